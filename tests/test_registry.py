# tests/test_registry.py

"""Tests for the source adapter registry."""

import unittest
from unittest.mock import patch

from fitlowprice.scrapers.coupang_scraper import CoupangScraper
from fitlowprice.scrapers.elevenst_scraper import ElevenstScraper
from fitlowprice.scrapers.naver_scraper import NaverScraper
from fitlowprice.scrapers.registry import adapter_for_url, build_adapters

SESSION_PATH = "fitlowprice.scrapers.http_client.curl_requests.Session"


class _Claims:
    """Adapter stub that claims every URL containing *domain*."""

    def __init__(self, source_id: str, domain: str) -> None:
        self.source_id = source_id
        self.domain = domain

    def owns_url(self, url: str) -> bool:
        return self.domain in url


@patch(SESSION_PATH)
class TestBuildAdapters(unittest.TestCase):
    """build_adapters instantiates the configured sources."""

    def test_default_registry(self, _mock_session_cls) -> None:
        """The default registry yields one adapter per source, in order."""
        adapters = build_adapters()
        self.assertEqual(list(adapters), ["coupang", "naver", "elevenst"])
        self.assertIsInstance(adapters["coupang"], CoupangScraper)
        self.assertIsInstance(adapters["naver"], NaverScraper)
        self.assertIsInstance(adapters["elevenst"], ElevenstScraper)

    def test_custom_source_list(self, _mock_session_cls) -> None:
        """A subset of sources can be built explicitly."""
        adapters = build_adapters([{
            "id": "elevenst",
            "label": "11번가",
            "scraper": "fitlowprice.scrapers.elevenst_scraper.ElevenstScraper",
        }])
        self.assertEqual(list(adapters), ["elevenst"])

    def test_url_routing(self, _mock_session_cls) -> None:
        """Each marketplace URL routes to exactly its own adapter."""
        adapters = build_adapters()
        cases = {
            "https://www.coupang.com/vp/products/1": "coupang",
            "https://smartstore.naver.com/s/products/2": "naver",
            "https://www.11st.co.kr/products/3": "elevenst",
        }
        for url, expected in cases.items():
            with self.subTest(url=url):
                adapter = adapter_for_url(url, adapters)
                assert adapter is not None
                self.assertEqual(adapter.source_id, expected)

    def test_unowned_url(self, _mock_session_cls) -> None:
        """URLs of other shops have no owner."""
        self.assertIsNone(
            adapter_for_url("https://www.gmarket.co.kr/item/1", build_adapters())
        )


class TestAdapterForUrl(unittest.TestCase):
    """adapter_for_url with overlapping stubs."""

    def test_overlap_logs_and_returns_first(self) -> None:
        """Overlapping claims are logged and the first owner wins."""
        adapters = {
            "a": _Claims("a", "shop.kr"),
            "b": _Claims("b", "shop.kr"),
        }
        with self.assertLogs("fitlowprice.registry", level="ERROR"):
            adapter = adapter_for_url("https://shop.kr/1", adapters)  # type: ignore[arg-type]
        assert adapter is not None
        self.assertEqual(adapter.source_id, "a")


if __name__ == "__main__":
    unittest.main()
