# fitlowprice/scrapers/http_client.py

"""Bounded single-request HTTP access shared by the marketplace adapters."""

import logging
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from fitlowprice.config.settings import Settings
from fitlowprice.errors import SourceUnavailable


class SourceHttpClient:
    """Issue one browser-impersonating request per call.

    Every failure mode (transport error, non-200 status, bot challenge)
    surfaces as :class:`SourceUnavailable` so the owning adapter can
    convert it into its empty/fallback result.
    """

    # Cloudflare / anti-bot interstitial markers
    _CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self, source_id: str, homepage: str) -> None:
        self.source_id = source_id
        self.homepage = homepage
        self.logger = logging.getLogger(f"fitlowprice.{source_id}")
        self.settings = Settings()
        self.timeout: int = Settings.timeout_for(source_id)
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        return {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self.homepage,
            **(extra or {}),
        }

    def _looks_blocked(self, text: str) -> bool:
        """Check for challenge pages and CAPTCHA indicators."""
        if text.lstrip().startswith(("{", "[")):
            return False
        lower = text.lower()

        for marker in self._CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Bot challenge detected (marker: '%s')",
                    self.source_id,
                    marker,
                )
                return True

        # Skip the keyword scan on content-rich pages to avoid
        # false positives from product text
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.source_id,
                        keyword,
                    )
                    return True
        return False

    def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> str:
        """GET *url* once and return the body text."""
        try:
            resp = self.session.get(
                url,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except Exception as exc:
            raise SourceUnavailable(
                self.source_id, f"request error: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise SourceUnavailable(
                self.source_id, f"HTTP {resp.status_code}"
            )
        text = str(resp.text)
        if self._looks_blocked(text):
            raise SourceUnavailable(self.source_id, "bot challenge page")
        return text

    def fetch_with_fallback(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> str:
        """GET *url*, retrying once through cloudscraper on failure."""
        try:
            return self.fetch(url, headers)
        except SourceUnavailable as exc:
            self.logger.info(
                "[%s] curl_cffi failed (%s), falling back to cloudscraper",
                self.source_id,
                exc.reason,
            )

        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except Exception as exc:
            raise SourceUnavailable(
                self.source_id, f"cloudscraper error: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise SourceUnavailable(
                self.source_id, f"cloudscraper HTTP {resp.status_code}"
            )
        text = str(resp.text)
        if self._looks_blocked(text):
            raise SourceUnavailable(
                self.source_id, "bot challenge page (cloudscraper)"
            )
        return text
