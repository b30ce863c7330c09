# fitlowprice/scrapers/elevenst_scraper.py

"""Scraper for 11st.co.kr via the server-rendered search page."""

import logging
import urllib.parse

from fitlowprice.config.settings import Settings
from fitlowprice.errors import SourceUnavailable
from fitlowprice.extraction.field_extractor import (
    FieldExtractor,
    css_attr,
    css_text,
    regex,
)
from fitlowprice.extraction.segmenter import (
    css_blocks,
    regex_blocks,
    segment_blocks,
)
from fitlowprice.filters.listing_validator import ListingValidator
from fitlowprice.models.listing import Listing
from fitlowprice.models.product_detail import ProductDetail, ScrapeResult
from fitlowprice.scrapers.fallback import settle_results
from fitlowprice.scrapers.http_client import SourceHttpClient


class ElevenstScraper:
    """Scraper for 11st.co.kr (11번가).

    Current search pages render ``c-card-item`` cards; older pages use a
    ``list_info`` layout keyed by ``thisClick_*`` ids.
    """

    source_id = "elevenst"

    SEARCH_URL = "https://search.11st.co.kr/Search.tmall?kwd={query}"
    BASE_URL = "https://www.11st.co.kr"

    BLOCK_SEGMENTERS = [
        css_blocks("li.c-search-list__item"),
        css_blocks("div.c-card-item"),
        regex_blocks(r"<li[^>]*id=\"thisClick_\d+\"[^>]*>.*?</li>"),
    ]

    NAME_PATTERNS = [
        css_text("div.c-card-item__name dd"),
        css_text("div.c-card-item__name"),
        css_text("p.info_tit a"),
    ]
    PRICE_PATTERNS = [
        css_text("dd.c-card-item__price span.value"),
        css_text("strong.sale_price"),
        regex(r"data-final-price=\"([\d,]+)\""),
    ]
    ORIGINAL_PRICE_PATTERNS = [
        css_text("dd.c-card-item__price-del span.value"),
        css_text("s.normal_price"),
    ]
    IMAGE_PATTERNS = [
        css_attr("div.c-card-item__thumb img", "data-src", "src"),
        css_attr("div.photo_wrap img", "data-original", "src"),
    ]
    URL_PATTERNS = [
        css_attr("a.c-card-item__anchor", "href"),
        css_attr("p.info_tit a", "href"),
        css_attr("a[href*='/products/']", "href"),
    ]
    FREE_SHIPPING_PATTERNS = [
        css_text("dd.c-card-item__delivery em.value-free"),
        regex(r"(무료배송)"),
    ]
    RATING_PATTERNS = [
        css_attr("div.c-starrate", "data-rating"),
        css_text("span.c-starrate__value"),
    ]
    REVIEW_COUNT_PATTERNS = [
        css_text("span.c-starrate__review"),
        css_text("span.review_count"),
    ]

    DETAIL_NAME_PATTERNS = [
        css_text("h1.title"),
        css_attr("meta[property='og:title']", "content"),
    ]
    DETAIL_PRICE_PATTERNS = [
        css_text("dl.price dd.price span.value"),
        regex(r"\"finalDscPrice\"\s*:\s*\"?([\d,]+)"),
        css_attr("meta[property='product:price:amount']", "content"),
    ]
    DETAIL_SHIPPING_PATTERNS = [
        css_text("div.delivery span.value"),
        regex(r"배송비\s*([\d,]+)\s*원"),
    ]
    DETAIL_IMAGE_PATTERNS = [
        css_attr("div.img_full img", "src"),
        css_attr("meta[property='og:image']", "content"),
    ]

    def __init__(self) -> None:
        self.logger = logging.getLogger("fitlowprice.elevenst")
        self.settings = Settings()
        self.http = SourceHttpClient(self.source_id, f"{self.BASE_URL}/")

    def owns_url(self, url: str) -> bool:
        """Return True for 11st.co.kr URLs."""
        return "11st.co.kr" in url

    def search_url(self, keyword: str) -> str:
        """Build the search-page URL for *keyword*."""
        return self.SEARCH_URL.format(query=urllib.parse.quote(keyword))

    def _parse_block(self, block: str) -> Listing | None:
        """Turn one product card into a Listing, or None if incomplete."""
        name = FieldExtractor.extract_text(block, self.NAME_PATTERNS)
        price = FieldExtractor.extract_price(block, self.PRICE_PATTERNS)
        url = FieldExtractor.extract_url(
            block, self.URL_PATTERNS, self.BASE_URL
        )
        if not name or price is None or not url:
            return None

        original = FieldExtractor.extract_price(
            block, self.ORIGINAL_PRICE_PATTERNS
        )
        return Listing(
            product_name=name,
            price=price,
            original_price=original if original and original > price else None,
            image_url=FieldExtractor.extract_url(
                block, self.IMAGE_PATTERNS, self.BASE_URL
            ) or "",
            product_url=url,
            source_id=self.source_id,
            is_free_shipping=FieldExtractor.extract_flag(
                block, self.FREE_SHIPPING_PATTERNS
            ),
            rating=FieldExtractor.extract_float(block, self.RATING_PATTERNS),
            review_count=FieldExtractor.extract_count(
                block, self.REVIEW_COUNT_PATTERNS
            ),
        )

    def parse_search_page(self, html: str) -> list[Listing]:
        """Segment a search page and extract up to the listing cap."""
        blocks = segment_blocks(html, self.BLOCK_SEGMENTERS, self.source_id)
        if not blocks:
            self.logger.warning("[elevenst] No product blocks found")
            return []
        return ListingValidator.collect(
            (self._parse_block(b) for b in blocks),
            self.settings.MAX_LISTINGS_PER_SOURCE,
        )

    def search(self, keyword: str) -> list[Listing]:
        """Search 11st; never raises."""
        url = self.search_url(keyword)
        listings: list[Listing] = []
        try:
            html = self.http.fetch(url)
            listings = self.parse_search_page(html)
            self.logger.info(
                "[elevenst] %d listings for '%s'", len(listings), keyword
            )
        except SourceUnavailable as exc:
            self.logger.warning("[elevenst] Search unavailable: %s", exc.reason)
        except Exception as exc:
            self.logger.error(
                "[elevenst] Search failed: %s", exc, exc_info=True
            )
        return settle_results(self.source_id, keyword, listings, url)

    def parse_detail(self, html: str, url: str) -> ProductDetail | None:
        """Extract a ProductDetail from a product page."""
        name = FieldExtractor.extract_text(html, self.DETAIL_NAME_PATTERNS)
        price = FieldExtractor.extract_price(html, self.DETAIL_PRICE_PATTERNS)
        if not name or price is None:
            return None
        return ProductDetail(
            name=name,
            source_id=self.source_id,
            base_price=price,
            shipping_fee=FieldExtractor.extract_price(
                html, self.DETAIL_SHIPPING_PATTERNS
            ) or 0,
            product_url=url,
            image_url=FieldExtractor.extract_url(
                html, self.DETAIL_IMAGE_PATTERNS, self.BASE_URL
            ) or "",
        )

    def fetch_detail(self, url: str) -> ScrapeResult:
        """Scrape one 11st product page; never raises."""
        if not self.owns_url(url):
            return ScrapeResult(success=False, error="not an 11st URL")
        try:
            html = self.http.fetch_with_fallback(url)
            detail = self.parse_detail(html, url)
        except SourceUnavailable as exc:
            self.logger.warning("[elevenst] Detail unavailable: %s", exc.reason)
            return ScrapeResult(success=False, error=str(exc))
        except Exception as exc:
            self.logger.error(
                "[elevenst] Detail scrape failed: %s", exc, exc_info=True
            )
            return ScrapeResult(success=False, error=str(exc))

        if detail is None:
            return ScrapeResult(
                success=False, error="name or price not found"
            )
        return ScrapeResult(success=True, detail=detail)
