# fitlowprice/scrapers/naver_scraper.py

"""Scraper for Naver Shopping via the Naver Open API (shop search)."""

import logging
import urllib.parse

from fitlowprice.config.settings import Settings
from fitlowprice.errors import SourceUnavailable
from fitlowprice.extraction.field_extractor import (
    FieldExtractor,
    css_attr,
    css_text,
    json_field,
    regex,
)
from fitlowprice.extraction.segmenter import json_blocks, segment_blocks
from fitlowprice.filters.listing_validator import ListingValidator
from fitlowprice.models.listing import Listing
from fitlowprice.models.product_detail import ProductDetail, ScrapeResult
from fitlowprice.scrapers.fallback import settle_results
from fitlowprice.scrapers.http_client import SourceHttpClient


class NaverScraper:
    """Scraper for Naver Shopping.

    Search goes through the authenticated Open API
    (``X-Naver-Client-Id`` / ``X-Naver-Client-Secret``); titles come back
    with ``<b>`` highlight tags that the text extractor strips. Without
    credentials the adapter skips the request and falls back. Detail
    lookups scrape smartstore/brand store pages, whose state is embedded
    as JSON in the HTML.
    """

    source_id = "naver"

    SEARCH_API = (
        "https://openapi.naver.com/v1/search/shop.json"
        "?query={query}&display={display}&sort=sim"
    )
    SEARCH_PAGE = "https://search.shopping.naver.com/search/all?query={query}"
    BASE_URL = "https://shopping.naver.com"
    OWNED_DOMAINS = (
        "smartstore.naver.com",
        "brand.naver.com",
        "shopping.naver.com",
    )

    BLOCK_SEGMENTERS = [
        json_blocks("items"),
        json_blocks("shoppingResult", "products"),
    ]

    NAME_PATTERNS = [
        json_field("title"),
        json_field("productTitle"),
        json_field("productName"),
    ]
    PRICE_PATTERNS = [
        json_field("lprice"),
        json_field("price"),
        json_field("lowPrice"),
    ]
    ORIGINAL_PRICE_PATTERNS = [
        json_field("originalPrice"),
        json_field("listPrice"),
    ]
    IMAGE_PATTERNS = [
        json_field("image"),
        json_field("imageUrl"),
    ]
    URL_PATTERNS = [
        json_field("link"),
        json_field("crUrl"),
        json_field("mallProductUrl"),
    ]
    FREE_SHIPPING_PATTERNS = [
        json_field("freeDelivery"),
        json_field("isFreeDelivery"),
    ]
    RATING_PATTERNS = [
        json_field("scoreInfo"),
        json_field("rating"),
    ]
    REVIEW_COUNT_PATTERNS = [
        json_field("reviewCount"),
        json_field("reviewCountSum"),
    ]

    DETAIL_NAME_PATTERNS = [
        regex(r"\"dispName\"\s*:\s*\"([^\"]+)\""),
        css_attr("meta[property='og:title']", "content"),
        css_text("h3._22kNQuEXmb"),
    ]
    DETAIL_PRICE_PATTERNS = [
        regex(r"\"discountedSalePrice\"\s*:\s*(\d+)"),
        regex(r"\"salePrice\"\s*:\s*(\d+)"),
        css_text("span._1LY7DqCnwR"),
    ]
    DETAIL_SHIPPING_PATTERNS = [
        regex(r"\"baseFee\"\s*:\s*(\d+)"),
        regex(r"배송비\s*([\d,]+)\s*원"),
    ]
    DETAIL_IMAGE_PATTERNS = [
        css_attr("meta[property='og:image']", "content"),
        regex(r"\"representativeImageUrl\"\s*:\s*\"([^\"]+)\""),
    ]

    def __init__(self) -> None:
        self.logger = logging.getLogger("fitlowprice.naver")
        self.settings = Settings()
        self.http = SourceHttpClient(self.source_id, f"{self.BASE_URL}/")

    def owns_url(self, url: str) -> bool:
        """Return True for Naver store and shopping URLs."""
        return any(domain in url for domain in self.OWNED_DOMAINS)

    def search_url(self, keyword: str) -> str:
        """Build the user-facing search-page URL for *keyword*."""
        return self.SEARCH_PAGE.format(query=urllib.parse.quote(keyword))

    def _has_credentials(self) -> bool:
        return bool(
            self.settings.NAVER_CLIENT_ID
            and self.settings.NAVER_CLIENT_SECRET
        )

    def _api_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-Naver-Client-Id": self.settings.NAVER_CLIENT_ID,
            "X-Naver-Client-Secret": self.settings.NAVER_CLIENT_SECRET,
        }

    def _parse_block(self, block: str) -> Listing | None:
        """Turn one API item into a Listing, or None if incomplete."""
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

    def parse_search_response(self, text: str) -> list[Listing]:
        """Segment an API response and extract up to the listing cap."""
        blocks = segment_blocks(text, self.BLOCK_SEGMENTERS, self.source_id)
        if not blocks:
            self.logger.warning("[naver] No items in API response")
            return []
        return ListingValidator.collect(
            (self._parse_block(b) for b in blocks),
            self.settings.MAX_LISTINGS_PER_SOURCE,
        )

    def search(self, keyword: str) -> list[Listing]:
        """Search Naver Shopping; never raises."""
        page_url = self.search_url(keyword)
        listings: list[Listing] = []
        if not self._has_credentials():
            self.logger.warning(
                "[naver] API credentials missing, skipping live search"
            )
            return settle_results(self.source_id, keyword, listings, page_url)

        url = self.SEARCH_API.format(
            query=urllib.parse.quote(keyword),
            display=self.settings.MAX_LISTINGS_PER_SOURCE,
        )
        try:
            body = self.http.fetch(url, self._api_headers())
            listings = self.parse_search_response(body)
            self.logger.info(
                "[naver] %d listings for '%s'", len(listings), keyword
            )
        except SourceUnavailable as exc:
            self.logger.warning("[naver] Search unavailable: %s", exc.reason)
        except Exception as exc:
            self.logger.error(
                "[naver] Search failed: %s", exc, exc_info=True
            )
        return settle_results(self.source_id, keyword, listings, page_url)

    def parse_detail(self, html: str, url: str) -> ProductDetail | None:
        """Extract a ProductDetail from a store product page."""
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
        """Scrape one Naver store product page; never raises."""
        if not self.owns_url(url):
            return ScrapeResult(success=False, error="not a naver URL")
        try:
            html = self.http.fetch_with_fallback(url)
            detail = self.parse_detail(html, url)
        except SourceUnavailable as exc:
            self.logger.warning("[naver] Detail unavailable: %s", exc.reason)
            return ScrapeResult(success=False, error=str(exc))
        except Exception as exc:
            self.logger.error(
                "[naver] Detail scrape failed: %s", exc, exc_info=True
            )
            return ScrapeResult(success=False, error=str(exc))

        if detail is None:
            return ScrapeResult(
                success=False, error="name or price not found"
            )
        return ScrapeResult(success=True, detail=detail)
