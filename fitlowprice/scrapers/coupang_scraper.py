# fitlowprice/scrapers/coupang_scraper.py

"""Scraper for coupang.com via the server-rendered search page."""

import logging
import urllib.parse

from fitlowprice.config.settings import Settings
from fitlowprice.errors import SourceUnavailable
from fitlowprice.extraction.field_extractor import (
    FieldExtractor,
    css_attr,
    css_present,
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


class CoupangScraper:
    """Scraper for coupang.com.

    Coupang serves two search-result layouts depending on rollout: the
    legacy ``li.search-product`` list and the newer CSS-module
    ``ProductUnit_*`` grid. Patterns for both are kept, legacy first.
    """

    source_id = "coupang"

    SEARCH_URL = (
        "https://www.coupang.com/np/search?q={query}&channel=user"
    )
    BASE_URL = "https://www.coupang.com"

    BLOCK_SEGMENTERS = [
        css_blocks("li.search-product"),
        css_blocks("li[class*='ProductUnit_productUnit']"),
        regex_blocks(r"<li[^>]*class=\"[^\"]*baby-product[^\"]*\"[^>]*>.*?</li>"),
    ]

    NAME_PATTERNS = [
        css_text("div.name"),
        css_text("div[class*='ProductUnit_productName']"),
        css_attr("img", "alt"),
    ]
    PRICE_PATTERNS = [
        css_text("strong.price-value"),
        css_text("strong[class*='Price_priceValue']"),
        regex(r"\"salePrice\"\s*:\s*\"?([\d,]+)"),
    ]
    ORIGINAL_PRICE_PATTERNS = [
        css_text("del.base-price"),
        css_text("del[class*='PriceInfo_basePrice']"),
    ]
    IMAGE_PATTERNS = [
        css_attr("img.search-product-wrap-img", "data-img-src", "src"),
        css_attr("figure img", "data-img-src", "src"),
    ]
    URL_PATTERNS = [
        css_attr("a.search-product-link", "href"),
        css_attr("a[href*='/vp/products/']", "href"),
    ]
    ROCKET_PATTERNS = [
        css_present("span.badge.rocket"),
        css_present("img[src*='rocket']"),
        css_present("img[alt*='로켓']"),
    ]
    FREE_SHIPPING_PATTERNS = [
        css_present("span.badge-free-shipping"),
        regex(r"(무료배송)"),
    ]
    RATING_PATTERNS = [
        css_text("em.rating"),
        css_attr("div[class*='ProductRating_star']", "data-rating"),
    ]
    REVIEW_COUNT_PATTERNS = [
        css_text("span.rating-total-count"),
        css_text("span[class*='ProductRating_ratingCount']"),
    ]

    DETAIL_NAME_PATTERNS = [
        css_text("h1.prod-buy-header__title"),
        css_text("h1[class*='product-title']"),
        css_attr("meta[property='og:title']", "content"),
    ]
    DETAIL_PRICE_PATTERNS = [
        css_text("span.total-price strong"),
        css_text("div.final-price-amount"),
        css_attr("meta[property='product:price:amount']", "content"),
    ]
    DETAIL_SHIPPING_PATTERNS = [
        css_text("div.prod-shipping-fee-message em"),
        regex(r"배송비\s*([\d,]+)\s*원"),
    ]
    DETAIL_IMAGE_PATTERNS = [
        css_attr("img.prod-image__detail", "src"),
        css_attr("meta[property='og:image']", "content"),
    ]

    def __init__(self) -> None:
        self.logger = logging.getLogger("fitlowprice.coupang")
        self.settings = Settings()
        self.http = SourceHttpClient(self.source_id, f"{self.BASE_URL}/")

    def owns_url(self, url: str) -> bool:
        """Return True for coupang.com URLs."""
        return "coupang.com" in url

    def search_url(self, keyword: str) -> str:
        """Build the search-page URL for *keyword*."""
        return self.SEARCH_URL.format(
            query=urllib.parse.quote_plus(keyword)
        )

    def _parse_block(self, block: str) -> Listing | None:
        """Turn one product block into a Listing, or None if incomplete."""
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
            is_rocket_delivery=FieldExtractor.extract_flag(
                block, self.ROCKET_PATTERNS
            ),
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
            self.logger.warning("[coupang] No product blocks found")
            return []
        return ListingValidator.collect(
            (self._parse_block(b) for b in blocks),
            self.settings.MAX_LISTINGS_PER_SOURCE,
        )

    def search(self, keyword: str) -> list[Listing]:
        """Search Coupang; never raises."""
        url = self.search_url(keyword)
        listings: list[Listing] = []
        try:
            html = self.http.fetch(url)
            listings = self.parse_search_page(html)
            self.logger.info(
                "[coupang] %d listings for '%s'", len(listings), keyword
            )
        except SourceUnavailable as exc:
            self.logger.warning("[coupang] Search unavailable: %s", exc.reason)
        except Exception as exc:
            self.logger.error(
                "[coupang] Search failed: %s", exc, exc_info=True
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
        """Scrape one Coupang product page; never raises."""
        if not self.owns_url(url):
            return ScrapeResult(success=False, error="not a coupang URL")
        try:
            html = self.http.fetch_with_fallback(url)
            detail = self.parse_detail(html, url)
        except SourceUnavailable as exc:
            self.logger.warning("[coupang] Detail unavailable: %s", exc.reason)
            return ScrapeResult(success=False, error=str(exc))
        except Exception as exc:
            self.logger.error(
                "[coupang] Detail scrape failed: %s", exc, exc_info=True
            )
            return ScrapeResult(success=False, error=str(exc))

        if detail is None:
            return ScrapeResult(
                success=False, error="name or price not found"
            )
        return ScrapeResult(success=True, detail=detail)
