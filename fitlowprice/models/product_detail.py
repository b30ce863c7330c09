# fitlowprice/models/product_detail.py

"""Single-URL lookup results."""

from dataclasses import dataclass
from datetime import datetime, timezone

from fitlowprice.models.pricing import PriceQuote


@dataclass(frozen=True)
class ProductDetail:
    """Product name, pricing and imagery scraped from one product page."""

    name: str
    source_id: str
    base_price: int
    shipping_fee: int
    product_url: str
    image_url: str = ""

    def to_quote(self, fetched_at: datetime | None = None) -> PriceQuote:
        """Snapshot this detail as a :class:`PriceQuote`."""
        return PriceQuote(
            source_id=self.source_id,
            base_price=self.base_price,
            shipping_fee=self.shipping_fee,
            product_url=self.product_url,
            fetched_at=fetched_at or datetime.now(timezone.utc),
        )


@dataclass(frozen=True)
class ScrapeResult:
    """Outcome of a detail fetch; ``detail`` is set only on success."""

    success: bool
    detail: ProductDetail | None = None
    error: str = ""
