# fitlowprice/models/listing.py

"""Normalised search-result model shared by every marketplace adapter."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Listing:
    """One normalised product listing from a single marketplace."""

    product_name: str
    price: int
    product_url: str
    source_id: str
    image_url: str = ""
    original_price: int | None = None
    is_rocket_delivery: bool | None = None
    is_free_shipping: bool | None = None
    rating: float | None = None
    review_count: int | None = None

    @property
    def discount_rate(self) -> int | None:
        """Percentage off ``original_price``, rounded, for display."""
        if not self.original_price or self.original_price <= self.price:
            return None
        return round(
            (self.original_price - self.price)
            / self.original_price
            * 100
        )
