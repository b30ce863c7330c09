# fitlowprice/services/search_orchestrator.py

"""Fans a keyword out to every marketplace and merges the results."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from fitlowprice.config.settings import Settings
from fitlowprice.errors import InvalidInput
from fitlowprice.filters.listing_validator import ListingValidator
from fitlowprice.models.listing import Listing
from fitlowprice.models.product_detail import ScrapeResult
from fitlowprice.scrapers.registry import (
    SourceAdapter,
    adapter_for_url,
    build_adapters,
)

logger = logging.getLogger("fitlowprice.orchestrator")


def listing_to_dict(listing: Listing) -> dict[str, Any]:
    """Serialise a listing with camelCase keys, omitting absent extras."""
    data: dict[str, Any] = {
        "productName": listing.product_name,
        "price": listing.price,
        "imageUrl": listing.image_url,
        "productUrl": listing.product_url,
        "sourceId": listing.source_id,
    }
    optional = {
        "originalPrice": listing.original_price,
        "discountRate": listing.discount_rate,
        "isRocketDelivery": listing.is_rocket_delivery,
        "isFreeShipping": listing.is_free_shipping,
        "rating": listing.rating,
        "reviewCount": listing.review_count,
    }
    data.update({k: v for k, v in optional.items() if v is not None})
    return data


@dataclass
class SearchOutcome:
    """Per-source listing buckets for one keyword search."""

    keyword: str
    results: dict[str, list[Listing]] = field(
        default_factory=lambda: dict[str, list[Listing]]()
    )
    searched_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def total_count(self) -> int:
        return sum(len(bucket) for bucket in self.results.values())

    @property
    def merged(self) -> list[Listing]:
        """All listings, cheapest first; ties keep dispatch order."""
        combined = [
            listing
            for bucket in self.results.values()
            for listing in bucket
        ]
        return sorted(combined, key=lambda listing: listing.price)

    def to_dict(self) -> dict[str, Any]:
        return {
            "keyword": self.keyword,
            "results": {
                source_id: [listing_to_dict(li) for li in bucket]
                for source_id, bucket in self.results.items()
            },
            "totalCount": self.total_count,
            "searchedAt": self.searched_at.isoformat(),
        }


def validate_keyword(keyword: str | None) -> str:
    """Return the trimmed keyword or raise :class:`InvalidInput`."""
    cleaned = (keyword or "").strip()
    if not cleaned:
        raise InvalidInput("Keyword is required")
    if len(cleaned) < Settings.MIN_KEYWORD_LENGTH:
        raise InvalidInput(
            f"Keyword must be at least {Settings.MIN_KEYWORD_LENGTH} characters"
        )
    return cleaned


class SearchOrchestrator:
    """Coordinates concurrent marketplace searches and URL lookups."""

    def __init__(
        self,
        adapters: dict[str, SourceAdapter] | None = None,
    ) -> None:
        self.adapters: dict[str, SourceAdapter] = (
            adapters if adapters is not None else build_adapters()
        )

    async def search_all(self, keyword: str) -> SearchOutcome:
        """Search every source concurrently and wait for all of them.

        A source that raises despite its own error handling is logged
        and contributes an empty bucket; siblings are never cancelled.
        """
        cleaned = validate_keyword(keyword)
        source_ids = list(self.adapters)

        batches = await asyncio.gather(
            *(
                asyncio.to_thread(adapter.search, cleaned)
                for adapter in self.adapters.values()
            ),
            return_exceptions=True,
        )

        outcome = SearchOutcome(keyword=cleaned)
        # gather() returns in submission order, not completion order
        for source_id, batch in zip(source_ids, batches):
            if isinstance(batch, BaseException):
                logger.error(
                    "Source %s raised for '%s': %s",
                    source_id,
                    cleaned,
                    batch,
                    exc_info=batch,
                )
                outcome.results[source_id] = []
                continue
            valid, _dropped = ListingValidator.validate(batch)
            outcome.results[source_id] = valid

        logger.info(
            "Search '%s' finished: %d listings from %d sources",
            cleaned,
            outcome.total_count,
            len(source_ids),
        )
        return outcome

    async def lookup_url(self, url: str) -> ScrapeResult:
        """Route a product URL to its owning source and scrape it."""
        cleaned = (url or "").strip()
        if not cleaned:
            raise InvalidInput("URL is required")
        adapter = adapter_for_url(cleaned, self.adapters)
        if adapter is None:
            raise InvalidInput(f"No source handles URL: {cleaned}")
        logger.info("Routing %s to %s", cleaned, adapter.source_id)
        return await asyncio.to_thread(adapter.fetch_detail, cleaned)
