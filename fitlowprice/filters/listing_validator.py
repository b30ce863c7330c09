# fitlowprice/filters/listing_validator.py

"""Listing validation: drop partially-extracted listings."""

import logging
from collections.abc import Iterable

from fitlowprice.models.listing import Listing

logger = logging.getLogger("fitlowprice.filters")


class ListingValidator:
    """Keep only listings with a name, a positive price and a URL."""

    @staticmethod
    def is_valid(listing: Listing | None) -> bool:
        """Return True when *listing* may be shown to a user."""
        if listing is None:
            return False
        if not listing.product_name.strip():
            logger.debug(
                "Dropped listing with empty name (source=%s, url=%s)",
                listing.source_id,
                listing.product_url,
            )
            return False
        if listing.price <= 0:
            logger.debug(
                "Dropped listing with zero/negative price "
                "(name=%s, source=%s)",
                listing.product_name,
                listing.source_id,
            )
            return False
        if not listing.product_url:
            logger.debug(
                "Dropped listing without URL (name=%s, source=%s)",
                listing.product_name,
                listing.source_id,
            )
            return False
        return True

    @staticmethod
    def validate(
        listings: Iterable[Listing],
    ) -> tuple[list[Listing], int]:
        """Split *listings* into the valid ones and a dropped count."""
        valid: list[Listing] = []
        dropped = 0
        for listing in listings:
            if ListingValidator.is_valid(listing):
                valid.append(listing)
            else:
                dropped += 1

        if dropped:
            logger.info("Validation dropped %d invalid listings", dropped)

        return valid, dropped

    @staticmethod
    def collect(
        candidates: Iterable[Listing | None],
        limit: int,
    ) -> list[Listing]:
        """Take valid listings from a lazy iterable until *limit* is hit.

        Candidates past the cap are never pulled, so block parsing stops
        as soon as enough listings have been found.
        """
        kept: list[Listing] = []
        if limit <= 0:
            return kept
        for candidate in candidates:
            if candidate is None or not ListingValidator.is_valid(candidate):
                continue
            kept.append(candidate)
            if len(kept) >= limit:
                break
        return kept
