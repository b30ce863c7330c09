# fitlowprice/scrapers/fallback.py

"""Deterministic synthetic listings for non-production deployments."""

import logging

from fitlowprice.config.settings import Settings
from fitlowprice.models.listing import Listing

logger = logging.getLogger("fitlowprice.fallback")

FALLBACK_PREFIX = "[샘플]"

# (price, original_price, free_shipping) per synthetic slot
_FALLBACK_SLOTS: dict[str, list[tuple[int, int | None, bool]]] = {
    "coupang": [(29900, 35900, True), (34500, None, True), (41000, 45000, False)],
    "naver": [(28700, None, False), (33000, 39000, True), (39900, None, True)],
    "elevenst": [(30500, 32000, True), (35800, None, False), (42900, 49000, True)],
}

_IMAGE_URL = "https://dummyimage.com/400x400/eeeeee/000000&text={source}+{index}"


def build_fallback_listings(
    source_id: str,
    keyword: str,
    search_url: str,
) -> list[Listing]:
    """Return the fixed synthetic listings for *source_id*.

    Names embed the keyword and carry :data:`FALLBACK_PREFIX` so they can
    never be mistaken for live data.
    """
    slots = _FALLBACK_SLOTS.get(source_id, [])
    return [
        Listing(
            product_name=f"{FALLBACK_PREFIX} {keyword} 샘플 상품 {index}",
            price=price,
            original_price=original,
            image_url=_IMAGE_URL.format(source=source_id, index=index),
            product_url=search_url,
            source_id=source_id,
            is_rocket_delivery=(source_id == "coupang" and index == 1) or None,
            is_free_shipping=free_shipping,
            rating=4.5,
            review_count=100 * index,
        )
        for index, (price, original, free_shipping) in enumerate(slots, 1)
    ]


def is_fallback(listing: Listing) -> bool:
    """Return True for listings produced by :func:`build_fallback_listings`."""
    return listing.product_name.startswith(FALLBACK_PREFIX)


def settle_results(
    source_id: str,
    keyword: str,
    listings: list[Listing],
    search_url: str,
) -> list[Listing]:
    """Apply the empty-result policy to a finished search.

    Live listings pass through untouched. An empty result becomes the
    synthetic fallback set outside production and stays empty in
    production.
    """
    if listings:
        return listings
    if Settings.is_production():
        logger.warning(
            "[%s] No listings for '%s'; returning empty (production)",
            source_id,
            keyword,
        )
        return []
    logger.warning(
        "[%s] No listings for '%s'; substituting fallback data",
        source_id,
        keyword,
    )
    return build_fallback_listings(source_id, keyword, search_url)
