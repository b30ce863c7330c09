# fitlowprice/scrapers/registry.py

"""Source-id keyed dispatch table of marketplace adapters."""

import importlib
import logging
from typing import Any, Protocol

from fitlowprice.config.settings import Settings
from fitlowprice.models.listing import Listing
from fitlowprice.models.product_detail import ScrapeResult

logger = logging.getLogger("fitlowprice.registry")


class SourceAdapter(Protocol):
    """Capability set every marketplace adapter implements."""

    source_id: str

    def owns_url(self, url: str) -> bool: ...

    def fetch_detail(self, url: str) -> ScrapeResult: ...

    def search(self, keyword: str) -> list[Listing]: ...


def _load_scraper_class(dotted_path: str) -> type[Any]:
    """Dynamically import a scraper class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def build_adapters(
    sources: list[dict[str, str]] | None = None,
) -> dict[str, SourceAdapter]:
    """Instantiate one adapter per source, preserving registry order."""
    adapters: dict[str, SourceAdapter] = {}
    for src in sources if sources is not None else Settings.AVAILABLE_SOURCES:
        scraper_cls = _load_scraper_class(src["scraper"])
        adapters[src["id"]] = scraper_cls()
    return adapters


def adapter_for_url(
    url: str,
    adapters: dict[str, SourceAdapter],
) -> SourceAdapter | None:
    """Return the single adapter that claims *url*, if any."""
    owners = [a for a in adapters.values() if a.owns_url(url)]
    if len(owners) > 1:
        # Overlapping ownership is a registry misconfiguration
        logger.error(
            "URL %s claimed by several sources: %s",
            url,
            [a.source_id for a in owners],
        )
    return owners[0] if owners else None
