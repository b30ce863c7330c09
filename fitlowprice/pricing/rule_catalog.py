# fitlowprice/pricing/rule_catalog.py

"""Read-only catalog of marketplace discount rules."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from fitlowprice.config.settings import Settings
from fitlowprice.models.pricing import DiscountRule

logger = logging.getLogger("fitlowprice.pricing")


class DiscountRuleCatalog:
    """Immutable set of discount rules keyed by source and rule id."""

    def __init__(self, rules: Iterable[DiscountRule]) -> None:
        self._rules: tuple[DiscountRule, ...] = tuple(rules)
        self._by_id: dict[str, DiscountRule] = {}
        for rule in self._rules:
            if rule.id in self._by_id:
                msg = f"Duplicate discount rule id '{rule.id}'"
                raise ValueError(msg)
            self._by_id[rule.id] = rule

    @classmethod
    def from_json(cls, path: Path) -> "DiscountRuleCatalog":
        """Load rules from a JSON array of camelCase rule objects."""
        with open(path, encoding="utf-8") as f:
            raw: list[dict[str, Any]] = json.load(f)
        catalog = cls(DiscountRule.from_dict(item) for item in raw)
        logger.debug("Loaded %d discount rules from %s", len(catalog), path)
        return catalog

    @classmethod
    def load_default(cls) -> "DiscountRuleCatalog":
        """Load the bundled rule set from ``DISCOUNT_RULES_PATH``."""
        return cls.from_json(Settings.DISCOUNT_RULES_PATH)

    def rules_for(self, source_id: str) -> tuple[DiscountRule, ...]:
        """Return the rules registered for *source_id*, in catalog order."""
        return tuple(r for r in self._rules if r.source_id == source_id)

    def get(self, rule_id: str) -> DiscountRule | None:
        return self._by_id.get(rule_id)

    def __len__(self) -> int:
        return len(self._rules)
