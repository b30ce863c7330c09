# fitlowprice/pricing/price_calculator.py

"""Final-price computation and cross-source ranking.

Everything here is synchronous and side-effect free: the same quote,
rule ids (in the same order) and rules always produce the same result.
"""

import dataclasses
import logging
from collections.abc import Mapping, Sequence

from fitlowprice.config.settings import Settings
from fitlowprice.errors import ComputationFailed
from fitlowprice.models.pricing import (
    AppliedDiscount,
    CalculatedPrice,
    ComputeResult,
    DiscountRule,
    Money,
    PriceQuote,
    whole_number,
)
from fitlowprice.pricing.rule_catalog import DiscountRuleCatalog

logger = logging.getLogger("fitlowprice.pricing")


def compute_final_price(
    quote: PriceQuote,
    selected_rule_ids: Sequence[str],
    rules: Sequence[DiscountRule],
    shipping_waiver_marker: str | None = None,
) -> tuple[Money, list[AppliedDiscount]]:
    """Apply the selected rules to *quote* in the order given.

    Percent rules discount the running total, so reordering the same
    rules can change the result. Rule ids that do not resolve to a rule
    of the quote's own source are skipped. The running total is clamped
    at zero once, after every rule has been applied. A missing or zero
    ``max_discount`` leaves a percent rule uncapped.
    """
    marker = (
        Settings.SHIPPING_WAIVER_MARKER
        if shipping_waiver_marker is None
        else shipping_waiver_marker
    )
    source_rules = {
        rule.id: rule for rule in rules if rule.source_id == quote.source_id
    }

    running: Money = quote.base_price + quote.shipping_fee
    applied: list[AppliedDiscount] = []

    for rule_id in selected_rule_ids:
        rule = source_rules.get(rule_id)
        if rule is None:
            logger.debug(
                "Skipping unresolved rule '%s' for %s",
                rule_id,
                quote.source_id,
            )
            continue

        if marker and marker in rule.rule_name and quote.shipping_fee > 0:
            amount: Money = quote.shipping_fee
        elif rule.discount_type == "fixed":
            amount = rule.discount_value
        else:
            amount = max(running, 0) * rule.discount_value / 100
            if rule.max_discount:
                amount = min(amount, rule.max_discount)
            amount = whole_number(amount)

        running = whole_number(running - amount)
        applied.append(
            AppliedDiscount(
                rule_id=rule.id,
                rule_name=rule.rule_name,
                amount=amount,
            )
        )

    return max(0, running), applied


def rank_by_sources(
    computed: Sequence[CalculatedPrice],
) -> list[CalculatedPrice]:
    """Sort by final price and mark the cheapest and each price gap.

    Exactly one entry (the first after a stable sort) is the cheapest.
    """
    ordered = sorted(computed, key=lambda c: c.final_price)
    if not ordered:
        return []
    cheapest = ordered[0].final_price
    return [
        dataclasses.replace(
            item,
            is_cheapest=(index == 0),
            price_difference=whole_number(item.final_price - cheapest),
        )
        for index, item in enumerate(ordered)
    ]


class PriceCalculator:
    """Computes ranked final prices for a comparison set."""

    def __init__(self, catalog: DiscountRuleCatalog | None = None) -> None:
        self.catalog = (
            catalog if catalog is not None else DiscountRuleCatalog.load_default()
        )

    def compute(
        self,
        quote: PriceQuote,
        selected_rule_ids: Sequence[str],
    ) -> CalculatedPrice:
        """Compute one source's final price (unranked)."""
        for rule_id in selected_rule_ids:
            rule = self.catalog.get(rule_id)
            if rule is None:
                logger.warning("Unknown discount rule '%s' ignored", rule_id)
            elif rule.source_id != quote.source_id:
                logger.warning(
                    "Rule '%s' belongs to %s, not %s; ignored",
                    rule_id,
                    rule.source_id,
                    quote.source_id,
                )
        final_price, applied = compute_final_price(
            quote,
            selected_rule_ids,
            self.catalog.rules_for(quote.source_id),
        )
        return CalculatedPrice(
            source_id=quote.source_id,
            base_price=quote.base_price,
            shipping_fee=quote.shipping_fee,
            final_price=final_price,
            applied_discounts=tuple(applied),
        )

    def compute_all(
        self,
        base_prices: Mapping[str, Mapping[str, int]],
        selected_rule_ids: Mapping[str, Sequence[str]],
    ) -> ComputeResult:
        """Compute and rank final prices for every source in *base_prices*.

        ``base_prices`` maps source id to ``{"basePrice", "shippingFee"}``;
        ``selected_rule_ids`` maps source id to rule ids in the order the
        user selected them. Unexpected faults surface as
        :class:`ComputationFailed`.
        """
        try:
            computed = [
                self.compute(
                    PriceQuote(
                        source_id=source_id,
                        base_price=int(prices.get("basePrice", 0)),
                        shipping_fee=int(prices.get("shippingFee", 0)),
                    ),
                    list(selected_rule_ids.get(source_id, [])),
                )
                for source_id, prices in base_prices.items()
            ]
            ranked = rank_by_sources(computed)
        except Exception as exc:
            logger.error("Price computation failed: %s", exc, exc_info=True)
            raise ComputationFailed("Calculation failed") from exc

        cheapest = ranked[0].source_id if ranked else None
        logger.info(
            "Computed %d prices, cheapest=%s", len(ranked), cheapest
        )
        return ComputeResult(results=ranked, cheapest_source=cheapest)
