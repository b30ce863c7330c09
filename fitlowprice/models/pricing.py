# fitlowprice/models/pricing.py

"""Discount rules, quotes and computed prices."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

RuleType = Literal["coupon", "point", "membership"]
DiscountType = Literal["percent", "fixed"]

# Won amounts are whole numbers; only percent arithmetic yields fractions
Money = int | float


def whole_number(value: Money) -> Money:
    """Return *value* as ``int`` when it has no fractional part."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _parse_money(raw: Any, field_name: str, rule_id: Any) -> Money:
    value = float(raw) if not isinstance(raw, int) else raw
    if value < 0:
        msg = f"Negative {field_name} for rule {rule_id}"
        raise ValueError(msg)
    return whole_number(value)


@dataclass(frozen=True)
class DiscountRule:
    """A discount definition owned by one marketplace.

    ``rule_type`` and ``conditions`` are informational only; the engine
    reads ``discount_type``, ``discount_value``, ``max_discount`` and the
    ``rule_name`` (for the shipping-waiver marker).
    """

    id: str
    source_id: str
    rule_type: RuleType
    rule_name: str
    discount_type: DiscountType
    discount_value: Money
    max_discount: Money | None = None
    conditions: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DiscountRule":
        """Build a rule from its camelCase JSON representation."""
        rule_id = data.get("id")
        discount_type = str(data["discountType"])
        if discount_type not in ("percent", "fixed"):
            msg = f"Unknown discountType '{discount_type}' for rule {rule_id}"
            raise ValueError(msg)
        max_discount = data.get("maxDiscount")
        return cls(
            id=str(data["id"]),
            source_id=str(data["sourceId"]),
            rule_type=data.get("ruleType", "coupon"),
            rule_name=str(data.get("ruleName", "")),
            discount_type=discount_type,  # type: ignore[arg-type]
            discount_value=_parse_money(
                data.get("discountValue", 0), "discountValue", rule_id
            ),
            max_discount=(
                _parse_money(max_discount, "maxDiscount", rule_id)
                if max_discount is not None
                else None
            ),
            conditions=str(data.get("conditions", "") or ""),
        )


@dataclass(frozen=True)
class PriceQuote:
    """A marketplace's base price and shipping fee for one product."""

    source_id: str
    base_price: int
    shipping_fee: int
    product_url: str = ""
    fetched_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "basePrice": self.base_price,
            "shippingFee": self.shipping_fee,
            "productUrl": self.product_url,
            "fetchedAt": (
                self.fetched_at.isoformat() if self.fetched_at else None
            ),
        }


@dataclass(frozen=True)
class AppliedDiscount:
    """A single rule's contribution to a final price."""

    rule_id: str
    rule_name: str
    amount: Money

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "amount": whole_number(self.amount),
        }


@dataclass(frozen=True)
class CalculatedPrice:
    """Final price for one marketplace within a comparison set."""

    source_id: str
    base_price: int
    shipping_fee: int
    final_price: Money
    applied_discounts: tuple[AppliedDiscount, ...] = ()
    is_cheapest: bool = False
    price_difference: Money = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceId": self.source_id,
            "basePrice": self.base_price,
            "shippingFee": self.shipping_fee,
            "finalPrice": whole_number(self.final_price),
            "appliedDiscounts": [
                d.to_dict() for d in self.applied_discounts
            ],
            "isCheapest": self.is_cheapest,
            "priceDifference": whole_number(self.price_difference),
        }


@dataclass(frozen=True)
class ComputeResult:
    """Ranked prices for a comparison set and the winning marketplace."""

    results: list[CalculatedPrice] = field(
        default_factory=lambda: list[CalculatedPrice]()
    )
    cheapest_source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "cheapestSource": self.cheapest_source,
        }
