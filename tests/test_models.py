# tests/test_models.py

"""Tests for the listing, detail and pricing data models."""

import dataclasses
import unittest
from datetime import datetime, timezone

from fitlowprice.models.listing import Listing
from fitlowprice.models.pricing import (
    AppliedDiscount,
    CalculatedPrice,
    ComputeResult,
    DiscountRule,
)
from fitlowprice.models.product_detail import ProductDetail


class TestListing(unittest.TestCase):
    """Listing defaults and derived discount rate."""

    def _listing(self, **kwargs: object) -> Listing:
        base: dict[str, object] = {
            "product_name": "에어팟",
            "price": 8000,
            "product_url": "https://www.coupang.com/vp/products/1",
            "source_id": "coupang",
        }
        base.update(kwargs)
        return Listing(**base)  # type: ignore[arg-type]

    def test_optional_fields_default_to_absent(self) -> None:
        """Source-specific extras are absent unless set."""
        li = self._listing()
        self.assertEqual(li.image_url, "")
        self.assertIsNone(li.original_price)
        self.assertIsNone(li.is_rocket_delivery)
        self.assertIsNone(li.is_free_shipping)
        self.assertIsNone(li.rating)
        self.assertIsNone(li.review_count)

    def test_discount_rate(self) -> None:
        """Discount rate is the rounded percentage off the original."""
        self.assertEqual(self._listing(original_price=10000).discount_rate, 20)
        self.assertEqual(self._listing(price=329000, original_price=359000).discount_rate, 8)

    def test_discount_rate_absent(self) -> None:
        """No original price, or no markdown, means no rate."""
        self.assertIsNone(self._listing().discount_rate)
        self.assertIsNone(self._listing(original_price=8000).discount_rate)

    def test_frozen(self) -> None:
        """Listings are immutable."""
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self._listing().price = 1  # type: ignore[misc]


class TestProductDetail(unittest.TestCase):
    """ProductDetail.to_quote snapshotting."""

    def test_to_quote(self) -> None:
        """A quote copies prices and stamps the fetch time."""
        detail = ProductDetail(
            name="상품",
            source_id="elevenst",
            base_price=30000,
            shipping_fee=2500,
            product_url="https://www.11st.co.kr/products/1",
        )
        stamp = datetime(2026, 10, 19, tzinfo=timezone.utc)
        quote = detail.to_quote(stamp)

        self.assertEqual(quote.source_id, "elevenst")
        self.assertEqual(quote.base_price, 30000)
        self.assertEqual(quote.shipping_fee, 2500)
        self.assertEqual(quote.fetched_at, stamp)


class TestPricingModels(unittest.TestCase):
    """DiscountRule parsing and result serialisation."""

    def test_rule_from_dict(self) -> None:
        """camelCase JSON maps onto rule fields."""
        rule = DiscountRule.from_dict({
            "id": "r2",
            "sourceId": "coupang",
            "ruleType": "coupon",
            "ruleName": "웰컴 쿠폰",
            "discountType": "percent",
            "discountValue": 10,
            "maxDiscount": 10000,
        })
        self.assertEqual(rule.source_id, "coupang")
        self.assertEqual(rule.discount_value, 10.0)
        self.assertEqual(rule.max_discount, 10000.0)
        self.assertEqual(rule.conditions, "")

    def test_compute_result_to_dict(self) -> None:
        """Nested results serialise with camelCase keys."""
        result = ComputeResult(
            results=[
                CalculatedPrice(
                    source_id="naver",
                    base_price=24500,
                    shipping_fee=3000,
                    final_price=26400,
                    applied_discounts=(AppliedDiscount("r3", "플러스 멤버십", 1100),),
                    is_cheapest=True,
                ),
            ],
            cheapest_source="naver",
        )
        data = result.to_dict()

        self.assertEqual(data["cheapestSource"], "naver")
        self.assertEqual(
            data["results"][0],
            {
                "sourceId": "naver",
                "basePrice": 24500,
                "shippingFee": 3000,
                "finalPrice": 26400,
                "appliedDiscounts": [
                    {"ruleId": "r3", "ruleName": "플러스 멤버십", "amount": 1100},
                ],
                "isCheapest": True,
                "priceDifference": 0,
            },
        )

    def test_empty_compute_result(self) -> None:
        """An empty result has no cheapest source."""
        self.assertEqual(
            ComputeResult().to_dict(), {"results": [], "cheapestSource": None}
        )


if __name__ == "__main__":
    unittest.main()
