from decimal import Decimal
from unittest import TestCase

from core.pricing import calculate_price, compute_discount
from models.PromoCode import DiscountType, PromoCode


class TestComputeDiscount(TestCase):
    def test_percentage(self):
        discount = compute_discount(DiscountType.PERCENTAGE, Decimal("20"), Decimal("100"))
        self.assertEqual(discount, Decimal("20.00"))

    def test_percentage_capped_at_price(self):
        discount = compute_discount(DiscountType.PERCENTAGE, Decimal("150"), Decimal("40"))
        self.assertEqual(discount, Decimal("40.00"))

    def test_percentage_rounds_to_cents(self):
        discount = compute_discount(DiscountType.PERCENTAGE, Decimal("15"), Decimal("33.33"))
        self.assertEqual(discount, Decimal("5.00"))

    def test_fixed(self):
        discount = compute_discount(DiscountType.FIXED, Decimal("15"), Decimal("100"))
        self.assertEqual(discount, Decimal("15.00"))

    def test_fixed_larger_than_price(self):
        discount = compute_discount(DiscountType.FIXED, Decimal("500"), Decimal("100"))
        self.assertEqual(discount, Decimal("100.00"))

    def test_free_event(self):
        discount = compute_discount(DiscountType.FIXED, Decimal("10"), Decimal("0"))
        self.assertEqual(discount, Decimal("0.00"))

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            compute_discount("bogo", Decimal("10"), Decimal("100"))


class TestCalculatePrice(TestCase):
    def _promo(self, discount_type, value) -> PromoCode:
        return PromoCode(
            code="PROMO", discount_type=discount_type, discount_value=Decimal(value)
        )

    def test_twenty_percent_of_hundred(self):
        price = calculate_price(
            Decimal("100"), 1, self._promo(DiscountType.PERCENTAGE, "20")
        )
        self.assertEqual(price.final_price, Decimal("80.00"))
        self.assertEqual(price.discount_amount, Decimal("20.00"))

    def test_fixed_fifteen_of_hundred(self):
        price = calculate_price(Decimal("100"), 1, self._promo(DiscountType.FIXED, "15"))
        self.assertEqual(price.final_price, Decimal("85.00"))

    def test_fixed_never_below_zero(self):
        price = calculate_price(Decimal("100"), 1, self._promo(DiscountType.FIXED, "250"))
        self.assertEqual(price.final_price, Decimal("0.00"))
        self.assertEqual(price.discount_amount, Decimal("100.00"))

    def test_quantity_applies_discount_on_subtotal(self):
        price = calculate_price(
            Decimal("50"), 3, self._promo(DiscountType.PERCENTAGE, "10")
        )
        self.assertEqual(price.subtotal, Decimal("150.00"))
        self.assertEqual(price.discount_amount, Decimal("15.00"))
        self.assertEqual(price.final_price, Decimal("135.00"))

    def test_without_promo(self):
        price = calculate_price(Decimal("25.5"), 2)
        self.assertEqual(price.unit_price, Decimal("25.50"))
        self.assertEqual(price.subtotal, Decimal("51.00"))
        self.assertEqual(price.discount_amount, Decimal("0.00"))
        self.assertEqual(price.final_price, Decimal("51.00"))
