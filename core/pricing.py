from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from models.PromoCode import DiscountType, PromoCode

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_discount(discount_type: str, value, price) -> Decimal:
    """Discount granted on `price`, always within [0, price].

    percentage: value x price / 100, capped at price
    fixed: min(value, price)
    """
    price = to_money(price)
    value = Decimal(str(value))
    if price <= 0 or value <= 0:
        return Decimal("0.00")

    if discount_type == DiscountType.PERCENTAGE:
        discount = to_money(value * price / Decimal(100))
    elif discount_type == DiscountType.FIXED:
        discount = to_money(value)
    else:
        raise ValueError(f"Unknown discount type: {discount_type}")
    return min(discount, price)


@dataclass
class PriceBreakdown:
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    discount_amount: Decimal
    final_price: Decimal

    def to_dict(self) -> dict:
        return {
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "final_price": self.final_price,
        }


def calculate_price(
    unit_price, quantity: int, promo_code: Optional[PromoCode] = None
) -> PriceBreakdown:
    unit_price = to_money(unit_price)
    subtotal = to_money(unit_price * quantity)
    discount = Decimal("0.00")
    if promo_code is not None:
        discount = compute_discount(
            discount_type=promo_code.discount_type,
            value=promo_code.discount_value,
            price=subtotal,
        )
    final_price = max(subtotal - discount, Decimal("0.00"))
    return PriceBreakdown(
        unit_price=unit_price,
        quantity=quantity,
        subtotal=subtotal,
        discount_amount=discount,
        final_price=final_price,
    )
