from datetime import datetime
from typing import Optional

from core.helper import to_utc
from models.PromoCode import PromoCode


def validate_promo_code(
    promo_code: PromoCode, event_id: Optional[int], now: datetime
) -> list[str]:
    """
    Check every redemption condition of a promo code

    Unlike the purchase preconditions this does not stop at the first failure,
    all violated conditions are reported together.

    Returns:
        list[str]: error messages, empty when the code can be redeemed
    """
    errors = []
    now = to_utc(now)

    if not promo_code.is_active:
        errors.append("Promo code is inactive")

    valid_from = to_utc(promo_code.valid_from)
    valid_until = to_utc(promo_code.valid_until)
    if valid_from is not None and now < valid_from:
        errors.append("Promo code is not yet valid")
    if valid_until is not None and now > valid_until:
        errors.append("Promo code has expired")

    if promo_code.max_uses is not None and promo_code.times_used >= promo_code.max_uses:
        errors.append("Promo code has reached maximum uses")

    # event scope is only checked when the caller names an event
    if (
        event_id is not None
        and promo_code.event_id is not None
        and promo_code.event_id != event_id
    ):
        errors.append("Promo code is not valid for this event")

    return errors
