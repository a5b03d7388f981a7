"""Purchase workflows: a single ticket or a multi-seat registration.

Preconditions are checked in a fixed order and the first failure wins. The
seat reservation, the record insert and the promo redemption share one
transaction; any failure rolls all of them back.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import (
    DuplicatePurchaseError,
    EventExpiredError,
    EventInactiveError,
    InsufficientCapacityError,
    InvalidPromoCodeError,
    NotFoundError,
    TicketingError,
)
from core.helper import to_utc, utc_now
from core.log import logger
from core.pricing import PriceBreakdown, calculate_price
from models.Event import Event
from models.PromoCode import PromoCode
from models.Registration import Registration
from models.Ticket import Ticket
from models.User import User
from repository import event as eventRepo
from repository import ledger
from repository import promo_code as promoCodeRepo
from repository import registration as registrationRepo
from repository import ticket as ticketRepo
from repository import ticket_type as ticketTypeRepo
from validators.promo_code import validate_promo_code


def _check_event(db: Session, event_id: int, quantity: int, now: datetime) -> Event:
    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        raise NotFoundError("Event not found")
    if not event.is_active:
        raise EventInactiveError("Event is not active")
    if to_utc(event.event_date) <= now:
        raise EventExpiredError("Cannot purchase tickets for past events")

    available = event.capacity - event.tickets_sold
    if quantity < 1:
        raise InsufficientCapacityError("Quantity must be at least 1")
    if available <= 0:
        raise InsufficientCapacityError("Event is sold out")
    if quantity > available:
        raise InsufficientCapacityError(f"Only {available} seats available")
    return event


def _resolve_promo_code(
    db: Session, code: Optional[str], event_id: int, now: datetime
) -> Optional[PromoCode]:
    if not code or not code.strip():
        return None
    promo_code = promoCodeRepo.get_promo_code_by_code(db=db, code=code)
    if promo_code is None:
        raise InvalidPromoCodeError(errors=["Promo code not found"])
    errors = validate_promo_code(promo_code=promo_code, event_id=event_id, now=now)
    if errors:
        raise InvalidPromoCodeError(errors=errors)
    return promo_code


def _redeem(db: Session, promo_code: Optional[PromoCode]) -> None:
    if promo_code is None:
        return
    if not promoCodeRepo.redeem_promo_code(db=db, promo_code_id=promo_code.id):
        raise InvalidPromoCodeError(errors=["Promo code has reached maximum uses"])


def purchase_ticket(
    db: Session,
    user: User,
    event_id: int,
    promo_code: Optional[str] = None,
    now: Optional[datetime] = None,
) -> tuple[Ticket, PriceBreakdown]:
    """Buy one seat of an event as a Ticket.

    Raises:
        NotFoundError, EventInactiveError, EventExpiredError,
        InsufficientCapacityError, DuplicatePurchaseError, InvalidPromoCodeError
    """
    now = to_utc(now) if now is not None else utc_now()
    try:
        event = _check_event(db=db, event_id=event_id, quantity=1, now=now)

        if ticketRepo.get_active_ticket(db=db, user_id=user.id, event_id=event.id):
            raise DuplicatePurchaseError(
                "You already have an active ticket for this event"
            )

        promo = _resolve_promo_code(db=db, code=promo_code, event_id=event.id, now=now)
        price = calculate_price(unit_price=event.price, quantity=1, promo_code=promo)

        ledger.reserve_seat(
            db=db, event_id=event.id, quantity=1, amount=price.final_price
        )
        try:
            ticket = ticketRepo.insert_ticket(
                db=db,
                user_id=user.id,
                event_id=event.id,
                price=price.final_price,
                discount_amount=price.discount_amount,
                promo_code_id=promo.id if promo else None,
                purchase_date=now,
            )
        except IntegrityError:
            db.rollback()
            raise DuplicatePurchaseError(
                "You already have an active ticket for this event"
            )
        _redeem(db=db, promo_code=promo)

        db.commit()
    except TicketingError:
        db.rollback()
        raise

    db.refresh(ticket)
    logger.info(
        f"Ticket {ticket.unique_code} purchased by user {user.id} "
        f"for event {event_id} at {price.final_price}"
    )
    return ticket, price


def register_for_event(
    db: Session,
    user: User,
    event_id: int,
    quantity: int = 1,
    promo_code: Optional[str] = None,
    ticket_type_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> tuple[Registration, PriceBreakdown]:
    """Register `quantity` seats of an event for the user.

    Raises:
        NotFoundError, EventInactiveError, EventExpiredError,
        InsufficientCapacityError, DuplicatePurchaseError, InvalidPromoCodeError
    """
    now = to_utc(now) if now is not None else utc_now()
    try:
        event = _check_event(db=db, event_id=event_id, quantity=quantity, now=now)

        if registrationRepo.get_registration_for_user(
            db=db, user_id=user.id, event_id=event.id
        ):
            raise DuplicatePurchaseError("You are already registered for this event")

        promo = _resolve_promo_code(db=db, code=promo_code, event_id=event.id, now=now)

        if ticket_type_id is not None:
            ticket_type = ticketTypeRepo.get_ticket_type_by_id(db=db, id=ticket_type_id)
            if (
                ticket_type is None
                or ticket_type.event_id != event.id
                or not ticket_type.is_active
            ):
                raise NotFoundError("Ticket type not found")

        price = calculate_price(
            unit_price=event.price, quantity=quantity, promo_code=promo
        )

        ledger.reserve_seat(
            db=db, event_id=event.id, quantity=quantity, amount=price.final_price
        )
        try:
            registration = registrationRepo.insert_registration(
                db=db,
                user_id=user.id,
                event_id=event.id,
                quantity=quantity,
                unit_price=price.unit_price,
                total_price=price.subtotal,
                discount_amount=price.discount_amount,
                final_price=price.final_price,
                ticket_type_id=ticket_type_id,
                promo_code_id=promo.id if promo else None,
                registered_at=now,
            )
        except IntegrityError:
            db.rollback()
            raise DuplicatePurchaseError("You are already registered for this event")
        _redeem(db=db, promo_code=promo)

        db.commit()
    except TicketingError:
        db.rollback()
        raise

    db.refresh(registration)
    logger.info(
        f"Registration {registration.id} of {quantity} seats by user {user.id} "
        f"for event {event_id} at {price.final_price}"
    )
    return registration, price
