"""Cancellation and check-in of tickets and registrations.

A cancelled ticket keeps its row with status `cancelled`; a cancelled
registration row is deleted. Both give their seats and the amount paid back
to the event ledger in the same transaction.

Every state change reads its ticket or registration with a row lock, so a
second cancel or a check-in racing a cancel sees the committed state.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from core.errors import (
    AccessDeniedError,
    AlreadyCancelledError,
    EventAlreadyOccurredError,
    InvalidStateError,
    NotFoundError,
    TicketingError,
)
from core.helper import to_utc, utc_now
from core.log import logger
from core.security import can_manage
from models.Event import Event
from models.Registration import PaymentStatus, Registration
from models.Ticket import Ticket, TicketStatus
from models.User import User
from repository import ledger
from repository import registration as registrationRepo
from repository import ticket as ticketRepo


def _check_event_not_started(event: Event, now: datetime) -> None:
    if to_utc(event.event_date) <= now:
        raise EventAlreadyOccurredError("Cannot cancel tickets for past events")


def cancel_ticket(
    db: Session, user: User, ticket_id: int, now: Optional[datetime] = None
) -> Ticket:
    """
    Raises:
        NotFoundError, AccessDeniedError, AlreadyCancelledError,
        InvalidStateError, EventAlreadyOccurredError
    """
    now = to_utc(now) if now is not None else utc_now()
    try:
        ticket = ticketRepo.get_ticket_for_update(db=db, ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket not found")
        if not can_manage(user, ticket.user_id):
            raise AccessDeniedError("You can only cancel your own tickets")
        if ticket.status == TicketStatus.CANCELLED:
            raise AlreadyCancelledError("Ticket is already cancelled")
        if ticket.status != TicketStatus.ACTIVE:
            raise InvalidStateError(f"Cannot cancel a {ticket.status} ticket")
        _check_event_not_started(ticket.event, now)

        ledger.release_seat(
            db=db, event_id=ticket.event_id, quantity=1, amount=ticket.price
        )
        ticket.status = TicketStatus.CANCELLED
        ticket.cancelled_at = now
        db.commit()
    except TicketingError:
        db.rollback()
        raise

    db.refresh(ticket)
    logger.info(f"Ticket {ticket.unique_code} cancelled by user {user.id}")
    return ticket


def cancel_registration(
    db: Session,
    user: User,
    registration_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> Registration:
    """Cancel a registration and delete its row.

    Returns the detached registration as it was before deletion.

    Raises:
        NotFoundError, AccessDeniedError, AlreadyCancelledError,
        InvalidStateError, EventAlreadyOccurredError
    """
    now = to_utc(now) if now is not None else utc_now()
    try:
        registration = registrationRepo.get_registration_for_update(
            db=db, registration_id=registration_id
        )
        if registration is None:
            raise NotFoundError("Registration not found")
        if not can_manage(user, registration.user_id):
            raise AccessDeniedError("You can only cancel your own registrations")
        if registration.payment_status in (
            PaymentStatus.CANCELLED,
            PaymentStatus.REFUNDED,
        ):
            raise AlreadyCancelledError("Registration is already cancelled")
        if registration.payment_status != PaymentStatus.COMPLETED:
            raise InvalidStateError(
                f"Cannot cancel a {registration.payment_status} registration"
            )
        if registration.checked_in:
            raise InvalidStateError("Cannot cancel a checked-in registration")
        _check_event_not_started(registration.event, now)

        ledger.release_seat(
            db=db,
            event_id=registration.event_id,
            quantity=registration.quantity,
            amount=registration.final_price,
        )
        if registrationRepo.delete_registration(db=db, registration=registration) != 1:
            raise AlreadyCancelledError("Registration is already cancelled")
        db.commit()
    except TicketingError:
        db.rollback()
        raise

    logger.info(f"Registration {registration_id} cancelled by user {user.id}")
    return registration


def _check_event_staff(user: User, event: Event) -> None:
    if not can_manage(user, event.organizer_id):
        raise AccessDeniedError("You can only check in attendees of your own events")


def mark_ticket_used(
    db: Session, user: User, ticket_id: int, now: Optional[datetime] = None
) -> Ticket:
    """Check a ticket in at the venue (active -> used)."""
    now = to_utc(now) if now is not None else utc_now()
    try:
        ticket = ticketRepo.get_ticket_for_update(db=db, ticket_id=ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket not found")
        _check_event_staff(user, ticket.event)
        if ticket.status == TicketStatus.CANCELLED:
            raise AlreadyCancelledError("Ticket is cancelled")
        if ticket.status != TicketStatus.ACTIVE:
            raise InvalidStateError("Ticket has already been used")

        ticket.status = TicketStatus.USED
        ticket.used_at = now
        db.commit()
    except TicketingError:
        db.rollback()
        raise

    db.refresh(ticket)
    logger.info(f"Ticket {ticket.unique_code} checked in by user {user.id}")
    return ticket


def check_in_registration(
    db: Session,
    user: User,
    registration_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> Registration:
    now = to_utc(now) if now is not None else utc_now()
    try:
        registration = registrationRepo.get_registration_for_update(
            db=db, registration_id=registration_id
        )
        if registration is None:
            raise NotFoundError("Registration not found")
        _check_event_staff(user, registration.event)
        if registration.payment_status != PaymentStatus.COMPLETED:
            raise InvalidStateError("Only completed registrations can be checked in")
        if registration.checked_in:
            raise InvalidStateError("Registration is already checked in")

        registration.checked_in = True
        registration.checked_in_at = now
        db.commit()
    except TicketingError:
        db.rollback()
        raise

    db.refresh(registration)
    logger.info(f"Registration {registration.id} checked in by user {user.id}")
    return registration
