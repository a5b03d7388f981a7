"""Administrative overrides of the event ledger.

These bypass the reservation checks of `repository.ledger` and must only be
reached from the admin routes and the CLI, never from purchase or
cancellation.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFoundError, OutOfRangeError
from core.helper import utc_now
from core.log import logger
from models.Event import Event


def _lock_event(db: Session, event_id: int) -> Event:
    stmt = (
        select(Event)
        .where(Event.id == event_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    event = db.execute(stmt).scalar()
    if event is None:
        raise NotFoundError("Event not found")
    return event


def reset_sales(db: Session, event_id: int, is_commit: bool = True) -> Event:
    event = _lock_event(db=db, event_id=event_id)
    logger.warning(
        f"Resetting sales of event {event.id} "
        f"(tickets_sold={event.tickets_sold}, total_revenue={event.total_revenue})"
    )
    event.tickets_sold = 0
    event.total_revenue = Decimal("0.00")
    event.updated_at = utc_now()
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(event)
    return event


def manual_adjust(
    db: Session,
    event_id: int,
    tickets_sold: Optional[int] = None,
    total_revenue: Optional[Decimal] = None,
    is_commit: bool = True,
) -> Event:
    """Set the event aggregates directly.

    When only `tickets_sold` is given, revenue is recomputed from the current
    event price.

    Raises:
        NotFoundError: event does not exist
        OutOfRangeError: tickets_sold outside [0, capacity] or negative revenue
    """
    event = _lock_event(db=db, event_id=event_id)

    if tickets_sold is not None:
        if tickets_sold < 0:
            raise OutOfRangeError("Tickets sold cannot be negative")
        if tickets_sold > event.capacity:
            raise OutOfRangeError(
                f"Tickets sold ({tickets_sold}) cannot exceed capacity ({event.capacity})"
            )

    if total_revenue is not None and total_revenue < 0:
        raise OutOfRangeError("Total revenue cannot be negative")

    logger.warning(
        f"Manual sales adjustment of event {event.id}: "
        f"tickets_sold {event.tickets_sold} -> {tickets_sold}, "
        f"total_revenue {event.total_revenue} -> {total_revenue}"
    )

    if tickets_sold is not None:
        event.tickets_sold = tickets_sold
    if total_revenue is not None:
        event.total_revenue = total_revenue
    elif tickets_sold is not None:
        event.total_revenue = Decimal(event.price) * tickets_sold

    event.updated_at = utc_now()
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(event)
    return event
