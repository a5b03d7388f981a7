"""Per-event seat ledger used by the purchase and cancellation workflows.

`tickets_sold` and `total_revenue` on Event are only mutated here (and by the
admin overrides in `repository.sales_admin`). Every mutation is a single
conditional UPDATE evaluated by the database, never a read-modify-write in
Python, so concurrent requests for the same event cannot oversell it.

None of these functions commit: the caller owns the transaction so that the
ledger change and the ticket/registration row land together.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from core.errors import InsufficientCapacityError, NotFoundError
from core.helper import utc_now
from core.log import logger
from models.Event import Event


def reserve_seat(
    db: Session,
    event_id: int,
    quantity: int,
    amount: Optional[Decimal] = None,
) -> None:
    """Take `quantity` seats of the event and book `amount` as revenue.

    `amount` defaults to `quantity * event.price`; the workflows pass the price
    actually charged so that a later release restores revenue exactly.

    Raises:
        InsufficientCapacityError: when the seats are not available anymore.
    """
    if quantity < 1:
        raise InsufficientCapacityError("Quantity must be at least 1")

    revenue = Event.price * quantity if amount is None else amount
    stmt = (
        update(Event)
        .where(
            Event.id == event_id,
            Event.tickets_sold + quantity <= Event.capacity,
        )
        .values(
            tickets_sold=Event.tickets_sold + quantity,
            total_revenue=Event.total_revenue + revenue,
            updated_at=utc_now(),
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 1:
        return

    available = db.execute(
        select(Event.capacity - Event.tickets_sold).where(Event.id == event_id)
    ).scalar()
    if available is None:
        raise NotFoundError("Event not found")
    if available <= 0:
        raise InsufficientCapacityError("Event is sold out")
    raise InsufficientCapacityError(f"Only {available} seats available")


def release_seat(
    db: Session,
    event_id: int,
    quantity: int,
    amount: Decimal,
) -> None:
    """Give back `quantity` seats and `amount` of revenue.

    Never drives either aggregate below zero: when the counters were lowered by
    an admin reset in between, the values are clamped at zero.
    """
    now = utc_now()
    stmt = (
        update(Event)
        .where(
            Event.id == event_id,
            Event.tickets_sold >= quantity,
            Event.total_revenue >= amount,
        )
        .values(
            tickets_sold=Event.tickets_sold - quantity,
            total_revenue=Event.total_revenue - amount,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount == 1:
        return

    clamped = (
        update(Event)
        .where(Event.id == event_id)
        .values(
            tickets_sold=case(
                (Event.tickets_sold >= quantity, Event.tickets_sold - quantity),
                else_=0,
            ),
            total_revenue=case(
                (Event.total_revenue >= amount, Event.total_revenue - amount),
                else_=0,
            ),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(clamped)
    if result.rowcount != 1:
        raise NotFoundError("Event not found")
    logger.warning(
        f"Ledger of event {event_id} clamped at zero while releasing "
        f"{quantity} seats / {amount}"
    )


def get_ledger(db: Session, event_id: int) -> Optional[tuple[int, Decimal]]:
    row = db.execute(
        select(Event.tickets_sold, Event.total_revenue).where(Event.id == event_id)
    ).first()
    if row is None:
        return None
    return row.tickets_sold, row.total_revenue
