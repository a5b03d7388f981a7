from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from core.helper import get_pagination_meta
from models.Event import Event
from models.Ticket import Ticket, TicketStatus, generate_ticket_code


def get_ticket_by_id(db: Session, ticket_id: int) -> Optional[Ticket]:
    stmt = (
        select(Ticket)
        .options(joinedload(Ticket.event), joinedload(Ticket.user))
        .where(Ticket.id == ticket_id)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar()


def get_ticket_for_update(db: Session, ticket_id: int) -> Optional[Ticket]:
    # row lock held until the caller commits or rolls back
    stmt = (
        select(Ticket)
        .where(Ticket.id == ticket_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar()


def get_ticket_by_code(db: Session, unique_code: str) -> Optional[Ticket]:
    stmt = (
        select(Ticket)
        .options(joinedload(Ticket.event), joinedload(Ticket.user))
        .where(Ticket.unique_code == unique_code)
    )
    return db.execute(stmt).scalar()


def get_active_ticket(db: Session, user_id: int, event_id: int) -> Optional[Ticket]:
    stmt = select(Ticket).where(
        Ticket.user_id == user_id,
        Ticket.event_id == event_id,
        Ticket.status == TicketStatus.ACTIVE,
    )
    return db.execute(stmt).scalars().first()


def insert_ticket(
    db: Session,
    user_id: int,
    event_id: int,
    price: Decimal,
    purchase_date: datetime,
    discount_amount: Decimal = Decimal("0.00"),
    promo_code_id: Optional[int] = None,
) -> Ticket:
    ticket = Ticket(
        unique_code=generate_ticket_code(),
        user_id=user_id,
        event_id=event_id,
        status=TicketStatus.ACTIVE,
        price=price,
        discount_amount=discount_amount,
        promo_code_id=promo_code_id,
        purchase_date=purchase_date,
    )
    db.add(ticket)
    db.flush()
    return ticket


def get_tickets_per_page(
    db: Session,
    page: int,
    page_size: int,
    user_id: Optional[int] = None,
    event_id: Optional[int] = None,
    status: Optional[str] = None,
) -> dict:
    offset = (page - 1) * page_size

    stmt = select(Ticket)
    if user_id is not None:
        stmt = stmt.where(Ticket.user_id == user_id)
    if event_id is not None:
        stmt = stmt.where(Ticket.event_id == event_id)
    if status:
        stmt = stmt.where(Ticket.status == status)

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = (
        stmt.options(joinedload(Ticket.event).joinedload(Event.category))
        .order_by(Ticket.purchase_date.desc(), Ticket.id.desc())
        .offset(offset)
        .limit(page_size)
    )
    results = db.scalars(stmt).all()

    return {
        **get_pagination_meta(page=page, page_size=page_size, count=total_count),
        "results": list(results),
    }


def count_tickets_by_status(db: Session, status: Optional[str] = None) -> int:
    stmt = select(func.count(Ticket.id))
    if status:
        stmt = stmt.where(Ticket.status == status)
    return db.scalar(stmt) or 0


def get_event_tickets(
    db: Session, event_id: int, include_cancelled: bool = False
) -> list[Ticket]:
    stmt = (
        select(Ticket)
        .options(joinedload(Ticket.user))
        .where(Ticket.event_id == event_id)
    )
    if not include_cancelled:
        stmt = stmt.where(Ticket.status != TicketStatus.CANCELLED)
    stmt = stmt.order_by(Ticket.purchase_date.asc())
    return list(db.scalars(stmt).all())
