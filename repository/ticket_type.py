from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.helper import utc_now
from models.TicketType import TicketType


def get_ticket_types_by_event(
    db: Session, event_id: int, only_active: bool = False
) -> list[TicketType]:
    stmt = select(TicketType).where(TicketType.event_id == event_id)
    if only_active:
        stmt = stmt.where(TicketType.is_active)
    stmt = stmt.order_by(TicketType.sort_order.asc(), TicketType.id.asc())
    return list(db.scalars(stmt).all())


def get_ticket_type_by_id(db: Session, id: int) -> Optional[TicketType]:
    stmt = select(TicketType).where(TicketType.id == id)
    return db.execute(stmt).scalar()


def insert_ticket_type(
    db: Session,
    event_id: int,
    name: str,
    description: Optional[str] = None,
    price_label: Optional[str] = None,
    sort_order: int = 0,
    is_commit: bool = True,
) -> TicketType:
    ticket_type = TicketType(
        event_id=event_id,
        name=name,
        description=description,
        price_label=price_label,
        sort_order=sort_order,
        is_active=True,
        created_at=utc_now(),
    )
    db.add(ticket_type)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(ticket_type)
    return ticket_type


def delete_ticket_type(db: Session, ticket_type: TicketType, is_commit: bool = True):
    db.delete(ticket_type)
    if is_commit:
        db.commit()


def update_ticket_type(
    db: Session, ticket_type: TicketType, is_commit: bool = True, **fields
) -> TicketType:
    for key, value in fields.items():
        if value is not None:
            setattr(ticket_type, key, value)
    if is_commit:
        db.commit()
        db.refresh(ticket_type)
    return ticket_type
