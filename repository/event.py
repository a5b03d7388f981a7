from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from core.helper import get_pagination_meta, utc_now
from models.Event import Event
from models.Registration import Registration
from models.Ticket import Ticket, TicketStatus


def get_event_by_id(db: Session, id: int) -> Optional[Event]:
    stmt = (
        select(Event)
        .options(joinedload(Event.category))
        .where(Event.id == id)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar()


def insert_event(
    db: Session,
    title: str,
    location: str,
    event_date: datetime,
    capacity: int,
    price: Decimal = Decimal("0.00"),
    description: Optional[str] = None,
    category_id: Optional[int] = None,
    image_url: Optional[str] = None,
    is_featured: bool = False,
    organizer_id: Optional[int] = None,
    is_commit: bool = True,
) -> Event:
    now = utc_now()
    event = Event(
        title=title.strip(),
        description=description.strip() if description else None,
        location=location.strip(),
        event_date=event_date,
        capacity=capacity,
        price=price,
        category_id=category_id,
        image_url=image_url,
        is_featured=is_featured,
        is_active=True,
        organizer_id=organizer_id,
        tickets_sold=0,
        total_revenue=Decimal("0.00"),
        created_at=now,
        updated_at=now,
    )
    db.add(event)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(event)
    return event


def update_event(db: Session, event: Event, is_commit: bool = True, **fields) -> Event:
    # capacity and the ledger aggregates are not editable through here
    for key in ("capacity", "tickets_sold", "total_revenue"):
        fields.pop(key, None)
    for key, value in fields.items():
        setattr(event, key, value)
    event.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(event)
    return event


def set_event_status(
    db: Session, event: Event, is_active: bool, is_commit: bool = True
) -> Event:
    event.is_active = is_active
    event.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(event)
    return event


def delete_event(db: Session, event: Event, is_commit: bool = True):
    db.delete(event)
    if is_commit:
        db.commit()


def count_active_tickets(db: Session, event_id: int) -> int:
    stmt = select(func.count(Ticket.id)).where(
        Ticket.event_id == event_id, Ticket.status == TicketStatus.ACTIVE
    )
    return db.scalar(stmt) or 0


def count_tickets(db: Session, event_id: int) -> int:
    stmt = select(func.count(Ticket.id)).where(Ticket.event_id == event_id)
    return db.scalar(stmt) or 0


def count_registrations(db: Session, event_id: int) -> int:
    stmt = select(func.count(Registration.id)).where(Registration.event_id == event_id)
    return db.scalar(stmt) or 0


def get_events_per_page(
    db: Session,
    page: int,
    page_size: int,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    location: Optional[str] = None,
    is_active: Optional[bool] = None,
    is_featured: Optional[bool] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> dict:
    offset = (page - 1) * page_size

    stmt = select(Event)
    if search:
        stmt = stmt.where(
            or_(
                Event.title.ilike(f"%{search}%"),
                Event.description.ilike(f"%{search}%"),
            )
        )
    if category_id is not None:
        stmt = stmt.where(Event.category_id == category_id)
    if location:
        stmt = stmt.where(Event.location.ilike(f"%{location}%"))
    if is_active is not None:
        stmt = stmt.where(Event.is_active == is_active)
    if is_featured is not None:
        stmt = stmt.where(Event.is_featured == is_featured)
    if min_price is not None:
        stmt = stmt.where(Event.price >= min_price)
    if max_price is not None:
        stmt = stmt.where(Event.price <= max_price)
    if date_from is not None:
        stmt = stmt.where(Event.event_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Event.event_date <= date_to)

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = (
        stmt.options(joinedload(Event.category))
        .order_by(Event.event_date.asc())
        .offset(offset)
        .limit(page_size)
    )
    results = db.scalars(stmt).all()

    return {
        **get_pagination_meta(page=page, page_size=page_size, count=total_count),
        "results": list(results),
    }


def get_events_for_report(
    db: Session,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> list[Event]:
    stmt = select(Event).options(joinedload(Event.category))
    if start_date is not None:
        stmt = stmt.where(Event.event_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Event.event_date <= end_date)
    stmt = stmt.order_by(Event.event_date.desc())
    return list(db.scalars(stmt).all())


def count_events(db: Session, upcoming_after: Optional[datetime] = None) -> int:
    stmt = select(func.count(Event.id))
    if upcoming_after is not None:
        stmt = stmt.where(Event.event_date > upcoming_after, Event.is_active)
    return db.scalar(stmt) or 0


def get_recent_events(db: Session, limit: int = 5) -> list[Event]:
    stmt = (
        select(Event)
        .options(joinedload(Event.category))
        .order_by(Event.created_at.desc())
        .limit(limit)
    )
    return list(db.scalars(stmt).all())


def get_sales_totals(db: Session) -> tuple[int, Decimal]:
    row = db.execute(
        select(
            func.coalesce(func.sum(Event.tickets_sold), 0),
            func.coalesce(func.sum(Event.total_revenue), 0),
        )
    ).first()
    return int(row[0]), Decimal(str(row[1])).quantize(Decimal("0.01"))


def get_ticket_status_counts(db: Session, event_id: int) -> dict[str, int]:
    stmt = (
        select(Ticket.status, func.count(Ticket.id))
        .where(Ticket.event_id == event_id)
        .group_by(Ticket.status)
    )
    counts = {status.value: 0 for status in TicketStatus}
    for status, count in db.execute(stmt).all():
        counts[status] = count
    return counts


def get_registration_totals(db: Session, event_id: int) -> tuple[int, int]:
    """Number of registrations and the seats they hold."""
    row = db.execute(
        select(
            func.count(Registration.id),
            func.coalesce(func.sum(Registration.quantity), 0),
        ).where(Registration.event_id == event_id)
    ).first()
    return int(row[0]), int(row[1])
