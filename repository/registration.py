import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from models.Registration import PaymentStatus, Registration


def get_registration_by_id(
    db: Session, registration_id: uuid.UUID
) -> Optional[Registration]:
    stmt = (
        select(Registration)
        .options(joinedload(Registration.event))
        .where(Registration.id == registration_id)
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar()


def get_registration_for_user(
    db: Session, user_id: int, event_id: int
) -> Optional[Registration]:
    stmt = select(Registration).where(
        Registration.user_id == user_id, Registration.event_id == event_id
    )
    return db.execute(stmt).scalar()


def insert_registration(
    db: Session,
    user_id: int,
    event_id: int,
    quantity: int,
    unit_price: Decimal,
    total_price: Decimal,
    discount_amount: Decimal,
    final_price: Decimal,
    registered_at: datetime,
    ticket_type_id: Optional[int] = None,
    promo_code_id: Optional[int] = None,
    payment_status: PaymentStatus = PaymentStatus.COMPLETED,
) -> Registration:
    registration = Registration(
        user_id=user_id,
        event_id=event_id,
        quantity=quantity,
        unit_price=unit_price,
        total_price=total_price,
        discount_amount=discount_amount,
        final_price=final_price,
        payment_status=payment_status,
        ticket_type_id=ticket_type_id,
        promo_code_id=promo_code_id,
        registered_at=registered_at,
    )
    db.add(registration)
    db.flush()
    return registration


def get_registration_for_update(
    db: Session, registration_id: uuid.UUID
) -> Optional[Registration]:
    # row lock held until the caller commits or rolls back
    stmt = (
        select(Registration)
        .where(Registration.id == registration_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar()


def delete_registration(db: Session, registration: Registration) -> int:
    """Delete the row and return how many rows went away."""
    stmt = (
        delete(Registration)
        .where(Registration.id == registration.id)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.expunge(registration)
    return result.rowcount


def get_user_registrations(db: Session, user_id: int) -> list[Registration]:
    stmt = (
        select(Registration)
        .options(joinedload(Registration.event), joinedload(Registration.ticket_type))
        .where(Registration.user_id == user_id)
        .order_by(Registration.registered_at.desc())
    )
    return list(db.scalars(stmt).all())


def get_event_registrations(db: Session, event_id: int) -> list[Registration]:
    stmt = (
        select(Registration)
        .options(joinedload(Registration.user))
        .where(Registration.event_id == event_id)
        .order_by(Registration.registered_at.asc())
    )
    return list(db.scalars(stmt).all())
