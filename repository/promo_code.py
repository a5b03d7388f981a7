from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, joinedload

from core.helper import get_pagination_meta, utc_now
from models.PromoCode import PromoCode


def normalize_code(code: str) -> str:
    return code.strip().upper()


def get_promo_code_by_id(db: Session, id: int) -> Optional[PromoCode]:
    stmt = (
        select(PromoCode)
        .options(joinedload(PromoCode.event))
        .where(PromoCode.id == id)
    )
    return db.execute(stmt).scalar()


def get_promo_code_by_code(db: Session, code: str) -> Optional[PromoCode]:
    stmt = select(PromoCode).where(PromoCode.code == normalize_code(code))
    return db.execute(stmt).scalar()


def insert_promo_code(
    db: Session,
    code: str,
    discount_type: str,
    discount_value: Decimal,
    valid_from: datetime,
    valid_until: datetime,
    description: Optional[str] = None,
    event_id: Optional[int] = None,
    max_uses: Optional[int] = None,
    created_by: Optional[int] = None,
    is_commit: bool = True,
) -> PromoCode:
    now = utc_now()
    promo_code = PromoCode(
        code=normalize_code(code),
        description=description,
        discount_type=discount_type,
        discount_value=discount_value,
        event_id=event_id,
        max_uses=max_uses,
        times_used=0,
        valid_from=valid_from,
        valid_until=valid_until,
        is_active=True,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(promo_code)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(promo_code)
    return promo_code


def update_promo_code(
    db: Session, promo_code: PromoCode, is_commit: bool = True, **fields
) -> PromoCode:
    for key, value in fields.items():
        if key == "code" and value is not None:
            value = normalize_code(value)
        setattr(promo_code, key, value)
    promo_code.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(promo_code)
    return promo_code


def delete_promo_code(db: Session, promo_code: PromoCode, is_commit: bool = True):
    db.delete(promo_code)
    if is_commit:
        db.commit()


def get_promo_codes_per_page(
    db: Session,
    page: int,
    page_size: int,
    event_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> dict:
    offset = (page - 1) * page_size

    stmt = select(PromoCode)
    if event_id is not None:
        stmt = stmt.where(PromoCode.event_id == event_id)
    if is_active is not None:
        stmt = stmt.where(PromoCode.is_active == is_active)
    if search:
        stmt = stmt.where(PromoCode.code.ilike(f"%{search}%"))

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))

    stmt = stmt.order_by(PromoCode.created_at.desc()).offset(offset).limit(page_size)
    results = db.scalars(stmt).all()

    return {
        **get_pagination_meta(page=page, page_size=page_size, count=total_count),
        "results": list(results),
    }


def redeem_promo_code(db: Session, promo_code_id: int) -> bool:
    """Count one use of the code if it still has uses left.

    Conditional UPDATE so concurrent redemptions cannot exceed `max_uses`.
    Returns False when the code ran out in the meantime. Does not commit.
    """
    stmt = (
        update(PromoCode)
        .where(
            PromoCode.id == promo_code_id,
            or_(
                PromoCode.max_uses.is_(None),
                PromoCode.times_used < PromoCode.max_uses,
            ),
        )
        .values(times_used=PromoCode.times_used + 1, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount == 1
