from typing import Optional
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.helper import utc_now
from models.Category import Category
from models.Event import Event


def get_all_categories(db: Session, is_active: Optional[bool] = None) -> list[Category]:
    stmt = select(Category)
    if is_active is not None:
        stmt = stmt.where(Category.is_active == is_active)
    stmt = stmt.order_by(Category.name.asc())
    return list(db.scalars(stmt).all())


def get_category_by_id(db: Session, id: int) -> Optional[Category]:
    stmt = select(Category).where(Category.id == id)
    return db.execute(stmt).scalar()


def get_category_by_name(db: Session, name: str) -> Optional[Category]:
    stmt = select(Category).where(func.lower(Category.name) == name.strip().lower())
    return db.execute(stmt).scalar()


def insert_category(
    db: Session, name: str, description: Optional[str] = None, is_commit: bool = True
) -> Category:
    category = Category(
        name=name.strip(), description=description, created_at=utc_now()
    )
    db.add(category)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(category)
    return category


def update_category(
    db: Session,
    category: Category,
    name: Optional[str] = None,
    description: Optional[str] = None,
    is_commit: bool = True,
) -> Category:
    if name is not None:
        category.name = name.strip()
    if description is not None:
        category.description = description
    if is_commit:
        db.commit()
        db.refresh(category)
    return category


def toggle_category_status(
    db: Session, category: Category, is_commit: bool = True
) -> Category:
    category.is_active = not category.is_active
    if is_commit:
        db.commit()
        db.refresh(category)
    return category


def count_events_in_category(db: Session, category_id: int) -> int:
    stmt = select(func.count(Event.id)).where(Event.category_id == category_id)
    return db.scalar(stmt) or 0


def get_event_count_per_category(db: Session) -> list[dict]:
    stmt = (
        select(Category.id, Category.name, func.count(Event.id).label("event_count"))
        .outerjoin(Event, Event.category_id == Category.id)
        .group_by(Category.id, Category.name)
        .order_by(Category.name.asc())
    )
    return [
        {"category_id": row.id, "name": row.name, "event_count": row.event_count}
        for row in db.execute(stmt).all()
    ]


def delete_category(db: Session, category: Category, is_commit: bool = True):
    db.delete(category)
    if is_commit:
        db.commit()
