from typing import Optional
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from core.helper import get_pagination_meta, utc_now
from models.Event import Event
from models.PromoCode import PromoCode
from models.Registration import Registration
from models.Ticket import Ticket
from models.Token import Token
from models.User import User, UserRole


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    stmt = select(User).where(User.username == username)
    data = db.execute(stmt).scalar()
    return data


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    stmt = select(User).where(User.email == email)
    data = db.execute(stmt).scalar()
    return data


def get_user_by_id(db: Session, id: int) -> Optional[User]:
    stmt = select(User).where(User.id == id)
    return db.execute(stmt).scalar()


def get_users_per_page(
    db: Session,
    page: int,
    page_size: int,
    search: Optional[str] = None,
    role: Optional[str] = None,
) -> dict:
    offset = (page - 1) * page_size

    stmt = select(User)
    if search:
        search_pattern = f"%{search}%"
        stmt = stmt.where(
            (User.username.ilike(search_pattern))
            | (User.name.ilike(search_pattern))
            | (User.email.ilike(search_pattern))
        )
    if role:
        stmt = stmt.where(User.role == role)

    total_count = db.scalar(select(func.count()).select_from(stmt.subquery()))
    stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
    results = db.scalars(stmt.offset(offset).limit(page_size)).all()

    return {
        **get_pagination_meta(page=page, page_size=page_size, count=total_count),
        "results": list(results),
    }


def count_users(db: Session) -> int:
    return db.scalar(select(func.count(User.id))) or 0


def create_user(
    db: Session,
    username: str,
    password: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    role: str = UserRole.USER,
    is_active: bool = True,
    is_commit: bool = True,
) -> User:
    now = utc_now()
    user = User(
        username=username,
        password=password,
        email=email,
        name=name,
        phone=phone,
        role=role,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.flush()
    if is_commit:
        db.commit()
        db.refresh(user)
    return user


def update_user_role(db: Session, user: User, role: str, is_commit: bool = True) -> User:
    user.role = role
    user.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(user)
    return user


def update_user_status(
    db: Session, user: User, is_active: bool, is_commit: bool = True
) -> User:
    user.is_active = is_active
    user.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(user)
    return user


def update_user_profile(
    db: Session,
    user: User,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    is_commit: bool = True,
) -> User:
    if name is not None:
        user.name = name
    if phone is not None:
        user.phone = phone
    user.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(user)
    return user


def update_user_password(
    db: Session, user: User, password: str, is_commit: bool = True
) -> User:
    user.password = password
    user.updated_at = utc_now()
    if is_commit:
        db.commit()
        db.refresh(user)
    return user


def count_user_purchases(db: Session, user_id: int) -> tuple[int, int]:
    """Tickets and registrations held by the user, in any status."""
    tickets = db.scalar(select(func.count(Ticket.id)).where(Ticket.user_id == user_id))
    registrations = db.scalar(
        select(func.count(Registration.id)).where(Registration.user_id == user_id)
    )
    return tickets or 0, registrations or 0


def count_organized_events(db: Session, user_id: int) -> int:
    stmt = select(func.count(Event.id)).where(Event.organizer_id == user_id)
    return db.scalar(stmt) or 0


def delete_user(db: Session, user: User, is_commit: bool = True):
    # promo codes outlive the admin who created them
    db.execute(
        update(PromoCode)
        .where(PromoCode.created_by == user.id)
        .values(created_by=None)
        .execution_options(synchronize_session=False)
    )
    for model, column in ((Token, Token.user_id), (User, User.id)):
        db.execute(
            delete(model)
            .where(column == user.id)
            .execution_options(synchronize_session=False)
        )
    db.expunge(user)
    if is_commit:
        db.commit()
