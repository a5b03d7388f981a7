from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
import pytz
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.orm import Session as SQLAlchemySession

from core.helper import to_utc
from models import get_db_sync
from models.Token import Token
from models.User import User
from schemas.auth import AuthorizationStatusEnum
from settings import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    ALGORITHM,
    SECRET_KEY,
    TZ,
)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token/", auto_error=False)


def generate_hash_password(password: str) -> str:
    hash = bcrypt.hashpw(str.encode(password), bcrypt.gensalt())
    return hash.decode()


def validated_password(hash: str, password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hash.encode())
    except Exception:
        return False


def generate_token_from_user(db: SQLAlchemySession, user: User) -> str:
    expire = datetime.now(tz=pytz.utc) + timedelta(
        minutes=float(ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    """
    {
        "id": "12",
        "username": "someusername",
        "exp": 1641455971,
    }
    """
    payload = {
        "id": str(user.id),
        "username": user.username,
        "exp": expire,
    }
    token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)
    new_token = Token(user=user, token=token, expired_at=expire)
    db.add(new_token)
    db.commit()
    return token


def get_user_from_token(db: SQLAlchemySession, token: Optional[str]) -> Optional[User]:
    if not token:
        return None

    now = datetime.now().astimezone(pytz.timezone(TZ))
    try:
        payload = jwt.decode(jwt=token, key=SECRET_KEY, algorithms=[ALGORITHM])
        id = int(payload.get("id"))
    except Exception:
        invalidate_token(db=db, token=token)
        return None

    stmt = select(Token).where(Token.token == token, Token.user_id == id)
    session = db.execute(stmt).scalar()
    if session is None:
        return None
    if to_utc(session.expired_at) <= now:
        invalidate_token(db=db, token=token)
        return None

    user = session.user
    if not user.is_active:
        return None
    return user


def get_current_user(
    db: Session = Depends(get_db_sync), token: str = Depends(oauth2_scheme)
) -> Optional[User]:
    return get_user_from_token(db, token)


def invalidate_token(db: SQLAlchemySession, token: str):
    # clear all expired token and selected_token
    now = datetime.now(tz=pytz.utc)
    stmt = (
        delete(Token)
        .where(or_(Token.expired_at <= now, Token.token == token))
        .execution_options(synchronize_session=False)
    )
    db.execute(stmt)
    db.commit()


def invalidate_user_tokens(
    db: SQLAlchemySession, user_id: int, except_token: Optional[str] = None
):
    stmt = delete(Token).where(Token.user_id == user_id)
    if except_token:
        stmt = stmt.where(Token.token != except_token)
    db.execute(stmt.execution_options(synchronize_session=False))
    db.commit()


def check_permissions(
    current_user: User | None, *allowed_roles: str
) -> AuthorizationStatusEnum:
    """Check if the current user has one of the allowed roles.
    Args:
        current_user (User | None): The current authenticated user.
        allowed_roles (str): Roles that may access the resource.
    Returns:
        AuthorizationStatusEnum: The authorization status.
    """
    if current_user is None:
        return AuthorizationStatusEnum.UNAUTHORIZED
    if current_user.role not in allowed_roles:
        return AuthorizationStatusEnum.FORBIDDEN
    return AuthorizationStatusEnum.PASSED


def can_manage(current_user: User, owner_id: int | None) -> bool:
    """Owner of the resource or an admin."""
    return current_user.id == owner_id or current_user.is_admin
