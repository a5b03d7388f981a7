from enum import StrEnum
from models import Base
from sqlalchemy import DateTime, String, Boolean, Integer
from sqlalchemy.orm import mapped_column, Mapped, relationship


class UserRole(StrEnum):
    ADMIN = "admin"
    ORGANIZER = "organizer"
    USER = "user"


class User(Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    username: Mapped[str] = mapped_column(
        "username", String(100), nullable=False, unique=True
    )
    email: Mapped[str] = mapped_column("email", String(255), nullable=True, index=True)
    name: Mapped[str] = mapped_column("name", String(200), nullable=True)
    phone: Mapped[str] = mapped_column("phone", String(50), nullable=True)
    password: Mapped[str] = mapped_column("password", String, nullable=True)
    role: Mapped[str] = mapped_column(
        "role", String(20), nullable=False, default=UserRole.USER
    )
    is_active: Mapped[bool] = mapped_column(
        "is_active", Boolean, nullable=False, default=True
    )
    created_at = mapped_column("created_at", DateTime(timezone=True))
    updated_at = mapped_column("updated_at", DateTime(timezone=True))

    # One to Many
    tokens = relationship("Token", back_populates="user")
    tickets = relationship("Ticket", back_populates="user")
    registrations = relationship("Registration", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
