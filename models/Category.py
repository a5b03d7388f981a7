from models import Base
from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import mapped_column, Mapped, relationship


class Category(Base):
    __tablename__ = "category"

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column("name", String(100), nullable=False, unique=True)
    description: Mapped[str] = mapped_column("description", Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        "is_active", Boolean, nullable=False, default=True
    )
    created_at = mapped_column("created_at", DateTime(timezone=True))

    events = relationship("Event", back_populates="category")
