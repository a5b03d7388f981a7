from models import Base
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import mapped_column, Mapped, relationship


class TicketType(Base):
    __tablename__ = "ticket_type"

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    event_id: Mapped[int] = mapped_column(
        "event_id",
        Integer,
        ForeignKey("event.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column("name", String(100), nullable=False)
    description: Mapped[str] = mapped_column("description", Text, nullable=True)
    price_label: Mapped[str] = mapped_column("price_label", String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        "is_active", Boolean, nullable=False, default=True
    )
    sort_order: Mapped[int] = mapped_column("sort_order", Integer, default=0)
    created_at = mapped_column("created_at", DateTime(timezone=True))

    event = relationship("Event", back_populates="ticket_types")
    registrations = relationship("Registration", back_populates="ticket_type")
