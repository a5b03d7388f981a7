import uuid
from decimal import Decimal
from enum import StrEnum
from models import Base
from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, text
from sqlalchemy.orm import mapped_column, Mapped, relationship


class TicketStatus(StrEnum):
    ACTIVE = "active"
    USED = "used"
    CANCELLED = "cancelled"


def generate_ticket_code() -> str:
    return f"TICKET-{uuid.uuid4()}"


class Ticket(Base):
    __tablename__ = "ticket"
    __table_args__ = (
        # one active ticket per user and event
        Index(
            "uq_ticket_user_event_active",
            "user_id",
            "event_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    unique_code: Mapped[str] = mapped_column(
        "unique_code",
        String(100),
        unique=True,
        nullable=False,
        default=generate_ticket_code,
    )
    user_id: Mapped[int] = mapped_column(
        "user_id", Integer, ForeignKey("user.id"), nullable=False, index=True
    )
    event_id: Mapped[int] = mapped_column(
        "event_id", Integer, ForeignKey("event.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        "status", String(20), nullable=False, default=TicketStatus.ACTIVE
    )
    # amount charged at purchase time, independent of later event price changes
    price: Mapped[Decimal] = mapped_column(
        "price", Numeric(10, 2), nullable=False, default=Decimal("0.00")
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        "discount_amount", Numeric(10, 2), nullable=False, default=Decimal("0.00")
    )
    promo_code_id: Mapped[int] = mapped_column(
        "promo_code_id",
        Integer,
        ForeignKey("promo_code.id", ondelete="SET NULL"),
        nullable=True,
    )
    purchase_date = mapped_column("purchase_date", DateTime(timezone=True))
    used_at = mapped_column("used_at", DateTime(timezone=True), nullable=True)
    cancelled_at = mapped_column("cancelled_at", DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="tickets")
    event = relationship("Event", back_populates="tickets")
    promo_code = relationship("PromoCode")
