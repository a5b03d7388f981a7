import uuid
from decimal import Decimal
from enum import StrEnum
from models import Base
from sqlalchemy import (
    Uuid,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import mapped_column, Mapped, relationship


class PaymentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class Registration(Base):
    __tablename__ = "registration"
    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_registration_user_event"),
        CheckConstraint("quantity >= 1", name="ck_registration_quantity"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        "id", Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4
    )
    user_id: Mapped[int] = mapped_column(
        "user_id", Integer, ForeignKey("user.id"), nullable=False, index=True
    )
    event_id: Mapped[int] = mapped_column(
        "event_id", Integer, ForeignKey("event.id"), nullable=False, index=True
    )
    ticket_type_id: Mapped[int] = mapped_column(
        "ticket_type_id",
        Integer,
        ForeignKey("ticket_type.id", ondelete="SET NULL"),
        nullable=True,
    )
    promo_code_id: Mapped[int] = mapped_column(
        "promo_code_id",
        Integer,
        ForeignKey("promo_code.id", ondelete="SET NULL"),
        nullable=True,
    )
    quantity: Mapped[int] = mapped_column("quantity", Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(
        "unit_price", Numeric(10, 2), nullable=False, default=Decimal("0.00")
    )
    total_price: Mapped[Decimal] = mapped_column(
        "total_price", Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        "discount_amount", Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    final_price: Mapped[Decimal] = mapped_column(
        "final_price", Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    payment_status: Mapped[str] = mapped_column(
        "payment_status", String(20), nullable=False, default=PaymentStatus.COMPLETED
    )
    checked_in: Mapped[bool] = mapped_column(
        "checked_in", Boolean, nullable=False, default=False
    )
    checked_in_at = mapped_column("checked_in_at", DateTime(timezone=True), nullable=True)
    registered_at = mapped_column("registered_at", DateTime(timezone=True))

    user = relationship("User", back_populates="registrations")
    event = relationship("Event", back_populates="registrations")
    ticket_type = relationship("TicketType", back_populates="registrations")
    promo_code = relationship("PromoCode")
