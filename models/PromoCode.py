from decimal import Decimal
from enum import StrEnum
from models import Base
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import mapped_column, Mapped, relationship


class DiscountType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PromoCode(Base):
    __tablename__ = "promo_code"
    __table_args__ = (
        CheckConstraint("times_used >= 0", name="ck_promo_code_times_used"),
        CheckConstraint(
            "max_uses IS NULL OR times_used <= max_uses",
            name="ck_promo_code_max_uses",
        ),
    )

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    code: Mapped[str] = mapped_column("code", String(50), unique=True, nullable=False)
    description: Mapped[str] = mapped_column("description", Text, nullable=True)
    discount_type: Mapped[str] = mapped_column(
        "discount_type", String(20), nullable=False, default=DiscountType.PERCENTAGE
    )
    discount_value: Mapped[Decimal] = mapped_column(
        "discount_value", Numeric(10, 2), nullable=False
    )
    # null event_id means the code is valid for every event
    event_id: Mapped[int] = mapped_column(
        "event_id",
        Integer,
        ForeignKey("event.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    # null max_uses means unlimited
    max_uses: Mapped[int] = mapped_column("max_uses", Integer, nullable=True)
    times_used: Mapped[int] = mapped_column(
        "times_used", Integer, nullable=False, default=0
    )
    valid_from = mapped_column("valid_from", DateTime(timezone=True), nullable=False)
    valid_until = mapped_column("valid_until", DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        "is_active", Boolean, nullable=False, default=True
    )
    created_by: Mapped[int] = mapped_column(
        "created_by", Integer, ForeignKey("user.id"), nullable=True
    )
    created_at = mapped_column("created_at", DateTime(timezone=True))
    updated_at = mapped_column("updated_at", DateTime(timezone=True))

    event = relationship("Event")
    creator = relationship("User", foreign_keys=[created_by])

    @property
    def remaining_uses(self) -> int | None:
        if self.max_uses is None:
            return None
        return max(self.max_uses - (self.times_used or 0), 0)
