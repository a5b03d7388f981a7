from decimal import Decimal
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


class Event(Base):
    __tablename__ = "event"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_event_capacity_positive"),
        CheckConstraint("price >= 0", name="ck_event_price_non_negative"),
        CheckConstraint(
            "tickets_sold >= 0 AND tickets_sold <= capacity",
            name="ck_event_tickets_sold_range",
        ),
        CheckConstraint("total_revenue >= 0", name="ck_event_revenue_non_negative"),
    )

    id: Mapped[int] = mapped_column(
        "id", Integer, primary_key=True, index=True, autoincrement=True
    )
    title: Mapped[str] = mapped_column("title", String(200), nullable=False)
    description: Mapped[str] = mapped_column("description", Text, nullable=True)
    location: Mapped[str] = mapped_column("location", String(300), nullable=False)
    event_date = mapped_column("event_date", DateTime(timezone=True), nullable=False)
    capacity: Mapped[int] = mapped_column("capacity", Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(
        "price", Numeric(10, 2), nullable=False, default=Decimal("0.00")
    )
    image_url: Mapped[str] = mapped_column("image_url", String(500), nullable=True)
    is_featured: Mapped[bool] = mapped_column(
        "is_featured", Boolean, nullable=False, default=False
    )
    is_active: Mapped[bool] = mapped_column(
        "is_active", Boolean, nullable=False, default=True
    )
    category_id: Mapped[int] = mapped_column(
        "category_id",
        Integer,
        ForeignKey("category.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    organizer_id: Mapped[int] = mapped_column(
        "organizer_id", Integer, ForeignKey("user.id"), nullable=True, index=True
    )

    # ledger aggregates, written only through repository.ledger and repository.sales_admin
    tickets_sold: Mapped[int] = mapped_column(
        "tickets_sold", Integer, nullable=False, default=0
    )
    total_revenue: Mapped[Decimal] = mapped_column(
        "total_revenue", Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )

    created_at = mapped_column("created_at", DateTime(timezone=True))
    updated_at = mapped_column("updated_at", DateTime(timezone=True))

    # Many to One
    category = relationship("Category", back_populates="events")
    organizer = relationship("User", foreign_keys=[organizer_id])

    # One to Many
    tickets = relationship("Ticket", back_populates="event")
    registrations = relationship("Registration", back_populates="event")
    ticket_types = relationship(
        "TicketType", back_populates="event", cascade="all, delete-orphan"
    )

    @property
    def available_seats(self) -> int:
        return self.capacity - (self.tickets_sold or 0)
