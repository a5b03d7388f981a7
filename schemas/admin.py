from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import Query
from pydantic import BaseModel, ConfigDict, model_validator

from schemas.event import EventResponse


class SalesReportQuery(BaseModel):
    start_date: Optional[datetime] = Query(None, description="Events starting after")
    end_date: Optional[datetime] = Query(None, description="Events starting before")


class AdjustSalesRequest(BaseModel):
    tickets_sold: Optional[int] = None
    total_revenue: Optional[Decimal] = None

    @model_validator(mode="after")
    def check_any(self):
        if self.tickets_sold is None and self.total_revenue is None:
            raise ValueError("tickets_sold or total_revenue is required")
        return self


class EventSalesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    capacity: int
    price: Decimal
    tickets_sold: int
    available_seats: int
    total_revenue: Decimal


class SalesReportItem(BaseModel):
    event_id: int
    title: str
    event_date: datetime
    category: Optional[str] = None
    capacity: int
    tickets_sold: int
    available_seats: int
    occupancy_rate: float
    total_revenue: Decimal
    is_active: bool


class SalesReportResponse(BaseModel):
    total_events: int
    total_tickets_sold: int
    total_revenue: Decimal
    average_occupancy_rate: float
    events: List[SalesReportItem]


class CategoryEventCount(BaseModel):
    category_id: int
    name: str
    event_count: int


class DashboardResponse(BaseModel):
    total_users: int
    total_events: int
    upcoming_events: int
    active_tickets: int
    total_tickets_sold: int
    total_revenue: Decimal
    events_per_category: List[CategoryEventCount]
    recent_events: List[EventResponse]


class AttendeeItem(BaseModel):
    kind: str
    record_id: str
    user_id: int
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    quantity: int
    status: str
    amount_paid: Decimal
    purchased_at: Optional[datetime] = None
    checked_in: bool


class AttendeesResponse(BaseModel):
    event_id: int
    title: str
    total_attendees: int
    attendees: List[AttendeeItem]
