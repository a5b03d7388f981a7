from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

from settings import DEFAULT_PAGE_SIZE, EVENT_MAX_CAPACITY, MAX_PAGE_SIZE


class EventQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    page_size: int = Query(
        DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page Size"
    )
    search: Optional[str] = Query(None, description="Search by title or description")
    category_id: Optional[int] = Query(None, description="Filter by category")
    location: Optional[str] = Query(None, description="Filter by location")
    is_featured: Optional[bool] = Query(None, description="Only featured events")
    min_price: Optional[Decimal] = Query(None, ge=0, description="Minimum price")
    max_price: Optional[Decimal] = Query(None, ge=0, description="Maximum price")
    date_from: Optional[datetime] = Query(None, description="Events starting after")
    date_to: Optional[datetime] = Query(None, description="Events starting before")
    include_inactive: bool = Query(
        False, description="Include inactive events, admin and organizer only"
    )


class CreateEventRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    location: str = Field(min_length=1, max_length=300)
    event_date: datetime
    capacity: int = Field(ge=1, le=EVENT_MAX_CAPACITY)
    price: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    is_featured: bool = False


class UpdateEventRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=300)
    event_date: Optional[datetime] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    is_featured: Optional[bool] = None


class EventStatusRequest(BaseModel):
    is_active: bool


class CategoryBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    location: str
    event_date: datetime
    capacity: int
    price: Decimal
    tickets_sold: int
    available_seats: int
    is_active: bool
    is_featured: bool
    image_url: Optional[str] = None
    organizer_id: Optional[int] = None
    category: Optional[CategoryBrief] = None
    created_at: Optional[datetime] = None


class EventListResponse(BaseModel):
    page: int
    page_size: int
    count: int
    page_count: int
    results: List[EventResponse]


class EventBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    location: str
    event_date: datetime


class EventStatsResponse(BaseModel):
    event_id: int
    title: str
    capacity: int
    tickets_sold: int
    available_seats: int
    occupancy_rate: float
    total_revenue: Decimal
    active_tickets: int
    used_tickets: int
    cancelled_tickets: int
    total_registrations: int
    registered_seats: int
