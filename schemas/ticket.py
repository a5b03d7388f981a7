from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import Query
from pydantic import BaseModel, ConfigDict

from models.Ticket import TicketStatus
from schemas.event import EventBrief
from settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class PurchaseTicketRequest(BaseModel):
    promo_code: Optional[str] = None


class PriceBreakdownResponse(BaseModel):
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    discount_amount: Decimal
    final_price: Decimal


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unique_code: str
    user_id: int
    event_id: int
    status: TicketStatus
    price: Decimal
    discount_amount: Decimal
    promo_code_id: Optional[int] = None
    purchase_date: Optional[datetime] = None
    used_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    event: Optional[EventBrief] = None


class PurchaseTicketResponse(BaseModel):
    ticket: TicketResponse
    pricing: PriceBreakdownResponse


class TicketQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    page_size: int = Query(
        DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page Size"
    )
    status: Optional[TicketStatus] = Query(None, description="Filter by status")
    event_id: Optional[int] = Query(None, description="Filter by event")


class TicketListResponse(BaseModel):
    page: int
    page_size: int
    count: int
    page_count: int
    results: List[TicketResponse]


class TicketVerifyResponse(BaseModel):
    valid: bool
    message: str
    ticket: TicketResponse
