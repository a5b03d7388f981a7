from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateTicketTypeRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price_label: Optional[str] = Field(default=None, max_length=100)
    sort_order: int = 0


class TicketTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    name: str
    description: Optional[str] = None
    price_label: Optional[str] = None
    is_active: bool
    sort_order: Optional[int] = 0


class TicketTypeListResponse(BaseModel):
    results: List[TicketTypeResponse]


class UpdateTicketTypeRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    price_label: Optional[str] = Field(default=None, max_length=100)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class TicketTypeAvailabilityResponse(BaseModel):
    ticket_type_id: int
    name: str
    available_quantity: int
    requested_quantity: int
    is_available: bool
    price: Decimal
