import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.Registration import PaymentStatus
from schemas.event import EventBrief
from schemas.ticket import PriceBreakdownResponse
from settings import REGISTRATION_MAX_QUANTITY


class RegistrationRequest(BaseModel):
    quantity: int = Field(default=1, le=REGISTRATION_MAX_QUANTITY)
    promo_code: Optional[str] = None
    ticket_type_id: Optional[int] = None


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: int
    event_id: int
    ticket_type_id: Optional[int] = None
    promo_code_id: Optional[int] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    payment_status: PaymentStatus
    checked_in: bool
    checked_in_at: Optional[datetime] = None
    registered_at: Optional[datetime] = None
    event: Optional[EventBrief] = None


class RegistrationCreatedResponse(BaseModel):
    registration: RegistrationResponse
    pricing: PriceBreakdownResponse


class RegistrationListResponse(BaseModel):
    results: List[RegistrationResponse]


class RegistrationCancelResponse(BaseModel):
    message: str
    id: uuid.UUID
    event_id: int
    released_seats: int
    refunded_amount: Decimal
