from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.PromoCode import DiscountType
from settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class PromoCodeQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    page_size: int = Query(
        DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page Size"
    )
    search: Optional[str] = Query(None, description="Search by code")
    event_id: Optional[int] = Query(None, description="Filter by event")
    is_active: Optional[bool] = Query(None, description="Filter by active flag")


class PromoCodeValidateQuery(BaseModel):
    event_id: Optional[int] = Query(None, description="Event the code is used for")
    price: Optional[Decimal] = Query(
        None, ge=0, description="Price to preview the discount on"
    )


def _check_discount(discount_type, discount_value):
    if (
        discount_type == DiscountType.PERCENTAGE
        and discount_value is not None
        and discount_value > 100
    ):
        raise ValueError("Percentage discount cannot exceed 100")


class CreatePromoCodeRequest(BaseModel):
    code: str = Field(min_length=3, max_length=50)
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal = Field(gt=0, decimal_places=2)
    event_id: Optional[int] = None
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_from: datetime
    valid_until: datetime

    @model_validator(mode="after")
    def check_values(self):
        if self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from")
        _check_discount(self.discount_type, self.discount_value)
        return self


class UpdatePromoCodeRequest(BaseModel):
    code: Optional[str] = Field(default=None, min_length=3, max_length=50)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    event_id: Optional[int] = None
    max_uses: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_values(self):
        if (
            self.valid_from is not None
            and self.valid_until is not None
            and self.valid_until <= self.valid_from
        ):
            raise ValueError("valid_until must be after valid_from")
        _check_discount(self.discount_type, self.discount_value)
        return self


class PromoCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Decimal
    event_id: Optional[int] = None
    max_uses: Optional[int] = None
    times_used: int
    remaining_uses: Optional[int] = None
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    created_at: Optional[datetime] = None


class PromoCodeListResponse(BaseModel):
    page: int
    page_size: int
    count: int
    page_count: int
    results: List[PromoCodeResponse]


class PromoCodeValidateResponse(BaseModel):
    valid: bool
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    event_id: Optional[int] = None
    remaining_uses: Optional[int] = None
    valid_until: datetime
    errors: List[str] = []
    discount_amount: Optional[Decimal] = None
    final_price: Optional[Decimal] = None
