from typing import List
from pydantic import BaseModel, ConfigDict


class UnauthorizedResponse(BaseModel):
    message: str = "Unauthorized"


class BadRequestResponse(BaseModel):
    message: str


class ValidationErrorResponseDetail(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "message": "Validation error on form data.",
                "errors": [
                    {
                        "field": "capacity",
                        "message": "Input should be greater than or equal to 1",
                    },
                ],
            }
        },
    )

    message: str
    errors: list[ValidationErrorResponseDetail]


class TicketingErrorResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"message": "Event is sold out", "code": "InsufficientCapacity"}
        }
    )

    message: str
    code: str
    errors: List[str] | None = None


class ForbiddenResponse(BaseModel):
    message: str = "You don't have permissions to perform this action"


class NotFoundResponse(BaseModel):
    message: str = "Not Found"


class InternalServerErrorResponse(BaseModel):
    detail: str
