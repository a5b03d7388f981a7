from enum import StrEnum
from typing import List, Optional


class ErrorKind(StrEnum):
    NOT_FOUND = "NotFound"
    EVENT_INACTIVE = "EventInactive"
    EVENT_EXPIRED = "EventExpired"
    INSUFFICIENT_CAPACITY = "InsufficientCapacity"
    DUPLICATE_PURCHASE = "DuplicatePurchase"
    INVALID_PROMO_CODE = "InvalidPromoCode"
    ACCESS_DENIED = "AccessDenied"
    ALREADY_CANCELLED = "AlreadyCancelled"
    INVALID_STATE = "InvalidState"
    EVENT_ALREADY_OCCURRED = "EventAlreadyOccurred"
    OUT_OF_RANGE = "OutOfRange"
    VALIDATION = "ValidationError"


class TicketingError(Exception):
    """Base error of the ticketing core.

    Every error carries a stable `kind` and the HTTP status the routes answer
    with. Raised by the workflows, converted to a response in routes.
    """

    kind: ErrorKind = ErrorKind.VALIDATION
    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.kind.value}


class NotFoundError(TicketingError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Not Found"


class EventInactiveError(TicketingError):
    kind = ErrorKind.EVENT_INACTIVE
    default_message = "Event is not active"


class EventExpiredError(TicketingError):
    kind = ErrorKind.EVENT_EXPIRED
    default_message = "Cannot purchase tickets for past events"


class InsufficientCapacityError(TicketingError):
    kind = ErrorKind.INSUFFICIENT_CAPACITY
    status_code = 409
    default_message = "Event is sold out"


class DuplicatePurchaseError(TicketingError):
    kind = ErrorKind.DUPLICATE_PURCHASE
    status_code = 409
    default_message = "You already have an active purchase for this event"


class InvalidPromoCodeError(TicketingError):
    kind = ErrorKind.INVALID_PROMO_CODE
    default_message = "Invalid promo code"

    def __init__(
        self, message: Optional[str] = None, errors: Optional[List[str]] = None
    ) -> None:
        self.errors = errors or []
        if message is None and self.errors:
            message = "; ".join(self.errors)
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class AccessDeniedError(TicketingError):
    kind = ErrorKind.ACCESS_DENIED
    status_code = 403
    default_message = "Access denied"


class AlreadyCancelledError(TicketingError):
    kind = ErrorKind.ALREADY_CANCELLED
    default_message = "Already cancelled"


class InvalidStateError(TicketingError):
    kind = ErrorKind.INVALID_STATE
    default_message = "Invalid state for this operation"


class EventAlreadyOccurredError(TicketingError):
    kind = ErrorKind.EVENT_ALREADY_OCCURRED
    default_message = "Event has already occurred"


class OutOfRangeError(TicketingError):
    kind = ErrorKind.OUT_OF_RANGE
    default_message = "Value out of range"


class ValidationFailedError(TicketingError):
    kind = ErrorKind.VALIDATION
    default_message = "Validation failed"
