import traceback
import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.cancellation import cancel_registration, check_in_registration
from core.errors import TicketingError
from core.log import logger
from core.responses import (
    InternalServerError,
    Ok,
    TicketingErrorResponse,
    Unauthorized,
    authorization_response,
    common_response,
)
from core.security import check_permissions, get_current_user
from models import get_db_sync
from models.User import User, UserRole
from repository import registration as registrationRepo
from schemas.common import (
    TicketingErrorResponse as TicketingErrorSchema,
    UnauthorizedResponse,
)
from schemas.registration import (
    RegistrationCancelResponse,
    RegistrationListResponse,
    RegistrationResponse,
)

router = APIRouter(prefix="/registration", tags=["Registration"])


@router.get(
    "/me",
    responses={
        "200": {"model": RegistrationListResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def my_registrations(
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    registrations = registrationRepo.get_user_registrations(db=db, user_id=user.id)
    return common_response(
        Ok(
            data=RegistrationListResponse(results=registrations).model_dump(
                mode="json"
            )
        )
    )


@router.post(
    "/{registration_id}/cancel",
    responses={
        "200": {"model": RegistrationCancelResponse},
        "400": {"model": TicketingErrorSchema},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": TicketingErrorSchema},
        "404": {"model": TicketingErrorSchema},
    },
)
def cancel(
    registration_id: uuid.UUID,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        registration = cancel_registration(
            db=db, user=user, registration_id=registration_id
        )
        data = RegistrationCancelResponse(
            message="Registration cancelled",
            id=registration.id,
            event_id=registration.event_id,
            released_seats=registration.quantity,
            refunded_amount=registration.final_price,
        )
        return common_response(Ok(data=data.model_dump(mode="json")))
    except TicketingError as e:
        logger.info(f"Cancellation of registration {registration_id} rejected: {e}")
        return common_response(TicketingErrorResponse(e))
    except Exception as e:
        traceback.print_exc()
        logger.error(f"Failed to cancel registration {registration_id}: {e}")
        db.rollback()
        return common_response(InternalServerError(error=str(e)))


@router.post(
    "/{registration_id}/check-in",
    responses={
        "200": {"model": RegistrationResponse},
        "400": {"model": TicketingErrorSchema},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": TicketingErrorSchema},
        "404": {"model": TicketingErrorSchema},
    },
)
def check_in(
    registration_id: uuid.UUID,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(
        check_permissions(user, UserRole.ADMIN, UserRole.ORGANIZER)
    )
    if denied is not None:
        return denied

    try:
        registration = check_in_registration(
            db=db, user=user, registration_id=registration_id
        )
        return common_response(
            Ok(
                data=RegistrationResponse.model_validate(registration).model_dump(
                    mode="json"
                )
            )
        )
    except TicketingError as e:
        return common_response(TicketingErrorResponse(e))
