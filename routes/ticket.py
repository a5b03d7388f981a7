import traceback
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.cancellation import cancel_ticket, mark_ticket_used
from core.errors import TicketingError
from core.log import logger
from core.responses import (
    Forbidden,
    InternalServerError,
    NotFound,
    Ok,
    TicketingErrorResponse,
    Unauthorized,
    authorization_response,
    common_response,
)
from core.security import can_manage, check_permissions, get_current_user
from models import get_db_sync
from models.Ticket import TicketStatus
from models.User import User, UserRole
from repository import ticket as ticketRepo
from schemas.common import (
    ForbiddenResponse,
    NotFoundResponse,
    TicketingErrorResponse as TicketingErrorSchema,
    UnauthorizedResponse,
)
from schemas.ticket import (
    TicketListResponse,
    TicketQuery,
    TicketResponse,
    TicketVerifyResponse,
)

router = APIRouter(prefix="/ticket", tags=["Ticket"])


@router.get(
    "/",
    responses={
        "200": {"model": TicketListResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
    },
)
def list_tickets(
    query: TicketQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    data = ticketRepo.get_tickets_per_page(
        db=db,
        page=query.page,
        page_size=query.page_size,
        event_id=query.event_id,
        status=query.status,
    )
    return common_response(
        Ok(data=TicketListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.get(
    "/me",
    responses={
        "200": {"model": TicketListResponse},
        "401": {"model": UnauthorizedResponse},
    },
)
def my_tickets(
    query: TicketQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    data = ticketRepo.get_tickets_per_page(
        db=db,
        page=query.page,
        page_size=query.page_size,
        user_id=user.id,
        event_id=query.event_id,
        status=query.status,
    )
    return common_response(
        Ok(data=TicketListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.get(
    "/verify/{unique_code}",
    responses={
        "200": {"model": TicketVerifyResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def verify_ticket(
    unique_code: str,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(
        check_permissions(user, UserRole.ADMIN, UserRole.ORGANIZER)
    )
    if denied is not None:
        return denied

    ticket = ticketRepo.get_ticket_by_code(db=db, unique_code=unique_code)
    if ticket is None:
        return common_response(NotFound(message="Ticket not found"))

    messages = {
        TicketStatus.ACTIVE: "Ticket is valid",
        TicketStatus.USED: "Ticket has already been used",
        TicketStatus.CANCELLED: "Ticket is cancelled",
    }
    data = TicketVerifyResponse(
        valid=ticket.status == TicketStatus.ACTIVE,
        message=messages.get(ticket.status, "Ticket is not valid"),
        ticket=TicketResponse.model_validate(ticket),
    )
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.get(
    "/{ticket_id}",
    responses={
        "200": {"model": TicketResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def get_ticket(
    ticket_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    ticket = ticketRepo.get_ticket_by_id(db=db, ticket_id=ticket_id)
    if ticket is None:
        return common_response(NotFound(message="Ticket not found"))
    if not can_manage(user, ticket.user_id):
        return common_response(Forbidden())

    return common_response(
        Ok(data=TicketResponse.model_validate(ticket).model_dump(mode="json"))
    )


@router.post(
    "/{ticket_id}/cancel",
    responses={
        "200": {"model": TicketResponse},
        "400": {"model": TicketingErrorSchema},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": TicketingErrorSchema},
        "404": {"model": TicketingErrorSchema},
    },
)
def cancel(
    ticket_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        ticket = cancel_ticket(db=db, user=user, ticket_id=ticket_id)
        return common_response(
            Ok(data=TicketResponse.model_validate(ticket).model_dump(mode="json"))
        )
    except TicketingError as e:
        logger.info(f"Cancellation of ticket {ticket_id} rejected: {e}")
        return common_response(TicketingErrorResponse(e))
    except Exception as e:
        traceback.print_exc()
        logger.error(f"Failed to cancel ticket {ticket_id}: {e}")
        db.rollback()
        return common_response(InternalServerError(error=str(e)))


@router.post(
    "/{ticket_id}/use",
    responses={
        "200": {"model": TicketResponse},
        "400": {"model": TicketingErrorSchema},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": TicketingErrorSchema},
        "404": {"model": TicketingErrorSchema},
    },
)
def use_ticket(
    ticket_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(
        check_permissions(user, UserRole.ADMIN, UserRole.ORGANIZER)
    )
    if denied is not None:
        return denied

    try:
        ticket = mark_ticket_used(db=db, user=user, ticket_id=ticket_id)
        return common_response(
            Ok(data=TicketResponse.model_validate(ticket).model_dump(mode="json"))
        )
    except TicketingError as e:
        return common_response(TicketingErrorResponse(e))
