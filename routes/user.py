from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.responses import (
    Forbidden,
    NotFound,
    Ok,
    Unauthorized,
    common_response,
)
from core.security import can_manage, get_current_user
from models import get_db_sync
from models.User import User
from repository import ticket as ticketRepo
from repository import user as userRepo
from schemas.common import (
    ForbiddenResponse,
    NotFoundResponse,
    UnauthorizedResponse,
)
from schemas.ticket import TicketListResponse, TicketQuery

router = APIRouter(prefix="/user", tags=["User"])


@router.get(
    "/{user_id}/events-history",
    responses={
        "200": {"model": TicketListResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def events_history(
    user_id: int,
    query: TicketQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    """Tickets the user bought, newest first, with their events."""
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))
    if not can_manage(user, user_id):
        return common_response(Forbidden())
    if userRepo.get_user_by_id(db=db, id=user_id) is None:
        return common_response(NotFound(message="User not found"))

    data = ticketRepo.get_tickets_per_page(
        db=db,
        page=query.page,
        page_size=query.page_size,
        user_id=user_id,
        event_id=query.event_id,
        status=query.status,
    )
    return common_response(
        Ok(data=TicketListResponse.model_validate(data).model_dump(mode="json"))
    )
