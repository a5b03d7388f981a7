import traceback
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.errors import TicketingError
from core.helper import occupancy_rate, to_utc, utc_now
from core.log import logger
from core.purchase import purchase_ticket, register_for_event
from core.responses import (
    BadRequest,
    Created,
    Forbidden,
    InternalServerError,
    NoContent,
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
from repository import category as categoryRepo
from repository import event as eventRepo
from repository import ticket_type as ticketTypeRepo
from schemas.common import (
    BadRequestResponse,
    ForbiddenResponse,
    InternalServerErrorResponse,
    NotFoundResponse,
    TicketingErrorResponse as TicketingErrorSchema,
    UnauthorizedResponse,
    ValidationErrorResponse,
)
from schemas.event import (
    CreateEventRequest,
    EventListResponse,
    EventQuery,
    EventResponse,
    EventStatsResponse,
    EventStatusRequest,
    UpdateEventRequest,
)
from schemas.registration import (
    RegistrationCreatedResponse,
    RegistrationRequest,
    RegistrationResponse,
)
from schemas.ticket import (
    PurchaseTicketRequest,
    PurchaseTicketResponse,
    TicketResponse,
)
from schemas.ticket_type import (
    CreateTicketTypeRequest,
    TicketTypeAvailabilityResponse,
    TicketTypeListResponse,
    TicketTypeResponse,
    UpdateTicketTypeRequest,
)

router = APIRouter(prefix="/event", tags=["Event"])

STAFF_ROLES = (UserRole.ADMIN, UserRole.ORGANIZER)


def _is_staff(user: User | None) -> bool:
    return user is not None and user.role in STAFF_ROLES


def _category_error(db: Session, category_id: int):
    category = categoryRepo.get_category_by_id(db=db, id=category_id)
    if category is None:
        return common_response(BadRequest(message="Category not found"))
    if not category.is_active:
        return common_response(BadRequest(message="Category is not active"))
    return None


@router.get(
    "/",
    responses={
        "200": {"model": EventListResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
def list_events(
    query: EventQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    is_active = None if query.include_inactive and _is_staff(user) else True
    data = eventRepo.get_events_per_page(
        db=db,
        page=query.page,
        page_size=query.page_size,
        search=query.search,
        category_id=query.category_id,
        location=query.location,
        is_active=is_active,
        is_featured=query.is_featured,
        min_price=query.min_price,
        max_price=query.max_price,
        date_from=to_utc(query.date_from),
        date_to=to_utc(query.date_to),
    )
    return common_response(
        Ok(data=EventListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.get(
    "/{event_id}",
    responses={
        "200": {"model": EventResponse},
        "404": {"model": NotFoundResponse},
    },
)
def get_event(
    event_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None or (not event.is_active and not _is_staff(user)):
        return common_response(NotFound(message="Event not found"))

    return common_response(
        Ok(data=EventResponse.model_validate(event).model_dump(mode="json"))
    )


@router.post(
    "/",
    responses={
        "201": {"model": EventResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
def create_event(
    request: CreateEventRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event_date = to_utc(request.event_date)
    if event_date <= utc_now():
        return common_response(BadRequest(message="Event date must be in the future"))

    if request.category_id is not None:
        denied = _category_error(db=db, category_id=request.category_id)
        if denied is not None:
            return denied

    event = eventRepo.insert_event(
        db=db,
        title=request.title,
        description=request.description,
        location=request.location,
        event_date=event_date,
        capacity=request.capacity,
        price=request.price,
        category_id=request.category_id,
        image_url=request.image_url,
        is_featured=request.is_featured,
        organizer_id=user.id,
    )
    logger.info(f"Event {event.id} created by user {user.id}")
    event = eventRepo.get_event_by_id(db=db, id=event.id)
    return common_response(
        Created(data=EventResponse.model_validate(event).model_dump(mode="json"))
    )


@router.put(
    "/{event_id}",
    responses={
        "200": {"model": EventResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def update_event(
    event_id: int,
    request: UpdateEventRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    fields = request.model_dump(exclude_unset=True)
    if "event_date" in fields and fields["event_date"] is not None:
        fields["event_date"] = to_utc(fields["event_date"])
    if fields.get("category_id") is not None:
        denied = _category_error(db=db, category_id=fields["category_id"])
        if denied is not None:
            return denied

    eventRepo.update_event(db=db, event=event, **fields)
    event = eventRepo.get_event_by_id(db=db, id=event_id)
    return common_response(
        Ok(data=EventResponse.model_validate(event).model_dump(mode="json"))
    )


@router.patch(
    "/{event_id}/status",
    responses={
        "200": {"model": EventResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def update_event_status(
    event_id: int,
    request: EventStatusRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    event = eventRepo.set_event_status(db=db, event=event, is_active=request.is_active)
    logger.info(f"Event {event.id} is_active set to {event.is_active}")
    return common_response(
        Ok(data=EventResponse.model_validate(event).model_dump(mode="json"))
    )


@router.get(
    "/{event_id}/stats",
    responses={
        "200": {"model": EventStatsResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def event_stats(
    event_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    ticket_counts = eventRepo.get_ticket_status_counts(db=db, event_id=event_id)
    registrations, registered_seats = eventRepo.get_registration_totals(
        db=db, event_id=event_id
    )
    data = EventStatsResponse(
        event_id=event.id,
        title=event.title,
        capacity=event.capacity,
        tickets_sold=event.tickets_sold,
        available_seats=event.available_seats,
        occupancy_rate=occupancy_rate(event.tickets_sold, event.capacity),
        total_revenue=event.total_revenue,
        active_tickets=ticket_counts[TicketStatus.ACTIVE],
        used_tickets=ticket_counts[TicketStatus.USED],
        cancelled_tickets=ticket_counts[TicketStatus.CANCELLED],
        total_registrations=registrations,
        registered_seats=registered_seats,
    )
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.delete(
    "/{event_id}",
    responses={
        "204": {"model": None},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def delete_event(
    event_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    active_tickets = eventRepo.count_active_tickets(db=db, event_id=event_id)
    if active_tickets > 0:
        return common_response(
            BadRequest(
                message=f"Cannot delete event with {active_tickets} active tickets. "
                "Deactivate it instead."
            )
        )
    if (
        eventRepo.count_tickets(db=db, event_id=event_id) > 0
        or eventRepo.count_registrations(db=db, event_id=event_id) > 0
    ):
        return common_response(
            BadRequest(
                message="Cannot delete event with purchase history. "
                "Deactivate it instead."
            )
        )

    eventRepo.delete_event(db=db, event=event)
    logger.info(f"Event {event_id} deleted by user {user.id}")
    return common_response(NoContent())


@router.post(
    "/{event_id}/ticket/",
    responses={
        "201": {"model": PurchaseTicketResponse},
        "400": {"model": TicketingErrorSchema},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": TicketingErrorSchema},
        "409": {"model": TicketingErrorSchema},
    },
)
def buy_ticket(
    event_id: int,
    request: PurchaseTicketRequest | None = None,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        ticket, pricing = purchase_ticket(
            db=db,
            user=user,
            event_id=event_id,
            promo_code=request.promo_code if request else None,
        )
        data = PurchaseTicketResponse(
            ticket=TicketResponse.model_validate(ticket),
            pricing=pricing.to_dict(),
        ).model_dump(mode="json")
        return common_response(Created(data=data))
    except TicketingError as e:
        logger.info(f"Ticket purchase for event {event_id} rejected: {e}")
        return common_response(TicketingErrorResponse(e))
    except Exception as e:
        traceback.print_exc()
        logger.error(f"Failed to purchase ticket for event {event_id}: {e}")
        db.rollback()
        return common_response(InternalServerError(error=str(e)))


@router.post(
    "/{event_id}/registration/",
    responses={
        "201": {"model": RegistrationCreatedResponse},
        "400": {"model": TicketingErrorSchema},
        "401": {"model": UnauthorizedResponse},
        "404": {"model": TicketingErrorSchema},
        "409": {"model": TicketingErrorSchema},
        "422": {"model": ValidationErrorResponse},
    },
)
def register(
    event_id: int,
    request: RegistrationRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    if user is None:
        return common_response(Unauthorized(message="Unauthorized"))

    try:
        registration, pricing = register_for_event(
            db=db,
            user=user,
            event_id=event_id,
            quantity=request.quantity,
            promo_code=request.promo_code,
            ticket_type_id=request.ticket_type_id,
        )
        data = RegistrationCreatedResponse(
            registration=RegistrationResponse.model_validate(registration),
            pricing=pricing.to_dict(),
        ).model_dump(mode="json")
        return common_response(Created(data=data))
    except TicketingError as e:
        logger.info(f"Registration for event {event_id} rejected: {e}")
        return common_response(TicketingErrorResponse(e))
    except Exception as e:
        traceback.print_exc()
        logger.error(f"Failed to register for event {event_id}: {e}")
        db.rollback()
        return common_response(InternalServerError(error=str(e)))


@router.get(
    "/{event_id}/ticket-type/",
    responses={
        "200": {"model": TicketTypeListResponse},
        "404": {"model": NotFoundResponse},
    },
)
def list_ticket_types(
    event_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))

    ticket_types = ticketTypeRepo.get_ticket_types_by_event(
        db=db, event_id=event_id, only_active=not _is_staff(user)
    )
    return common_response(
        Ok(
            data=TicketTypeListResponse(results=ticket_types).model_dump(mode="json")
        )
    )


@router.post(
    "/{event_id}/ticket-type/",
    responses={
        "201": {"model": TicketTypeResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def create_ticket_type(
    event_id: int,
    request: CreateTicketTypeRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    ticket_type = ticketTypeRepo.insert_ticket_type(
        db=db,
        event_id=event_id,
        name=request.name,
        description=request.description,
        price_label=request.price_label,
        sort_order=request.sort_order,
    )
    return common_response(
        Created(
            data=TicketTypeResponse.model_validate(ticket_type).model_dump(mode="json")
        )
    )


@router.put(
    "/{event_id}/ticket-type/{ticket_type_id}",
    responses={
        "200": {"model": TicketTypeResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
def update_ticket_type(
    event_id: int,
    ticket_type_id: int,
    request: UpdateTicketTypeRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    ticket_type = ticketTypeRepo.get_ticket_type_by_id(db=db, id=ticket_type_id)
    if ticket_type is None or ticket_type.event_id != event_id:
        return common_response(NotFound(message="Ticket type not found"))

    ticket_type = ticketTypeRepo.update_ticket_type(
        db=db, ticket_type=ticket_type, **request.model_dump(exclude_unset=True)
    )
    return common_response(
        Ok(data=TicketTypeResponse.model_validate(ticket_type).model_dump(mode="json"))
    )


@router.get(
    "/{event_id}/ticket-type/{ticket_type_id}/availability",
    responses={
        "200": {"model": TicketTypeAvailabilityResponse},
        "404": {"model": NotFoundResponse},
    },
)
def ticket_type_availability(
    event_id: int,
    ticket_type_id: int,
    quantity: int = Query(1, ge=1, description="Seats wanted"),
    db: Session = Depends(get_db_sync),
):
    event = eventRepo.get_event_by_id(db=db, id=event_id)
    ticket_type = ticketTypeRepo.get_ticket_type_by_id(db=db, id=ticket_type_id)
    if event is None or ticket_type is None or ticket_type.event_id != event_id:
        return common_response(NotFound(message="Ticket type not found"))

    # ticket types share the seats of their event
    available = event.available_seats
    is_available = (
        ticket_type.is_active
        and event.is_active
        and to_utc(event.event_date) > utc_now()
        and available >= quantity
    )
    data = TicketTypeAvailabilityResponse(
        ticket_type_id=ticket_type.id,
        name=ticket_type.name,
        available_quantity=available,
        requested_quantity=quantity,
        is_available=is_available,
        price=event.price,
    )
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.delete(
    "/{event_id}/ticket-type/{ticket_type_id}",
    responses={
        "204": {"model": None},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def delete_ticket_type(
    event_id: int,
    ticket_type_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, *STAFF_ROLES))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))
    if not can_manage(user, event.organizer_id):
        return common_response(Forbidden())

    ticket_type = ticketTypeRepo.get_ticket_type_by_id(db=db, id=ticket_type_id)
    if ticket_type is None or ticket_type.event_id != event_id:
        return common_response(NotFound(message="Ticket type not found"))

    ticketTypeRepo.delete_ticket_type(db=db, ticket_type=ticket_type)
    return common_response(NoContent())
