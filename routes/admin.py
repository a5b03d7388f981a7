from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.errors import TicketingError
from core.helper import occupancy_rate, to_utc, utc_now
from core.log import logger
from core.responses import (
    BadRequest,
    Created,
    NoContent,
    NotFound,
    Ok,
    TicketingErrorResponse,
    authorization_response,
    common_response,
)
from core.security import (
    check_permissions,
    generate_hash_password,
    get_current_user,
)
from models import get_db_sync
from models.Ticket import TicketStatus
from models.User import User, UserRole
from repository import category as categoryRepo
from repository import event as eventRepo
from repository import registration as registrationRepo
from repository import sales_admin
from repository import ticket as ticketRepo
from repository import user as userRepo
from schemas.admin import (
    AdjustSalesRequest,
    AttendeeItem,
    AttendeesResponse,
    DashboardResponse,
    EventSalesResponse,
    SalesReportItem,
    SalesReportQuery,
    SalesReportResponse,
)
from schemas.common import (
    BadRequestResponse,
    ForbiddenResponse,
    NotFoundResponse,
    TicketingErrorResponse as TicketingErrorSchema,
    UnauthorizedResponse,
    ValidationErrorResponse,
)
from schemas.event import EventResponse
from schemas.user import (
    CreateUserRequest,
    UserListResponse,
    UserQuery,
    UserResponse,
    UserRoleRequest,
    UserStatusRequest,
)

router = APIRouter(prefix="/admin", tags=["Admin"])

ADMIN_RESPONSES = {
    "401": {"model": UnauthorizedResponse},
    "403": {"model": ForbiddenResponse},
}


@router.get(
    "/dashboard",
    responses={"200": {"model": DashboardResponse}, **ADMIN_RESPONSES},
)
def dashboard(
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    total_tickets_sold, total_revenue = eventRepo.get_sales_totals(db=db)
    data = DashboardResponse(
        total_users=userRepo.count_users(db=db),
        total_events=eventRepo.count_events(db=db),
        upcoming_events=eventRepo.count_events(db=db, upcoming_after=utc_now()),
        active_tickets=ticketRepo.count_tickets_by_status(
            db=db, status=TicketStatus.ACTIVE
        ),
        total_tickets_sold=total_tickets_sold,
        total_revenue=total_revenue,
        events_per_category=categoryRepo.get_event_count_per_category(db=db),
        recent_events=[
            EventResponse.model_validate(event)
            for event in eventRepo.get_recent_events(db=db)
        ],
    )
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.get(
    "/sales-report",
    responses={"200": {"model": SalesReportResponse}, **ADMIN_RESPONSES},
)
def sales_report(
    query: SalesReportQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    events = eventRepo.get_events_for_report(
        db=db, start_date=to_utc(query.start_date), end_date=to_utc(query.end_date)
    )
    items = [
        SalesReportItem(
            event_id=event.id,
            title=event.title,
            event_date=event.event_date,
            category=event.category.name if event.category else None,
            capacity=event.capacity,
            tickets_sold=event.tickets_sold,
            available_seats=event.available_seats,
            occupancy_rate=occupancy_rate(event.tickets_sold, event.capacity),
            total_revenue=event.total_revenue,
            is_active=event.is_active,
        )
        for event in events
    ]
    average = (
        round(sum(item.occupancy_rate for item in items) / len(items), 2)
        if items
        else 0.0
    )
    data = SalesReportResponse(
        total_events=len(items),
        total_tickets_sold=sum(item.tickets_sold for item in items),
        total_revenue=sum((item.total_revenue for item in items), Decimal("0.00")),
        average_occupancy_rate=average,
        events=items,
    )
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.put(
    "/event/{event_id}/sales",
    responses={
        "200": {"model": EventSalesResponse},
        "400": {"model": TicketingErrorSchema},
        "404": {"model": TicketingErrorSchema},
        **ADMIN_RESPONSES,
    },
)
def adjust_sales(
    event_id: int,
    request: AdjustSalesRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    try:
        event = sales_admin.manual_adjust(
            db=db,
            event_id=event_id,
            tickets_sold=request.tickets_sold,
            total_revenue=request.total_revenue,
        )
    except TicketingError as e:
        db.rollback()
        return common_response(TicketingErrorResponse(e))

    logger.info(f"Sales of event {event_id} adjusted by admin {user.id}")
    return common_response(
        Ok(data=EventSalesResponse.model_validate(event).model_dump(mode="json"))
    )


@router.post(
    "/event/{event_id}/sales/reset",
    responses={
        "200": {"model": EventSalesResponse},
        "404": {"model": TicketingErrorSchema},
        **ADMIN_RESPONSES,
    },
)
def reset_sales(
    event_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    try:
        event = sales_admin.reset_sales(db=db, event_id=event_id)
    except TicketingError as e:
        db.rollback()
        return common_response(TicketingErrorResponse(e))

    logger.info(f"Sales of event {event_id} reset by admin {user.id}")
    return common_response(
        Ok(data=EventSalesResponse.model_validate(event).model_dump(mode="json"))
    )


@router.get(
    "/event/{event_id}/attendees",
    responses={
        "200": {"model": AttendeesResponse},
        "404": {"model": NotFoundResponse},
        **ADMIN_RESPONSES,
    },
)
def event_attendees(
    event_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    event = eventRepo.get_event_by_id(db=db, id=event_id)
    if event is None:
        return common_response(NotFound(message="Event not found"))

    attendees = [
        AttendeeItem(
            kind="ticket",
            record_id=ticket.unique_code,
            user_id=ticket.user_id,
            username=ticket.user.username,
            name=ticket.user.name,
            email=ticket.user.email,
            quantity=1,
            status=ticket.status,
            amount_paid=ticket.price,
            purchased_at=ticket.purchase_date,
            checked_in=ticket.status == TicketStatus.USED,
        )
        for ticket in ticketRepo.get_event_tickets(db=db, event_id=event_id)
    ]
    attendees += [
        AttendeeItem(
            kind="registration",
            record_id=str(registration.id),
            user_id=registration.user_id,
            username=registration.user.username,
            name=registration.user.name,
            email=registration.user.email,
            quantity=registration.quantity,
            status=registration.payment_status,
            amount_paid=registration.final_price,
            purchased_at=registration.registered_at,
            checked_in=registration.checked_in,
        )
        for registration in registrationRepo.get_event_registrations(
            db=db, event_id=event_id
        )
    ]
    data = AttendeesResponse(
        event_id=event.id,
        title=event.title,
        total_attendees=sum(item.quantity for item in attendees),
        attendees=attendees,
    )
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.get(
    "/user/",
    responses={"200": {"model": UserListResponse}, **ADMIN_RESPONSES},
)
def list_users(
    query: UserQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    data = userRepo.get_users_per_page(
        db=db,
        page=query.page,
        page_size=query.page_size,
        search=query.search,
        role=query.role,
    )
    return common_response(
        Ok(data=UserListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.patch(
    "/user/{user_id}/status",
    responses={
        "200": {"model": UserResponse},
        "400": {"model": BadRequestResponse},
        "404": {"model": NotFoundResponse},
        **ADMIN_RESPONSES,
    },
)
def update_user_status(
    user_id: int,
    request: UserStatusRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    target = userRepo.get_user_by_id(db=db, id=user_id)
    if target is None:
        return common_response(NotFound(message="User not found"))
    if target.id == user.id and not request.is_active:
        return common_response(BadRequest(message="You cannot deactivate yourself"))

    target = userRepo.update_user_status(db=db, user=target, is_active=request.is_active)
    logger.info(f"User {target.id} is_active set to {target.is_active} by {user.id}")
    return common_response(
        Ok(data=UserResponse.model_validate(target).model_dump(mode="json"))
    )


@router.patch(
    "/user/{user_id}/role",
    responses={
        "200": {"model": UserResponse},
        "400": {"model": BadRequestResponse},
        "404": {"model": NotFoundResponse},
        **ADMIN_RESPONSES,
    },
)
def update_user_role(
    user_id: int,
    request: UserRoleRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    target = userRepo.get_user_by_id(db=db, id=user_id)
    if target is None:
        return common_response(NotFound(message="User not found"))
    if target.id == user.id and request.role != UserRole.ADMIN:
        return common_response(BadRequest(message="You cannot change your own role"))

    target = userRepo.update_user_role(db=db, user=target, role=request.role)
    logger.info(f"User {target.id} role set to {target.role} by {user.id}")
    return common_response(
        Ok(data=UserResponse.model_validate(target).model_dump(mode="json"))
    )


@router.post(
    "/user/",
    responses={
        "201": {"model": UserResponse},
        "400": {"model": BadRequestResponse},
        "422": {"model": ValidationErrorResponse},
        **ADMIN_RESPONSES,
    },
)
def create_user(
    request: CreateUserRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    if userRepo.get_user_by_username(db=db, username=request.username):
        return common_response(BadRequest(message="Username already registered"))
    if userRepo.get_user_by_email(db=db, email=request.email):
        return common_response(BadRequest(message="Email already registered"))

    target = userRepo.create_user(
        db=db,
        username=request.username,
        password=generate_hash_password(request.password),
        email=request.email,
        name=request.name,
        phone=request.phone,
        role=request.role,
        is_active=True,
    )
    logger.info(f"User {target.id} created with role {target.role} by {user.id}")
    return common_response(
        Created(data=UserResponse.model_validate(target).model_dump(mode="json"))
    )


@router.delete(
    "/user/{user_id}",
    responses={
        "204": {"model": None},
        "400": {"model": BadRequestResponse},
        "404": {"model": NotFoundResponse},
        **ADMIN_RESPONSES,
    },
)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    target = userRepo.get_user_by_id(db=db, id=user_id)
    if target is None:
        return common_response(NotFound(message="User not found"))
    if target.id == user.id:
        return common_response(BadRequest(message="You cannot delete your own account"))

    tickets, registrations = userRepo.count_user_purchases(db=db, user_id=user_id)
    if tickets or registrations:
        return common_response(
            BadRequest(
                message=f"Cannot delete user. They have {tickets} tickets and "
                f"{registrations} registrations. Consider deactivating instead."
            )
        )
    events = userRepo.count_organized_events(db=db, user_id=user_id)
    if events:
        return common_response(
            BadRequest(
                message=f"Cannot delete user. They are the organizer of {events} events."
            )
        )

    userRepo.delete_user(db=db, user=target)
    logger.info(f"User {user_id} deleted by {user.id}")
    return common_response(NoContent())
