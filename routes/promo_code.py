from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.helper import to_utc, utc_now
from core.log import logger
from core.pricing import calculate_price
from core.responses import (
    BadRequest,
    Created,
    NoContent,
    NotFound,
    Ok,
    authorization_response,
    common_response,
)
from core.security import check_permissions, get_current_user
from models import get_db_sync
from models.User import User, UserRole
from repository import event as eventRepo
from repository import promo_code as promoCodeRepo
from schemas.common import (
    BadRequestResponse,
    ForbiddenResponse,
    NotFoundResponse,
    UnauthorizedResponse,
    ValidationErrorResponse,
)
from schemas.promo_code import (
    CreatePromoCodeRequest,
    PromoCodeListResponse,
    PromoCodeQuery,
    PromoCodeResponse,
    PromoCodeValidateQuery,
    PromoCodeValidateResponse,
    UpdatePromoCodeRequest,
)
from validators.promo_code import validate_promo_code

router = APIRouter(prefix="/promo-code", tags=["Promo Code"])


@router.get(
    "/validate/{code}",
    responses={
        "200": {"model": PromoCodeValidateResponse},
        "404": {"model": NotFoundResponse},
    },
)
def validate(
    code: str,
    query: PromoCodeValidateQuery = Depends(),
    db: Session = Depends(get_db_sync),
):
    promo_code = promoCodeRepo.get_promo_code_by_code(db=db, code=code)
    if promo_code is None:
        return common_response(NotFound(message="Promo code not found"))

    errors = validate_promo_code(
        promo_code=promo_code, event_id=query.event_id, now=utc_now()
    )
    data = PromoCodeValidateResponse(
        valid=not errors,
        code=promo_code.code,
        discount_type=promo_code.discount_type,
        discount_value=promo_code.discount_value,
        event_id=promo_code.event_id,
        remaining_uses=promo_code.remaining_uses,
        valid_until=promo_code.valid_until,
        errors=errors,
    )
    if not errors and query.price is not None:
        price = calculate_price(
            unit_price=query.price, quantity=1, promo_code=promo_code
        )
        data.discount_amount = price.discount_amount
        data.final_price = price.final_price
    return common_response(Ok(data=data.model_dump(mode="json")))


@router.get(
    "/",
    responses={
        "200": {"model": PromoCodeListResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
    },
)
def list_promo_codes(
    query: PromoCodeQuery = Depends(),
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    data = promoCodeRepo.get_promo_codes_per_page(
        db=db,
        page=query.page,
        page_size=query.page_size,
        event_id=query.event_id,
        is_active=query.is_active,
        search=query.search,
    )
    return common_response(
        Ok(data=PromoCodeListResponse.model_validate(data).model_dump(mode="json"))
    )


@router.post(
    "/",
    responses={
        "201": {"model": PromoCodeResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
def create_promo_code(
    request: CreatePromoCodeRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    if promoCodeRepo.get_promo_code_by_code(db=db, code=request.code):
        return common_response(BadRequest(message="Promo code already exists"))
    if request.event_id is not None:
        if eventRepo.get_event_by_id(db=db, id=request.event_id) is None:
            return common_response(BadRequest(message="Event not found"))

    promo_code = promoCodeRepo.insert_promo_code(
        db=db,
        code=request.code,
        description=request.description,
        discount_type=request.discount_type,
        discount_value=request.discount_value,
        event_id=request.event_id,
        max_uses=request.max_uses,
        valid_from=to_utc(request.valid_from),
        valid_until=to_utc(request.valid_until),
        created_by=user.id,
    )
    logger.info(f"Promo code {promo_code.code} created by user {user.id}")
    return common_response(
        Created(
            data=PromoCodeResponse.model_validate(promo_code).model_dump(mode="json")
        )
    )


@router.get(
    "/{promo_code_id}",
    responses={
        "200": {"model": PromoCodeResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def get_promo_code(
    promo_code_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    promo_code = promoCodeRepo.get_promo_code_by_id(db=db, id=promo_code_id)
    if promo_code is None:
        return common_response(NotFound(message="Promo code not found"))

    return common_response(
        Ok(data=PromoCodeResponse.model_validate(promo_code).model_dump(mode="json"))
    )


@router.put(
    "/{promo_code_id}",
    responses={
        "200": {"model": PromoCodeResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def update_promo_code(
    promo_code_id: int,
    request: UpdatePromoCodeRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    promo_code = promoCodeRepo.get_promo_code_by_id(db=db, id=promo_code_id)
    if promo_code is None:
        return common_response(NotFound(message="Promo code not found"))

    fields = request.model_dump(exclude_unset=True)
    if fields.get("code") is not None:
        existing = promoCodeRepo.get_promo_code_by_code(db=db, code=fields["code"])
        if existing is not None and existing.id != promo_code.id:
            return common_response(BadRequest(message="Promo code already exists"))
    if fields.get("event_id") is not None:
        if eventRepo.get_event_by_id(db=db, id=fields["event_id"]) is None:
            return common_response(BadRequest(message="Event not found"))
    if fields.get("max_uses") is not None and fields["max_uses"] < promo_code.times_used:
        return common_response(
            BadRequest(message="max_uses cannot be lower than times_used")
        )
    for key in ("valid_from", "valid_until"):
        if fields.get(key) is not None:
            fields[key] = to_utc(fields[key])

    valid_from = fields.get("valid_from") or to_utc(promo_code.valid_from)
    valid_until = fields.get("valid_until") or to_utc(promo_code.valid_until)
    if valid_until <= valid_from:
        return common_response(
            BadRequest(message="valid_until must be after valid_from")
        )

    promo_code = promoCodeRepo.update_promo_code(db=db, promo_code=promo_code, **fields)
    return common_response(
        Ok(data=PromoCodeResponse.model_validate(promo_code).model_dump(mode="json"))
    )


@router.patch(
    "/{promo_code_id}/deactivate",
    responses={
        "200": {"model": PromoCodeResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def deactivate_promo_code(
    promo_code_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    promo_code = promoCodeRepo.get_promo_code_by_id(db=db, id=promo_code_id)
    if promo_code is None:
        return common_response(NotFound(message="Promo code not found"))

    promo_code = promoCodeRepo.update_promo_code(
        db=db, promo_code=promo_code, is_active=False
    )
    return common_response(
        Ok(data=PromoCodeResponse.model_validate(promo_code).model_dump(mode="json"))
    )


@router.delete(
    "/{promo_code_id}",
    responses={
        "204": {"model": None},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def delete_promo_code(
    promo_code_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    promo_code = promoCodeRepo.get_promo_code_by_id(db=db, id=promo_code_id)
    if promo_code is None:
        return common_response(NotFound(message="Promo code not found"))

    promoCodeRepo.delete_promo_code(db=db, promo_code=promo_code)
    logger.info(f"Promo code {promo_code.code} deleted by user {user.id}")
    return common_response(NoContent())
