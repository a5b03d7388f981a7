from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.log import logger
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
from repository import category as categoryRepo
from schemas.category import (
    CategoryListResponse,
    CategoryQuery,
    CategoryRequest,
    CategoryResponse,
    UpdateCategoryRequest,
)
from schemas.common import (
    BadRequestResponse,
    ForbiddenResponse,
    NotFoundResponse,
    UnauthorizedResponse,
)

router = APIRouter(prefix="/category", tags=["Category"])


@router.get("/", responses={"200": {"model": CategoryListResponse}})
def list_categories(
    query: CategoryQuery = Depends(), db: Session = Depends(get_db_sync)
):
    categories = categoryRepo.get_all_categories(db=db, is_active=query.is_active)
    return common_response(
        Ok(data=CategoryListResponse(results=categories).model_dump(mode="json"))
    )


@router.post(
    "/",
    responses={
        "201": {"model": CategoryResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
    },
)
def create_category(
    request: CategoryRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    if categoryRepo.get_category_by_name(db=db, name=request.name):
        return common_response(BadRequest(message="Category already exists"))

    category = categoryRepo.insert_category(
        db=db, name=request.name, description=request.description
    )
    return common_response(
        Created(data=CategoryResponse.model_validate(category).model_dump(mode="json"))
    )


@router.put(
    "/{category_id}",
    responses={
        "200": {"model": CategoryResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def update_category(
    category_id: int,
    request: UpdateCategoryRequest,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    category = categoryRepo.get_category_by_id(db=db, id=category_id)
    if category is None:
        return common_response(NotFound(message="Category not found"))

    if request.name is not None:
        existing = categoryRepo.get_category_by_name(db=db, name=request.name)
        if existing is not None and existing.id != category.id:
            return common_response(BadRequest(message="Category already exists"))

    category = categoryRepo.update_category(
        db=db, category=category, name=request.name, description=request.description
    )
    return common_response(
        Ok(data=CategoryResponse.model_validate(category).model_dump(mode="json"))
    )


@router.patch(
    "/{category_id}/toggle-status",
    responses={
        "200": {"model": CategoryResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def toggle_category_status(
    category_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    category = categoryRepo.get_category_by_id(db=db, id=category_id)
    if category is None:
        return common_response(NotFound(message="Category not found"))

    category = categoryRepo.toggle_category_status(db=db, category=category)
    logger.info(f"Category {category.id} is_active set to {category.is_active}")
    return common_response(
        Ok(data=CategoryResponse.model_validate(category).model_dump(mode="json"))
    )


@router.delete(
    "/{category_id}",
    responses={
        "204": {"model": None},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "403": {"model": ForbiddenResponse},
        "404": {"model": NotFoundResponse},
    },
)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db_sync),
    user: User = Depends(get_current_user),
):
    denied = authorization_response(check_permissions(user, UserRole.ADMIN))
    if denied is not None:
        return denied

    category = categoryRepo.get_category_by_id(db=db, id=category_id)
    if category is None:
        return common_response(NotFound(message="Category not found"))

    event_count = categoryRepo.count_events_in_category(db=db, category_id=category_id)
    if event_count > 0:
        return common_response(
            BadRequest(
                message=f"Cannot delete category with {event_count} events. "
                "Reassign or delete the events first."
            )
        )

    categoryRepo.delete_category(db=db, category=category)
    return common_response(NoContent())
