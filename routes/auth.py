from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from core.log import logger
from core.responses import (
    Created,
    common_response,
    Ok,
    BadRequest,
    Unauthorized,
)
from core.security import (
    generate_hash_password,
    generate_token_from_user,
    get_user_from_token,
    invalidate_token,
    invalidate_user_tokens,
    validated_password,
    oauth2_scheme,
)
from models import get_db_sync
from models.User import UserRole
from schemas.common import (
    BadRequestResponse,
    InternalServerErrorResponse,
    UnauthorizedResponse,
    ValidationErrorResponse,
)
from schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginSuccessResponse,
    LogoutSuccessResponse,
    MeResponse,
    SignUpRequest,
    UpdateProfileRequest,
)
from repository import user as userRepo

router = APIRouter(prefix="/auth", tags=["Auth"])


def _authenticate(db: Session, username: str, password: str):
    user = userRepo.get_user_by_username(db=db, username=username)
    if user is None or user.password is None:
        return None
    if not user.is_active:
        return None
    if not validated_password(user.password, password):
        return None
    return user


@router.post("/token/")
async def swagger_form_token(
    form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db_sync)
):
    user = _authenticate(db=db, username=form_data.username, password=form_data.password)
    if user is None:
        return common_response(BadRequest(message="Invalid Credentials"))

    token = generate_token_from_user(db=db, user=user)
    return {"access_token": token, "token_type": "bearer"}


@router.post(
    "/signin/",
    responses={
        "200": {"model": LoginSuccessResponse},
        "400": {"model": BadRequestResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
async def signin(request: LoginRequest, db: Session = Depends(get_db_sync)):
    user = _authenticate(db=db, username=request.username, password=request.password)
    if user is None:
        return common_response(BadRequest(message="Invalid Credentials"))

    token = generate_token_from_user(db=db, user=user)
    return common_response(
        Ok(data=LoginSuccessResponse(access_token=token).model_dump(mode="json"))
    )


@router.post(
    "/signup/",
    responses={
        "201": {"model": MeResponse},
        "400": {"model": BadRequestResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
async def signup(request: SignUpRequest, db: Session = Depends(get_db_sync)):
    if userRepo.get_user_by_username(db=db, username=request.username):
        return common_response(BadRequest(message="Username already registered"))
    if userRepo.get_user_by_email(db=db, email=request.email):
        return common_response(BadRequest(message="Email already registered"))

    user = userRepo.create_user(
        db=db,
        username=request.username,
        password=generate_hash_password(request.password),
        email=request.email,
        name=request.name,
        phone=request.phone,
        role=UserRole.USER,
        is_active=True,
    )
    logger.info(f"User {user.username} signed up")
    return common_response(
        Created(data=MeResponse.model_validate(user, from_attributes=True).model_dump())
    )


@router.get(
    "/me/",
    responses={
        "200": {"model": MeResponse},
        "401": {"model": UnauthorizedResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
async def me(db: Session = Depends(get_db_sync), token: str = Depends(oauth2_scheme)):
    user = get_user_from_token(db=db, token=token)
    if user is None:
        return common_response(Unauthorized(message="Invalid Credentials"))

    return common_response(
        Ok(data=MeResponse.model_validate(user, from_attributes=True).model_dump())
    )


@router.post(
    "/logout/",
    responses={
        "200": {"model": LogoutSuccessResponse},
        "401": {"model": UnauthorizedResponse},
        "500": {"model": InternalServerErrorResponse},
    },
)
async def logout(
    db: Session = Depends(get_db_sync), token: str = Depends(oauth2_scheme)
):
    user = get_user_from_token(db=db, token=token)
    if user is None:
        return common_response(Unauthorized(message="Invalid Credentials"))

    invalidate_token(db=db, token=token)
    return common_response(Ok(data={"message": "logout successfully"}))


@router.put(
    "/change-password/",
    responses={
        "200": {"model": LogoutSuccessResponse},
        "400": {"model": BadRequestResponse},
        "401": {"model": UnauthorizedResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
async def change_password(
    request: ChangePasswordRequest,
    db: Session = Depends(get_db_sync),
    token: str = Depends(oauth2_scheme),
):
    user = get_user_from_token(db=db, token=token)
    if user is None:
        return common_response(Unauthorized(message="Invalid Credentials"))

    if user.password is None or not validated_password(
        user.password, request.current_password
    ):
        return common_response(BadRequest(message="Current password is incorrect"))

    userRepo.update_user_password(
        db=db, user=user, password=generate_hash_password(request.new_password)
    )
    # other sessions of this user sign in again
    invalidate_user_tokens(db=db, user_id=user.id, except_token=token)
    logger.info(f"User {user.username} changed password")
    return common_response(Ok(data={"message": "Password changed successfully"}))


@router.put(
    "/profile/",
    responses={
        "200": {"model": MeResponse},
        "401": {"model": UnauthorizedResponse},
        "422": {"model": ValidationErrorResponse},
    },
)
async def update_profile(
    request: UpdateProfileRequest,
    db: Session = Depends(get_db_sync),
    token: str = Depends(oauth2_scheme),
):
    user = get_user_from_token(db=db, token=token)
    if user is None:
        return common_response(Unauthorized(message="Invalid Credentials"))

    user = userRepo.update_user_profile(
        db=db, user=user, name=request.name, phone=request.phone
    )
    return common_response(
        Ok(data=MeResponse.model_validate(user, from_attributes=True).model_dump())
    )
