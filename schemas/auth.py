from enum import StrEnum
from typing import Optional
from pydantic import BaseModel, Field


class AuthorizationStatusEnum(StrEnum):
    PASSED = "passed"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


class LoginSuccessResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    role: str


class LogoutSuccessResponse(BaseModel):
    message: str


class SignUpRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: str
    password: str = Field(min_length=6)
    name: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
