from datetime import datetime
from typing import List, Optional

from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

from models.User import UserRole
from settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class UserQuery(BaseModel):
    page: int = Query(1, ge=1, description="Page Number")
    page_size: int = Query(
        DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page Size"
    )
    search: Optional[str] = Query(None, description="Search by username, name or email")
    role: Optional[UserRole] = Query(None, description="Filter by role")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    page: int
    page_size: int
    count: int
    page_count: int
    results: List[UserResponse]


class UserStatusRequest(BaseModel):
    is_active: bool


class UserRoleRequest(BaseModel):
    role: UserRole


class CreateUserRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: str
    password: str = Field(min_length=6)
    name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.USER
