from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from helpdesk.models.enums import Role
from helpdesk.schemas.common import ApiModel, Pagination


class UserSummary(ApiModel):
    id: int
    name: str
    email: str
    role: Role


class UserRead(UserSummary):
    created_at: datetime


class UserListItem(UserRead):
    open_tickets_count: int = 0
    has_open_tickets: bool = False


class TechnicianRead(UserSummary):
    workload: int = 0


class UserCreate(ApiModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    role: Role


class UserUpdate(ApiModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[Role] = None


class UserRegister(ApiModel):
    email: EmailStr
    name: str = Field(..., min_length=2)
    password: str = Field(..., min_length=6)


class Token(BaseModel):
    access_token: str
    token_type: str


class UserListResponse(ApiModel):
    users: List[UserListItem]
    pagination: Pagination


class TechnicianListResponse(ApiModel):
    technicians: List[TechnicianRead]
