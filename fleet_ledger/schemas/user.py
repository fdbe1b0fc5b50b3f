from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from fleet_ledger.models.user import UserRole


class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.user

    model_config = ConfigDict(from_attributes=True)


class UserCreate(UserBase):
    password: str = Field(..., min_length=4, max_length=100)


class UserResponse(UserBase):
    id: int
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    total: int
    users: list[UserResponse]


class UserDeleteResponse(BaseModel):
    message: str
