from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class BranchBase(BaseModel):
    branch_name: str = Field(..., min_length=1, max_length=150)
    phone_number: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None


class BranchCreate(BranchBase):
    pass


class BranchUpdate(BaseModel):
    branch_name: Optional[str] = Field(None, max_length=150)
    phone_number: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None


class BranchResponse(BranchBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BranchListResponse(BaseModel):
    total: int
    branches: list[BranchResponse]


class BranchDeleteResponse(BaseModel):
    message: str
