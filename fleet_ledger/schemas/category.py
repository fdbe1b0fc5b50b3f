from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryResponse(CategoryBase):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryListResponse(BaseModel):
    total: int
    categories: list[CategoryResponse]


class CategoryDeleteResponse(BaseModel):
    message: str


class CategorySeedResponse(BaseModel):
    message: str
    created: int
    count: int
    categories: list[CategoryResponse] = []
