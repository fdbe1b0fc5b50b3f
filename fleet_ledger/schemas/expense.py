from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from fleet_ledger.models.expense import ExpenseType

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date


class ExpenseCreate(BaseModel):
    """Date defaults to today on the server if not provided."""
    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    date: Optional[DateType] = None
    expense_type: ExpenseType = ExpenseType.other
    branch_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    trip_id: Optional[str] = None


class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    amount: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    date: Optional[DateType] = None
    expense_type: Optional[ExpenseType] = None
    branch_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    trip_id: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: str
    title: str
    amount: Decimal
    category: str
    description: Optional[str] = None
    date: DateType
    expense_type: ExpenseType
    branch_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    vehicle_name: Optional[str] = None
    trip_id: Optional[str] = None
    trip_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    expenses: List[ExpenseResponse]


class ExpenseDeleteResponse(BaseModel):
    message: str
