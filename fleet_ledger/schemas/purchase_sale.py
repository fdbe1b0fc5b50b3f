"""
Purchase & Sale ledger schemas.

Business rules (tins required for purchase/sale, category required for expense,
non-negative balance and tins) are enforced in purchase_sale_service so that
partial updates are validated against the merged record.
"""

from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from fleet_ledger.models.purchase_sale import TransactionType

DateType = date


# ============================================================================
# Ledger
# ============================================================================

class PurchaseSaleCreate(BaseModel):
    date: DateType
    vehicle_id: str = Field(..., min_length=1)
    opening_balance: Decimal = Field(..., ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "date": "2024-05-01",
                "vehicle_id": "VEH-ABCDEFGH",
                "opening_balance": 5000.00,
            }
        }


class PurchaseSaleUpdate(BaseModel):
    date: Optional[DateType] = None
    vehicle_id: Optional[str] = Field(None, min_length=1)
    opening_balance: Optional[Decimal] = Field(None, ge=0)


class PurchaseSaleResponse(BaseModel):
    id: str
    date: DateType
    vehicle_id: str
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    branch_id: Optional[str] = None
    opening_balance: Decimal
    current_balance: Optional[Decimal] = None
    current_tins: Optional[int] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    collection_expense_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseSaleListResponse(BaseModel):
    total: int
    purchase_sales: List[PurchaseSaleResponse]


class PurchaseSaleDeleteResponse(BaseModel):
    message: str


# ============================================================================
# Ledger transactions
# ============================================================================

class TransactionCreate(BaseModel):
    type: TransactionType
    date: DateType
    amount: Decimal = Field(..., ge=0)
    tins: Optional[int] = Field(None, description="Required for purchase and sale")
    category: Optional[str] = Field(None, max_length=100, description="Required for expense")
    description: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "type": "purchase",
                "date": "2024-05-02",
                "amount": 1200.00,
                "tins": 40,
                "description": "Morning market",
            }
        }


class TransactionUpdate(BaseModel):
    type: Optional[TransactionType] = None
    date: Optional[DateType] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    tins: Optional[int] = None
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class TransactionResponse(BaseModel):
    id: str
    purchase_sale_id: str
    type: TransactionType
    date: DateType
    amount: Decimal
    tins: Optional[int] = None
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    total: int
    transactions: List[TransactionResponse]
