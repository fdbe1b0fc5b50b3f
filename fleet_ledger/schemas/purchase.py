"""
Trip fuel entry schemas (purchases and sales of fuel recorded against a trip).
"""

from decimal import Decimal
from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from fleet_ledger.models.trip import FuelEntryType

DateType = date


class ExportFormat(str, Enum):
    csv = "csv"
    json = "json"


class PurchaseCreate(BaseModel):
    trip_id: str = Field(..., min_length=1, description="Trip the entry belongs to")
    date: Optional[DateType] = Field(None, description="Defaults to today")
    price: Decimal = Field(..., ge=0)
    litre: Decimal = Field(..., ge=0)
    type: FuelEntryType

    class Config:
        json_schema_extra = {
            "example": {
                "trip_id": "TRP-ABCDEFGH",
                "date": "2024-05-01",
                "price": 1250.00,
                "litre": 500,
                "type": "Purchase",
            }
        }


class PurchaseUpdate(BaseModel):
    trip_id: Optional[str] = Field(None, min_length=1)
    date: Optional[DateType] = None
    price: Optional[Decimal] = Field(None, ge=0)
    litre: Optional[Decimal] = Field(None, ge=0)
    type: Optional[FuelEntryType] = None


class PurchaseResponse(BaseModel):
    id: str
    trip_id: str
    trip_name: str
    vehicle_id: str
    vehicle_name: str
    vehicle_number: str
    date: DateType
    price: Decimal
    litre: Decimal
    type: FuelEntryType
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseListResponse(BaseModel):
    total: int
    purchases: List[PurchaseResponse]


class PurchaseDeleteResponse(BaseModel):
    message: str
