from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime

from fleet_ledger.models.trip import TripStatus


class TripCreate(BaseModel):
    vehicle_id: str = Field(..., min_length=1)
    trip_name: str = Field(..., min_length=1, max_length=150)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: TripStatus = TripStatus.Active


class TripUpdate(BaseModel):
    vehicle_id: Optional[str] = Field(None, min_length=1)
    trip_name: Optional[str] = Field(None, min_length=1, max_length=150)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[TripStatus] = None


class TripResponse(BaseModel):
    id: str
    vehicle_id: str
    vehicle_name: str
    vehicle_number: str
    trip_name: str
    start_date: date
    end_date: Optional[date] = None
    status: TripStatus
    total_purchases: Decimal
    total_sales: Decimal
    total_purchase_litres: Decimal
    total_sales_litres: Decimal
    profit_loss: Decimal
    is_profitable: bool
    has_reached_breakeven: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripListResponse(BaseModel):
    total: int
    trips: List[TripResponse]


class TripDeleteResponse(BaseModel):
    message: str
