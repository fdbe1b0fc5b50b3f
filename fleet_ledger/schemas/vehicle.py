from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class VehicleCreate(BaseModel):
    """vehicle_name is optional; the service falls back to vehicle_number."""
    vehicle_name: Optional[str] = Field(None, max_length=150)
    vehicle_number: str = Field(..., min_length=1, max_length=50)
    driver_name: str = Field(..., min_length=1, max_length=150)
    co_passenger_name: str = Field(..., min_length=1, max_length=150)
    branch_id: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "vehicle_name": "Tanker 1",
                "vehicle_number": "abc-1234",
                "driver_name": "Ahmed",
                "co_passenger_name": "Bilal",
                "branch_id": "BR-ABCDEFGH",
            }
        }


class VehicleUpdate(BaseModel):
    vehicle_name: Optional[str] = Field(None, max_length=150)
    vehicle_number: Optional[str] = Field(None, min_length=1, max_length=50)
    driver_name: Optional[str] = Field(None, min_length=1, max_length=150)
    co_passenger_name: Optional[str] = Field(None, min_length=1, max_length=150)
    branch_id: Optional[str] = None


class VehicleResponse(BaseModel):
    id: str
    vehicle_name: str
    vehicle_number: str
    driver_name: str
    co_passenger_name: str
    branch_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VehicleListResponse(BaseModel):
    total: int
    vehicles: list[VehicleResponse]


class VehicleDeleteResponse(BaseModel):
    message: str
