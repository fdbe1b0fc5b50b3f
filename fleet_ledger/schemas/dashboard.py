from decimal import Decimal
from datetime import date
from typing import List, Optional
from pydantic import BaseModel


class ReportFilters(BaseModel):
    branch_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class ProfitFigures(BaseModel):
    revenue: Decimal
    expense: Decimal
    profit: Decimal


class VehicleProfitRow(BaseModel):
    vehicle_id: str
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    revenue: Decimal
    expense: Decimal
    profit: Decimal


class DashboardResponse(BaseModel):
    filters: ReportFilters
    totals: ProfitFigures
    today: ProfitFigures
    by_vehicle: List[VehicleProfitRow]
