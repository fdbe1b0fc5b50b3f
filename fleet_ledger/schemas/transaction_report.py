from decimal import Decimal
from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel

from fleet_ledger.schemas.dashboard import ReportFilters

DateType = date


class UnifiedTransaction(BaseModel):
    id: str
    source: Literal["expense", "purchase-sale"]
    type: str
    date: DateType
    amount: Decimal
    direction: Literal["income", "expense"]
    branch_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    purchase_sale_id: Optional[str] = None


class VehicleTradeSummary(BaseModel):
    vehicle_id: str
    vehicle_name: Optional[str] = None
    vehicle_number: Optional[str] = None
    purchase: Decimal
    sale: Decimal
    expense: Decimal


class BranchExpenseSummary(BaseModel):
    branch_id: Optional[str] = None
    total: Decimal


class TransactionReportSummaries(BaseModel):
    by_vehicle: List[VehicleTradeSummary]
    branch_expenses: List[BranchExpenseSummary]


class TransactionReportResponse(BaseModel):
    filters: ReportFilters
    transactions: List[UnifiedTransaction]
    summaries: TransactionReportSummaries
