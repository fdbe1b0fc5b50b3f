from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from fleet_ledger.logger_config import logger
from fleet_ledger.models.expense import Expense, ExpenseType
from fleet_ledger.models.purchase_sale import (
    PurchaseSale,
    PurchaseSaleTransaction,
    TransactionType,
)
from fleet_ledger.models.vehicle import Vehicle


ZERO = Decimal("0.00")
ALL_BRANCHES = "all"


def normalize_branch_filter(branch_id: Optional[str]) -> Optional[str]:
    """`all` and blank both mean no branch filter."""
    if not branch_id or branch_id.strip().lower() == ALL_BRANCHES:
        return None
    return branch_id.strip()


def _to_decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else ZERO


class DashboardService:
    """
    Revenue / expense / profit figures.

    revenue = revenue-type expenses (Complete Collection lands here)
    expense = other expenses + ledger purchase and expense transactions
    Ledger sales are never revenue on their own.
    """

    def __init__(self, db: Session):
        self.db = db

    # ================= QUERY BUILDERS ===================

    def _expense_query(self, branch_id, date_from, date_to):
        query = self.db.query(Expense)
        if branch_id:
            query = query.filter(Expense.branch_id == branch_id)
        if date_from:
            query = query.filter(Expense.date >= date_from)
        if date_to:
            query = query.filter(Expense.date <= date_to)
        return query

    def _ledger_outflow_query(self, branch_id, date_from, date_to):
        query = (
            self.db.query(PurchaseSaleTransaction)
            .join(PurchaseSale, PurchaseSale.id == PurchaseSaleTransaction.purchase_sale_id)
            .filter(
                PurchaseSaleTransaction.type.in_(
                    [TransactionType.purchase, TransactionType.expense]
                )
            )
        )
        if branch_id:
            query = query.filter(PurchaseSale.branch_id == branch_id)
        if date_from:
            query = query.filter(PurchaseSaleTransaction.date >= date_from)
        if date_to:
            query = query.filter(PurchaseSaleTransaction.date <= date_to)
        return query

    # ================= FIGURES ===================

    def _figures(self, branch_id, date_from, date_to) -> Dict[str, Decimal]:
        revenue_row = (
            self._expense_query(branch_id, date_from, date_to)
            .with_entities(
                func.coalesce(
                    func.sum(
                        case((Expense.expense_type == ExpenseType.revenue, Expense.amount), else_=0)
                    ),
                    0,
                ),
                func.coalesce(
                    func.sum(
                        case((Expense.expense_type != ExpenseType.revenue, Expense.amount), else_=0)
                    ),
                    0,
                ),
            )
            .one()
        )
        outflow = (
            self._ledger_outflow_query(branch_id, date_from, date_to)
            .with_entities(func.coalesce(func.sum(PurchaseSaleTransaction.amount), 0))
            .scalar()
        )

        revenue = _to_decimal(revenue_row[0])
        expense = _to_decimal(revenue_row[1]) + _to_decimal(outflow)
        return {"revenue": revenue, "expense": expense, "profit": revenue - expense}

    def _by_vehicle(self, branch_id, date_from, date_to) -> List[dict]:
        vehicle_query = self.db.query(Vehicle)
        if branch_id:
            vehicle_query = vehicle_query.filter(Vehicle.branch_id == branch_id)
        vehicles = vehicle_query.order_by(Vehicle.created_at.desc()).all()

        expense_rows = (
            self._expense_query(branch_id, date_from, date_to)
            .filter(Expense.vehicle_id.isnot(None))
            .with_entities(
                Expense.vehicle_id,
                func.max(Expense.vehicle_name),
                func.coalesce(
                    func.sum(
                        case((Expense.expense_type == ExpenseType.revenue, Expense.amount), else_=0)
                    ),
                    0,
                ),
                func.coalesce(
                    func.sum(
                        case((Expense.expense_type != ExpenseType.revenue, Expense.amount), else_=0)
                    ),
                    0,
                ),
            )
            .group_by(Expense.vehicle_id)
            .all()
        )
        expense_map = {
            row[0]: (row[1], _to_decimal(row[2]), _to_decimal(row[3])) for row in expense_rows
        }

        outflow_rows = (
            self._ledger_outflow_query(branch_id, date_from, date_to)
            .with_entities(
                PurchaseSale.vehicle_id,
                func.coalesce(func.sum(PurchaseSaleTransaction.amount), 0),
            )
            .group_by(PurchaseSale.vehicle_id)
            .all()
        )
        outflow_map = {row[0]: _to_decimal(row[1]) for row in outflow_rows}

        rows = []
        for vehicle in vehicles:
            expense_name, revenue, expense = expense_map.get(vehicle.id, (None, ZERO, ZERO))
            expense += outflow_map.get(vehicle.id, ZERO)
            rows.append(
                {
                    "vehicle_id": vehicle.id,
                    "vehicle_name": expense_name or vehicle.vehicle_name or vehicle.vehicle_number,
                    "vehicle_number": vehicle.vehicle_number,
                    "revenue": revenue,
                    "expense": expense,
                    "profit": revenue - expense,
                }
            )
        rows.sort(key=lambda row: row["profit"], reverse=True)
        return rows

    # ================= PUBLIC ===================

    def get_dashboard(
        self,
        branch_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> dict:
        branch_id = normalize_branch_filter(branch_id)
        if date_from and date_to and date_from > date_to:
            raise ValueError("date_from cannot be after date_to")

        today = date.today()
        logger.debug(f"Dashboard filters: branch={branch_id}, from={date_from}, to={date_to}")

        return {
            "filters": {"branch_id": branch_id, "date_from": date_from, "date_to": date_to},
            "totals": self._figures(branch_id, date_from, date_to),
            "today": self._figures(branch_id, today, today),
            "by_vehicle": self._by_vehicle(branch_id, date_from, date_to),
        }
