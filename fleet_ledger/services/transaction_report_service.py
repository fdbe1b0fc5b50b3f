from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from fleet_ledger.logger_config import logger
from fleet_ledger.models.expense import Expense, ExpenseType
from fleet_ledger.models.purchase_sale import (
    PurchaseSale,
    PurchaseSaleTransaction,
    TransactionType,
)
from fleet_ledger.services.dashboard_service import normalize_branch_filter
from fleet_ledger.services.purchase_sale_service import COLLECTION_TITLE_PREFIX


ZERO = Decimal("0.00")

LEDGER_LABELS = {
    TransactionType.purchase: "Purchase",
    TransactionType.sale: "Sale",
    TransactionType.expense: "Vehicle Expense",
}


def expense_label(expense: Expense) -> str:
    if (expense.title or "").startswith(COLLECTION_TITLE_PREFIX):
        return "Completed Fund (Income)"
    if expense.expense_type == ExpenseType.revenue:
        return "Income"
    return "Expense"


class TransactionReportService:
    """
    One feed over expenses and purchase & sale transactions, with per-vehicle
    and per-branch summaries.
    """

    def __init__(self, db: Session):
        self.db = db

    def _expenses(self, branch_id, date_from, date_to):
        query = self.db.query(Expense)
        if branch_id:
            query = query.filter(Expense.branch_id == branch_id)
        if date_from:
            query = query.filter(Expense.date >= date_from)
        if date_to:
            query = query.filter(Expense.date <= date_to)
        return query

    def _ledger_transactions(self, branch_id, date_from, date_to):
        query = self.db.query(PurchaseSaleTransaction, PurchaseSale).join(
            PurchaseSale, PurchaseSale.id == PurchaseSaleTransaction.purchase_sale_id
        )
        if branch_id:
            query = query.filter(PurchaseSale.branch_id == branch_id)
        if date_from:
            query = query.filter(PurchaseSaleTransaction.date >= date_from)
        if date_to:
            query = query.filter(PurchaseSaleTransaction.date <= date_to)
        return query.order_by(
            PurchaseSaleTransaction.date.desc(), PurchaseSaleTransaction.created_at.desc()
        )

    def _branch_expenses(self, branch_id, date_from, date_to) -> List[dict]:
        total = func.coalesce(func.sum(Expense.amount), 0)
        rows = (
            self._expenses(branch_id, date_from, date_to)
            .filter(Expense.expense_type != ExpenseType.revenue)
            .with_entities(Expense.branch_id, total)
            .group_by(Expense.branch_id)
            .all()
        )
        summaries = [
            {"branch_id": row[0], "total": Decimal(str(row[1]))} for row in rows
        ]
        summaries.sort(key=lambda row: row["total"], reverse=True)
        return summaries

    def get_report(
        self,
        branch_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> dict:
        branch_id = normalize_branch_filter(branch_id)
        if date_from and date_to and date_from > date_to:
            raise ValueError("date_from cannot be after date_to")

        expenses = (
            self._expenses(branch_id, date_from, date_to)
            .order_by(Expense.date.desc(), Expense.created_at.desc())
            .all()
        )
        ledger_rows = self._ledger_transactions(branch_id, date_from, date_to).all()
        logger.debug(
            f"Transaction report: {len(expenses)} expenses, {len(ledger_rows)} ledger transactions"
        )

        feed = []
        for expense in expenses:
            is_income = expense.expense_type == ExpenseType.revenue
            feed.append(
                {
                    "id": expense.id,
                    "source": "expense",
                    "type": expense_label(expense),
                    "date": expense.date,
                    "amount": expense.amount,
                    "direction": "income" if is_income else "expense",
                    "branch_id": expense.branch_id,
                    "vehicle_id": expense.vehicle_id,
                    "vehicle_name": expense.vehicle_name,
                    "category": expense.category,
                    "description": expense.description,
                }
            )

        vehicle_summary = {}
        for tx, ledger in ledger_rows:
            feed.append(
                {
                    "id": tx.id,
                    "source": "purchase-sale",
                    "type": LEDGER_LABELS[tx.type],
                    "date": tx.date,
                    "amount": tx.amount,
                    "direction": "income" if tx.type == TransactionType.sale else "expense",
                    "branch_id": ledger.branch_id,
                    "vehicle_id": ledger.vehicle_id,
                    "vehicle_name": ledger.vehicle_name,
                    "vehicle_number": ledger.vehicle_number,
                    "category": tx.category,
                    "description": tx.description,
                    "purchase_sale_id": ledger.id,
                }
            )

            if not ledger.vehicle_id:
                continue
            row = vehicle_summary.setdefault(
                ledger.vehicle_id,
                {
                    "vehicle_id": ledger.vehicle_id,
                    "vehicle_name": ledger.vehicle_name,
                    "vehicle_number": ledger.vehicle_number,
                    "purchase": ZERO,
                    "sale": ZERO,
                    "expense": ZERO,
                },
            )
            row[tx.type.value] += Decimal(tx.amount)

        # Stable sort keeps same-day rows in their query order
        feed.sort(key=lambda item: item["date"], reverse=True)
        by_vehicle = sorted(
            vehicle_summary.values(),
            key=lambda row: row["sale"] - row["purchase"],
            reverse=True,
        )

        return {
            "filters": {"branch_id": branch_id, "date_from": date_from, "date_to": date_to},
            "transactions": feed,
            "summaries": {
                "by_vehicle": by_vehicle,
                "branch_expenses": self._branch_expenses(branch_id, date_from, date_to),
            },
        }
