from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.logger_config import logger
from fleet_ledger.models.branch import Branch
from fleet_ledger.models.expense import Expense, ExpenseType
from fleet_ledger.models.purchase_sale import PurchaseSale
from fleet_ledger.models.trip import Trip
from fleet_ledger.services.vehicle_service import get_vehicle_by_id
from fleet_ledger.utils.identifiers import generate_custom_id


def _today() -> date:
    return date.today()


def _apply_references(db: Session, expense: Expense, fields: dict) -> None:
    """Resolve branch / vehicle / trip ids and copy the display names onto the expense."""
    if "branch_id" in fields:
        branch_id = fields["branch_id"] or None
        if branch_id and not db.query(Branch.id).filter(Branch.id == branch_id).first():
            raise NotFoundError("Branch not found")
        expense.branch_id = branch_id

    if "vehicle_id" in fields:
        vehicle_id = fields["vehicle_id"] or None
        if vehicle_id:
            vehicle = get_vehicle_by_id(db, vehicle_id)
            if not vehicle:
                raise NotFoundError("Vehicle not found")
            expense.vehicle_id = vehicle.id
            expense.vehicle_name = vehicle.display_name
            if expense.branch_id is None and "branch_id" not in fields:
                expense.branch_id = vehicle.branch_id
        else:
            expense.vehicle_id = None
            expense.vehicle_name = None

    if "trip_id" in fields:
        trip_id = fields["trip_id"] or None
        if trip_id:
            trip = db.query(Trip).filter(Trip.id == trip_id).first()
            if not trip:
                raise NotFoundError("Trip not found")
            expense.trip_id = trip.id
            expense.trip_name = trip.trip_name
        else:
            expense.trip_id = None
            expense.trip_name = None


def get_expense_by_id(db: Session, expense_id: str) -> Optional[Expense]:
    """Get expense by ID."""
    return db.query(Expense).filter(Expense.id == expense_id).first()


def create_expense(
    db: Session,
    title: str,
    amount: Decimal,
    category: str,
    description: Optional[str] = None,
    expense_date: Optional[date] = None,
    expense_type: ExpenseType = ExpenseType.other,
    branch_id: Optional[str] = None,
    vehicle_id: Optional[str] = None,
    trip_id: Optional[str] = None,
    commit: bool = True,
) -> Expense:
    """Create a single expense; date defaults to today.

    With commit=False the expense is only flushed so callers can bundle it with
    their own writes (e.g. a purchase & sale collection).
    """
    if amount is None or Decimal(amount) < 0:
        raise ValueError("Amount must be positive")
    if not title or not title.strip():
        raise ValueError("Expense title is required")
    if not category or not category.strip():
        raise ValueError("Category is required")

    expense = Expense(
        id=generate_custom_id("EXP"),
        title=title.strip(),
        amount=Decimal(amount),
        category=category.strip(),
        description=description.strip() if description else None,
        date=expense_date or _today(),
        expense_type=expense_type,
    )
    _apply_references(
        db,
        expense,
        {"branch_id": branch_id, "vehicle_id": vehicle_id, "trip_id": trip_id},
    )
    db.add(expense)

    if not commit:
        db.flush()
        return expense

    try:
        db.commit()
        db.refresh(expense)
        logger.info(f"Expense created: {expense.id} {expense.expense_type.value} {expense.amount}")
        return expense
    except Exception:
        db.rollback()
        logger.exception("Error creating expense")
        raise ValueError("Failed to create expense.")


def update_expense(db: Session, expense_id: str, updates: dict) -> Optional[Expense]:
    """Update expense fields present in `updates`."""
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        return None

    if updates.get("title") is not None:
        if not updates["title"].strip():
            raise ValueError("Expense title is required")
        expense.title = updates["title"].strip()
    if updates.get("amount") is not None:
        expense.amount = Decimal(updates["amount"])
    if updates.get("category") is not None:
        if not updates["category"].strip():
            raise ValueError("Category is required")
        expense.category = updates["category"].strip()
    if "description" in updates:
        description = updates["description"]
        expense.description = description.strip() if description else None
    if updates.get("date") is not None:
        expense.date = updates["date"]
    if updates.get("expense_type") is not None:
        expense.expense_type = updates["expense_type"]

    _apply_references(
        db,
        expense,
        {key: updates[key] for key in ("branch_id", "vehicle_id", "trip_id") if key in updates},
    )

    try:
        db.commit()
        db.refresh(expense)
        return expense
    except Exception:
        db.rollback()
        logger.exception("Error updating expense")
        raise ValueError("Failed to update expense.")


def delete_expense(db: Session, expense_id: str) -> bool:
    """Delete an expense."""
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        return False
    db.query(PurchaseSale).filter(PurchaseSale.collection_expense_id == expense_id).update(
        {PurchaseSale.collection_expense_id: None}, synchronize_session=False
    )
    db.delete(expense)
    try:
        db.commit()
        logger.info(f"Expense deleted: {expense_id}")
        return True
    except Exception:
        db.rollback()
        logger.exception("Error deleting expense")
        raise ValueError("Failed to delete expense.")


def get_all_expenses(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    vehicle_id: Optional[str] = None,
    trip_id: Optional[str] = None,
    branch_id: Optional[str] = None,
    expense_type: Optional[ExpenseType] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
) -> Tuple[List[Expense], int, Decimal]:
    """List expenses with filters. Returns (rows, total_count, total_amount)."""
    query = db.query(Expense)
    if vehicle_id:
        query = query.filter(Expense.vehicle_id == vehicle_id)
    if trip_id:
        query = query.filter(Expense.trip_id == trip_id)
    if branch_id:
        query = query.filter(Expense.branch_id == branch_id)
    if expense_type is not None:
        query = query.filter(Expense.expense_type == expense_type)
    if date_from is not None:
        query = query.filter(Expense.date >= date_from)
    if date_to is not None:
        query = query.filter(Expense.date <= date_to)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Expense.title.ilike(term),
                Expense.category.ilike(term),
                Expense.description.ilike(term),
            )
        )

    total_count = query.count()
    total_row = query.with_entities(func.coalesce(func.sum(Expense.amount), 0)).first()
    total_amount = Decimal(str(total_row[0])) if total_row else Decimal("0")

    rows = (
        query.order_by(Expense.date.desc(), Expense.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total_count, total_amount
