# fleet_ledger/services/purchase_sale_service.py

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.logger_config import logger
from fleet_ledger.models.expense import Expense, ExpenseType
from fleet_ledger.models.purchase_sale import (
    PurchaseSale,
    PurchaseSaleTransaction,
    TransactionType,
)
from fleet_ledger.services.expense_service import create_expense
from fleet_ledger.services.vehicle_service import require_vehicle
from fleet_ledger.utils.identifiers import generate_custom_id


ZERO = Decimal("0.00")
COLLECTION_CATEGORY = "Purchase & Sale"
COLLECTION_DESCRIPTION = "Collection completed for Purchase & Sale"
COLLECTION_TITLE_PREFIX = "Purchase & Sale Collection"
COMPLETED_MESSAGE = "Purchase-sale is completed"


# ==================== HELPER FUNCTIONS ====================

def get_effects(
    tx_type: TransactionType,
    amount: Decimal,
    tins: Optional[int] = None,
) -> Tuple[Decimal, int]:
    """
    Effect of one transaction on its ledger.

    sale     -> balance +amount, tins -tins
    purchase -> balance -amount, tins +tins
    expense  -> balance -amount, tins unchanged
    """
    amount = Decimal(amount)
    balance_effect = amount if tx_type == TransactionType.sale else -amount
    if tx_type == TransactionType.purchase:
        tins_effect = tins or 0
    elif tx_type == TransactionType.sale:
        tins_effect = -(tins or 0)
    else:
        tins_effect = 0
    return balance_effect, tins_effect


def _current_balance(purchase_sale: PurchaseSale) -> Decimal:
    if purchase_sale.current_balance is None:
        return Decimal(purchase_sale.opening_balance)
    return Decimal(purchase_sale.current_balance)


def _current_tins(purchase_sale: PurchaseSale) -> int:
    return purchase_sale.current_tins or 0


def _apply_delta(purchase_sale: PurchaseSale, balance_delta: Decimal, tins_delta: int) -> None:
    """Shift the running totals, refusing to take either below zero."""
    next_balance = _current_balance(purchase_sale) + balance_delta
    if next_balance < 0:
        raise ValueError("Insufficient balance")
    next_tins = _current_tins(purchase_sale) + tins_delta
    if next_tins < 0:
        raise ValueError("Insufficient tins")

    purchase_sale.current_balance = next_balance
    purchase_sale.current_tins = next_tins


def _validate_transaction_fields(
    tx_type: Optional[TransactionType],
    tx_date: Optional[date],
    amount: Optional[Decimal],
    tins: Optional[int],
    category: Optional[str],
) -> None:
    if tx_type is None:
        raise ValueError("Valid transaction type is required")
    if tx_date is None:
        raise ValueError("Valid date is required")
    if amount is None or Decimal(amount) < 0:
        raise ValueError("Valid amount is required")
    if tx_type in (TransactionType.purchase, TransactionType.sale) and tins is None:
        raise ValueError("No of tins is required")
    if tins is not None and tins < 0:
        raise ValueError("No of tins must be a valid number")
    if tx_type == TransactionType.expense and not category:
        raise ValueError("Category is required for expense")


def _ensure_open(purchase_sale: PurchaseSale) -> None:
    if purchase_sale.completed:
        raise ValueError(COMPLETED_MESSAGE)


def compute_totals(db: Session, purchase_sale: PurchaseSale) -> Tuple[Decimal, int]:
    """Replay every transaction over the opening balance. Not clamped."""
    balance = Decimal(purchase_sale.opening_balance)
    tins = 0
    transactions = (
        db.query(PurchaseSaleTransaction)
        .filter(PurchaseSaleTransaction.purchase_sale_id == purchase_sale.id)
        .all()
    )
    for tx in transactions:
        balance_effect, tins_effect = get_effects(tx.type, tx.amount, tx.tins)
        balance += balance_effect
        tins += tins_effect
    return balance, tins


def _backfill(db: Session, purchase_sale: PurchaseSale) -> bool:
    """
    Fill in a missing current_balance / current_tins from the transactions.
    Returns True when something changed.
    """
    needs_balance = purchase_sale.current_balance is None
    needs_tins = purchase_sale.current_tins is None
    if not needs_balance and not needs_tins:
        return False

    balance, tins = compute_totals(db, purchase_sale)
    if needs_balance:
        purchase_sale.current_balance = max(ZERO, balance)
    if needs_tins:
        purchase_sale.current_tins = max(0, tins)
    logger.info(
        f"Backfilled purchase-sale {purchase_sale.id}: "
        f"balance={purchase_sale.current_balance}, tins={purchase_sale.current_tins}"
    )
    return True


def _commit(db: Session, instance, action: str):
    try:
        db.commit()
        if instance is not None:
            db.refresh(instance)
        return instance
    except Exception:
        db.rollback()
        logger.exception(f"Error while trying to {action}")
        raise ValueError(f"Failed to {action}.")


# ==================== PURCHASE SALE QUERIES ====================

def get_purchase_sale_by_id(db: Session, purchase_sale_id: str) -> Optional[PurchaseSale]:
    """Get a ledger by ID, backfilling its running totals if they are missing."""
    purchase_sale = db.query(PurchaseSale).filter(PurchaseSale.id == purchase_sale_id).first()
    if purchase_sale and _backfill(db, purchase_sale):
        _commit(db, purchase_sale, "backfill purchase-sale")
    return purchase_sale


def require_purchase_sale(db: Session, purchase_sale_id: str) -> PurchaseSale:
    purchase_sale = get_purchase_sale_by_id(db, purchase_sale_id)
    if not purchase_sale:
        raise NotFoundError("Purchase-sale not found")
    return purchase_sale


def get_all_purchase_sales(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    vehicle_id: Optional[str] = None,
    branch_id: Optional[str] = None,
    completed: Optional[bool] = None,
) -> Tuple[List[PurchaseSale], int]:
    """List ledgers by date then creation time, newest first."""
    query = db.query(PurchaseSale)
    if vehicle_id:
        query = query.filter(PurchaseSale.vehicle_id == vehicle_id)
    if branch_id:
        query = query.filter(PurchaseSale.branch_id == branch_id)
    if completed is not None:
        query = query.filter(PurchaseSale.completed == completed)

    total = query.count()
    rows = (
        query.order_by(PurchaseSale.date.desc(), PurchaseSale.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

    patched = [row for row in rows if _backfill(db, row)]
    if patched:
        _commit(db, None, "backfill purchase-sales")
    return rows, total


# ==================== PURCHASE SALE MUTATIONS ====================

def create_purchase_sale(
    db: Session,
    ledger_date: date,
    vehicle_id: str,
    opening_balance: Decimal,
) -> PurchaseSale:
    """Open a ledger for a vehicle. The running balance starts at the opening balance."""
    if ledger_date is None:
        raise ValueError("Valid date is required")
    if opening_balance is None:
        raise ValueError("Opening balance is required")
    opening_balance = Decimal(opening_balance)
    if opening_balance < 0:
        raise ValueError("Opening balance cannot be negative")

    vehicle = require_vehicle(db, vehicle_id)
    purchase_sale = PurchaseSale(
        id=generate_custom_id("PS"),
        date=ledger_date,
        vehicle_id=vehicle.id,
        vehicle_name=vehicle.vehicle_name,
        vehicle_number=vehicle.vehicle_number,
        branch_id=vehicle.branch_id,
        opening_balance=opening_balance,
        current_balance=opening_balance,
        current_tins=0,
        completed=False,
    )
    db.add(purchase_sale)
    _commit(db, purchase_sale, "create purchase-sale")
    logger.info(
        f"Purchase-sale {purchase_sale.id} opened for vehicle {vehicle.vehicle_number} "
        f"with balance {opening_balance}"
    )
    return purchase_sale


def update_purchase_sale(db: Session, purchase_sale_id: str, updates: dict) -> Optional[PurchaseSale]:
    """
    Update date, vehicle or opening balance.
    Completed ledgers are locked.

    A new opening balance shifts current_balance by the same delta so the
    running total still equals opening + sales - purchases - expenses.
    """
    purchase_sale = get_purchase_sale_by_id(db, purchase_sale_id)
    if not purchase_sale:
        return None
    _ensure_open(purchase_sale)

    if updates.get("date") is not None:
        purchase_sale.date = updates["date"]

    if updates.get("opening_balance") is not None:
        new_opening = Decimal(updates["opening_balance"])
        if new_opening < 0:
            raise ValueError("Opening balance cannot be negative")
        delta = new_opening - Decimal(purchase_sale.opening_balance)
        if delta:
            _apply_delta(purchase_sale, delta, 0)
            logger.debug(f"Purchase-sale {purchase_sale_id} opening balance shifted by {delta}")
        purchase_sale.opening_balance = new_opening

    if updates.get("vehicle_id") is not None:
        vehicle = require_vehicle(db, updates["vehicle_id"])
        purchase_sale.vehicle_id = vehicle.id
        purchase_sale.vehicle_name = vehicle.vehicle_name
        purchase_sale.vehicle_number = vehicle.vehicle_number
        purchase_sale.branch_id = vehicle.branch_id

    return _commit(db, purchase_sale, "update purchase-sale")


def complete_collection(db: Session, purchase_sale_id: str) -> Optional[PurchaseSale]:
    """
    Record the outstanding balance as revenue and lock the ledger.
    Already completed ledgers are returned unchanged.
    """
    purchase_sale = get_purchase_sale_by_id(db, purchase_sale_id)
    if not purchase_sale:
        return None
    if purchase_sale.completed:
        logger.debug(f"Purchase-sale {purchase_sale_id} already completed")
        return purchase_sale

    label = purchase_sale.vehicle_name or purchase_sale.vehicle_number or "Vehicle"
    collected_at = datetime.now(timezone.utc)
    expense = create_expense(
        db,
        title=f"{COLLECTION_TITLE_PREFIX} - {label}",
        amount=_current_balance(purchase_sale),
        category=COLLECTION_CATEGORY,
        description=COLLECTION_DESCRIPTION,
        expense_date=date.today(),
        expense_type=ExpenseType.revenue,
        branch_id=purchase_sale.branch_id,
        vehicle_id=purchase_sale.vehicle_id,
        commit=False,
    )

    purchase_sale.completed = True
    purchase_sale.completed_at = collected_at
    purchase_sale.collection_expense_id = expense.id

    _commit(db, purchase_sale, "complete collection")
    logger.info(
        f"Collection completed for purchase-sale {purchase_sale_id}: "
        f"{expense.amount} recorded as revenue expense {expense.id}"
    )
    return purchase_sale


def undo_complete_collection(db: Session, purchase_sale_id: str) -> Optional[PurchaseSale]:
    """Remove the collection expense and reopen the ledger."""
    purchase_sale = get_purchase_sale_by_id(db, purchase_sale_id)
    if not purchase_sale:
        return None
    if not purchase_sale.completed:
        return purchase_sale

    expense_id = purchase_sale.collection_expense_id
    purchase_sale.completed = False
    purchase_sale.completed_at = None
    purchase_sale.collection_expense_id = None
    if expense_id:
        db.flush()
        db.query(Expense).filter(Expense.id == expense_id).delete(synchronize_session=False)

    _commit(db, purchase_sale, "undo complete collection")
    logger.info(f"Collection undone for purchase-sale {purchase_sale_id}")
    return purchase_sale


def recalculate_purchase_sale(db: Session, purchase_sale_id: str) -> Optional[PurchaseSale]:
    """Rebuild current_balance / current_tins from the transactions, clamped at zero."""
    purchase_sale = get_purchase_sale_by_id(db, purchase_sale_id)
    if not purchase_sale:
        return None

    balance, tins = compute_totals(db, purchase_sale)
    if balance < 0 or tins < 0:
        logger.warning(
            f"Purchase-sale {purchase_sale_id} replayed below zero "
            f"(balance={balance}, tins={tins}); clamping"
        )
    purchase_sale.current_balance = max(ZERO, balance)
    purchase_sale.current_tins = max(0, tins)
    return _commit(db, purchase_sale, "recalculate purchase-sale")


def delete_purchase_sale(db: Session, purchase_sale_id: str) -> bool:
    """Delete a ledger with its transactions and collection expense."""
    purchase_sale = db.query(PurchaseSale).filter(PurchaseSale.id == purchase_sale_id).first()
    if not purchase_sale:
        return False

    expense_id = purchase_sale.collection_expense_id
    transaction_count = len(purchase_sale.transactions)
    db.delete(purchase_sale)
    db.flush()
    if expense_id:
        db.query(Expense).filter(Expense.id == expense_id).delete(synchronize_session=False)

    _commit(db, None, "delete purchase-sale")
    logger.info(
        f"Purchase-sale deleted: {purchase_sale_id} ({transaction_count} transactions removed)"
    )
    return True


# ==================== TRANSACTIONS ====================

def get_transactions(
    db: Session,
    purchase_sale_id: str,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[PurchaseSaleTransaction], int]:
    """List a ledger's transactions, newest first."""
    purchase_sale = require_purchase_sale(db, purchase_sale_id)
    query = db.query(PurchaseSaleTransaction).filter(
        PurchaseSaleTransaction.purchase_sale_id == purchase_sale.id
    )
    total = query.count()
    rows = (
        query.order_by(PurchaseSaleTransaction.date.desc(), PurchaseSaleTransaction.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total


def get_transaction(
    db: Session,
    purchase_sale_id: str,
    transaction_id: str,
) -> Optional[PurchaseSaleTransaction]:
    """Get a transaction only if it belongs to the given ledger."""
    purchase_sale = require_purchase_sale(db, purchase_sale_id)
    return (
        db.query(PurchaseSaleTransaction)
        .filter(
            PurchaseSaleTransaction.id == transaction_id,
            PurchaseSaleTransaction.purchase_sale_id == purchase_sale.id,
        )
        .first()
    )


def create_transaction(
    db: Session,
    purchase_sale_id: str,
    tx_type: TransactionType,
    tx_date: date,
    amount: Decimal,
    tins: Optional[int] = None,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> PurchaseSaleTransaction:
    """
    Add a purchase / sale / expense and move the ledger totals in the same commit.
    """
    purchase_sale = require_purchase_sale(db, purchase_sale_id)
    _ensure_open(purchase_sale)

    category = category.strip() if category else None
    _validate_transaction_fields(tx_type, tx_date, amount, tins, category)

    balance_effect, tins_effect = get_effects(tx_type, amount, tins)
    _apply_delta(purchase_sale, balance_effect, tins_effect)

    transaction = PurchaseSaleTransaction(
        id=generate_custom_id("PST"),
        purchase_sale_id=purchase_sale.id,
        type=tx_type,
        date=tx_date,
        amount=Decimal(amount),
        tins=tins if tx_type != TransactionType.expense else None,
        category=category if tx_type == TransactionType.expense else None,
        description=description.strip() if description else None,
    )
    db.add(transaction)
    _commit(db, transaction, "create transaction")
    logger.info(
        f"Transaction {transaction.id} ({tx_type.value} {transaction.amount}) added to "
        f"purchase-sale {purchase_sale.id}; balance={purchase_sale.current_balance}, "
        f"tins={purchase_sale.current_tins}"
    )
    return transaction


def update_transaction(
    db: Session,
    purchase_sale_id: str,
    transaction_id: str,
    updates: dict,
) -> Optional[PurchaseSaleTransaction]:
    """
    Merge `updates` over the stored transaction and apply (new effect - old effect).
    """
    purchase_sale = require_purchase_sale(db, purchase_sale_id)
    transaction = get_transaction(db, purchase_sale_id, transaction_id)
    if not transaction:
        return None
    _ensure_open(purchase_sale)

    tx_type = updates.get("type") or transaction.type
    tx_date = updates.get("date") or transaction.date
    amount = updates["amount"] if updates.get("amount") is not None else transaction.amount
    tins = updates["tins"] if "tins" in updates else transaction.tins
    if "category" in updates:
        category = updates["category"].strip() if updates["category"] else None
    else:
        category = transaction.category
    if "description" in updates:
        description = updates["description"].strip() if updates["description"] else None
    else:
        description = transaction.description

    _validate_transaction_fields(tx_type, tx_date, amount, tins, category)

    old_balance, old_tins = get_effects(transaction.type, transaction.amount, transaction.tins)
    new_balance, new_tins = get_effects(tx_type, amount, tins)
    _apply_delta(purchase_sale, new_balance - old_balance, new_tins - old_tins)

    transaction.type = tx_type
    transaction.date = tx_date
    transaction.amount = Decimal(amount)
    transaction.tins = tins if tx_type != TransactionType.expense else None
    transaction.category = category if tx_type == TransactionType.expense else None
    transaction.description = description

    return _commit(db, transaction, "update transaction")


def delete_transaction(db: Session, purchase_sale_id: str, transaction_id: str) -> bool:
    """Reverse a transaction's effect on the ledger, then delete it."""
    purchase_sale = require_purchase_sale(db, purchase_sale_id)
    transaction = get_transaction(db, purchase_sale_id, transaction_id)
    if not transaction:
        return False
    _ensure_open(purchase_sale)

    balance_effect, tins_effect = get_effects(transaction.type, transaction.amount, transaction.tins)
    _apply_delta(purchase_sale, -balance_effect, -tins_effect)

    db.delete(transaction)
    _commit(db, None, "delete transaction")
    logger.info(f"Transaction {transaction_id} removed from purchase-sale {purchase_sale_id}")
    return True
