from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.services import purchase_sale_service as ledger
from fleet_ledger.schemas.purchase_sale import (
    PurchaseSaleCreate,
    PurchaseSaleUpdate,
    PurchaseSaleResponse,
    PurchaseSaleListResponse,
    PurchaseSaleDeleteResponse,
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionListResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()

PURCHASE_SALE_NOT_FOUND = "Purchase-sale not found"
TRANSACTION_NOT_FOUND = "Transaction not found"


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def _translate(e: Exception, action: str) -> HTTPException:
    """Map service exceptions onto HTTP errors."""
    if isinstance(e, NotFoundError):
        return _not_found(str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.error(f"Error while trying to {action}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )


# ==================== LEDGERS ====================

@router.get("", response_model=PurchaseSaleListResponse)
def get_purchase_sales(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    vehicle_id: Optional[str] = Query(None),
    branch_id: Optional[str] = Query(None),
    completed: Optional[bool] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ Get purchase & sale ledgers, newest first """
    try:
        items, total = ledger.get_all_purchase_sales(
            db, skip, limit, vehicle_id=vehicle_id, branch_id=branch_id, completed=completed
        )
        return PurchaseSaleListResponse(
            total=total,
            purchase_sales=[PurchaseSaleResponse.model_validate(item) for item in items]
        )
    except Exception as e:
        raise _translate(e, "fetch purchase-sales")


@router.post("", response_model=PurchaseSaleResponse, status_code=HTTP_201_CREATED)
def create_purchase_sale_route(
    data: PurchaseSaleCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Open a ledger for a vehicle. current_balance starts at opening_balance and tins at 0.
    """
    try:
        item = ledger.create_purchase_sale(
            db,
            ledger_date=data.date,
            vehicle_id=data.vehicle_id,
            opening_balance=data.opening_balance,
        )
        logger.info(f"Purchase-sale {item.id} created by {current_user.username}")
        return PurchaseSaleResponse.model_validate(item)
    except Exception as e:
        raise _translate(e, "create purchase-sale")


@router.get("/{purchase_sale_id}", response_model=PurchaseSaleResponse)
def get_purchase_sale(
    purchase_sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Purchase & Sale by Id
    """
    try:
        item = ledger.get_purchase_sale_by_id(db, purchase_sale_id)
    except Exception as e:
        raise _translate(e, "fetch purchase-sale")

    if not item:
        raise _not_found(PURCHASE_SALE_NOT_FOUND)
    return PurchaseSaleResponse.model_validate(item)


@router.put("/{purchase_sale_id}", response_model=PurchaseSaleResponse)
def update_purchase_sale_route(
    purchase_sale_id: str,
    data: PurchaseSaleUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update date, vehicle or opening balance.
    """
    try:
        item = ledger.update_purchase_sale(db, purchase_sale_id, data.model_dump(exclude_unset=True))
    except Exception as e:
        raise _translate(e, "update purchase-sale")

    if not item:
        raise _not_found(PURCHASE_SALE_NOT_FOUND)
    logger.info(f"Purchase-sale {purchase_sale_id} updated by {current_user.username}")
    return PurchaseSaleResponse.model_validate(item)


@router.post("/{purchase_sale_id}/complete", response_model=PurchaseSaleResponse)
def complete_collection_route(
    purchase_sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Complete Collection: book current_balance as a revenue expense and lock the ledger.
    Calling it again on a completed ledger changes nothing.
    """
    try:
        item = ledger.complete_collection(db, purchase_sale_id)
    except Exception as e:
        raise _translate(e, "complete collection")

    if not item:
        raise _not_found(PURCHASE_SALE_NOT_FOUND)
    logger.info(f"Purchase-sale {purchase_sale_id} collection completed by {current_user.username}")
    return PurchaseSaleResponse.model_validate(item)


@router.post("/{purchase_sale_id}/undo-complete", response_model=PurchaseSaleResponse)
def undo_complete_collection_route(
    purchase_sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Undo Complete Collection: delete the revenue expense and reopen the ledger.
    """
    try:
        item = ledger.undo_complete_collection(db, purchase_sale_id)
    except Exception as e:
        raise _translate(e, "undo complete collection")

    if not item:
        raise _not_found(PURCHASE_SALE_NOT_FOUND)
    logger.info(f"Purchase-sale {purchase_sale_id} reopened by {current_user.username}")
    return PurchaseSaleResponse.model_validate(item)


@router.post("/{purchase_sale_id}/recalculate", response_model=PurchaseSaleResponse)
def recalculate_purchase_sale_route(
    purchase_sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Rebuild the running balance and tins from the stored transactions.
    """
    try:
        item = ledger.recalculate_purchase_sale(db, purchase_sale_id)
    except Exception as e:
        raise _translate(e, "recalculate purchase-sale")

    if not item:
        raise _not_found(PURCHASE_SALE_NOT_FOUND)
    return PurchaseSaleResponse.model_validate(item)


@router.delete("/{purchase_sale_id}", response_model=PurchaseSaleDeleteResponse)
def delete_purchase_sale_route(
    purchase_sale_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a ledger, its transactions and its collection expense.
    """
    try:
        success = ledger.delete_purchase_sale(db, purchase_sale_id)
    except Exception as e:
        raise _translate(e, "delete purchase-sale")

    if not success:
        raise _not_found(PURCHASE_SALE_NOT_FOUND)
    logger.info(f"Purchase-sale {purchase_sale_id} deleted by {current_user.username}")
    return PurchaseSaleDeleteResponse(message="Purchase-sale deleted successfully")


# ==================== TRANSACTIONS ====================

@router.get("/{purchase_sale_id}/transactions", response_model=TransactionListResponse)
def get_transactions(
    purchase_sale_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(500, ge=1, le=1000),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ List a ledger's transactions, newest first """
    try:
        items, total = ledger.get_transactions(db, purchase_sale_id, skip, limit)
        return TransactionListResponse(
            total=total,
            transactions=[TransactionResponse.model_validate(item) for item in items]
        )
    except Exception as e:
        raise _translate(e, "fetch transactions")


@router.post(
    "/{purchase_sale_id}/transactions",
    response_model=TransactionResponse,
    status_code=HTTP_201_CREATED,
)
def create_transaction_route(
    purchase_sale_id: str,
    data: TransactionCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Add a purchase, sale or expense.
    Rejected when the ledger would end up with a negative balance or tin count.
    """
    try:
        item = ledger.create_transaction(
            db,
            purchase_sale_id,
            tx_type=data.type,
            tx_date=data.date,
            amount=data.amount,
            tins=data.tins,
            category=data.category,
            description=data.description,
        )
        logger.info(
            f"Transaction {item.id} added to purchase-sale {purchase_sale_id} by {current_user.username}"
        )
        return TransactionResponse.model_validate(item)
    except Exception as e:
        raise _translate(e, "create transaction")


@router.get("/{purchase_sale_id}/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    purchase_sale_id: str,
    transaction_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        item = ledger.get_transaction(db, purchase_sale_id, transaction_id)
    except Exception as e:
        raise _translate(e, "fetch transaction")

    if not item:
        raise _not_found(TRANSACTION_NOT_FOUND)
    return TransactionResponse.model_validate(item)


@router.put("/{purchase_sale_id}/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction_route(
    purchase_sale_id: str,
    transaction_id: str,
    data: TransactionUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a transaction. Omitted fields keep their stored values.
    """
    try:
        item = ledger.update_transaction(
            db, purchase_sale_id, transaction_id, data.model_dump(exclude_unset=True)
        )
    except Exception as e:
        raise _translate(e, "update transaction")

    if not item:
        raise _not_found(TRANSACTION_NOT_FOUND)
    logger.info(f"Transaction {transaction_id} updated by {current_user.username}")
    return TransactionResponse.model_validate(item)


@router.delete("/{purchase_sale_id}/transactions/{transaction_id}", response_model=PurchaseSaleDeleteResponse)
def delete_transaction_route(
    purchase_sale_id: str,
    transaction_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a transaction and reverse its effect on the ledger.
    """
    try:
        success = ledger.delete_transaction(db, purchase_sale_id, transaction_id)
    except Exception as e:
        raise _translate(e, "delete transaction")

    if not success:
        raise _not_found(TRANSACTION_NOT_FOUND)
    logger.info(f"Transaction {transaction_id} deleted by {current_user.username}")
    return PurchaseSaleDeleteResponse(message="Transaction deleted successfully")
