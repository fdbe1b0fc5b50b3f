from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.schemas.transaction_report import TransactionReportResponse
from fleet_ledger.services.transaction_report_service import TransactionReportService
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=TransactionReportResponse)
def get_transactions_report(
    branch_id: Optional[str] = Query(None, description="Branch id, or 'all'"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Expenses and purchase & sale transactions in one feed, newest first.
    """
    try:
        service = TransactionReportService(db)
        return TransactionReportResponse(**service.get_report(branch_id, date_from, date_to))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception:
        logger.exception("Error fetching transactions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch transactions",
        )
