from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.schemas.dashboard import DashboardResponse
from fleet_ledger.services.dashboard_service import DashboardService
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    branch_id: Optional[str] = Query(None, description="Branch id, or 'all'"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
):
    """
    Revenue, expense and profit for the range, for today, and per vehicle.
    """
    try:
        service = DashboardService(db)
        return DashboardResponse(**service.get_dashboard(branch_id, date_from, date_to))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception:
        logger.exception("Error fetching dashboard")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch dashboard data",
        )
