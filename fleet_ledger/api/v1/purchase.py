from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.services.purchase_service import (
    create_purchase,
    get_purchase_by_id,
    get_all_purchases,
    update_purchase,
    delete_purchase,
    export_rows,
    rows_to_csv,
)
from fleet_ledger.schemas.purchase import (
    ExportFormat,
    PurchaseCreate,
    PurchaseUpdate,
    PurchaseResponse,
    PurchaseListResponse,
    PurchaseDeleteResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=PurchaseListResponse)
def get_purchases(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    vehicle_id: Optional[str] = Query(None),
    trip_id: Optional[str] = Query(None),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ Get fuel purchase / sales entries, newest first """
    try:
        purchases, total = get_all_purchases(db, skip, limit, vehicle_id, trip_id, month)

        return PurchaseListResponse(
            total=total,
            purchases=[PurchaseResponse.model_validate(purchase) for purchase in purchases]
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error fetching purchases: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch purchases"
        )


@router.get("/export")
def export_purchases(
    vehicle_id: Optional[str] = Query(None),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    format: ExportFormat = Query(ExportFormat.csv),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Download the filtered entries as CSV or a JSON array.
    """
    try:
        rows = export_rows(db, vehicle_id=vehicle_id, month=month)
        logger.info(f"{len(rows)} purchases exported as {format.value} by {current_user.username}")

        if format == ExportFormat.json:
            return rows

        suffix = f"-{month}" if month else ""
        return Response(
            content=rows_to_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="purchases{suffix}.csv"'},
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error exporting purchases: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export purchases"
        )


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(
    purchase_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Purchase by Id
    """
    purchase = get_purchase_by_id(db, purchase_id)

    if not purchase:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Purchase not found"
        )

    return PurchaseResponse.model_validate(purchase)


@router.post("", response_model=PurchaseResponse, status_code=HTTP_201_CREATED)
def create_purchase_route(
    purchase_data: PurchaseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Record a fuel purchase or sale on a trip. The trip totals are refreshed.
    """
    try:
        purchase = create_purchase(
            db=db,
            trip_id=purchase_data.trip_id,
            price=purchase_data.price,
            litre=purchase_data.litre,
            type=purchase_data.type,
            purchase_date=purchase_data.date,
        )
        logger.info(f"Purchase {purchase.id} created by {current_user.username}")

        return PurchaseResponse.model_validate(purchase)

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating purchase: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create purchase"
        )


@router.put("/{purchase_id}", response_model=PurchaseResponse)
def update_purchase_route(
    purchase_id: str,
    purchase_data: PurchaseUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update a fuel entry.
    """
    try:
        purchase = update_purchase(db, purchase_id, purchase_data.model_dump(exclude_unset=True))

        if not purchase:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Purchase not found"
            )

        logger.info(f"Purchase {purchase_id} updated by {current_user.username}")

        return PurchaseResponse.model_validate(purchase)
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating purchase: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update purchase"
        )


@router.delete("/{purchase_id}", response_model=PurchaseDeleteResponse)
def delete_purchase_route(
    purchase_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a fuel entry.
    """
    try:
        success = delete_purchase(db, purchase_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Purchase not found"
            )

        logger.info(f"Purchase {purchase_id} deleted by {current_user.username}")

        return PurchaseDeleteResponse(
            message="Purchase deleted successfully"
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting purchase: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete purchase"
        )
