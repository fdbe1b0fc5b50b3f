from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from starlette.status import HTTP_201_CREATED
from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.expense import ExpenseType
from fleet_ledger.models.user import User
from fleet_ledger.services.expense_service import (
    create_expense,
    get_expense_by_id,
    get_all_expenses,
    update_expense,
    delete_expense,
)
from fleet_ledger.schemas.expense import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseListResponse,
    ExpenseDeleteResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=ExpenseListResponse)
def get_expenses(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    vehicle_id: Optional[str] = Query(None),
    trip_id: Optional[str] = Query(None),
    branch_id: Optional[str] = Query(None),
    expense_type: Optional[ExpenseType] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List expenses, newest date first.
    total_amount is the sum over every row matching the filters, not just this page.
    """
    try:
        expenses, total, total_amount = get_all_expenses(
            db,
            skip=skip,
            limit=limit,
            vehicle_id=vehicle_id,
            trip_id=trip_id,
            branch_id=branch_id,
            expense_type=expense_type,
            date_from=date_from,
            date_to=date_to,
            search=search,
        )

        return ExpenseListResponse(
            total=total,
            total_amount=total_amount,
            expenses=[ExpenseResponse.model_validate(expense) for expense in expenses]
        )
    except Exception as e:
        logger.error(f"Error fetching expenses: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expenses"
        )


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Expense by Id
    """
    expense = get_expense_by_id(db, expense_id)

    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )

    return ExpenseResponse.model_validate(expense)


@router.post("", response_model=ExpenseResponse, status_code=HTTP_201_CREATED)
def create_expense_route(
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create Expense
    """
    try:
        expense = create_expense(
            db=db,
            title=expense_data.title,
            amount=expense_data.amount,
            category=expense_data.category,
            description=expense_data.description,
            expense_date=expense_data.date,
            expense_type=expense_data.expense_type,
            branch_id=expense_data.branch_id,
            vehicle_id=expense_data.vehicle_id,
            trip_id=expense_data.trip_id,
        )
        logger.info(f"Expense {expense.id} created by {current_user.username}")

        return ExpenseResponse.model_validate(expense)

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
        logger.error(f"Error creating expense: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create expense"
        )


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense_route(
    expense_id: str,
    expense_data: ExpenseUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update expense information.
    """
    try:
        expense = update_expense(db, expense_id, expense_data.model_dump(exclude_unset=True))

        if not expense:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Expense not found"
            )

        logger.info(f"Expense {expense_id} updated by {current_user.username}")

        return ExpenseResponse.model_validate(expense)
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
        logger.error(f"Error updating expense: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update expense"
        )


@router.delete("/{expense_id}", response_model=ExpenseDeleteResponse)
def delete_expense_route(
    expense_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete an expense.
    """
    try:
        success = delete_expense(db, expense_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Expense not found"
            )

        logger.info(f"Expense {expense_id} deleted by {current_user.username}")

        return ExpenseDeleteResponse(
            message="Expense deleted successfully"
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting expense: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete expense"
        )
