from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.services.branch_service import (
    create_branch,
    get_branch_by_id,
    get_all_branches,
    update_branch,
    delete_branch,
)
from fleet_ledger.schemas.branch import (
    BranchCreate,
    BranchUpdate,
    BranchResponse,
    BranchListResponse,
    BranchDeleteResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=BranchListResponse)
def get_branches(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ Get all the branches """
    try:
        branches, total = get_all_branches(db, skip, limit, search)

        return BranchListResponse(
            total=total,
            branches=[BranchResponse.model_validate(branch) for branch in branches]
        )
    except Exception as e:
        logger.error(f"Error fetching branches: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch branches"
        )


@router.get("/{branch_id}", response_model=BranchResponse)
def get_branch(
    branch_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Branch by Id
    """
    branch = get_branch_by_id(db, branch_id)

    if not branch:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Branch not found"
        )

    return BranchResponse.model_validate(branch)


@router.post("", response_model=BranchResponse, status_code=HTTP_201_CREATED)
def create_branch_route(
    branch_data: BranchCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create Branch
    """
    try:
        branch = create_branch(
            db=db,
            branch_name=branch_data.branch_name,
            phone_number=branch_data.phone_number,
            address=branch_data.address,
        )
        logger.info(f"Branch {branch.branch_name} created by {current_user.username}")

        return BranchResponse.model_validate(branch)

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating branch: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create branch"
        )


@router.put("/{branch_id}", response_model=BranchResponse)
def update_branch_route(
    branch_id: str,
    branch_data: BranchUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update branch information.
    """
    try:
        branch = update_branch(db, branch_id, branch_data.model_dump(exclude_unset=True))

        if not branch:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Branch not found"
            )

        logger.info(f"Branch {branch_id} updated by {current_user.username}")

        return BranchResponse.model_validate(branch)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating branch: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update branch"
        )


@router.delete("/{branch_id}", response_model=BranchDeleteResponse)
def delete_branch_route(
    branch_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a branch. Vehicles, ledgers and expenses keep existing without it.
    """
    try:
        success = delete_branch(db, branch_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Branch not found"
            )

        logger.info(f"Branch {branch_id} deleted by {current_user.username}")

        return BranchDeleteResponse(
            message="Branch deleted successfully"
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting branch: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete branch"
        )
