from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from fleet_ledger.core.dependencies import get_db, get_current_active_user, get_current_admin_user
from fleet_ledger.models.user import User, UserRole
from fleet_ledger.services.user_service import (
    get_all_users,
    create_user,
    delete_user,
)
from fleet_ledger.schemas.user import (
    UserCreate,
    UserResponse,
    UserListResponse,
    UserDeleteResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_active_user),
):
    """
    Get current authenticated user's information.
    """
    return UserResponse.model_validate(current_user)


@router.get("", response_model=UserListResponse)
def get_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all users with optional filtering.
    Requires authentication.
    """
    try:
        users, total = get_all_users(db, skip=skip, limit=limit, role=role, search=search)

        return UserListResponse(
            total=total,
            users=[UserResponse.model_validate(user) for user in users]
        )
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch users"
        )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user_route(
    user_data: UserCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Create a new user.
    Admin only.
    """
    try:
        user = create_user(
            db=db,
            username=user_data.username,
            password=user_data.password,
            name=user_data.name,
            role=user_data.role,
        )

        logger.info(f"User {user.username} created by {current_user.username}")
        return UserResponse.model_validate(user)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating user: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user"
        )


@router.delete("/{user_id}", response_model=UserDeleteResponse)
def delete_user_route(
    user_id: int,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """
    Delete a user.
    Admin only; admins cannot delete themselves.
    """
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )

    try:
        success = delete_user(db, user_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        logger.info(f"User {user_id} deleted by {current_user.username}")
        return UserDeleteResponse(message="User deleted successfully")
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting user: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete user"
        )
