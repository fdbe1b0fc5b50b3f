from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.services.category_service import (
    create_category,
    get_category_by_id,
    get_all_categories,
    update_category,
    delete_category,
    seed_default_categories,
)
from fleet_ledger.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryListResponse,
    CategoryDeleteResponse,
    CategorySeedResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=CategoryListResponse)
def get_categories(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ Get all the categories, sorted by name """
    try:
        categories, total = get_all_categories(db, skip, limit, search)

        return CategoryListResponse(
            total=total,
            categories=[CategoryResponse.model_validate(category) for category in categories]
        )
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch categories"
        )


@router.post("/seed", response_model=CategorySeedResponse)
def seed_categories(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Insert the default categories. Does nothing when categories already exist.
    """
    try:
        created, existing = seed_default_categories(db)
        if not created:
            return CategorySeedResponse(
                message="Categories already exist",
                created=0,
                count=existing,
            )

        logger.info(f"Default categories seeded by {current_user.username}")
        return CategorySeedResponse(
            message="Default categories created successfully",
            created=len(created),
            count=len(created),
            categories=[CategoryResponse.model_validate(category) for category in created],
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error seeding categories: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to seed categories"
        )


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Category by Id
    """
    category = get_category_by_id(db, category_id)

    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )

    return CategoryResponse.model_validate(category)


@router.post("", response_model=CategoryResponse, status_code=HTTP_201_CREATED)
def create_category_route(
    category_data: CategoryCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create Category
    """
    try:
        category = create_category(
            db=db,
            name=category_data.name,
            description=category_data.description,
        )
        logger.info(f"Category {category.name} created by {current_user.username}")

        return CategoryResponse.model_validate(category)

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create category"
        )


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category_route(
    category_id: str,
    category_data: CategoryUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update category information.
    """
    try:
        category = update_category(db, category_id, category_data.model_dump(exclude_unset=True))

        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found"
            )

        logger.info(f"Category {category_id} updated by {current_user.username}")

        return CategoryResponse.model_validate(category)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update category"
        )


@router.delete("/{category_id}", response_model=CategoryDeleteResponse)
def delete_category_route(
    category_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a category.
    """
    try:
        success = delete_category(db, category_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found"
            )

        logger.info(f"Category {category_id} deleted by {current_user.username}")

        return CategoryDeleteResponse(
            message="Category deleted successfully"
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting category: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete category"
        )
