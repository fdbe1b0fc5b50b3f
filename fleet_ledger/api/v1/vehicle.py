from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.user import User
from fleet_ledger.services.vehicle_service import (
    create_vehicle,
    get_vehicle_by_id,
    get_all_vehicles,
    update_vehicle,
    delete_vehicle,
)
from fleet_ledger.schemas.vehicle import (
    VehicleCreate,
    VehicleUpdate,
    VehicleResponse,
    VehicleListResponse,
    VehicleDeleteResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=VehicleListResponse)
def get_vehicles(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    branch_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ Get all the vehicles """
    try:
        vehicles, total = get_all_vehicles(db, skip, limit, branch_id, search)

        return VehicleListResponse(
            total=total,
            vehicles=[VehicleResponse.model_validate(vehicle) for vehicle in vehicles]
        )
    except Exception as e:
        logger.error(f"Error fetching vehicles: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch vehicles"
        )


@router.get("/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(
    vehicle_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Vehicle by Id
    """
    vehicle = get_vehicle_by_id(db, vehicle_id)

    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    return VehicleResponse.model_validate(vehicle)


@router.post("", response_model=VehicleResponse, status_code=HTTP_201_CREATED)
def create_vehicle_route(
    vehicle_data: VehicleCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create Vehicle
    """
    try:
        vehicle = create_vehicle(
            db=db,
            vehicle_number=vehicle_data.vehicle_number,
            driver_name=vehicle_data.driver_name,
            co_passenger_name=vehicle_data.co_passenger_name,
            vehicle_name=vehicle_data.vehicle_name,
            branch_id=vehicle_data.branch_id,
        )
        logger.info(f"Vehicle {vehicle.vehicle_number} created by {current_user.username}")

        return VehicleResponse.model_validate(vehicle)

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
        logger.error(f"Error creating vehicle: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create vehicle"
        )


@router.put("/{vehicle_id}", response_model=VehicleResponse)
def update_vehicle_route(
    vehicle_id: str,
    vehicle_data: VehicleUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update vehicle information.
    Existing trips and ledgers keep the names they were created with.
    """
    try:
        vehicle = update_vehicle(db, vehicle_id, vehicle_data.model_dump(exclude_unset=True))

        if not vehicle:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vehicle not found"
            )

        logger.info(f"Vehicle {vehicle_id} updated by {current_user.username}")

        return VehicleResponse.model_validate(vehicle)
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
        logger.error(f"Error updating vehicle: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update vehicle"
        )


@router.delete("/{vehicle_id}", response_model=VehicleDeleteResponse)
def delete_vehicle_route(
    vehicle_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a vehicle.
    Refused while trips or purchase & sale ledgers still reference it.
    """
    try:
        success = delete_vehicle(db, vehicle_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Vehicle not found"
            )

        logger.info(f"Vehicle {vehicle_id} deleted by {current_user.username}")

        return VehicleDeleteResponse(
            message="Vehicle deleted successfully"
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting vehicle: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete vehicle"
        )
