from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.core.dependencies import get_db, get_current_active_user
from fleet_ledger.models.trip import TripStatus
from fleet_ledger.models.user import User
from fleet_ledger.services.trip_service import (
    create_trip,
    get_trip_by_id,
    get_all_trips,
    update_trip,
    delete_trip,
)
from fleet_ledger.schemas.trip import (
    TripCreate,
    TripUpdate,
    TripResponse,
    TripListResponse,
    TripDeleteResponse,
)
from fleet_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=TripListResponse)
def get_trips(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    vehicle_id: Optional[str] = Query(None),
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """ Get all the trips """
    try:
        trips, total = get_all_trips(db, skip, limit, vehicle_id, status_filter)

        return TripListResponse(
            total=total,
            trips=[TripResponse.model_validate(trip) for trip in trips]
        )
    except Exception as e:
        logger.error(f"Error fetching trips: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch trips"
        )


@router.get("/{trip_id}", response_model=TripResponse)
def get_trip(
    trip_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get Trip by Id, including its purchase / sales totals
    """
    trip = get_trip_by_id(db, trip_id)

    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )

    return TripResponse.model_validate(trip)


@router.post("", response_model=TripResponse, status_code=HTTP_201_CREATED)
def create_trip_route(
    trip_data: TripCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create Trip
    """
    try:
        trip = create_trip(
            db=db,
            vehicle_id=trip_data.vehicle_id,
            trip_name=trip_data.trip_name,
            start_date=trip_data.start_date,
            end_date=trip_data.end_date,
            status=trip_data.status,
        )
        logger.info(f"Trip {trip.id} created by {current_user.username}")

        return TripResponse.model_validate(trip)

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
        logger.error(f"Error creating trip: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create trip"
        )


@router.put("/{trip_id}", response_model=TripResponse)
def update_trip_route(
    trip_id: str,
    trip_data: TripUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update trip information.
    """
    try:
        trip = update_trip(db, trip_id, trip_data.model_dump(exclude_unset=True))

        if not trip:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Trip not found"
            )

        logger.info(f"Trip {trip_id} updated by {current_user.username}")

        return TripResponse.model_validate(trip)
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
        logger.error(f"Error updating trip: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update trip"
        )


@router.delete("/{trip_id}", response_model=TripDeleteResponse)
def delete_trip_route(
    trip_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a trip together with its fuel entries.
    """
    try:
        success = delete_trip(db, trip_id)
        if not success:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Trip not found"
            )

        logger.info(f"Trip {trip_id} deleted by {current_user.username}")

        return TripDeleteResponse(
            message="Trip deleted successfully"
        )
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error deleting trip: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete trip"
        )
