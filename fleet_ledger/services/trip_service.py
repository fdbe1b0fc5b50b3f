from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.logger_config import logger
from fleet_ledger.models.expense import Expense
from fleet_ledger.models.trip import FuelEntryType, Purchase, Trip, TripStatus
from fleet_ledger.services.vehicle_service import require_vehicle
from fleet_ledger.utils.identifiers import generate_custom_id


ZERO = Decimal("0.00")


# ==================== HELPER FUNCTIONS ====================

def _sum_when(column, entry_type: FuelEntryType):
    return func.coalesce(func.sum(case((Purchase.type == entry_type, column), else_=0)), 0)


def refresh_trip_statistics(db: Session, trip: Trip) -> Trip:
    """
    Recompute a trip's derived totals from its purchases.

    profit_loss = total_sales - total_purchases
    Flushes but does not commit; callers own the transaction.
    """
    db.flush()
    row = (
        db.query(
            _sum_when(Purchase.price, FuelEntryType.Purchase),
            _sum_when(Purchase.price, FuelEntryType.Sales),
            _sum_when(Purchase.litre, FuelEntryType.Purchase),
            _sum_when(Purchase.litre, FuelEntryType.Sales),
        )
        .filter(Purchase.trip_id == trip.id)
        .one()
    )
    total_purchases, total_sales, purchase_litres, sales_litres = (
        Decimal(str(value)) for value in row
    )
    profit_loss = total_sales - total_purchases

    trip.total_purchases = total_purchases
    trip.total_sales = total_sales
    trip.total_purchase_litres = purchase_litres
    trip.total_sales_litres = sales_litres
    trip.profit_loss = profit_loss
    trip.is_profitable = profit_loss >= 0
    trip.has_reached_breakeven = total_sales >= total_purchases

    logger.debug(
        f"Trip {trip.id} statistics: purchases={total_purchases}, sales={total_sales}, "
        f"profit_loss={profit_loss}"
    )
    return trip


def require_trip(db: Session, trip_id: Optional[str]) -> Trip:
    trip_id = (trip_id or "").strip()
    if not trip_id:
        raise ValueError("Trip is required")
    trip = get_trip_by_id(db, trip_id)
    if not trip:
        raise NotFoundError("Trip not found")
    return trip


# ==================== TRIP QUERIES ====================

def get_trip_by_id(db: Session, trip_id: str) -> Optional[Trip]:
    """Get trip by ID."""
    return db.query(Trip).filter(Trip.id == trip_id).first()


def get_all_trips(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    vehicle_id: Optional[str] = None,
    status: Optional[TripStatus] = None,
) -> tuple[List[Trip], int]:
    """List trips, newest first, optionally for one vehicle."""
    query = db.query(Trip)
    if vehicle_id:
        query = query.filter(Trip.vehicle_id == vehicle_id)
    if status:
        query = query.filter(Trip.status == status)
    total = query.count()
    trips = query.order_by(Trip.created_at.desc()).offset(skip).limit(limit).all()
    return trips, total


# ==================== TRIP MUTATIONS ====================

def create_trip(
    db: Session,
    vehicle_id: str,
    trip_name: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: TripStatus = TripStatus.Active,
) -> Trip:
    """Create a trip for a vehicle; totals start at zero."""
    vehicle = require_vehicle(db, vehicle_id)
    if not trip_name or not trip_name.strip():
        raise ValueError("Trip name is required")

    start = start_date or date.today()
    if end_date and end_date < start:
        raise ValueError("End date cannot be before start date")
    if status == TripStatus.Completed and end_date is None:
        end_date = date.today()

    trip = Trip(
        id=generate_custom_id("TRP"),
        vehicle_id=vehicle.id,
        vehicle_name=vehicle.display_name,
        vehicle_number=vehicle.vehicle_number,
        trip_name=trip_name.strip(),
        start_date=start,
        end_date=end_date,
        status=status,
        total_purchases=ZERO,
        total_sales=ZERO,
        total_purchase_litres=ZERO,
        total_sales_litres=ZERO,
        profit_loss=ZERO,
        is_profitable=True,
        has_reached_breakeven=True,
    )
    db.add(trip)
    try:
        db.commit()
        db.refresh(trip)
        logger.info(f"Trip created: {trip.id} for vehicle {vehicle.vehicle_number}")
        return trip
    except Exception:
        db.rollback()
        logger.exception("Error creating trip")
        raise ValueError("Failed to create trip.")


def update_trip(db: Session, trip_id: str, updates: dict) -> Optional[Trip]:
    """Update a trip. Changing the vehicle also re-points the trip's purchases."""
    trip = get_trip_by_id(db, trip_id)
    if not trip:
        return None

    if updates.get("vehicle_id") is not None and updates["vehicle_id"] != trip.vehicle_id:
        vehicle = require_vehicle(db, updates["vehicle_id"])
        trip.vehicle_id = vehicle.id
        trip.vehicle_name = vehicle.display_name
        trip.vehicle_number = vehicle.vehicle_number
        for purchase in trip.purchases:
            purchase.vehicle_id = vehicle.id
            purchase.vehicle_name = vehicle.display_name
            purchase.vehicle_number = vehicle.vehicle_number

    if updates.get("trip_name") is not None:
        if not updates["trip_name"].strip():
            raise ValueError("Trip name is required")
        trip.trip_name = updates["trip_name"].strip()
        for purchase in trip.purchases:
            purchase.trip_name = trip.trip_name
    if updates.get("start_date") is not None:
        trip.start_date = updates["start_date"]
    if "end_date" in updates:
        trip.end_date = updates["end_date"]
    if updates.get("status") is not None:
        trip.status = updates["status"]
        if trip.status == TripStatus.Completed and trip.end_date is None:
            trip.end_date = date.today()

    if trip.end_date and trip.end_date < trip.start_date:
        db.rollback()
        raise ValueError("End date cannot be before start date")

    try:
        db.commit()
        db.refresh(trip)
        return trip
    except Exception:
        db.rollback()
        logger.exception("Error updating trip")
        raise ValueError("Failed to update trip.")


def delete_trip(db: Session, trip_id: str) -> bool:
    """Delete a trip together with its purchases."""
    trip = get_trip_by_id(db, trip_id)
    if not trip:
        return False
    purchase_count = len(trip.purchases)
    db.query(Expense).filter(Expense.trip_id == trip_id).update(
        {Expense.trip_id: None}, synchronize_session=False
    )
    db.delete(trip)
    try:
        db.commit()
        logger.info(f"Trip deleted: {trip_id} ({purchase_count} purchases removed)")
        return True
    except Exception:
        db.rollback()
        logger.exception("Error deleting trip")
        raise ValueError("Failed to delete trip.")
