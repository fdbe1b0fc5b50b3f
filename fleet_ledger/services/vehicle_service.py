from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, or_
from typing import Optional, List

from fleet_ledger.common.exceptions import NotFoundError
from fleet_ledger.models.vehicle import Vehicle
from fleet_ledger.models.branch import Branch
from fleet_ledger.models.expense import Expense
from fleet_ledger.models.trip import Trip
from fleet_ledger.models.purchase_sale import PurchaseSale
from fleet_ledger.utils.identifiers import generate_custom_id
from fleet_ledger.logger_config import logger


DUPLICATE_NUMBER_MESSAGE = "Vehicle number already exists"


def _normalize_number(vehicle_number: str) -> str:
    return vehicle_number.strip().upper()


def _require_text(value: Optional[str], label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{label} is required")
    return value.strip()


def _check_branch(db: Session, branch_id: Optional[str]) -> Optional[str]:
    if not branch_id:
        return None
    if not db.query(Branch.id).filter(Branch.id == branch_id).first():
        raise NotFoundError("Branch not found")
    return branch_id


def get_vehicle_by_id(db: Session, vehicle_id: str) -> Optional[Vehicle]:
    """Get vehicle by ID."""
    return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()


def get_vehicle_by_number(db: Session, vehicle_number: str) -> Optional[Vehicle]:
    """Get vehicle by its registration number (stored upper-cased)."""
    return (
        db.query(Vehicle)
        .filter(Vehicle.vehicle_number == _normalize_number(vehicle_number))
        .first()
    )


def require_vehicle(db: Session, vehicle_id: Optional[str]) -> Vehicle:
    """Fetch a vehicle or raise NotFoundError; used by services that reference vehicles."""
    vehicle_id = (vehicle_id or "").strip()
    if not vehicle_id:
        raise ValueError("Vehicle is required")
    vehicle = get_vehicle_by_id(db, vehicle_id)
    if not vehicle:
        raise NotFoundError("Vehicle not found")
    return vehicle


def get_all_vehicles(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    branch_id: Optional[str] = None,
    search: Optional[str] = None,
) -> tuple[List[Vehicle], int]:
    """Get all vehicles, newest first."""
    query = db.query(Vehicle)
    if branch_id:
        query = query.filter(Vehicle.branch_id == branch_id)
    if search:
        term = f"%{search}%"
        query = query.filter(
            or_(
                Vehicle.vehicle_name.ilike(term),
                Vehicle.vehicle_number.ilike(term),
                Vehicle.driver_name.ilike(term),
            )
        )
    total = query.count()
    vehicles = query.order_by(Vehicle.created_at.desc()).offset(skip).limit(limit).all()
    return vehicles, total


def create_vehicle(
    db: Session,
    vehicle_number: str,
    driver_name: str,
    co_passenger_name: str,
    vehicle_name: Optional[str] = None,
    branch_id: Optional[str] = None,
) -> Vehicle:
    """Create a vehicle; vehicle_name falls back to the vehicle number."""
    number = _normalize_number(_require_text(vehicle_number, "Vehicle number"))
    if get_vehicle_by_number(db, number):
        raise ValueError(DUPLICATE_NUMBER_MESSAGE)

    vehicle_id = generate_custom_id("VEH")
    while get_vehicle_by_id(db, vehicle_id):
        vehicle_id = generate_custom_id("VEH")

    vehicle = Vehicle(
        id=vehicle_id,
        vehicle_name=(vehicle_name or "").strip() or number,
        vehicle_number=number,
        driver_name=_require_text(driver_name, "Driver name"),
        co_passenger_name=_require_text(co_passenger_name, "Co-passenger name"),
        branch_id=_check_branch(db, branch_id),
    )
    db.add(vehicle)
    try:
        db.commit()
        db.refresh(vehicle)
        logger.info(f"Vehicle created: {vehicle.id} ({vehicle.vehicle_number})")
        return vehicle
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating vehicle: {e}")
        raise ValueError(DUPLICATE_NUMBER_MESSAGE)


def update_vehicle(db: Session, vehicle_id: str, updates: dict) -> Optional[Vehicle]:
    """Update vehicle fields present in `updates`."""
    vehicle = get_vehicle_by_id(db, vehicle_id)
    if not vehicle:
        return None

    if updates.get("vehicle_number") is not None:
        number = _normalize_number(_require_text(updates["vehicle_number"], "Vehicle number"))
        existing = get_vehicle_by_number(db, number)
        if existing and existing.id != vehicle_id:
            raise ValueError(DUPLICATE_NUMBER_MESSAGE)
        vehicle.vehicle_number = number
    if "vehicle_name" in updates:
        vehicle.vehicle_name = (updates["vehicle_name"] or "").strip() or vehicle.vehicle_number
    if updates.get("driver_name") is not None:
        vehicle.driver_name = _require_text(updates["driver_name"], "Driver name")
    if updates.get("co_passenger_name") is not None:
        vehicle.co_passenger_name = _require_text(updates["co_passenger_name"], "Co-passenger name")
    if "branch_id" in updates:
        vehicle.branch_id = _check_branch(db, updates["branch_id"])

    try:
        db.commit()
        db.refresh(vehicle)
        return vehicle
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating vehicle: {e}")
        raise ValueError(DUPLICATE_NUMBER_MESSAGE)


def delete_vehicle(db: Session, vehicle_id: str) -> bool:
    """Delete a vehicle that has no trips or purchase & sale ledgers."""
    vehicle = get_vehicle_by_id(db, vehicle_id)
    if not vehicle:
        return False

    trip_count = db.query(func.count(Trip.id)).filter(Trip.vehicle_id == vehicle_id).scalar()
    ledger_count = (
        db.query(func.count(PurchaseSale.id))
        .filter(PurchaseSale.vehicle_id == vehicle_id)
        .scalar()
    )
    if trip_count or ledger_count:
        raise ValueError(
            "Cannot delete vehicle with existing trips or purchase & sale records. Remove them first."
        )

    db.query(Expense).filter(Expense.vehicle_id == vehicle_id).update(
        {Expense.vehicle_id: None}, synchronize_session=False
    )
    db.delete(vehicle)
    try:
        db.commit()
        logger.info(f"Vehicle deleted: {vehicle_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting vehicle: {e}")
        raise ValueError("Failed to delete vehicle.")
