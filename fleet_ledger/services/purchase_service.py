import csv
import io
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from fleet_ledger.logger_config import logger
from fleet_ledger.models.trip import FuelEntryType, Purchase, Trip
from fleet_ledger.services.trip_service import refresh_trip_statistics, require_trip
from fleet_ledger.utils.identifiers import generate_custom_id


EXPORT_COLUMNS = [
    "id",
    "date",
    "trip_id",
    "trip_name",
    "vehicle_id",
    "vehicle_name",
    "vehicle_number",
    "type",
    "litre",
    "price",
]


# ==================== HELPER FUNCTIONS ====================

def parse_month(month: Optional[str]) -> Optional[tuple[date, date]]:
    """
    Turn "YYYY-MM" into an inclusive (first_day, last_day) range.
    Returns None for an empty value.
    """
    if not month:
        return None
    try:
        year_str, month_str = month.strip().split("-")
        year, month_number = int(year_str), int(month_str)
        first_day = date(year, month_number, 1)
    except ValueError:
        raise ValueError("Month must be in YYYY-MM format")

    if month_number == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month_number + 1, 1)
    return first_day, date.fromordinal(next_month.toordinal() - 1)


def _copy_trip_fields(purchase: Purchase, trip: Trip) -> None:
    purchase.trip_id = trip.id
    purchase.trip_name = trip.trip_name
    purchase.vehicle_id = trip.vehicle_id
    purchase.vehicle_name = trip.vehicle_name
    purchase.vehicle_number = trip.vehicle_number


def _filtered_query(
    db: Session,
    vehicle_id: Optional[str] = None,
    trip_id: Optional[str] = None,
    month: Optional[str] = None,
):
    query = db.query(Purchase)
    if vehicle_id:
        query = query.filter(Purchase.vehicle_id == vehicle_id)
    if trip_id:
        query = query.filter(Purchase.trip_id == trip_id)
    month_range = parse_month(month)
    if month_range:
        logger.debug(f"Filtering purchases by month {month}: {month_range}")
        query = query.filter(Purchase.date >= month_range[0], Purchase.date <= month_range[1])
    return query.order_by(Purchase.date.desc(), Purchase.created_at.desc())


# ==================== PURCHASE QUERIES ====================

def get_purchase_by_id(db: Session, purchase_id: str) -> Optional[Purchase]:
    """Get fuel entry by ID."""
    return db.query(Purchase).filter(Purchase.id == purchase_id).first()


def get_all_purchases(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    vehicle_id: Optional[str] = None,
    trip_id: Optional[str] = None,
    month: Optional[str] = None,
) -> tuple[List[Purchase], int]:
    query = _filtered_query(db, vehicle_id, trip_id, month)
    total = query.count()
    return query.offset(skip).limit(limit).all(), total


# ==================== PURCHASE MUTATIONS ====================

def create_purchase(
    db: Session,
    trip_id: str,
    price: Decimal,
    litre: Decimal,
    type: FuelEntryType,
    purchase_date: Optional[date] = None,
) -> Purchase:
    """
    Record a fuel purchase or sale against a trip and refresh the trip totals.
    """
    trip = require_trip(db, trip_id)
    if price is None or Decimal(price) < 0:
        raise ValueError("Price must be zero or more")
    if litre is None or Decimal(litre) < 0:
        raise ValueError("Litre must be zero or more")

    purchase = Purchase(
        id=generate_custom_id("PUR"),
        date=purchase_date or date.today(),
        price=Decimal(price),
        litre=Decimal(litre),
        type=type,
    )
    _copy_trip_fields(purchase, trip)
    db.add(purchase)

    try:
        refresh_trip_statistics(db, trip)
        db.commit()
        db.refresh(purchase)
        logger.info(
            f"{type.value} entry {purchase.id} recorded on trip {trip.id}: "
            f"{purchase.litre} L for {purchase.price}"
        )
        return purchase
    except Exception:
        db.rollback()
        logger.exception("Error creating purchase")
        raise ValueError("Failed to create purchase.")


def update_purchase(db: Session, purchase_id: str, updates: dict) -> Optional[Purchase]:
    """
    Update a fuel entry. Moving it to another trip refreshes both trips.
    """
    purchase = get_purchase_by_id(db, purchase_id)
    if not purchase:
        return None

    old_trip = purchase.trip
    new_trip = old_trip
    if updates.get("trip_id") is not None and updates["trip_id"] != purchase.trip_id:
        new_trip = require_trip(db, updates["trip_id"])
        _copy_trip_fields(purchase, new_trip)
        purchase.trip = new_trip

    if updates.get("date") is not None:
        purchase.date = updates["date"]
    if updates.get("price") is not None:
        purchase.price = Decimal(updates["price"])
    if updates.get("litre") is not None:
        purchase.litre = Decimal(updates["litre"])
    if updates.get("type") is not None:
        purchase.type = updates["type"]

    try:
        refresh_trip_statistics(db, new_trip)
        if old_trip is not None and old_trip.id != new_trip.id:
            refresh_trip_statistics(db, old_trip)
            logger.info(f"Purchase {purchase_id} moved from trip {old_trip.id} to {new_trip.id}")
        db.commit()
        db.refresh(purchase)
        return purchase
    except Exception:
        db.rollback()
        logger.exception("Error updating purchase")
        raise ValueError("Failed to update purchase.")


def delete_purchase(db: Session, purchase_id: str) -> bool:
    """Delete a fuel entry and refresh its trip."""
    purchase = get_purchase_by_id(db, purchase_id)
    if not purchase:
        return False

    trip = purchase.trip
    if trip is not None:
        trip.purchases.remove(purchase)
    db.delete(purchase)
    try:
        if trip is not None:
            refresh_trip_statistics(db, trip)
        db.commit()
        logger.info(f"Purchase deleted: {purchase_id}")
        return True
    except Exception:
        db.rollback()
        logger.exception("Error deleting purchase")
        raise ValueError("Failed to delete purchase.")


# ==================== EXPORT ====================

def export_rows(
    db: Session,
    vehicle_id: Optional[str] = None,
    month: Optional[str] = None,
) -> List[dict]:
    """Flat dict rows for the export endpoint, newest first."""
    rows = []
    for purchase in _filtered_query(db, vehicle_id=vehicle_id, month=month).all():
        rows.append(
            {
                "id": purchase.id,
                "date": purchase.date.isoformat(),
                "trip_id": purchase.trip_id,
                "trip_name": purchase.trip_name,
                "vehicle_id": purchase.vehicle_id,
                "vehicle_name": purchase.vehicle_name,
                "vehicle_number": purchase.vehicle_number,
                "type": purchase.type.value,
                "litre": str(purchase.litre),
                "price": str(purchase.price),
            }
        )
    return rows


def rows_to_csv(rows: List[dict]) -> str:
    sio = io.StringIO()
    writer = csv.DictWriter(sio, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return sio.getvalue()
