import enum

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleet_ledger.core.database import Base
from fleet_ledger.utils.identifiers import generate_custom_id


class TripStatus(str, enum.Enum):
    Active = "Active"
    Completed = "Completed"


class FuelEntryType(str, enum.Enum):
    Purchase = "Purchase"
    Sales = "Sales"


class Trip(Base):
    __tablename__ = "trips"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("TRP"))
    vehicle_id = Column(String(20), ForeignKey("vehicles.id"), nullable=False, index=True)
    vehicle_name = Column(String(150), nullable=False)
    vehicle_number = Column(String(50), nullable=False)
    trip_name = Column(String(150), nullable=False)
    start_date = Column(Date, nullable=False, server_default=func.current_date())
    end_date = Column(Date, nullable=True)
    status = Column(Enum(TripStatus), nullable=False, default=TripStatus.Active)

    # Derived from the trip's purchases; see trip_service.refresh_trip_statistics
    total_purchases = Column(Numeric(15, 2), nullable=False, default=0)
    total_sales = Column(Numeric(15, 2), nullable=False, default=0)
    total_purchase_litres = Column(Numeric(12, 2), nullable=False, default=0)
    total_sales_litres = Column(Numeric(12, 2), nullable=False, default=0)
    profit_loss = Column(Numeric(15, 2), nullable=False, default=0)
    is_profitable = Column(Boolean, nullable=False, default=False)
    has_reached_breakeven = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vehicle = relationship("Vehicle", back_populates="trips")
    purchases = relationship("Purchase", back_populates="trip", cascade="all, delete-orphan")


class Purchase(Base):
    """A fuel purchase or sale line recorded against a trip."""
    __tablename__ = "purchases"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PUR"))
    trip_id = Column(String(20), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    trip_name = Column(String(150), nullable=False)
    vehicle_id = Column(String(20), ForeignKey("vehicles.id"), nullable=False, index=True)
    vehicle_name = Column(String(150), nullable=False)
    vehicle_number = Column(String(50), nullable=False)
    date = Column(Date, nullable=False, server_default=func.current_date())
    price = Column(Numeric(15, 2), nullable=False)
    litre = Column(Numeric(12, 2), nullable=False)
    type = Column(Enum(FuelEntryType), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    trip = relationship("Trip", back_populates="purchases")
