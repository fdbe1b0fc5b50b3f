from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleet_ledger.core.database import Base
from fleet_ledger.utils.identifiers import generate_custom_id


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("VEH"))
    vehicle_name = Column(String(150), nullable=False)
    vehicle_number = Column(String(50), unique=True, nullable=False, index=True)
    driver_name = Column(String(150), nullable=False)
    co_passenger_name = Column(String(150), nullable=False)
    branch_id = Column(String(20), ForeignKey("branches.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    branch = relationship("Branch", back_populates="vehicles")
    trips = relationship("Trip", back_populates="vehicle")
    purchase_sales = relationship("PurchaseSale", back_populates="vehicle")

    @property
    def display_name(self) -> str:
        return self.vehicle_name or self.vehicle_number

    def __repr__(self):
        return f"<Vehicle(id='{self.id}', number='{self.vehicle_number}')>"
