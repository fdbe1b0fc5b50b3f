from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from fleet_ledger.core.database import Base
from fleet_ledger.utils.identifiers import generate_custom_id


DEFAULT_CATEGORIES = [
    {"name": "Fuel", "description": "Petrol, diesel, and other fuel costs"},
    {"name": "Maintenance", "description": "Regular vehicle maintenance"},
    {"name": "Insurance", "description": "Vehicle insurance premiums"},
    {"name": "Registration", "description": "Vehicle registration and licensing"},
    {"name": "Repairs", "description": "Vehicle repairs and fixes"},
    {"name": "Tolls", "description": "Highway and bridge tolls"},
    {"name": "Parking", "description": "Parking fees and charges"},
    {"name": "Other", "description": "Miscellaneous expenses"},
]


class Category(Base):
    """Expense categories offered when recording expenses (fuel, tolls, repairs, ...)."""
    __tablename__ = "categories"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("CAT"))
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
