import enum

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.sql import func

from fleet_ledger.core.database import Base
from fleet_ledger.utils.identifiers import generate_custom_id


class ExpenseType(str, enum.Enum):
    investment = "investment"
    revenue = "revenue"
    other = "other"


class Expense(Base):
    """Generic ledger entry. `revenue` rows count as income everywhere else in the app."""
    __tablename__ = "expenses"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXP"))
    title = Column(String(200), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, server_default=func.current_date())
    expense_type = Column(Enum(ExpenseType), nullable=False, default=ExpenseType.other)

    branch_id = Column(String(20), ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True)
    vehicle_id = Column(String(20), ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)
    vehicle_name = Column(String(150), nullable=True)
    trip_id = Column(String(20), ForeignKey("trips.id", ondelete="SET NULL"), nullable=True)
    trip_name = Column(String(150), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
