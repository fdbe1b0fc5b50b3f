import enum

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleet_ledger.core.database import Base
from fleet_ledger.utils.identifiers import generate_custom_id


class TransactionType(str, enum.Enum):
    purchase = "purchase"
    sale = "sale"
    expense = "expense"


class PurchaseSale(Base):
    """
    Per-vehicle running account.

    current_balance = opening_balance + sales - purchases - expenses
    current_tins    = purchased tins - sold tins
    Both are kept non-negative by purchase_sale_service.
    """
    __tablename__ = "purchase_sales"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PS"))
    date = Column(Date, nullable=False, server_default=func.current_date())
    vehicle_id = Column(String(20), ForeignKey("vehicles.id"), nullable=False, index=True)
    vehicle_name = Column(String(150), nullable=True)
    vehicle_number = Column(String(50), nullable=True)
    branch_id = Column(String(20), ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True)

    opening_balance = Column(Numeric(15, 2), nullable=False)
    current_balance = Column(Numeric(15, 2), nullable=True)
    current_tins = Column(Integer, nullable=True, default=0)

    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    collection_expense_id = Column(String(20), ForeignKey("expenses.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vehicle = relationship("Vehicle", back_populates="purchase_sales")
    transactions = relationship(
        "PurchaseSaleTransaction",
        back_populates="purchase_sale",
        cascade="all, delete-orphan",
    )


class PurchaseSaleTransaction(Base):
    __tablename__ = "purchase_sale_transactions"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PST"))
    purchase_sale_id = Column(
        String(20), ForeignKey("purchase_sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(Enum(TransactionType), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    tins = Column(Integer, nullable=True)          # purchase / sale only
    category = Column(String(100), nullable=True)  # expense only
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    purchase_sale = relationship("PurchaseSale", back_populates="transactions")
