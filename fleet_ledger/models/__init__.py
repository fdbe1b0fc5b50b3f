# fleet_ledger/models/__init__.py
from .user import User, UserRole
from .branch import Branch
from .vehicle import Vehicle
from .category import Category
from .expense import Expense, ExpenseType
from .trip import Trip, TripStatus, Purchase, FuelEntryType
from .purchase_sale import PurchaseSale, PurchaseSaleTransaction, TransactionType
