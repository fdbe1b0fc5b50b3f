"""
Insert a manual revenue expense.

Usage:
    python scripts/add_revenue.py --amount 1000 --yes

Optional:
    --branch-id BR-XXXXXXXX
    --vehicle-id VEH-XXXXXXXX
    --date YYYY-MM-DD
    --title "Manual Revenue Adjustment"
    --category "Adjustment"
    --description "Added via script"
"""

import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from fleet_ledger import models  # noqa: F401
from fleet_ledger.core.database import SessionLocal
from fleet_ledger.logger_config import logger
from fleet_ledger.models.expense import ExpenseType
from fleet_ledger.services.expense_service import create_expense


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Add a revenue expense")
    parser.add_argument("--amount", default="1000")
    parser.add_argument("--branch-id")
    parser.add_argument("--vehicle-id")
    parser.add_argument("--date", dest="revenue_date", type=date.fromisoformat)
    parser.add_argument("--title", default="Manual Revenue Adjustment")
    parser.add_argument("--category", default="Adjustment")
    parser.add_argument("--description", default="Added via script")
    parser.add_argument("--yes", action="store_true", help="Confirm writing to the database")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if not args.yes:
        print("Refusing to write to DB without --yes", file=sys.stderr)
        print("Example: python scripts/add_revenue.py --amount 1000 --yes", file=sys.stderr)
        return 1

    try:
        amount = Decimal(args.amount)
    except InvalidOperation:
        amount = Decimal("0")
    if amount <= 0:
        print("Invalid --amount. Provide a positive number.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        expense = create_expense(
            db,
            title=args.title,
            amount=amount,
            category=args.category,
            description=args.description,
            expense_date=args.revenue_date,
            expense_type=ExpenseType.revenue,
            branch_id=args.branch_id,
            vehicle_id=args.vehicle_id,
        )
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    logger.info(f"Revenue expense {expense.id} inserted from script")
    print(f"Inserted revenue expense: {expense.id}")
    print(f"Amount: {expense.amount}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
