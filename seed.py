import argparse
import random
from datetime import date, timedelta
from decimal import Decimal

from faker import Faker

from fleet_ledger import models  # noqa: F401
from fleet_ledger.core.database import Base, SessionLocal, engine
from fleet_ledger.models.expense import ExpenseType
from fleet_ledger.models.trip import FuelEntryType
from fleet_ledger.models.purchase_sale import TransactionType
from fleet_ledger.models.user import UserRole
from fleet_ledger.services.branch_service import create_branch
from fleet_ledger.services.category_service import seed_default_categories
from fleet_ledger.services.expense_service import create_expense
from fleet_ledger.services.purchase_sale_service import create_purchase_sale, create_transaction
from fleet_ledger.services.purchase_service import create_purchase
from fleet_ledger.services.trip_service import create_trip
from fleet_ledger.services.user_service import create_user, get_user_by_username
from fleet_ledger.services.vehicle_service import create_vehicle

fake = Faker()


def parse_args():
    parser = argparse.ArgumentParser(description="Seed the fleet ledger database")
    parser.add_argument("--admin-username", default="admin")
    parser.add_argument("--admin-password", default="admin123")
    parser.add_argument("--admin-name", default="Administrator")
    parser.add_argument("--skip-categories", action="store_true", help="Do not insert default categories")
    parser.add_argument("--demo", action="store_true", help="Also create Faker demo branches, vehicles and ledgers")
    parser.add_argument("--branches", type=int, default=3)
    parser.add_argument("--vehicles", type=int, default=6)
    parser.add_argument("--create-tables", action="store_true", help="Create tables without running migrations")
    return parser.parse_args()


def seed_admin(db, username, password, name):
    if get_user_by_username(db, username):
        print(f"ℹ️  User '{username}' already exists")
        return
    create_user(db, username=username, password=password, name=name, role=UserRole.admin)
    print(f"✅ Admin user created: {username}")
    print("⚠️  Change this password after first login!")


def seed_demo(db, branch_count, vehicle_count):
    print("🔄 Creating branches and vehicles...")
    branches = [
        create_branch(
            db,
            branch_name=f"{fake.city()} Branch",
            phone_number=fake.phone_number()[:20],
            address=fake.address().replace("\n", ", "),
        )
        for _ in range(branch_count)
    ]

    vehicles = []
    for index in range(vehicle_count):
        vehicles.append(
            create_vehicle(
                db,
                vehicle_number=f"{fake.bothify('???-####')}",
                driver_name=fake.name(),
                co_passenger_name=fake.name(),
                vehicle_name=f"Tanker {index + 1}",
                branch_id=random.choice(branches).id if branches else None,
            )
        )
    print(f"✅ Seeded {len(branches)} branches and {len(vehicles)} vehicles")

    print("🔄 Creating trips, fuel entries and ledgers...")
    today = date.today()
    for vehicle in vehicles:
        trip = create_trip(
            db,
            vehicle_id=vehicle.id,
            trip_name=f"{fake.city()} run",
            start_date=today - timedelta(days=random.randint(1, 20)),
        )
        for _ in range(random.randint(2, 5)):
            litres = Decimal(random.randint(100, 900))
            create_purchase(
                db,
                trip_id=trip.id,
                price=litres * Decimal("2.15"),
                litre=litres,
                type=FuelEntryType.Purchase,
                purchase_date=trip.start_date,
            )
            create_purchase(
                db,
                trip_id=trip.id,
                price=litres * Decimal("2.40"),
                litre=litres,
                type=FuelEntryType.Sales,
                purchase_date=trip.start_date,
            )

        purchase_sale = create_purchase_sale(
            db,
            ledger_date=today - timedelta(days=7),
            vehicle_id=vehicle.id,
            opening_balance=Decimal(random.randint(5, 20) * 1000),
        )
        tins = random.randint(20, 80)
        create_transaction(
            db, purchase_sale.id, TransactionType.purchase, purchase_sale.date,
            Decimal(tins * 45), tins=tins, description="Opening stock",
        )
        create_transaction(
            db, purchase_sale.id, TransactionType.sale, today,
            Decimal(tins * 52), tins=tins, description="Market sale",
        )
        create_transaction(
            db, purchase_sale.id, TransactionType.expense, today,
            Decimal(random.randint(50, 300)), category="Fuel",
        )

        create_expense(
            db,
            title=f"Service - {vehicle.vehicle_name}",
            amount=Decimal(random.randint(100, 900)),
            category="Maintenance",
            expense_type=ExpenseType.other,
            vehicle_id=vehicle.id,
        )
    print("✅ Demo data created")


def main():
    args = parse_args()

    if args.create_tables:
        Base.metadata.create_all(bind=engine)
        print("✅ Tables created")

    db = SessionLocal()
    try:
        seed_admin(db, args.admin_username, args.admin_password, args.admin_name)

        if not args.skip_categories:
            created, existing = seed_default_categories(db)
            if created:
                print(f"✅ Seeded {len(created)} default categories")
            else:
                print(f"ℹ️  {existing} categories already exist, skipped")

        if args.demo:
            seed_demo(db, args.branches, args.vehicles)

        print("🎉 Seeding complete!")
    except Exception as e:
        db.rollback()
        print(f"❌ Seeding failed: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
