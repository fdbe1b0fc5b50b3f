"""initial schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-18 09:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0a1b2c3d4e5f'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('admin', 'user', name='userrole')
trip_status = sa.Enum('Active', 'Completed', name='tripstatus')
fuel_entry_type = sa.Enum('Purchase', 'Sales', name='fuelentrytype')
expense_type = sa.Enum('investment', 'revenue', 'other', name='expensetype')
transaction_type = sa.Enum('purchase', 'sale', 'expense', name='transactiontype')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=20), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', user_role, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_user_id'), 'users', ['user_id'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'branches',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('branch_name', sa.String(length=150), nullable=False),
        sa.Column('phone_number', sa.String(length=30), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table(
        'vehicles',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('vehicle_name', sa.String(length=150), nullable=False),
        sa.Column('vehicle_number', sa.String(length=50), nullable=False),
        sa.Column('driver_name', sa.String(length=150), nullable=False),
        sa.Column('co_passenger_name', sa.String(length=150), nullable=False),
        sa.Column('branch_id', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_vehicles_vehicle_number'), 'vehicles', ['vehicle_number'], unique=True)

    op.create_table(
        'trips',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('vehicle_id', sa.String(length=20), nullable=False),
        sa.Column('vehicle_name', sa.String(length=150), nullable=False),
        sa.Column('vehicle_number', sa.String(length=50), nullable=False),
        sa.Column('trip_name', sa.String(length=150), nullable=False),
        sa.Column('start_date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', trip_status, nullable=False),
        sa.Column('total_purchases', sa.Numeric(15, 2), nullable=False),
        sa.Column('total_sales', sa.Numeric(15, 2), nullable=False),
        sa.Column('total_purchase_litres', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_sales_litres', sa.Numeric(12, 2), nullable=False),
        sa.Column('profit_loss', sa.Numeric(15, 2), nullable=False),
        sa.Column('is_profitable', sa.Boolean(), nullable=False),
        sa.Column('has_reached_breakeven', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trips_vehicle_id'), 'trips', ['vehicle_id'], unique=False)

    op.create_table(
        'expenses',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('expense_type', expense_type, nullable=False),
        sa.Column('branch_id', sa.String(length=20), nullable=True),
        sa.Column('vehicle_id', sa.String(length=20), nullable=True),
        sa.Column('vehicle_name', sa.String(length=150), nullable=True),
        sa.Column('trip_id', sa.String(length=20), nullable=True),
        sa.Column('trip_name', sa.String(length=150), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_expenses_branch_id'), 'expenses', ['branch_id'], unique=False)
    op.create_index(op.f('ix_expenses_vehicle_id'), 'expenses', ['vehicle_id'], unique=False)

    op.create_table(
        'purchases',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('trip_id', sa.String(length=20), nullable=False),
        sa.Column('trip_name', sa.String(length=150), nullable=False),
        sa.Column('vehicle_id', sa.String(length=20), nullable=False),
        sa.Column('vehicle_name', sa.String(length=150), nullable=False),
        sa.Column('vehicle_number', sa.String(length=50), nullable=False),
        sa.Column('date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('price', sa.Numeric(15, 2), nullable=False),
        sa.Column('litre', sa.Numeric(12, 2), nullable=False),
        sa.Column('type', fuel_entry_type, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['trip_id'], ['trips.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_purchases_trip_id'), 'purchases', ['trip_id'], unique=False)
    op.create_index(op.f('ix_purchases_vehicle_id'), 'purchases', ['vehicle_id'], unique=False)

    op.create_table(
        'purchase_sales',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('date', sa.Date(), server_default=sa.text('CURRENT_DATE'), nullable=False),
        sa.Column('vehicle_id', sa.String(length=20), nullable=False),
        sa.Column('vehicle_name', sa.String(length=150), nullable=True),
        sa.Column('vehicle_number', sa.String(length=50), nullable=True),
        sa.Column('branch_id', sa.String(length=20), nullable=True),
        sa.Column('opening_balance', sa.Numeric(15, 2), nullable=False),
        sa.Column('current_balance', sa.Numeric(15, 2), nullable=True),
        sa.Column('current_tins', sa.Integer(), nullable=True),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('collection_expense_id', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['branch_id'], ['branches.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['collection_expense_id'], ['expenses.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_purchase_sales_branch_id'), 'purchase_sales', ['branch_id'], unique=False)
    op.create_index(op.f('ix_purchase_sales_vehicle_id'), 'purchase_sales', ['vehicle_id'], unique=False)

    op.create_table(
        'purchase_sale_transactions',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('purchase_sale_id', sa.String(length=20), nullable=False),
        sa.Column('type', transaction_type, nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False),
        sa.Column('tins', sa.Integer(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['purchase_sale_id'], ['purchase_sales.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_purchase_sale_transactions_purchase_sale_id'),
        'purchase_sale_transactions',
        ['purchase_sale_id'],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_purchase_sale_transactions_purchase_sale_id'), table_name='purchase_sale_transactions')
    op.drop_table('purchase_sale_transactions')
    op.drop_index(op.f('ix_purchase_sales_vehicle_id'), table_name='purchase_sales')
    op.drop_index(op.f('ix_purchase_sales_branch_id'), table_name='purchase_sales')
    op.drop_table('purchase_sales')
    op.drop_index(op.f('ix_purchases_vehicle_id'), table_name='purchases')
    op.drop_index(op.f('ix_purchases_trip_id'), table_name='purchases')
    op.drop_table('purchases')
    op.drop_index(op.f('ix_expenses_vehicle_id'), table_name='expenses')
    op.drop_index(op.f('ix_expenses_branch_id'), table_name='expenses')
    op.drop_table('expenses')
    op.drop_index(op.f('ix_trips_vehicle_id'), table_name='trips')
    op.drop_table('trips')
    op.drop_index(op.f('ix_vehicles_vehicle_number'), table_name='vehicles')
    op.drop_table('vehicles')
    op.drop_table('categories')
    op.drop_table('branches')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_user_id'), table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (transaction_type, expense_type, fuel_entry_type, trip_status, user_role):
        enum_type.drop(bind, checkfirst=True)
