from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from fleet_ledger.models.branch import Branch, sanitize_phone
from fleet_ledger.models.vehicle import Vehicle
from fleet_ledger.models.expense import Expense
from fleet_ledger.models.purchase_sale import PurchaseSale
from fleet_ledger.utils.identifiers import generate_custom_id
from fleet_ledger.logger_config import logger


def _clean_name(name: Optional[str]) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Branch name is required")
    return name.strip()


def get_branch_by_id(db: Session, branch_id: str) -> Optional[Branch]:
    """Get branch by ID."""
    return db.query(Branch).filter(Branch.id == branch_id).first()


def get_all_branches(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> tuple[List[Branch], int]:
    """Get all branches, newest first, with optional search."""
    query = db.query(Branch)
    if search:
        term = f"%{search}%"
        query = query.filter(
            or_(
                Branch.branch_name.ilike(term),
                Branch.phone_number.ilike(term),
                Branch.address.ilike(term),
            )
        )
    total = query.count()
    branches = query.order_by(Branch.created_at.desc()).offset(skip).limit(limit).all()
    return branches, total


def create_branch(
    db: Session,
    branch_name: str,
    phone_number: Optional[str] = None,
    address: Optional[str] = None,
) -> Branch:
    """Create a new branch."""
    branch_id = generate_custom_id("BR")
    while get_branch_by_id(db, branch_id):
        branch_id = generate_custom_id("BR")

    branch = Branch(
        id=branch_id,
        branch_name=_clean_name(branch_name),
        phone_number=sanitize_phone(phone_number),
        address=address.strip() if address else None,
    )
    db.add(branch)
    try:
        db.commit()
        db.refresh(branch)
        logger.info(f"Branch created: {branch.id} ({branch.branch_name})")
        return branch
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating branch: {e}")
        raise ValueError("Failed to create branch.")


def update_branch(db: Session, branch_id: str, updates: dict) -> Optional[Branch]:
    """Update branch fields present in `updates`."""
    branch = get_branch_by_id(db, branch_id)
    if not branch:
        return None

    if "branch_name" in updates:
        branch.branch_name = _clean_name(updates["branch_name"])
    if "phone_number" in updates:
        branch.phone_number = sanitize_phone(updates["phone_number"])
    if "address" in updates:
        address = updates["address"]
        branch.address = address.strip() if address else None

    try:
        db.commit()
        db.refresh(branch)
        return branch
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating branch: {e}")
        raise ValueError("Failed to update branch.")


def delete_branch(db: Session, branch_id: str) -> bool:
    """Delete a branch, detaching the vehicles, ledgers and expenses that point at it."""
    branch = get_branch_by_id(db, branch_id)
    if not branch:
        return False

    for model in (Vehicle, PurchaseSale, Expense):
        detached = (
            db.query(model)
            .filter(model.branch_id == branch_id)
            .update({model.branch_id: None}, synchronize_session=False)
        )
        if detached:
            logger.debug(f"Detached {detached} {model.__tablename__} rows from branch {branch_id}")

    db.delete(branch)
    try:
        db.commit()
        logger.info(f"Branch deleted: {branch_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting branch: {e}")
        raise ValueError("Failed to delete branch.")
