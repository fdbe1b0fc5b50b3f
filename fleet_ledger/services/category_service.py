from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List

from fleet_ledger.models.category import Category, DEFAULT_CATEGORIES
from fleet_ledger.utils.identifiers import generate_custom_id
from fleet_ledger.logger_config import logger


DUPLICATE_NAME_MESSAGE = "Category name already exists"


def get_category_by_id(db: Session, category_id: str) -> Optional[Category]:
    """Get category by ID."""
    return db.query(Category).filter(Category.id == category_id).first()


def get_category_by_name(db: Session, name: str) -> Optional[Category]:
    """Get category by name."""
    return db.query(Category).filter(Category.name == name.strip()).first()


def get_all_categories(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
) -> tuple[List[Category], int]:
    """Get all categories sorted by name, with optional search."""
    query = db.query(Category)
    if search:
        term = f"%{search}%"
        query = query.filter(
            or_(
                Category.name.ilike(term),
                Category.description.ilike(term),
            )
        )
    total = query.count()
    categories = query.order_by(Category.name.asc()).offset(skip).limit(limit).all()
    return categories, total


def _new_category_id(db: Session) -> str:
    category_id = generate_custom_id("CAT")
    while get_category_by_id(db, category_id):
        category_id = generate_custom_id("CAT")
    return category_id


def create_category(db: Session, name: str, description: Optional[str] = None) -> Category:
    """Create a new category."""
    name = name.strip()
    if not name:
        raise ValueError("Category name is required")
    if get_category_by_name(db, name):
        raise ValueError(DUPLICATE_NAME_MESSAGE)

    category = Category(
        id=_new_category_id(db),
        name=name,
        description=description.strip() if description else None,
    )
    db.add(category)
    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating category: {e}")
        raise ValueError(DUPLICATE_NAME_MESSAGE)


def update_category(db: Session, category_id: str, updates: dict) -> Optional[Category]:
    """Update category."""
    category = get_category_by_id(db, category_id)
    if not category:
        return None

    if updates.get("name") is not None:
        name = updates["name"].strip()
        if not name:
            raise ValueError("Category name is required")
        existing = get_category_by_name(db, name)
        if existing and existing.id != category_id:
            raise ValueError(DUPLICATE_NAME_MESSAGE)
        category.name = name
    if "description" in updates:
        description = updates["description"]
        category.description = description.strip() if description else None

    try:
        db.commit()
        db.refresh(category)
        return category
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating category: {e}")
        raise ValueError(DUPLICATE_NAME_MESSAGE)


def delete_category(db: Session, category_id: str) -> bool:
    """Delete category. Expenses keep their category text."""
    category = get_category_by_id(db, category_id)
    if not category:
        return False
    db.delete(category)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting category: {e}")
        raise ValueError("Failed to delete category.")


def seed_default_categories(db: Session) -> tuple[List[Category], int]:
    """
    Insert the default categories when the table is empty.
    Returns (created categories, existing count before seeding).
    """
    existing_count = db.query(Category).count()
    if existing_count > 0:
        logger.info(f"Category seed skipped, {existing_count} categories already exist")
        return [], existing_count

    created = []
    for entry in DEFAULT_CATEGORIES:
        category = Category(
            id=_new_category_id(db),
            name=entry["name"],
            description=entry["description"],
        )
        db.add(category)
        db.flush()
        created.append(category)
    try:
        db.commit()
        for category in created:
            db.refresh(category)
        logger.info(f"Seeded {len(created)} default categories")
        return created, 0
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error seeding categories: {e}")
        raise ValueError("Failed to seed categories.")
