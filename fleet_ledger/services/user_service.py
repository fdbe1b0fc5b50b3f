from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from typing import Optional, List
from fleet_ledger.models.user import User, UserRole
from fleet_ledger.core.security import get_password_hash, verify_password
from fleet_ledger.logger_config import logger


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by database ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get user by username (case-insensitive, stored lower-cased)."""
    return db.query(User).filter(User.username == User.normalize_username(username)).first()


def get_user_by_user_id(db: Session, user_id: str) -> Optional[User]:
    """Get user by user_id (e.g., 'ADM-ABC12345')."""
    return db.query(User).filter(User.user_id == user_id).first()


def count_users(db: Session) -> int:
    return db.query(User).count()


def get_all_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    role: Optional[UserRole] = None,
    search: Optional[str] = None
) -> tuple[List[User], int]:
    """Get all users with optional filtering."""
    query = db.query(User)

    if role:
        query = query.filter(User.role == role)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                User.name.ilike(search_term),
                User.username.ilike(search_term),
                User.user_id.ilike(search_term),
            )
        )

    total = query.count()
    users = query.order_by(User.id).offset(skip).limit(limit).all()

    return users, total


def create_user(
    db: Session,
    username: str,
    password: str,
    name: str,
    role: UserRole = UserRole.user,
) -> User:
    """Create a new user with a bcrypt-hashed password."""
    username = User.normalize_username(username)
    if not username:
        raise ValueError("Username is required")

    if get_user_by_username(db, username):
        raise ValueError("Username already exists")

    user_id = User.generate_user_id(role)
    while get_user_by_user_id(db, user_id):
        user_id = User.generate_user_id(role)

    user = User(
        user_id=user_id,
        username=username,
        password_hash=get_password_hash(password),
        name=name.strip(),
        role=role,
    )
    db.add(user)

    try:
        db.commit()
        db.refresh(user)
        logger.info(f"User {user.username} created with role {role.value}")
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating user: {str(e)}")
        raise ValueError("Failed to create user. Username may already exist.")


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, otherwise None."""
    user = get_user_by_username(db, username)
    if not user:
        logger.debug(f"Authentication failed: unknown username {username!r}")
        return None
    if not verify_password(password, user.password_hash):
        logger.debug(f"Authentication failed: bad password for {user.username}")
        return None
    return user


def delete_user(db: Session, user_id: int) -> bool:
    """Delete user."""
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    db.delete(user)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting user: {str(e)}")
        raise ValueError("Failed to delete user.")
