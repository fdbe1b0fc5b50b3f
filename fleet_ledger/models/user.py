from sqlalchemy import Column, Enum, Integer, String, DateTime
from sqlalchemy.sql import func
import enum
import secrets
import string
from fleet_ledger.core.database import Base


class UserRole(str, enum.Enum):
    admin = "admin"
    user = "user"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(20), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.user)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @staticmethod
    def generate_user_id(role: UserRole) -> str:
        """Generate a short unique user ID based on role"""
        prefix = {
            UserRole.admin: "ADM",
            UserRole.user: "USR",
        }[role]

        random_part = ''.join(secrets.choice(string.ascii_uppercase + string.digits)
                             for _ in range(8))

        return f"{prefix}-{random_part}"

    @staticmethod
    def normalize_username(username: str) -> str:
        return username.strip().lower()

    def __repr__(self):
        return f"<User(user_id='{self.user_id}', username='{self.username}')>"
