import re

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from fleet_ledger.core.database import Base
from fleet_ledger.utils.identifiers import generate_custom_id


_PHONE_NOISE = re.compile(r"[\s\-()]")


def sanitize_phone(value):
    """Strip spaces, dashes and parentheses; keep a leading +. Blank becomes None."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return _PHONE_NOISE.sub("", trimmed)


class Branch(Base):
    __tablename__ = "branches"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("BR"))
    branch_name = Column(String(150), nullable=False)
    phone_number = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    vehicles = relationship("Vehicle", back_populates="branch")

    def __repr__(self):
        return f"<Branch(id='{self.id}', name='{self.branch_name}')>"
