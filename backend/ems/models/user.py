from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from ems.db.session import Base


class User(Base):
    """Login credentials; employee accounts are tied to their details row by email."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="Employee")  # Admin|Employee|HR
    created_at = Column(DateTime, default=datetime.utcnow)
