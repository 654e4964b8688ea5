# user_api/models/users.py

import enum
import uuid
from sqlalchemy import Column, String, Enum
from user_api.database import Base

def generate_user_id() -> str:
    return uuid.uuid4().hex

class UserRole(str, enum.Enum):
    """Enumeration for user roles."""
    USER = "user"
    ADMIN = "admin"

class User(Base):
    """SQLAlchemy model for the 'users' table."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, index=True, default=generate_user_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    # Always a bcrypt hash, never the submitted secret
    password = Column(String, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
