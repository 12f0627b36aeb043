"""
User database model.

Identity record owned by the auth collaborator; trips reference it by id.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func
from roady.app.db.session import Base


class User(Base):
    """
    User model for authentication.

    Immutable once created; account management is outside the tracker.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', email='{self.email}')>"
