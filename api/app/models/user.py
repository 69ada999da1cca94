"""
User model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from sqlalchemy import DateTime

from app.utils.time_utils import utcnow


class User(SQLModel, table=True):
    """User table - accounts are managed by the auth service, only identity lives here."""
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Relationships
    documents: List["Document"] = Relationship(back_populates="user")
    flashcard_reviews: List["FlashcardReview"] = Relationship(back_populates="user")
