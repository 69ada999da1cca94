"""
Document model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
from sqlalchemy import DateTime

from app.utils.time_utils import utcnow


class Document(SQLModel, table=True):
    """Document table - uploaded study material that flashcard sets are generated from."""
    __tablename__ = "document"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    filename: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Relationships
    user: "User" = Relationship(back_populates="documents")
    flashcard_sets: List["FlashcardSet"] = Relationship(back_populates="document")
