"""
FlashcardSet model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, Dict
from datetime import datetime
from sqlalchemy import Column, DateTime, JSON

from app.utils.time_utils import utcnow


class FlashcardSet(SQLModel, table=True):
    """
    FlashcardSet table - an ordered, immutable list of generated cards.

    Cards are stored as a JSON array of {"front": ..., "back": ...} objects and
    are addressed by their 0-based position in that array.
    """
    __tablename__ = "flashcard_set"

    id: Optional[int] = Field(default=None, primary_key=True)
    document_id: int = Field(foreign_key="document.id", ondelete="CASCADE", index=True)
    title: Optional[str] = None
    cards: List[Dict[str, str]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    # Relationships
    document: "Document" = Relationship(back_populates="flashcard_sets")
    reviews: List["FlashcardReview"] = Relationship(back_populates="flashcard_set")

    @property
    def card_count(self) -> int:
        return len(self.cards or [])
