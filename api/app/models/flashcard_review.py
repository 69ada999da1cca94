"""
FlashcardReview model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional
from datetime import datetime
from sqlalchemy import CheckConstraint, DateTime, UniqueConstraint

from app.utils.time_utils import utcnow

DEFAULT_EASE_FACTOR = 2.5
DEFAULT_INTERVAL = 1
MIN_EASE_FACTOR = 1.3
MIN_INTERVAL = 1


class FlashcardReview(SQLModel, table=True):
    """
    FlashcardReview table - spaced-repetition state of one card for one user.

    Exactly one row exists per (user_id, flashcard_set_id, card_index).
    Rows are seeded when a set is generated and mutated only by review submission.
    """
    __tablename__ = "flashcard_review"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "flashcard_set_id", "card_index",
            name="uq_flashcard_review_user_set_card",
        ),
        CheckConstraint("ease_factor >= 1.3", name="ck_flashcard_review_ease_factor_min"),
        CheckConstraint('"interval" >= 1', name="ck_flashcard_review_interval_min"),
        CheckConstraint("card_index >= 0", name="ck_flashcard_review_card_index_min"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    flashcard_set_id: int = Field(foreign_key="flashcard_set.id", ondelete="CASCADE", index=True)
    card_index: int
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR)
    interval: int = Field(default=DEFAULT_INTERVAL)  # Whole days
    next_review_date: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    times_reviewed: int = Field(default=0)
    last_reviewed: Optional[datetime] = Field(default=None, sa_type=DateTime)
    version: int = Field(default=0)  # Bumped on every review, used for compare-and-swap

    # Relationships
    user: "User" = Relationship(back_populates="flashcard_reviews")
    flashcard_set: "FlashcardSet" = Relationship(back_populates="reviews")
