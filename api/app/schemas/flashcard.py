"""
Flashcard schemas.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.models.enums import Difficulty


class CardContent(BaseModel):
    """One card of a flashcard set."""
    front: str = Field(..., description="Key concept, term, or question")
    back: str = Field(..., description="Definition, explanation, or answer")


class FlashcardSetCreateRequest(BaseModel):
    """Request to store a generated flashcard set and seed the user's review states."""
    user_id: int = Field(..., description="User ID (owner of the document)")
    document_id: int = Field(..., description="Document the cards were generated from")
    title: Optional[str] = Field(None, description="Optional set title")
    cards: List[CardContent] = Field(..., min_length=1, description="Generated cards, in order")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 1,
                "document_id": 7,
                "title": "Cell biology",
                "cards": [
                    {"front": "Mitochondria", "back": "Organelle that produces ATP"}
                ]
            }
        }


class FlashcardSetResponse(BaseModel):
    """A flashcard set with its cards."""
    id: int
    document_id: int
    title: Optional[str] = None
    cards: List[CardContent]
    created_at: datetime
    initialized_count: Optional[int] = Field(None, description="Review states created by this request")


class InitializeSetRequest(BaseModel):
    """Request to seed review states for a set."""
    user_id: int = Field(..., description="User ID")
    card_count: int = Field(..., ge=0, description="Number of cards in the set")


class InitializeSetResponse(BaseModel):
    """Response from review state initialization."""
    created_count: int = Field(..., description="Review states created by this call")
    total_cards: int = Field(..., description="Cards in the set")


class DueCard(BaseModel):
    """A card that is due for review."""
    front: str
    back: str
    card_index: int
    review_id: int
    times_reviewed: int


class DueCardsResponse(BaseModel):
    """Due cards of a set, most overdue first."""
    due_cards: List[DueCard]
    total_due: int
    total_cards: int


class ReviewRequest(BaseModel):
    """Request to record a review rating for one card."""
    user_id: int = Field(..., description="User ID")
    card_index: int = Field(..., description="0-based index of the card in the set")
    difficulty: str = Field(..., description="Rating: 'again', 'hard', 'good' or 'easy'")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 1,
                "card_index": 0,
                "difficulty": Difficulty.GOOD.value
            }
        }


class ReviewResponse(BaseModel):
    """New schedule of the reviewed card."""
    message: str = "Review recorded"
    next_review_date: datetime
    interval: int
    ease_factor: float
    times_reviewed: int


class SetStatsResponse(BaseModel):
    """Review statistics for one set."""
    total_cards: int
    due_today: int
    avg_reviews: float
    new_cards: int
    learning_cards: int


class DeleteSetResponse(BaseModel):
    """Response from flashcard set deletion."""
    message: str
    deleted_reviews: int


class FlashcardProgressResponse(BaseModel):
    """Progress buckets across all of a user's cards."""
    total: int
    new: int
    learning: int
    mastered: int
    reviewed: int


class ReviewActivityData(BaseModel):
    """Cards reviewed on a single day."""
    date: str  # ISO format date string (YYYY-MM-DD)
    count: int


class ReviewActivityResponse(BaseModel):
    """Cards reviewed per day."""
    activity: List[ReviewActivityData]
