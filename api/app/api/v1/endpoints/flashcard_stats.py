"""
Flashcard statistics endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session
import logging

from app.core.database import get_session
from app.models.models import User
from app.schemas.flashcard import (
    FlashcardProgressResponse,
    ReviewActivityData,
    ReviewActivityResponse,
)
from app.services.flashcard_stats_service import get_flashcard_progress, get_review_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flashcard-stats", tags=["flashcard-stats"])


@router.get("/progress", response_model=FlashcardProgressResponse)
async def get_progress(
    user_id: int,
    session: Session = Depends(get_session)
):
    """
    Get new / learning / mastered card counts across all of a user's sets.
    """
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found"
        )

    return FlashcardProgressResponse(**get_flashcard_progress(session, user_id))


@router.get("/activity", response_model=ReviewActivityResponse)
async def get_activity(
    user_id: int,
    days: int = Query(7, description="Number of trailing days to include"),
    session: Session = Depends(get_session)
):
    """
    Get the number of cards reviewed per day over the last `days` days.
    """
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found"
        )

    activity = get_review_activity(session, user_id, days=days)
    return ReviewActivityResponse(
        activity=[
            ReviewActivityData(date=item['date'].isoformat(), count=item['count'])
            for item in activity
        ]
    )
