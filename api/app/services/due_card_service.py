"""
Due-card query: which cards of a set should a user review right now.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlmodel import Session, select

from app.models.models import FlashcardReview
from app.services.card_store_service import get_owned_flashcard_set
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def get_due_cards(
    session: Session,
    user_id: int,
    flashcard_set_id: int,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    List the cards of a set whose next_review_date has passed.

    Read-only. Cards come back most-overdue first (ties by card index),
    each joined with its front/back content. An empty list means the
    user is caught up.

    Args:
        session: Database session
        user_id: Reviewing user (must own the set's document)
        flashcard_set_id: Flashcard set ID
        now: Comparison time; defaults to the service UTC clock

    Returns:
        Dict with due_cards, total_due and total_cards
    """
    flashcard_set = get_owned_flashcard_set(session, flashcard_set_id, user_id)

    if now is None:
        now = utcnow()

    reviews = session.exec(
        select(FlashcardReview)
        .where(
            FlashcardReview.user_id == user_id,
            FlashcardReview.flashcard_set_id == flashcard_set_id,
            FlashcardReview.next_review_date <= now
        )
        .order_by(FlashcardReview.next_review_date, FlashcardReview.card_index)  # type: ignore
    ).all()

    cards = flashcard_set.cards or []
    due_cards: List[Dict[str, Any]] = []
    for review in reviews:
        if review.card_index >= len(cards):
            logger.warning(
                f"Review {review.id} points at card {review.card_index} but set "
                f"{flashcard_set_id} only has {len(cards)} cards, skipping"
            )
            continue
        card = cards[review.card_index]
        due_cards.append({
            'front': card.get('front', ''),
            'back': card.get('back', ''),
            'card_index': review.card_index,
            'review_id': review.id,
            'times_reviewed': review.times_reviewed,
        })

    logger.debug(f"User {user_id} has {len(due_cards)} due card(s) in set {flashcard_set_id}")

    return {
        'due_cards': due_cards,
        'total_due': len(due_cards),
        'total_cards': len(cards),
    }
