"""
Flashcard statistics across all of a user's sets.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from sqlmodel import Session, select, func
from sqlalchemy import case

from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.models.models import CardProgressBucket, FlashcardReview
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def get_flashcard_progress(
    session: Session,
    user_id: int,
    mastered_threshold: Optional[int] = None
) -> Dict[str, int]:
    """
    Bucket every review row of a user by how often it has been reviewed.

    new: never reviewed; learning: reviewed fewer than mastered_threshold
    times; mastered: at least mastered_threshold times. These buckets are
    for reporting only and have no effect on scheduling.

    Returns:
        Dict with total, new, learning, mastered and reviewed counts
    """
    if mastered_threshold is None:
        mastered_threshold = settings.mastered_review_threshold

    times = FlashcardReview.times_reviewed
    row = session.exec(
        select(
            func.count(FlashcardReview.id).label('total'),
            func.count(case((times == 0, 1))).label('new_cards'),
            func.count(case(((times > 0) & (times < mastered_threshold), 1))).label('learning'),
            func.count(case((times >= mastered_threshold, 1))).label('mastered'),
        )
        .where(FlashcardReview.user_id == user_id)
    ).one()

    total = row.total or 0
    new_cards = row.new_cards or 0
    return {
        'total': total,
        CardProgressBucket.NEW.value: new_cards,
        CardProgressBucket.LEARNING.value: row.learning or 0,
        CardProgressBucket.MASTERED.value: row.mastered or 0,
        'reviewed': total - new_cards,
    }


def _to_date(value) -> date:
    # SQLite returns DATE() as 'YYYY-MM-DD' text, PostgreSQL as a date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def get_review_activity(
    session: Session,
    user_id: int,
    days: int = 7,
    now: Optional[datetime] = None
) -> List[Dict[str, object]]:
    """
    Count cards reviewed per day over the trailing window.

    A card counts once, on the day of its most recent review. Days without
    reviews are omitted.

    Args:
        session: Database session
        user_id: User ID
        days: Window length in days (1..activity_max_days)
        now: End of the window; defaults to the service UTC clock

    Returns:
        List of {"date": date, "count": int}, ascending by date
    """
    if days < 1 or days > settings.activity_max_days:
        raise InvalidInputError(f"days must be between 1 and {settings.activity_max_days}")

    if now is None:
        now = utcnow()
    since = now - timedelta(days=days)

    review_day = func.date(FlashcardReview.last_reviewed)
    rows = session.exec(
        select(
            review_day.label('day'),
            func.count(FlashcardReview.id).label('count')
        )
        .where(
            FlashcardReview.user_id == user_id,
            FlashcardReview.last_reviewed.isnot(None),  # type: ignore
            FlashcardReview.last_reviewed >= since
        )
        .group_by(review_day)
        .order_by(review_day)
    ).all()

    return [{'date': _to_date(row.day), 'count': row.count} for row in rows]
