"""
SRS (Spaced Repetition System) service implementing a simplified SM-2 scheduler.

Each card carries an interval (whole days) and an ease factor. A review
rating moves both:

    again: interval 1,                            ease - 0.20 (min 1.3)
    hard:  interval max(1, round(interval * 1.2)), ease - 0.15 (min 1.3)
    good:  interval round(interval * ease),        ease unchanged
    easy:  interval round(interval * ease * 1.3),  ease + 0.15 (no cap)

round() is round-half-away-from-zero, computed on decimals so that the
same inputs give the same interval on every platform.
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, NamedTuple, Union
from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from app.core.exceptions import ConcurrencyConflictError, InvalidInputError, StorageError
from app.models.enums import Difficulty
from app.models.flashcard_review import FlashcardReview, MIN_EASE_FACTOR, MIN_INTERVAL
from app.services.card_store_service import (
    get_flashcard_set,
    get_review_state,
    update_review_state,
    validate_card_index,
)
from app.utils.time_utils import add_days, utcnow

logger = logging.getLogger(__name__)


AGAIN_EASE_PENALTY = Decimal("0.2")
HARD_EASE_PENALTY = Decimal("0.15")
EASY_EASE_BONUS = Decimal("0.15")
HARD_INTERVAL_FACTOR = Decimal("1.2")
EASY_INTERVAL_BONUS = Decimal("1.3")

# Ease factors are kept at 4 decimal places so repeated +/- steps don't drift
EASE_PRECISION = Decimal("0.0001")

# First attempt plus one retry when a concurrent review raced us
REVIEW_WRITE_ATTEMPTS = 2


class ScheduleResult(NamedTuple):
    """Outcome of scheduling one review."""
    interval: int
    ease_factor: float


def round_half_away_from_zero(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_difficulty(difficulty: Union[str, Difficulty]) -> Difficulty:
    """
    Convert a rating to Difficulty.

    Raises:
        InvalidInputError: If the value is not again, hard, good or easy
    """
    if isinstance(difficulty, Difficulty):
        return difficulty
    try:
        return Difficulty(difficulty)
    except ValueError:
        allowed = ", ".join(d.value for d in Difficulty)
        raise InvalidInputError(f"Invalid difficulty '{difficulty}'. Must be one of: {allowed}")


def _to_decimal(value: Union[int, float]) -> Decimal:
    # str() gives the shortest repr, so 2.65 becomes Decimal("2.65") and not its binary expansion
    return Decimal(str(value))


def calculate_next_schedule(
    interval: int,
    ease_factor: float,
    difficulty: Union[str, Difficulty]
) -> ScheduleResult:
    """
    Compute the next interval and ease factor for a review rating.

    Pure function: no I/O, no clock.

    Args:
        interval: Current interval in days (>= 1)
        ease_factor: Current ease factor (>= 1.3)
        difficulty: 'again', 'hard', 'good' or 'easy'

    Returns:
        ScheduleResult with the new interval and ease factor
    """
    rating = parse_difficulty(difficulty)
    current_interval = _to_decimal(interval)
    ease = _to_decimal(ease_factor)
    min_ease = _to_decimal(MIN_EASE_FACTOR)

    if rating is Difficulty.AGAIN:
        new_interval = 1
        new_ease = max(min_ease, ease - AGAIN_EASE_PENALTY)
    elif rating is Difficulty.HARD:
        new_interval = max(1, round_half_away_from_zero(current_interval * HARD_INTERVAL_FACTOR))
        new_ease = max(min_ease, ease - HARD_EASE_PENALTY)
    elif rating is Difficulty.GOOD:
        new_interval = round_half_away_from_zero(current_interval * ease)
        new_ease = ease
    else:
        new_interval = round_half_away_from_zero(current_interval * ease * EASY_INTERVAL_BONUS)
        new_ease = ease + EASY_EASE_BONUS

    # Stored states always satisfy interval >= 1; the floor only matters for corrupt input
    new_interval = max(MIN_INTERVAL, new_interval)
    new_ease = new_ease.quantize(EASE_PRECISION, rounding=ROUND_HALF_UP)

    return ScheduleResult(interval=new_interval, ease_factor=float(new_ease))


def calculate_next_review_date(interval: int, base_time: datetime = None) -> datetime:
    """
    Calculate when a card becomes due again.

    Args:
        interval: Interval in whole days
        base_time: Time of the review (defaults to now, UTC)

    Returns:
        base_time plus interval calendar days
    """
    if base_time is None:
        base_time = utcnow()
    return add_days(base_time, interval)


@retry(
    stop=stop_after_attempt(REVIEW_WRITE_ATTEMPTS),
    retry=retry_if_exception_type(ConcurrencyConflictError),
    reraise=True,
)
def _apply_review(
    session: Session,
    user_id: int,
    flashcard_set_id: int,
    card_index: int,
    rating: Difficulty,
    clock: Callable[[], datetime]
) -> FlashcardReview:
    review = get_review_state(session, user_id, flashcard_set_id, card_index)
    now = clock()
    schedule = calculate_next_schedule(review.interval, review.ease_factor, rating)
    next_review_date = calculate_next_review_date(schedule.interval, now)

    updated = update_review_state(
        session,
        review.id,
        expected_version=review.version,
        ease_factor=schedule.ease_factor,
        interval=schedule.interval,
        next_review_date=next_review_date,
        last_reviewed=now,
    )
    if not updated:
        session.rollback()
        logger.warning(
            f"Concurrent review of set {flashcard_set_id}, card {card_index} by user {user_id} "
            f"(version {review.version} changed)"
        )
        raise ConcurrencyConflictError(
            f"Card {card_index} of set {flashcard_set_id} was reviewed concurrently"
        )

    session.commit()
    session.refresh(review)
    return review


def submit_review(
    session: Session,
    user_id: int,
    flashcard_set_id: int,
    card_index: int,
    difficulty: Union[str, Difficulty],
    clock: Callable[[], datetime] = utcnow
) -> FlashcardReview:
    """
    Record a review rating and reschedule the card.

    The read-modify-write is guarded by the row version: if another review
    of the same card commits in between, the whole step is retried once on
    fresh state, then ConcurrencyConflictError is raised. On any error the
    stored row is left unchanged.

    Args:
        session: Database session
        user_id: Reviewing user
        flashcard_set_id: Set the card belongs to
        card_index: 0-based index of the card in the set
        difficulty: 'again', 'hard', 'good' or 'easy'
        clock: Source of the current UTC time

    Returns:
        The updated FlashcardReview

    Raises:
        InvalidInputError: Unknown difficulty or card index out of range
        NotFoundError: Set or review row does not exist
        ConcurrencyConflictError: Lost the race twice
        StorageError: Database failure (rolled back)
    """
    rating = parse_difficulty(difficulty)
    flashcard_set = get_flashcard_set(session, flashcard_set_id)
    validate_card_index(flashcard_set, card_index)

    try:
        review = _apply_review(session, user_id, flashcard_set_id, card_index, rating, clock)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Error recording review for user {user_id}, set {flashcard_set_id}, "
            f"card {card_index}: {str(e)}"
        )
        raise StorageError("Failed to record review") from e

    logger.info(
        f"Review recorded: user {user_id}, set {flashcard_set_id}, card {card_index}, "
        f"difficulty={rating.value}, interval={review.interval}, ease={review.ease_factor}, "
        f"next_review_date={review.next_review_date}"
    )
    return review
