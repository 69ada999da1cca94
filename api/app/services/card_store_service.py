"""
Card store service: persistence of flashcard sets and per-user review state.

Every function takes the database session explicitly; nothing here holds
a connection of its own.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Any
from sqlmodel import Session, select, func
from sqlalchemy import case, delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import (
    AuthorizationError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from app.models.models import Document, FlashcardReview, FlashcardSet, User
from app.utils.text_utils import normalize_card_text
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def get_flashcard_set(session: Session, flashcard_set_id: int) -> FlashcardSet:
    """Fetch a flashcard set or raise NotFoundError."""
    flashcard_set = session.get(FlashcardSet, flashcard_set_id)
    if not flashcard_set:
        raise NotFoundError(f"Flashcard set with id {flashcard_set_id} not found")
    return flashcard_set


def get_owned_flashcard_set(session: Session, flashcard_set_id: int, user_id: int) -> FlashcardSet:
    """
    Fetch a flashcard set and check that its document belongs to the user.

    Raises:
        NotFoundError: If the set does not exist
        AuthorizationError: If the set's document belongs to someone else
    """
    flashcard_set = get_flashcard_set(session, flashcard_set_id)
    document = session.get(Document, flashcard_set.document_id)
    if not document or document.user_id != user_id:
        raise AuthorizationError(f"Access denied to flashcard set {flashcard_set_id}")
    return flashcard_set


def validate_card_index(flashcard_set: FlashcardSet, card_index: int) -> None:
    """Raise InvalidInputError if card_index does not address a card in the set."""
    if card_index < 0 or card_index >= flashcard_set.card_count:
        raise InvalidInputError(
            f"Card index {card_index} is out of range for flashcard set {flashcard_set.id} "
            f"({flashcard_set.card_count} cards)"
        )


def create_flashcard_set(
    session: Session,
    document_id: int,
    cards: List[Dict[str, str]],
    title: Optional[str] = None
) -> FlashcardSet:
    """
    Persist a generated flashcard set for a document.

    Card text is trimmed; a card with an empty front or back is rejected, as
    is an empty set. The set is immutable after this call.

    Args:
        session: Database session
        document_id: Owning document
        cards: List of {"front": str, "back": str}
        title: Optional display title

    Returns:
        The committed FlashcardSet
    """
    document = session.get(Document, document_id)
    if not document:
        raise NotFoundError(f"Document with id {document_id} not found")

    if not cards:
        raise InvalidInputError("A flashcard set needs at least one card")

    normalized_cards = []
    for index, card in enumerate(cards):
        front = normalize_card_text(card.get("front"))
        back = normalize_card_text(card.get("back"))
        if not front or not back:
            raise InvalidInputError(f"Card {index} must have a non-empty front and back")
        normalized_cards.append({"front": front, "back": back})

    flashcard_set = FlashcardSet(document_id=document_id, title=title, cards=normalized_cards)
    try:
        session.add(flashcard_set)
        session.commit()
        session.refresh(flashcard_set)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to save flashcard set for document {document_id}: {str(e)}")
        raise StorageError("Failed to save flashcard set") from e

    logger.info(
        f"Created flashcard set {flashcard_set.id} for document {document_id} "
        f"with {len(normalized_cards)} cards"
    )
    return flashcard_set


def _existing_card_indices(session: Session, flashcard_set_id: int, user_id: int) -> set[int]:
    rows = session.exec(
        select(FlashcardReview.card_index).where(
            FlashcardReview.user_id == user_id,
            FlashcardReview.flashcard_set_id == flashcard_set_id
        )
    ).all()
    return set(rows)


def initialize_review_states(
    session: Session,
    flashcard_set_id: int,
    user_id: int,
    card_count: int,
    now: Optional[datetime] = None
) -> int:
    """
    Seed one review row per card index 0..card_count-1 for a user.

    Indices that already have a row are skipped, so calling this again
    never duplicates rows or resets progress. If a concurrent initializer
    wins the race on some index, the unique constraint violation is treated
    as "already exists" and the remaining indices are inserted one by one.

    Args:
        session: Database session
        flashcard_set_id: Set to seed
        user_id: Reviewing user
        card_count: Number of cards in the set (must match the set)
        now: Initial next_review_date (defaults to now, i.e. immediately due)

    Returns:
        Number of rows created by this call
    """
    if card_count < 0:
        raise InvalidInputError(f"card_count must be >= 0, got {card_count}")

    flashcard_set = get_flashcard_set(session, flashcard_set_id)
    if card_count != flashcard_set.card_count:
        raise InvalidInputError(
            f"card_count {card_count} does not match the {flashcard_set.card_count} cards "
            f"of flashcard set {flashcard_set_id}"
        )

    if not session.get(User, user_id):
        raise NotFoundError(f"User with id {user_id} not found")

    if now is None:
        now = utcnow()

    try:
        existing = _existing_card_indices(session, flashcard_set_id, user_id)
        missing = [index for index in range(card_count) if index not in existing]
        if not missing:
            logger.debug(
                f"Review states for set {flashcard_set_id}, user {user_id} already initialized"
            )
            return 0

        session.add_all([
            FlashcardReview(
                user_id=user_id,
                flashcard_set_id=flashcard_set_id,
                card_index=index,
                next_review_date=now,
            )
            for index in missing
        ])
        session.commit()
        created = len(missing)
    except IntegrityError:
        session.rollback()
        logger.warning(
            f"Concurrent initialization detected for set {flashcard_set_id}, user {user_id}; "
            f"inserting remaining review states individually"
        )
        created = _insert_missing_individually(session, flashcard_set_id, user_id, card_count, now)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to initialize review states for set {flashcard_set_id}: {str(e)}")
        raise StorageError("Failed to initialize review states") from e

    logger.info(
        f"Initialized {created} review state(s) for set {flashcard_set_id}, user {user_id} "
        f"({card_count - created} already present)"
    )
    return created


def _insert_missing_individually(
    session: Session,
    flashcard_set_id: int,
    user_id: int,
    card_count: int,
    now: datetime
) -> int:
    created = 0
    try:
        existing = _existing_card_indices(session, flashcard_set_id, user_id)
        for index in range(card_count):
            if index in existing:
                continue
            try:
                with session.begin_nested():
                    session.add(FlashcardReview(
                        user_id=user_id,
                        flashcard_set_id=flashcard_set_id,
                        card_index=index,
                        next_review_date=now,
                    ))
                created += 1
            except IntegrityError:
                logger.debug(f"Review state {flashcard_set_id}/{index} created concurrently")
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to initialize review states for set {flashcard_set_id}: {str(e)}")
        raise StorageError("Failed to initialize review states") from e
    return created


def get_review_state(
    session: Session,
    user_id: int,
    flashcard_set_id: int,
    card_index: int
) -> FlashcardReview:
    """
    Read the current review row, bypassing any stale copy in the session.

    Raises:
        NotFoundError: If the card was never initialized for this user
    """
    review = session.exec(
        select(FlashcardReview)
        .where(
            FlashcardReview.user_id == user_id,
            FlashcardReview.flashcard_set_id == flashcard_set_id,
            FlashcardReview.card_index == card_index
        )
        .execution_options(populate_existing=True)
    ).first()

    if not review:
        raise NotFoundError(
            f"Review record not found for user {user_id}, set {flashcard_set_id}, card {card_index}"
        )
    return review


def update_review_state(
    session: Session,
    review_id: int,
    expected_version: int,
    ease_factor: float,
    interval: int,
    next_review_date: datetime,
    last_reviewed: datetime
) -> bool:
    """
    Compare-and-swap update of one review row.

    The row is only written if its version still equals expected_version;
    times_reviewed and version are incremented in the same statement.
    The caller owns the transaction (commit/rollback).

    Returns:
        True if the row was updated, False if another writer got there first
    """
    result = session.exec(
        update(FlashcardReview)
        .where(
            FlashcardReview.id == review_id,
            FlashcardReview.version == expected_version
        )
        .values(
            ease_factor=ease_factor,
            interval=interval,
            next_review_date=next_review_date,
            last_reviewed=last_reviewed,
            times_reviewed=FlashcardReview.times_reviewed + 1,
            version=FlashcardReview.version + 1,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def aggregate_stats(
    session: Session,
    user_id: int,
    flashcard_set_id: int,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Summarize a user's review rows for one set in a single query.

    Returns:
        Dict with total_cards, due_today, avg_reviews, new_cards and
        learning_cards (cards reviewed at least once)
    """
    if now is None:
        now = utcnow()

    row = session.exec(
        select(
            func.count(FlashcardReview.id).label('total_cards'),
            func.count(case((FlashcardReview.next_review_date <= now, 1))).label('due_today'),
            func.avg(FlashcardReview.times_reviewed).label('avg_reviews'),
            func.count(case((FlashcardReview.times_reviewed == 0, 1))).label('new_cards'),
            func.count(case((FlashcardReview.times_reviewed > 0, 1))).label('learning_cards'),
        )
        .where(
            FlashcardReview.user_id == user_id,
            FlashcardReview.flashcard_set_id == flashcard_set_id
        )
    ).one()

    return {
        'total_cards': row.total_cards or 0,
        'due_today': row.due_today or 0,
        'avg_reviews': float(row.avg_reviews or 0),
        'new_cards': row.new_cards or 0,
        'learning_cards': row.learning_cards or 0,
    }


def delete_flashcard_set(session: Session, flashcard_set_id: int) -> int:
    """
    Delete a flashcard set and every review row that belongs to it.

    Review rows are removed first so the delete also works on databases
    that do not enforce ON DELETE CASCADE (SQLite without the pragma).

    Returns:
        Number of review rows deleted
    """
    get_flashcard_set(session, flashcard_set_id)
    try:
        result = session.exec(
            delete(FlashcardReview).where(FlashcardReview.flashcard_set_id == flashcard_set_id)
        )
        reviews_deleted = result.rowcount or 0
        session.exec(delete(FlashcardSet).where(FlashcardSet.id == flashcard_set_id))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to delete flashcard set {flashcard_set_id}: {str(e)}")
        raise StorageError("Failed to delete flashcard set") from e

    logger.info(f"Deleted flashcard set {flashcard_set_id} and {reviews_deleted} review state(s)")
    return reviews_deleted


def delete_document_flashcards(session: Session, document_id: int) -> Dict[str, int]:
    """
    Delete every flashcard set of a document together with their review rows.

    Called by the document layer before it removes the document itself.

    Returns:
        Dict with flashcard_sets_deleted and reviews_deleted counts
    """
    set_ids = session.exec(
        select(FlashcardSet.id).where(FlashcardSet.document_id == document_id)
    ).all()

    if not set_ids:
        return {'flashcard_sets_deleted': 0, 'reviews_deleted': 0}

    try:
        reviews_result = session.exec(
            delete(FlashcardReview).where(FlashcardReview.flashcard_set_id.in_(set_ids))  # type: ignore
        )
        sets_result = session.exec(
            delete(FlashcardSet).where(FlashcardSet.id.in_(set_ids))  # type: ignore
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to delete flashcards of document {document_id}: {str(e)}")
        raise StorageError("Failed to delete document flashcards") from e

    counts = {
        'flashcard_sets_deleted': sets_result.rowcount or 0,
        'reviews_deleted': reviews_result.rowcount or 0,
    }
    logger.info(f"Deleted flashcards of document {document_id}: {counts}")
    return counts
