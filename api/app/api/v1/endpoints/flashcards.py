"""
Flashcard set and review endpoints.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
import logging

from app.core.database import get_session
from app.core.exceptions import AuthorizationError
from app.models.models import Document, User
from app.schemas.flashcard import (
    CardContent,
    DeleteSetResponse,
    DueCard,
    DueCardsResponse,
    FlashcardSetCreateRequest,
    FlashcardSetResponse,
    InitializeSetRequest,
    InitializeSetResponse,
    ReviewRequest,
    ReviewResponse,
    SetStatsResponse,
)
from app.services.card_store_service import (
    aggregate_stats,
    create_flashcard_set,
    delete_flashcard_set,
    get_owned_flashcard_set,
    initialize_review_states,
)
from app.services.due_card_service import get_due_cards
from app.services.srs_service import submit_review

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flashcards", tags=["flashcards"])


def _get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found"
        )
    return user


@router.post("/sets", response_model=FlashcardSetResponse, status_code=status.HTTP_201_CREATED)
async def create_set(
    request: FlashcardSetCreateRequest,
    session: Session = Depends(get_session)
):
    """
    Store a generated flashcard set and seed the user's review states.

    Called by the generation flow once the LLM has produced the cards.
    Every card starts immediately due with interval 1 and ease factor 2.5.
    """
    _get_user_or_404(session, request.user_id)

    document = session.get(Document, request.document_id)
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document with id {request.document_id} not found"
        )
    if document.user_id != request.user_id:
        raise AuthorizationError(f"Access denied to document {request.document_id}")

    flashcard_set = create_flashcard_set(
        session,
        request.document_id,
        [card.model_dump() for card in request.cards],
        title=request.title
    )
    initialized_count = initialize_review_states(
        session, flashcard_set.id, request.user_id, flashcard_set.card_count
    )

    return FlashcardSetResponse(
        id=flashcard_set.id,
        document_id=flashcard_set.document_id,
        title=flashcard_set.title,
        cards=[CardContent(**card) for card in flashcard_set.cards],
        created_at=flashcard_set.created_at,
        initialized_count=initialized_count,
    )


@router.get("/sets/{set_id}", response_model=FlashcardSetResponse)
async def get_set(
    set_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    """Get a flashcard set with its cards."""
    _get_user_or_404(session, user_id)
    flashcard_set = get_owned_flashcard_set(session, set_id, user_id)
    return FlashcardSetResponse(
        id=flashcard_set.id,
        document_id=flashcard_set.document_id,
        title=flashcard_set.title,
        cards=[CardContent(**card) for card in flashcard_set.cards],
        created_at=flashcard_set.created_at,
    )


@router.post("/sets/{set_id}/initialize", response_model=InitializeSetResponse)
async def initialize_set(
    set_id: int,
    request: InitializeSetRequest,
    session: Session = Depends(get_session)
):
    """
    Seed review states for every card of a set.

    Idempotent: indices that already have a review state keep their progress.
    """
    _get_user_or_404(session, request.user_id)
    flashcard_set = get_owned_flashcard_set(session, set_id, request.user_id)

    created_count = initialize_review_states(session, set_id, request.user_id, request.card_count)

    return InitializeSetResponse(created_count=created_count, total_cards=flashcard_set.card_count)


@router.get("/sets/{set_id}/due", response_model=DueCardsResponse)
async def get_due(
    set_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    """
    Get the cards of a set that are due for review, most overdue first.

    Due-ness is evaluated against the server clock.
    """
    _get_user_or_404(session, user_id)
    due = get_due_cards(session, user_id, set_id)
    return DueCardsResponse(
        due_cards=[DueCard(**card) for card in due['due_cards']],
        total_due=due['total_due'],
        total_cards=due['total_cards'],
    )


@router.post("/sets/{set_id}/review", response_model=ReviewResponse)
async def review_card(
    set_id: int,
    request: ReviewRequest,
    session: Session = Depends(get_session)
):
    """
    Record a review rating (again, hard, good, easy) and reschedule the card.
    """
    _get_user_or_404(session, request.user_id)
    get_owned_flashcard_set(session, set_id, request.user_id)

    review = submit_review(
        session,
        request.user_id,
        set_id,
        request.card_index,
        request.difficulty
    )

    return ReviewResponse(
        next_review_date=review.next_review_date,
        interval=review.interval,
        ease_factor=review.ease_factor,
        times_reviewed=review.times_reviewed,
    )


@router.get("/sets/{set_id}/stats", response_model=SetStatsResponse)
async def get_set_stats(
    set_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    """Get review statistics for a set."""
    _get_user_or_404(session, user_id)
    get_owned_flashcard_set(session, set_id, user_id)
    return SetStatsResponse(**aggregate_stats(session, user_id, set_id))


@router.delete("/sets/{set_id}", response_model=DeleteSetResponse)
async def delete_set(
    set_id: int,
    user_id: int,
    session: Session = Depends(get_session)
):
    """Delete a flashcard set and all review states attached to it."""
    _get_user_or_404(session, user_id)
    get_owned_flashcard_set(session, set_id, user_id)
    deleted_reviews = delete_flashcard_set(session, set_id)
    return DeleteSetResponse(
        message=f"Flashcard set {set_id} deleted",
        deleted_reviews=deleted_reviews,
    )
