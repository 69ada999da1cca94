"""
Review session orchestration: fetch due cards, present them one at a time,
record ratings and report the set's stats at the end.

The session only holds the queue loaded at start(); all scheduling state
stays in the database.

This is the in-process driver for a whole study session, for callers that
hold a database session directly (maintenance scripts, background jobs).
HTTP clients run the same loop themselves through the /due and /review
endpoints, one request per step.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union
from sqlmodel import Session

from app.core.exceptions import InvalidInputError
from app.models.enums import Difficulty
from app.services.card_store_service import aggregate_stats
from app.services.due_card_service import get_due_cards
from app.services.srs_service import submit_review
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """Result of rating one card in a session."""
    card_index: int
    difficulty: Difficulty
    interval: int
    next_review_date: datetime


@dataclass
class ReviewSession:
    """Walks a user through the due cards of one flashcard set."""
    session: Session
    user_id: int
    flashcard_set_id: int
    clock: Callable[[], datetime] = utcnow
    queue: List[Dict[str, Any]] = field(default_factory=list)
    position: int = 0
    outcomes: List[ReviewOutcome] = field(default_factory=list)

    def start(self) -> int:
        """Load the due cards. Returns how many are queued."""
        due = get_due_cards(self.session, self.user_id, self.flashcard_set_id, now=self.clock())
        self.queue = due['due_cards']
        self.position = 0
        self.outcomes = []
        logger.info(
            f"Review session started for user {self.user_id}, set {self.flashcard_set_id}: "
            f"{len(self.queue)} of {due['total_cards']} card(s) due"
        )
        return len(self.queue)

    @property
    def current_card(self) -> Optional[Dict[str, Any]]:
        if self.position < len(self.queue):
            return self.queue[self.position]
        return None

    @property
    def remaining(self) -> int:
        return len(self.queue) - self.position

    @property
    def is_complete(self) -> bool:
        return self.position >= len(self.queue)

    def submit(self, difficulty: Union[str, Difficulty]) -> ReviewOutcome:
        """Rate the current card and advance to the next one."""
        card = self.current_card
        if card is None:
            raise InvalidInputError("No card left to review in this session")

        review = submit_review(
            self.session,
            self.user_id,
            self.flashcard_set_id,
            card['card_index'],
            difficulty,
            clock=self.clock,
        )
        outcome = ReviewOutcome(
            card_index=card['card_index'],
            difficulty=Difficulty(difficulty),
            interval=review.interval,
            next_review_date=review.next_review_date,
        )
        self.outcomes.append(outcome)
        self.position += 1
        return outcome

    def finish(self) -> Dict[str, Any]:
        """Re-query the set's stats after the session."""
        stats = aggregate_stats(self.session, self.user_id, self.flashcard_set_id, now=self.clock())
        logger.info(
            f"Review session finished for user {self.user_id}, set {self.flashcard_set_id}: "
            f"{len(self.outcomes)} card(s) reviewed, {stats['due_today']} still due"
        )
        return stats
