"""
Models module - re-exports all table models.

Importing this module registers every table with SQLModel.metadata, which
init_db() and Alembic autogenerate rely on.
"""
from app.models.enums import Difficulty, CardProgressBucket
from app.models.user import User
from app.models.document import Document
from app.models.flashcard_set import FlashcardSet
from app.models.flashcard_review import FlashcardReview

__all__ = [
    'Difficulty',
    'CardProgressBucket',
    'User',
    'Document',
    'FlashcardSet',
    'FlashcardReview',
]
