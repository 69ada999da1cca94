"""
Models package.
"""
# Import enums first
from app.models.enums import Difficulty, CardProgressBucket

# Import all models
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
