import os
from datetime import datetime

import pytest

# Settings refuse to load without a database URL; tests run on in-memory SQLite
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('ENVIRONMENT', 'development')

from sqlmodel import SQLModel, Session  # noqa: E402

from app.core.database import create_db_engine  # noqa: E402
from app.models.models import Document, User  # noqa: E402
from app.services.card_store_service import (  # noqa: E402
    create_flashcard_set,
    initialize_review_states,
)

FIXED_NOW = datetime(2025, 3, 14, 9, 30, 0)


@pytest.fixture
def engine():
    engine = create_db_engine('sqlite://')
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def user(session):
    u = User(username='ada', email='ada@example.com')
    session.add(u)
    session.commit()
    session.refresh(u)
    return u


@pytest.fixture
def other_user(session):
    u = User(username='grace', email='grace@example.com')
    session.add(u)
    session.commit()
    session.refresh(u)
    return u


@pytest.fixture
def document(session, user):
    doc = Document(user_id=user.id, filename='biology.pdf')
    session.add(doc)
    session.commit()
    session.refresh(doc)
    return doc


def make_cards(count):
    return [{'front': f'Term {i}', 'back': f'Definition {i}'} for i in range(count)]


@pytest.fixture
def card_factory():
    return make_cards


@pytest.fixture
def seeded_set(session, user, document):
    """A 20-card set whose review states were initialized at FIXED_NOW."""
    flashcard_set = create_flashcard_set(session, document.id, make_cards(20), title='Cells')
    initialize_review_states(session, flashcard_set.id, user.id, 20, now=FIXED_NOW)
    return flashcard_set


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def client(engine):
    from fastapi.testclient import TestClient
    from app.core.database import get_session
    from app.main import app

    def override_get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
