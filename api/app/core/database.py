from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_db_engine(db_url: str):
    """
    Build an engine for the given URL.

    SQLite (local runs and tests) shares one connection across threads;
    every other backend gets a pre-pinged connection pool.
    """
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


db_url = settings.sqlalchemy_database_url
logger.info(f"Connecting to database: {db_url[:20]}...")  # Log partial URL for debugging

engine = create_db_engine(db_url)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def init_db():
    """Initialize database tables."""
    SQLModel.metadata.create_all(engine)
