from pydantic_settings import BaseSettings
import os
from pathlib import Path

# Try to load .env file explicitly before creating Settings
try:
    from dotenv import load_dotenv
    import logging
    _logger = logging.getLogger(__name__)

    # Look for .env in api directory (parent of app directory)
    api_dir = Path(__file__).parent.parent.parent
    env_path = api_dir / ".env"

    if env_path.exists():
        load_dotenv(env_path, override=False)
        _logger.info(f"Loaded .env file from: {env_path}")
    else:
        # Fallback to current directory
        current_env = Path(".env")
        if current_env.exists():
            load_dotenv(current_env, override=False)
            _logger.info(f"Loaded .env file from: {current_env.absolute()}")
        else:
            _logger.debug(f".env file not found at {env_path} or {current_env.absolute()}")
except ImportError:
    # dotenv not installed, will rely on environment variables
    import logging
    _logger = logging.getLogger(__name__)
    _logger.warning("python-dotenv not installed. Install it with: pip install python-dotenv")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = ""
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # API
    api_v1_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["*"]

    # Reporting: cards reviewed at least this many times count as mastered
    mastered_review_threshold: int = 5

    # Upper bound for the review activity window, in days
    activity_max_days: int = 90

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        # Hosting providers expose DATABASE_URL uppercase
        if not kwargs.get("database_url"):
            kwargs["database_url"] = os.getenv("DATABASE_URL", "")
        super().__init__(**kwargs)

    @property
    def sqlalchemy_database_url(self) -> str:
        """Database URL normalized for SQLAlchemy (postgresql:// rather than postgres://)."""
        if self.database_url.startswith("postgres://"):
            return self.database_url.replace("postgres://", "postgresql://", 1)
        return self.database_url


# Create settings instance
settings = Settings()

# Validate required DATABASE_URL
if not settings.database_url:
    raise ValueError("DATABASE_URL environment variable is required")
