"""Database connection and session management."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

load_dotenv()

logger = logging.getLogger(__name__)

# Database URL from environment or default
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/promptpulse.db")

# Ensure data directory exists
data_dir = Path("./data")
data_dir.mkdir(exist_ok=True)

# Create engine
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {},
    echo=False,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class PersistenceError(Exception):
    """A single record could not be written or updated."""

    def __init__(self, record: str, cause: Exception):
        super().__init__(f"Failed to persist {record}: {cause}")
        self.record = record
        self.cause = cause


def get_db() -> Session:
    """Get database session. Use as context manager or dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database tables."""
    from db.models import Base

    Base.metadata.create_all(bind=bind or engine)
    logger.info(f"Database initialized at: {DATABASE_URL if bind is None else bind.url}")
