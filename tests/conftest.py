"""Shared fixtures."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base
from processing.clustering import PreparedPost


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def make_post():
    """Build PreparedPost objects with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> PreparedPost:
        counter["n"] += 1
        features = {"subjects": [], "emotion": [], "style": [], "motion": [], "environment": []}
        features.update(overrides.pop("visual_features", {}))
        data = {
            "id": f"post-{counter['n']}",
            "media_type": "image",
            "caption": "",
            "visual_features": features,
            "engagement_velocity": 0.0,
            "platform": "reddit",
            "creator_id": f"creator-{counter['n']}",
        }
        data.update(overrides)
        return PreparedPost(**data)

    return _make
