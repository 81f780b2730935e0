"""Database layer for PromptPulse."""

from db.database import PersistenceError, SessionLocal, engine, get_db, init_db
from db.models import (
    Base,
    ClusterModel,
    NotificationModel,
    PostModel,
    ProcessingJobModel,
    PromptModel,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
    "PersistenceError",
    "Base",
    "PostModel",
    "ClusterModel",
    "PromptModel",
    "NotificationModel",
    "ProcessingJobModel",
]
