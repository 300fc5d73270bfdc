"""SQLAlchemy ORM models for the Recallio database."""

from backend.models.base import Base
from backend.models.learning_progress import LearningProgress
from backend.models.learning_session import LearningSession, SessionWord
from backend.models.user import User
from backend.models.word import Word

__all__ = ["Base", "LearningProgress", "LearningSession", "SessionWord", "User", "Word"]
