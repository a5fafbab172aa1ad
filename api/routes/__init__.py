"""API route modules."""
from api.routes import categories, questions, sessions, snapshot, tracking

__all__ = ["categories", "questions", "sessions", "snapshot", "tracking"]
