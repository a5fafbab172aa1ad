"""FastAPI dependencies."""
from api.dependencies.quiz import get_quiz_service

__all__ = ["get_quiz_service"]
