"""Pydantic models."""
from api.models.questions import ImportRequest
from api.models.sessions import (
    AdvancePayload,
    AnswerPayload,
    RandomSessionStart,
    SessionStart,
    WrongSessionStart,
)

__all__ = [
    "AdvancePayload",
    "AnswerPayload",
    "ImportRequest",
    "RandomSessionStart",
    "SessionStart",
    "WrongSessionStart",
]
