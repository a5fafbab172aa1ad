"""Session-related Pydantic models."""
from pydantic import BaseModel, Field

from models import QuestionType


class SessionStart(BaseModel):
    """Model for starting a study or sequential-exam session."""

    categoryId: str | None = None
    type: QuestionType | None = None
    questionIds: list[str] | None = None
    title: str | None = None
    query: str | None = None


class RandomSessionStart(BaseModel):
    """Model for starting a random exam drawn from a category."""

    categoryId: str = Field(..., min_length=1)
    type: QuestionType | None = None
    resetProgress: bool = False


class WrongSessionStart(BaseModel):
    """Model for studying the wrong-answer book."""

    categoryId: str | None = None


class AnswerPayload(BaseModel):
    """Model for answering the question at the cursor or a given question."""

    questionId: str | None = None
    value: str


class AdvancePayload(BaseModel):
    """Model for moving forward; ``delayMs`` debounces the step."""

    delayMs: int = Field(0, ge=0, le=10_000)
