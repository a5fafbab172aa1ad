"""
Per-user tracking tables: wrong-answer counters, random-exam progress,
exam history and opaque userState values owned by other features.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from api.database import Base


class WrongEntry(Base):
    """How many submitted exams got this question wrong."""

    __tablename__ = "wrong_entries"

    question_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    count: Mapped[int] = mapped_column(default=1, nullable=False)


class ServedQuestion(Base):
    """A question already served by a submitted random exam of a category."""

    __tablename__ = "served_questions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    category_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    question_id: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint("category_id", "question_id", name="uq_served_category_question"),
    )


class ExamResultRecord(Base):
    """Immutable result of a submitted exam."""

    __tablename__ = "exam_results"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    result_id: Mapped[str] = mapped_column(String(64), nullable=False)
    taken_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    score: Mapped[int] = mapped_column(default=0, nullable=False)
    total: Mapped[int] = mapped_column(default=0, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    position: Mapped[int] = mapped_column(default=0, nullable=False)


class UserStateExtra(Base):
    """userState key stored verbatim (bookmarks, notes, theme, ...)."""

    __tablename__ = "user_state_extras"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)

    @property
    def value(self) -> Any:
        try:
            return json.loads(self.value_json)
        except (json.JSONDecodeError, TypeError):
            return None

    @value.setter
    def value(self, value: Any) -> None:
        self.value_json = json.dumps(value, ensure_ascii=False)
