"""
Category and Question tables.
"""

from __future__ import annotations

import json

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from api.database import Base


class CategoryRecord(Base):
    """A named question bank."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(default=0, nullable=False)


class QuestionRecord(Base):
    """
    Parsed question. Options keep their original label prefix ("A. ...").
    """

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    # No FK: restored backups may carry questions of a removed category.
    category_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    position: Mapped[int] = mapped_column(default=0, nullable=False)
    question_type: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    options_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    explanation: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def options(self) -> list[str]:
        """Parse options from JSON."""
        if not self.options_json:
            return []
        try:
            return json.loads(self.options_json)
        except (json.JSONDecodeError, TypeError):
            return []

    @options.setter
    def options(self, value: list[str] | None) -> None:
        """Serialize options to JSON."""
        self.options_json = json.dumps(value, ensure_ascii=False) if value else None


class StorageMeta(Base):
    """Key/value flags about the store itself, never part of a backup."""

    __tablename__ = "storage_meta"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
