"""Owner of the question bank and the per-user tracking state."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable

from core.errors import (
    CategoryExistsError,
    CategoryNotFoundError,
    QuestionNotFoundError,
    QuizError,
)
from models import Category, ExamResult, Question, QuestionType

log = logging.getLogger(__name__)

DEFAULT_CATEGORY_ID = "default"
DEFAULT_CATEGORY_NAME = "演示题库"
UNKNOWN_CATEGORY_NAME = "未知分类"


@dataclass
class QuizContext:
    questions: list[Question] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    wrong_list: dict[str, int] = field(default_factory=dict)
    random_progress: dict[str, set[str]] = field(default_factory=dict)
    exam_history: list[ExamResult] = field(default_factory=list)
    # userState keys owned by other features (bookmarks, notes, theme, ...)
    extras: dict[str, Any] = field(default_factory=dict)

    # ---- categories ----
    def get_category(self, category_id: str) -> Category:
        for category in self.categories:
            if category.id == category_id:
                return category
        raise CategoryNotFoundError()

    def category_name(self, category_id: str) -> str:
        try:
            return self.get_category(category_id).name
        except CategoryNotFoundError:
            return UNKNOWN_CATEGORY_NAME

    def find_category_by_name(self, name: str) -> Category | None:
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def add_category(self, name: str, category_id: str | None = None) -> Category:
        category = Category(id=category_id or uuid.uuid4().hex, name=name)
        self.categories.append(category)
        log.info("Category created: %s (%s)", category.name, category.id)
        return category

    def resolve_import_category(
        self,
        new_name: str | None = None,
        existing_id: str | None = None,
        merge: bool = False,
    ) -> tuple[Category, bool]:
        """Pick the import target. Returns (category, created).

        Nothing is added here; the caller commits a created category only
        after the text parsed into at least one question.
        """
        if existing_id:
            return self.get_category(existing_id), False
        name = (new_name or "").strip()
        if not name:
            raise QuizError("请输入新分类名称")
        existing = self.find_category_by_name(name)
        if existing is not None:
            if not merge:
                raise CategoryExistsError(f'分类 "{name}" 已存在，是否合并到该分类？')
            return existing, False
        return Category(id=uuid.uuid4().hex, name=name), True

    def delete_category(self, category_id: str) -> int:
        """Delete a category with its questions and progress. Returns removed count."""
        self.get_category(category_id)
        removed_ids = {q.id for q in self.questions if q.category_id == category_id}
        self.questions = [q for q in self.questions if q.category_id != category_id]
        self.categories = [c for c in self.categories if c.id != category_id]
        self.random_progress.pop(category_id, None)
        for question_id in removed_ids:
            self.wrong_list.pop(question_id, None)
        log.info("Category deleted: %s, questions removed: %d", category_id, len(removed_ids))
        return len(removed_ids)

    # ---- questions ----
    def import_questions(self, questions: Iterable[Question]) -> int:
        added = list(questions)
        self.questions.extend(added)
        return len(added)

    def get_question(self, question_id: str) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise QuestionNotFoundError()

    def remove_question(self, question_id: str) -> Question:
        question = self.get_question(question_id)
        self.questions = [q for q in self.questions if q.id != question_id]
        self.wrong_list.pop(question_id, None)
        served = self.random_progress.get(question.category_id)
        if served is not None:
            served.discard(question_id)
        return question

    def questions_in_category(
        self,
        category_id: str | None,
        question_type: QuestionType | None = None,
    ) -> list[Question]:
        return [
            q
            for q in self.questions
            if (category_id is None or q.category_id == category_id)
            and (question_type is None or q.type == question_type)
        ]

    def available_types(self, questions: Iterable[Question]) -> list[QuestionType]:
        present = {q.type for q in questions}
        return [t for t in QuestionType if t in present]

    def questions_by_type(
        self, questions: Iterable[Question]
    ) -> dict[QuestionType, list[Question]]:
        """Group questions per type, in QuestionType order, skipping empty types."""
        groups: dict[QuestionType, list[Question]] = {t: [] for t in QuestionType}
        for question in questions:
            groups[question.type].append(question)
        return {t: items for t, items in groups.items() if items}

    def search(self, query: str, limit: int = 10) -> list[Question]:
        if not query:
            return []
        return [q for q in self.questions if query in q.content][:limit]

    def replace_all(self, other: "QuizContext") -> None:
        self.questions = other.questions
        self.categories = other.categories
        self.wrong_list = other.wrong_list
        self.random_progress = other.random_progress
        self.exam_history = other.exam_history
        self.extras = other.extras


def build_demo_context() -> QuizContext:
    """Starter bank shown on first launch."""
    context = QuizContext(categories=[Category(DEFAULT_CATEGORY_ID, DEFAULT_CATEGORY_NAME)])
    context.import_questions(
        [
            Question(
                id="1",
                content="《红楼梦》的作者是谁？",
                options=["A. 曹雪芹", "B. 罗贯中", "C. 施耐庵", "D. 吴承恩"],
                answer="A",
                type=QuestionType.SINGLE,
                category_id=DEFAULT_CATEGORY_ID,
            ),
            Question(
                id="2",
                content="光年是时间单位。",
                answer="错误",
                type=QuestionType.JUDGMENT,
                category_id=DEFAULT_CATEGORY_ID,
            ),
            Question(
                id="3",
                content="以下属于四大发明的有：",
                options=["A. 造纸术", "B. 指南针", "C. 蒸汽机", "D. 火药"],
                answer="ABD",
                type=QuestionType.MULTIPLE,
                category_id=DEFAULT_CATEGORY_ID,
            ),
            Question(
                id="4",
                content="One apple a day, keeps the doctor ____.",
                answer="away",
                type=QuestionType.FILL,
                category_id=DEFAULT_CATEGORY_ID,
            ),
        ]
    )
    return context
