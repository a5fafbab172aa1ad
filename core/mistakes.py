"""Wrong-answer book: per-question counters of failed exam attempts."""
from __future__ import annotations

from typing import Iterable

from core.context import QuizContext
from models import Question, QuestionType


class MistakeTracker:
    def __init__(self, context: QuizContext):
        self.context = context

    def record_wrong(self, question_ids: Iterable[str]) -> None:
        wrong_list = self.context.wrong_list
        for question_id in question_ids:
            wrong_list[question_id] = wrong_list.get(question_id, 0) + 1

    def count(self, question_id: str) -> int:
        return self.context.wrong_list.get(question_id, 0)

    def remove(self, question_id: str) -> bool:
        """Drop a question from the book ("mastered")."""
        return self.context.wrong_list.pop(question_id, None) is not None

    def clear_category(
        self, category_id: str, question_type: QuestionType | None = None
    ) -> int:
        removed = 0
        for question in self.context.questions_in_category(category_id, question_type):
            if self.remove(question.id):
                removed += 1
        return removed

    def wrong_questions(self, category_id: str | None = None) -> list[Question]:
        return [
            q
            for q in self.context.questions_in_category(category_id)
            if self.context.wrong_list.get(q.id)
        ]

    def stats_by_category(self) -> list[dict[str, object]]:
        wrong = self.wrong_questions()
        stats = []
        for category in self.context.categories:
            count = sum(1 for q in wrong if q.category_id == category.id)
            if count > 0:
                stats.append({"id": category.id, "name": category.name, "count": count})
        return stats
