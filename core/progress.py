"""Resumable random sampling: each category serves every question once
before any repeats, across any number of random exams.

A question counts as served only after the exam that contained it is
submitted; drawing a batch does not consume anything.
"""
from __future__ import annotations

import logging
import random
from typing import Iterable

from core.context import QuizContext
from core.errors import NoQuestionsError, ProgressExhaustedError
from models import Question, QuestionType

log = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 30


class ProgressTracker:
    def __init__(
        self,
        context: QuizContext,
        batch_size: int = DEFAULT_BATCH_SIZE,
        rng: random.Random | None = None,
    ):
        self.context = context
        self.batch_size = batch_size
        self.rng = rng or random.Random()

    def served(self, category_id: str) -> set[str]:
        return self.context.random_progress.get(category_id, set())

    def pool(
        self, category_id: str, type_filter: QuestionType | None = None
    ) -> list[Question]:
        return self.context.questions_in_category(category_id, type_filter)

    def available(
        self, category_id: str, type_filter: QuestionType | None = None
    ) -> list[Question]:
        served = self.served(category_id)
        return [q for q in self.pool(category_id, type_filter) if q.id not in served]

    def draw_batch(
        self, category_id: str, type_filter: QuestionType | None = None
    ) -> list[Question]:
        """Draw up to ``batch_size`` unserved questions, uniformly at random.

        Raises:
            NoQuestionsError: the category has no questions of this type.
            ProgressExhaustedError: every question in the pool was served.
        """
        pool = self.pool(category_id, type_filter)
        if not pool:
            raise NoQuestionsError("该分类下没有此类型的题目")
        available = self.available(category_id, type_filter)
        if not available:
            raise ProgressExhaustedError()
        count = min(self.batch_size, len(available))
        log.debug(
            "Random draw: category=%s type=%s available=%d take=%d",
            category_id,
            type_filter.value if type_filter else "all",
            len(available),
            count,
        )
        return self.rng.sample(available, count)

    def draw_library(self) -> list[Question]:
        """Whole-bank random batch; not tied to any category's progress."""
        questions = self.context.questions
        if not questions:
            raise NoQuestionsError()
        return self.rng.sample(questions, min(self.batch_size, len(questions)))

    def reset_progress(self, category_id: str) -> None:
        # Always category-wide, even when a single type ran out.
        self.context.random_progress[category_id] = set()
        log.info("Random progress reset: %s", category_id)

    def mark_served(self, category_id: str, question_ids: Iterable[str]) -> None:
        served = self.context.random_progress.setdefault(category_id, set())
        served.update(question_ids)

    def summary(self, category_id: str) -> dict[str, object]:
        questions = self.pool(category_id)
        served = self.served(category_id)
        done = sum(1 for q in questions if q.id in served)
        total = len(questions)
        type_counts = {t.value: 0 for t in QuestionType}
        for question in questions:
            type_counts[question.type.value] += 1
        return {
            "categoryId": category_id,
            "done": done,
            "total": total,
            "percent": round(done / total * 100) if total else 0,
            "remaining": sum(1 for q in questions if q.id not in served),
            "typeCounts": type_counts,
        }
