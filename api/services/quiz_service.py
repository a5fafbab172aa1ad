"""Service layer for the question bank, sessions and tracking state.

One QuizService owns the in-memory context and at most one session. Every
public method runs under the service lock and persists the context after a
mutation.
"""
from __future__ import annotations

import logging
import random
import threading
from collections import Counter
from pathlib import Path
from typing import Callable, Iterable

from sqlalchemy.orm import sessionmaker

from api.database import session_scope
from api.services.state_service import load_or_seed, save_context
from core.context import QuizContext
from core.errors import (
    NoActiveSessionError,
    NoQuestionsError,
    ProgressExhaustedError,
    QuestionNotFoundError,
    UnrecognizedFormatError,
)
from core.mistakes import MistakeTracker
from core.progress import DEFAULT_BATCH_SIZE, ProgressTracker
from core.session_engine import QuizSession, TimerFactory
from models import TYPE_LABELS, Category, ExamResult, Question, QuestionType, SessionKind
from serialization import deserialize_snapshot, serialize_snapshot
from text_extract import QuestionTextExtractor, parse_text_to_questions

log = logging.getLogger(__name__)

Persist = Callable[[QuizContext], None]

ALL_QUESTIONS_TITLE = "全部题目"
SEARCH_TITLE = "搜索结果"
LIBRARY_EXAM_TITLE = "全真模拟"


def _no_persist(context: QuizContext) -> None:
    return None


class QuizService:
    def __init__(
        self,
        context: QuizContext,
        persist: Persist = _no_persist,
        batch_size: int = DEFAULT_BATCH_SIZE,
        rng: random.Random | None = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self.context = context
        self.session: QuizSession | None = None
        self._persist = persist
        self._rng = rng or random.Random()
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self.progress = ProgressTracker(context, batch_size=batch_size, rng=self._rng)
        self.mistakes = MistakeTracker(context)

    @classmethod
    def from_storage(
        cls,
        factory: sessionmaker,
        seed_demo: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> "QuizService":
        """Load the stored context and persist every later change through ``factory``."""
        with session_scope(factory) as db:
            context = load_or_seed(db, seed_demo)

        def persist(ctx: QuizContext) -> None:
            with session_scope(factory) as db:
                save_context(db, ctx)

        log.info(
            "Quiz service ready: categories=%d questions=%d",
            len(context.categories),
            len(context.questions),
        )
        return cls(context, persist=persist, batch_size=batch_size)

    def _save(self) -> None:
        self._persist(self.context)

    # ---- categories ----
    def list_categories(self) -> list[tuple[Category, int]]:
        with self._lock:
            counts = Counter(q.category_id for q in self.context.questions)
            return [(c, counts.get(c.id, 0)) for c in self.context.categories]

    def delete_category(self, category_id: str) -> int:
        with self._lock:
            removed = self.context.delete_category(category_id)
            self._save()
            return removed

    def type_groups(self, category_id: str | None = None) -> dict[QuestionType, int]:
        """Question count per type present, for grouped study and exam sessions."""
        with self._lock:
            if category_id is not None:
                self.context.get_category(category_id)
            questions = self.context.questions_in_category(category_id)
            groups = self.context.questions_by_type(questions)
            return {t: len(items) for t, items in groups.items()}

    # ---- questions ----
    def list_questions(
        self,
        category_id: str | None = None,
        question_type: QuestionType | None = None,
        query: str | None = None,
    ) -> list[Question]:
        with self._lock:
            if query:
                return [
                    q
                    for q in self.context.search(query)
                    if (category_id is None or q.category_id == category_id)
                    and (question_type is None or q.type == question_type)
                ]
            return self.context.questions_in_category(category_id, question_type)

    def remove_question(self, question_id: str) -> Question:
        with self._lock:
            question = self.context.remove_question(question_id)
            self._save()
            log.info("Question removed: %s", question_id)
            return question

    def _commit_import(
        self, category: Category, created: bool, questions: list[Question]
    ) -> dict[str, object]:
        if not questions:
            raise UnrecognizedFormatError()
        if created:
            self.context.add_category(category.name, category_id=category.id)
        self.context.import_questions(questions)
        self._save()
        counts = Counter(q.type.value for q in questions)
        log.info(
            "Imported %d questions into %s (%s)", len(questions), category.name, category.id
        )
        return {
            "category": category,
            "created": created,
            "imported": len(questions),
            "questions": questions,
            "typeCounts": {t.value: counts.get(t.value, 0) for t in QuestionType},
        }

    def import_text(
        self,
        text: str,
        category_name: str | None = None,
        category_id: str | None = None,
        merge: bool = False,
    ) -> dict[str, object]:
        """Parse pasted text into a new or existing category.

        Raises:
            CategoryExistsError: the new name is taken and ``merge`` is False.
            UnrecognizedFormatError: no question could be parsed.
        """
        with self._lock:
            category, created = self.context.resolve_import_category(
                category_name, category_id, merge
            )
            questions = parse_text_to_questions(text, category.id)
            return self._commit_import(category, created, questions)

    def import_file(
        self,
        file_path: Path,
        category_name: str | None = None,
        category_id: str | None = None,
        merge: bool = False,
    ) -> dict[str, object]:
        """Same as import_text for a .txt/.md/.docx file; adds extractor logs."""
        with self._lock:
            category, created = self.context.resolve_import_category(
                category_name, category_id, merge
            )
            extractor = QuestionTextExtractor(file_path, category.id)
            questions = extractor.extract()
            result = self._commit_import(category, created, questions)
            result["logs"] = extractor.logs
            return result

    # ---- sessions ----
    def _open(
        self,
        questions: list[Question],
        title: str,
        kind: SessionKind,
        category_id: str | None = None,
    ) -> QuizSession:
        session = QuizSession.start(
            self.context,
            questions,
            title,
            kind,
            category_id,
            rng=self._rng,
            timer_factory=self._timer_factory,
        )
        if self.session is not None:
            self.session.discard(confirmed=True)
        self.session = session
        return session

    def _select(
        self,
        category_id: str | None,
        question_type: QuestionType | None,
        question_ids: Iterable[str] | None,
        query: str | None = None,
    ) -> list[Question]:
        if query:
            return [q for q in self.context.questions if query in q.content]
        if question_ids is not None:
            return [self.context.get_question(question_id) for question_id in question_ids]
        if category_id is not None:
            self.context.get_category(category_id)
        return self.context.questions_in_category(category_id, question_type)

    def _title(
        self,
        category_id: str | None,
        question_type: QuestionType | None,
        title: str | None,
    ) -> str:
        if title:
            return title
        base = self.context.category_name(category_id) if category_id else ALL_QUESTIONS_TITLE
        if question_type is not None:
            return f"{base} - {TYPE_LABELS[question_type]}"
        return base

    def start_study(
        self,
        category_id: str | None = None,
        question_type: QuestionType | None = None,
        question_ids: Iterable[str] | None = None,
        title: str | None = None,
        query: str | None = None,
    ) -> QuizSession:
        """Study a category, a type group, hand-picked ids or every search hit."""
        with self._lock:
            questions = self._select(category_id, question_type, question_ids, query)
            if query and not title:
                title = SEARCH_TITLE
            return self._open(
                questions, self._title(category_id, question_type, title), SessionKind.STUDY
            )

    def start_sequential(
        self,
        category_id: str | None = None,
        question_type: QuestionType | None = None,
        question_ids: Iterable[str] | None = None,
        title: str | None = None,
    ) -> QuizSession:
        with self._lock:
            questions = self._select(category_id, question_type, question_ids)
            return self._open(
                questions,
                self._title(category_id, question_type, title),
                SessionKind.SEQUENTIAL_EXAM,
            )

    def start_random(
        self,
        category_id: str,
        question_type: QuestionType | None = None,
        reset_progress: bool = False,
    ) -> QuizSession:
        """Draw the next random batch of a category.

        When every question of the pool was served this raises
        ProgressExhaustedError, unless ``reset_progress`` is set: then the
        whole category starts over and a fresh batch is drawn.
        """
        with self._lock:
            name = self.context.get_category(category_id).name
            try:
                remaining = len(self.progress.available(category_id, question_type))
                batch = self.progress.draw_batch(category_id, question_type)
                title = f"{name} - 随机模考 (剩余{remaining}题)"
            except ProgressExhaustedError:
                if not reset_progress:
                    raise
                self.progress.reset_progress(category_id)
                self._save()
                batch = self.progress.draw_batch(category_id, question_type)
                title = f"{name} - 随机模考"
            return self._open(batch, title, SessionKind.RANDOM_EXAM, category_id)

    def start_library_random(self) -> QuizSession:
        with self._lock:
            batch = self.progress.draw_library()
            return self._open(batch, LIBRARY_EXAM_TITLE, SessionKind.RANDOM_EXAM)

    def start_wrong(self, category_id: str | None = None) -> QuizSession:
        with self._lock:
            if category_id is not None:
                title = f"错题本 - {self.context.get_category(category_id).name}"
            else:
                title = "错题本 (全部)"
            questions = self.mistakes.wrong_questions(category_id)
            if not questions:
                raise NoQuestionsError("错题本为空")
            return self._open(questions, title, SessionKind.STUDY)

    def current_session(self) -> QuizSession:
        with self._lock:
            return self._current()

    def _current(self) -> QuizSession:
        if self.session is None:
            raise NoActiveSessionError()
        return self.session

    def answer(self, value: str, question_id: str | None = None) -> QuizSession:
        with self._lock:
            session = self._current()
            session.record_answer(question_id or session.current.id, value)
            return session

    def reveal(self) -> QuizSession:
        with self._lock:
            session = self._current()
            session.reveal()
            return session

    def advance(self, delay_ms: int = 0) -> QuizSession:
        with self._lock:
            session = self._current()
            session.advance(delay_ms)
            return session

    def retreat(self) -> QuizSession:
        with self._lock:
            session = self._current()
            session.retreat()
            return session

    def submit(self) -> QuizSession:
        with self._lock:
            session = self._current()
            already = session.result is not None
            session.submit()
            if not already:
                self._save()
            return session

    def discard(self, confirmed: bool = False) -> None:
        with self._lock:
            session = self._current()
            session.discard(confirmed)
            self.session = None

    # ---- tracking ----
    def wrong_overview(self) -> dict[str, object]:
        with self._lock:
            return {
                "total": len(self.mistakes.wrong_questions()),
                "categories": self.mistakes.stats_by_category(),
            }

    def wrong_questions(self, category_id: str | None = None) -> list[Question]:
        with self._lock:
            return self.mistakes.wrong_questions(category_id)

    def remove_wrong(self, question_id: str) -> None:
        with self._lock:
            if not self.mistakes.remove(question_id):
                raise QuestionNotFoundError("该题不在错题本中")
            self._save()

    def clear_wrong_category(
        self, category_id: str, question_type: QuestionType | None = None
    ) -> int:
        with self._lock:
            self.context.get_category(category_id)
            removed = self.mistakes.clear_category(category_id, question_type)
            self._save()
            log.info(
                "Wrong list cleared: category=%s type=%s removed=%d",
                category_id,
                question_type.value if question_type else "all",
                removed,
            )
            return removed

    def progress_summary(self, category_id: str) -> dict[str, object]:
        with self._lock:
            summary = self.progress.summary(category_id)
            summary["name"] = self.context.get_category(category_id).name
            return summary

    def reset_progress(self, category_id: str) -> dict[str, object]:
        with self._lock:
            self.context.get_category(category_id)
            self.progress.reset_progress(category_id)
            self._save()
            return self.progress.summary(category_id)

    def history(self) -> list[ExamResult]:
        with self._lock:
            return list(self.context.exam_history)

    # ---- backup ----
    def export_snapshot(self) -> dict[str, object]:
        with self._lock:
            return serialize_snapshot(self.context)

    def restore_snapshot(self, payload: object) -> None:
        """Replace everything with a backup document; the session is dropped."""
        with self._lock:
            restored = deserialize_snapshot(payload)
            self._persist(restored)
            if self.session is not None:
                self.session.discard(confirmed=True)
                self.session = None
            self.context.replace_all(restored)
            log.info(
                "Snapshot restored: categories=%d questions=%d",
                len(self.context.categories),
                len(self.context.questions),
            )
