"""Quiz session state machine.

A session runs over a private copy of the questions it was started with and
moves from ACTIVE to SUBMITTED (exams only) or DISCARDED. Submitting is the
only operation that touches the shared context: it feeds the wrong-answer
book, the random-progress sets and the exam history, exactly once.
"""
from __future__ import annotations

import copy
import logging
import random
import re
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable, Sequence

from core.context import QuizContext
from core.errors import (
    ConfirmationRequiredError,
    InvalidSessionOperationError,
    NoQuestionsError,
    QuestionNotInSessionError,
)
from core.evaluation import is_correct, option_marks, selection_marks
from core.mistakes import MistakeTracker
from core.progress import ProgressTracker
from models import (
    UNSET_ANSWER,
    ExamResult,
    Question,
    QuestionType,
    SessionKind,
    SessionState,
    SubmissionResult,
)

log = logging.getLogger(__name__)

OPTION_LETTER_RE = re.compile(r"[A-Z]")

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class QuizSession:
    def __init__(
        self,
        context: QuizContext,
        questions: Sequence[Question],
        title: str,
        kind: SessionKind,
        category_id: str | None = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self.id = uuid.uuid4().hex
        self.context = context
        self.questions: list[Question] = list(questions)
        self.title = title
        self.kind = kind
        self.category_id = category_id
        self.cursor = 0
        self.revealed = False
        self.answers: dict[str, str] = {}
        self.state = SessionState.ACTIVE
        self.result: SubmissionResult | None = None

        self._index = {q.id: q for q in self.questions}
        self._timer_factory = timer_factory
        self._pending: threading.Timer | None = None
        self._generation = 0
        self._lock = threading.RLock()

    @classmethod
    def start(
        cls,
        context: QuizContext,
        questions: Sequence[Question],
        title: str,
        kind: SessionKind,
        category_id: str | None = None,
        *,
        rng: random.Random | None = None,
        timer_factory: TimerFactory = threading.Timer,
    ) -> "QuizSession":
        if not questions:
            raise NoQuestionsError()
        snapshot = copy.deepcopy(list(questions))
        if kind == SessionKind.RANDOM_EXAM:
            (rng or random).shuffle(snapshot)
        session = cls(context, snapshot, title, kind, category_id, timer_factory)
        log.info(
            "Session started: %s kind=%s questions=%d", title, kind.value, len(snapshot)
        )
        return session

    # ---- state ----
    @property
    def is_exam(self) -> bool:
        return self.kind != SessionKind.STUDY

    @property
    def submitted(self) -> bool:
        return self.state == SessionState.SUBMITTED

    @property
    def current(self) -> Question:
        return self.questions[self.cursor]

    @property
    def is_last(self) -> bool:
        return self.cursor == len(self.questions) - 1

    def shows_answers(self) -> bool:
        return self.submitted or (not self.is_exam and self.revealed)

    # ---- answering ----
    def record_answer(self, question_id: str, value: str) -> bool:
        """Store an answer. Returns False when the session no longer accepts it."""
        with self._lock:
            if self.state != SessionState.ACTIVE:
                return False
            question = self._index.get(question_id)
            if question is None:
                raise QuestionNotInSessionError()

            if question.type == QuestionType.MULTIPLE:
                letter = value.strip().upper()
                if not OPTION_LETTER_RE.fullmatch(letter):
                    raise InvalidSessionOperationError("多选题每次只能选择一个选项")
                selected = set(self.answers.get(question_id, ""))
                selected ^= {letter}
                self.answers[question_id] = "".join(sorted(selected))
            else:
                self.answers[question_id] = value

            # Multiple choice waits for an explicit reveal.
            if not self.is_exam and question.type != QuestionType.MULTIPLE:
                self.revealed = True
            return True

    def reveal(self) -> None:
        with self._lock:
            if self.state == SessionState.ACTIVE:
                self.revealed = True

    # ---- navigation ----
    def _cancel_pending(self) -> None:
        # Bumping the generation also disarms a timer that already fired and
        # is waiting for the lock.
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _step_forward(self) -> None:
        if self.state == SessionState.DISCARDED:
            return
        if self.cursor < len(self.questions) - 1:
            self.cursor += 1
            self.revealed = False

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._pending = None
            self._step_forward()

    def advance(self, delay_ms: int = 0) -> None:
        """Move to the next question, optionally after ``delay_ms``.

        A new call replaces any advance still waiting on its delay.
        """
        with self._lock:
            self._cancel_pending()
            if delay_ms <= 0:
                self._step_forward()
                return
            generation = self._generation
            timer = self._timer_factory(
                delay_ms / 1000.0, lambda: self._fire(generation)
            )
            timer.daemon = True
            self._pending = timer
            timer.start()

    def retreat(self) -> None:
        with self._lock:
            self._cancel_pending()
            if self.cursor > 0:
                self.cursor -= 1
                self.revealed = False

    def has_pending_advance(self) -> bool:
        return self._pending is not None

    # ---- submission ----
    def _grade(self) -> SubmissionResult:
        correctness: dict[str, bool] = {}
        wrong_ids: list[str] = []
        for question in self.questions:
            answer = self.answers.get(question.id)
            if answer is None:
                ok = question.answer == UNSET_ANSWER
            else:
                ok = is_correct(question, answer)
            correctness[question.id] = ok
            if not ok:
                wrong_ids.append(question.id)
        return SubmissionResult(
            score=len(self.questions) - len(wrong_ids),
            total=len(self.questions),
            wrong_ids=tuple(wrong_ids),
            correctness=correctness,
        )

    def submit(self) -> SubmissionResult:
        """Grade the exam and record the outcome once.

        Calling it again returns the first result without touching the
        wrong-answer book, progress or history a second time.
        """
        with self._lock:
            if not self.is_exam:
                raise InvalidSessionOperationError("练习模式无需交卷")
            if self.result is not None:
                return self.result
            if self.state == SessionState.DISCARDED:
                raise InvalidSessionOperationError("练习已退出")

            result = self._grade()
            self._cancel_pending()
            self.state = SessionState.SUBMITTED
            self.result = result

            MistakeTracker(self.context).record_wrong(result.wrong_ids)
            if self.kind == SessionKind.RANDOM_EXAM and self.category_id:
                ProgressTracker(self.context).mark_served(
                    self.category_id, [q.id for q in self.questions]
                )
            self.context.exam_history.append(
                ExamResult(
                    id=uuid.uuid4().hex,
                    timestamp=datetime.now(timezone.utc),
                    score=result.score,
                    total=result.total,
                    kind="random" if self.kind == SessionKind.RANDOM_EXAM else "sequential",
                )
            )
            log.info(
                "Session submitted: %s score=%d/%d", self.title, result.score, result.total
            )
            return result

    def discard(self, confirmed: bool = False) -> None:
        with self._lock:
            if self.is_exam and self.state == SessionState.ACTIVE and not confirmed:
                raise ConfirmationRequiredError()
            self._cancel_pending()
            self.state = SessionState.DISCARDED
            log.info("Session discarded: %s", self.title)

    # ---- presentation ----
    def question_view(self, question: Question) -> dict[str, object]:
        answer = self.answers.get(question.id)
        visible = self.shows_answers()
        view: dict[str, object] = {
            "id": question.id,
            "content": question.content,
            "type": question.type.value,
            "options": list(question.options),
            "categoryId": question.category_id,
            "userAnswer": answer,
            "wrongCount": self.context.wrong_list.get(question.id, 0),
        }
        if visible:
            view["answer"] = question.answer
            view["explanation"] = question.explanation
            view["marks"] = option_marks(question, answer)
            view["isCorrect"] = (
                self.result.correctness.get(question.id)
                if self.result is not None
                else is_correct(question, answer or "")
            )
        else:
            view["marks"] = selection_marks(question, answer)
        return view

    def view(self) -> dict[str, object]:
        with self._lock:
            payload: dict[str, object] = {
                "id": self.id,
                "title": self.title,
                "kind": self.kind.value,
                "state": self.state.value,
                "isExam": self.is_exam,
                "categoryId": self.category_id,
                "index": self.cursor,
                "total": len(self.questions),
                "isLast": self.is_last,
                "revealed": self.revealed,
                "submitted": self.submitted,
                "answeredCount": len(self.answers),
                "question": self.question_view(self.current),
            }
            if self.result is not None:
                payload["result"] = {
                    "score": self.result.score,
                    "total": self.result.total,
                    "wrongIds": list(self.result.wrong_ids),
                }
            return payload
