import pytest

from core.context import QuizContext
from core.errors import NoQuestionsError, ProgressExhaustedError
from core.progress import ProgressTracker
from core.session_engine import QuizSession
from models import Category, Question, QuestionType, SessionKind


def _bank(count: int, question_type=QuestionType.FILL) -> QuizContext:
    return QuizContext(
        categories=[Category("c1", "Bank")],
        questions=[
            Question(f"q{i}", f"question {i}", "x", question_type, "c1")
            for i in range(count)
        ],
    )


def _submit_batch(context: QuizContext, batch, rng) -> None:
    session = QuizSession.start(
        context, batch, "random", SessionKind.RANDOM_EXAM, "c1", rng=rng
    )
    session.submit()


def test_batch_limited_to_batch_size(rng) -> None:
    tracker = ProgressTracker(_bank(45), rng=rng)
    batch = tracker.draw_batch("c1")
    assert len(batch) == 30
    assert len({q.id for q in batch}) == 30


def test_drawing_does_not_consume(rng) -> None:
    context = _bank(3)
    tracker = ProgressTracker(context, rng=rng)
    tracker.draw_batch("c1")
    assert tracker.served("c1") == set()
    assert len(tracker.available("c1")) == 3


def test_served_questions_not_drawn_again(rng) -> None:
    context = _bank(5)
    tracker = ProgressTracker(context, batch_size=3, rng=rng)
    first = tracker.draw_batch("c1")
    _submit_batch(context, first, rng)
    second = tracker.draw_batch("c1")

    assert len(second) == 2
    assert not {q.id for q in first} & {q.id for q in second}


def test_exhaustion_then_reset(rng) -> None:
    context = _bank(3)
    tracker = ProgressTracker(context, batch_size=2, rng=rng)
    while tracker.available("c1"):
        _submit_batch(context, tracker.draw_batch("c1"), rng)

    with pytest.raises(ProgressExhaustedError):
        tracker.draw_batch("c1")

    tracker.reset_progress("c1")
    assert {q.id for q in tracker.available("c1")} == {"q0", "q1", "q2"}


def test_discarded_exam_leaves_progress_unchanged(rng) -> None:
    context = _bank(3)
    tracker = ProgressTracker(context, rng=rng)
    batch = tracker.draw_batch("c1")
    session = QuizSession.start(
        context, batch, "random", SessionKind.RANDOM_EXAM, "c1", rng=rng
    )
    session.record_answer(session.current.id, "x")
    session.discard(confirmed=True)

    assert context.random_progress.get("c1", set()) == set()


def test_type_filter_and_category_wide_reset(rng) -> None:
    context = _bank(2)
    context.questions.append(Question("j1", "judge", "对", QuestionType.JUDGMENT, "c1"))
    tracker = ProgressTracker(context, rng=rng)

    _submit_batch(context, tracker.draw_batch("c1", QuestionType.JUDGMENT), rng)
    _submit_batch(context, tracker.draw_batch("c1", QuestionType.FILL), rng)
    with pytest.raises(ProgressExhaustedError):
        tracker.draw_batch("c1", QuestionType.JUDGMENT)

    tracker.reset_progress("c1")
    assert tracker.served("c1") == set()


def test_empty_pool(rng) -> None:
    tracker = ProgressTracker(_bank(2), rng=rng)
    with pytest.raises(NoQuestionsError, match="该分类下没有此类型的题目"):
        tracker.draw_batch("c1", QuestionType.MULTIPLE)
    with pytest.raises(NoQuestionsError):
        tracker.draw_batch("other")


def test_draw_library(rng) -> None:
    context = _bank(40)
    tracker = ProgressTracker(context, rng=rng)
    assert len(tracker.draw_library()) == 30
    with pytest.raises(NoQuestionsError):
        ProgressTracker(QuizContext(), rng=rng).draw_library()


def test_summary(rng) -> None:
    context = _bank(3)
    context.questions.append(Question("s1", "pick", "A", QuestionType.SINGLE, "c1", ["A. a"]))
    tracker = ProgressTracker(context, rng=rng)
    tracker.mark_served("c1", ["q0", "q1"])
    tracker.mark_served("c1", ["q1"])

    summary = tracker.summary("c1")

    assert summary["done"] == 2
    assert summary["total"] == 4
    assert summary["percent"] == 50
    assert summary["remaining"] == 2
    assert summary["typeCounts"] == {
        "single": 1,
        "multiple": 0,
        "judgment": 0,
        "fill": 3,
        "essay": 0,
    }


def test_summary_of_empty_category(rng) -> None:
    summary = ProgressTracker(QuizContext(), rng=rng).summary("none")
    assert summary["percent"] == 0
    assert summary["total"] == 0


def test_summary_ignores_ids_outside_pool(rng) -> None:
    context = _bank(2)
    context.random_progress["c1"] = {"q0", "gone-1", "gone-2", "gone-3"}

    summary = ProgressTracker(context, rng=rng).summary("c1")

    assert summary["done"] == 1
    assert summary["percent"] == 50
    assert summary["remaining"] == 1
