import pytest

from core.errors import (
    ConfirmationRequiredError,
    InvalidSessionOperationError,
    NoQuestionsError,
    QuestionNotInSessionError,
)
from core.session_engine import QuizSession
from models import UNSET_ANSWER, Question, QuestionType, SessionKind, SessionState


def _start(context, kind=SessionKind.SEQUENTIAL_EXAM, fake_timer=None, **kwargs):
    options = {}
    if fake_timer is not None:
        options["timer_factory"] = fake_timer
    return QuizSession.start(
        context, context.questions, "demo", kind, **kwargs, **options
    )


def test_start_rejects_empty_list(demo_context) -> None:
    with pytest.raises(NoQuestionsError):
        QuizSession.start(demo_context, [], "empty", SessionKind.STUDY)


def test_start_copies_questions(demo_context) -> None:
    session = _start(demo_context, SessionKind.STUDY)
    session.questions[0].content = "changed"
    assert demo_context.questions[0].content == "《红楼梦》的作者是谁？"
    assert session.cursor == 0
    assert not session.revealed
    assert not session.is_exam


def test_random_exam_is_shuffled_copy(demo_context, rng) -> None:
    session = _start(demo_context, SessionKind.RANDOM_EXAM, rng=rng)
    assert sorted(q.id for q in session.questions) == ["1", "2", "3", "4"]
    assert session.is_exam


def test_multiple_choice_toggles_sorted(demo_context) -> None:
    session = _start(demo_context)
    assert session.record_answer("3", "D")
    session.record_answer("3", "A")
    assert session.answers["3"] == "AD"
    session.record_answer("3", "D")
    assert session.answers["3"] == "A"


def test_single_choice_replaces(demo_context) -> None:
    session = _start(demo_context)
    session.record_answer("1", "B")
    session.record_answer("1", "A")
    assert session.answers["1"] == "A"


def test_unknown_question_rejected(demo_context) -> None:
    session = _start(demo_context)
    with pytest.raises(QuestionNotInSessionError):
        session.record_answer("missing", "A")


def test_study_auto_reveal_except_multiple(demo_context) -> None:
    session = _start(demo_context, SessionKind.STUDY)
    session.record_answer("3", "A")
    assert not session.revealed
    session.record_answer("1", "A")
    assert session.revealed


def test_exam_never_reveals_before_submit(demo_context) -> None:
    session = _start(demo_context)
    session.record_answer("1", "A")
    session.reveal()
    assert not session.shows_answers()
    assert "answer" not in session.view()["question"]


def test_navigation_is_clamped(demo_context) -> None:
    session = _start(demo_context, SessionKind.STUDY)
    session.retreat()
    assert session.cursor == 0
    for _ in range(10):
        session.advance()
    assert session.cursor == 3
    assert session.is_last


def test_navigation_resets_reveal(demo_context) -> None:
    session = _start(demo_context, SessionKind.STUDY)
    session.reveal()
    session.advance()
    assert session.cursor == 1
    assert not session.revealed
    session.reveal()
    session.retreat()
    assert not session.revealed


def test_debounced_advance_replaces_pending(demo_context, fake_timer) -> None:
    session = _start(demo_context, SessionKind.STUDY, fake_timer=fake_timer)
    session.advance(delay_ms=500)
    session.advance(delay_ms=500)
    first, second = fake_timer.created

    assert first.cancelled
    assert second.started and second.daemon
    assert second.interval == 0.5

    first.fire()
    assert session.cursor == 0
    second.fire()
    assert session.cursor == 1
    assert not session.has_pending_advance()


def test_retreat_cancels_pending_advance(demo_context, fake_timer) -> None:
    session = _start(demo_context, SessionKind.STUDY, fake_timer=fake_timer)
    session.advance()
    session.advance(delay_ms=300)
    session.retreat()
    [timer] = fake_timer.created
    assert timer.cancelled
    timer.fire()
    assert session.cursor == 0


def test_submit_scores_and_records(demo_context) -> None:
    session = _start(demo_context)
    session.record_answer("1", "A")
    session.record_answer("2", "错")
    for letter in "DBA":
        session.record_answer("3", letter)

    result = session.submit()

    assert (result.score, result.total) == (3, 4)
    assert result.wrong_ids == ("4",)
    assert session.state == SessionState.SUBMITTED
    assert demo_context.wrong_list == {"4": 1}
    [history] = demo_context.exam_history
    assert history.kind == "sequential"
    assert (history.score, history.total) == (3, 4)


def test_submit_twice_is_idempotent(demo_context) -> None:
    session = _start(demo_context)
    first = session.submit()
    second = session.submit()

    assert second == first
    assert demo_context.wrong_list == {"1": 1, "2": 1, "3": 1, "4": 1}
    assert len(demo_context.exam_history) == 1


def test_answers_frozen_after_submit(demo_context) -> None:
    session = _start(demo_context)
    session.submit()
    assert not session.record_answer("1", "A")
    assert "1" not in session.answers


def test_unanswered_unset_reference_counts_correct(demo_context) -> None:
    demo_context.questions.append(
        Question("5", "essay", UNSET_ANSWER, QuestionType.ESSAY, "default")
    )
    session = _start(demo_context)
    result = session.submit()
    assert result.correctness["5"] is True
    assert "5" not in demo_context.wrong_list


def test_study_session_cannot_submit(demo_context) -> None:
    session = _start(demo_context, SessionKind.STUDY)
    with pytest.raises(InvalidSessionOperationError):
        session.submit()


def test_random_exam_submit_marks_progress(demo_context, rng) -> None:
    session = _start(demo_context, SessionKind.RANDOM_EXAM, rng=rng, category_id="default")
    session.submit()
    assert demo_context.random_progress["default"] == {"1", "2", "3", "4"}
    assert demo_context.exam_history[0].kind == "random"


def test_discard_exam_requires_confirmation(demo_context) -> None:
    session = _start(demo_context, SessionKind.RANDOM_EXAM, category_id="default")
    with pytest.raises(ConfirmationRequiredError):
        session.discard()
    assert session.state == SessionState.ACTIVE

    session.discard(confirmed=True)
    assert session.state == SessionState.DISCARDED
    assert demo_context.random_progress == {}
    assert demo_context.wrong_list == {}
    assert demo_context.exam_history == []


def test_discard_study_and_submitted_exam_without_confirmation(demo_context) -> None:
    _start(demo_context, SessionKind.STUDY).discard()
    exam = _start(demo_context)
    exam.submit()
    exam.discard()
    assert exam.state == SessionState.DISCARDED


def test_discard_cancels_pending_timer(demo_context, fake_timer) -> None:
    session = _start(demo_context, SessionKind.STUDY, fake_timer=fake_timer)
    session.advance(delay_ms=100)
    session.discard()
    [timer] = fake_timer.created
    assert timer.cancelled
    timer.fire()
    assert session.cursor == 0


def test_view_after_submit_shows_answers(demo_context) -> None:
    session = _start(demo_context)
    session.record_answer("1", "B")
    session.submit()
    view = session.view()

    assert view["submitted"] is True
    assert view["result"] == {"score": 0, "total": 4, "wrongIds": ["1", "2", "3", "4"]}
    question = view["question"]
    assert question["answer"] == "A"
    assert question["isCorrect"] is False
    assert question["marks"] == ["correct", "wrong", "none", "none"]
    assert question["wrongCount"] == 1


def test_multiple_choice_letters_are_normalised(demo_context) -> None:
    session = _start(demo_context)
    session.record_answer("3", "a")
    session.record_answer("3", " A ")
    assert session.answers["3"] == ""
    for letter in "dba":
        session.record_answer("3", letter)
    assert session.answers["3"] == "ABD"
    assert session.submit().correctness["3"] is True


@pytest.mark.parametrize("value", ["AB", "", "1", "甲"])
def test_multiple_choice_rejects_non_letters(demo_context, value) -> None:
    session = _start(demo_context)
    session.record_answer("3", "A")
    with pytest.raises(InvalidSessionOperationError):
        session.record_answer("3", value)
    assert session.answers["3"] == "A"
