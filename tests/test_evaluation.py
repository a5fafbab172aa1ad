import pytest

from core.evaluation import (
    MARK_CORRECT,
    MARK_NONE,
    MARK_SELECTED,
    MARK_WRONG,
    is_correct,
    is_judgment_correct,
    normalize_answer,
    option_marks,
    selection_marks,
)
from models import Question, QuestionType


def _question(qtype: QuestionType, answer: str, options: list[str] | None = None) -> Question:
    return Question(
        id="q",
        content="Q",
        answer=answer,
        type=qtype,
        category_id="cat",
        options=options or [],
    )


@pytest.mark.parametrize("user", ["B", "×", "错", "错误", "f", "False"])
def test_judgment_false_synonyms(user: str) -> None:
    assert is_correct(_question(QuestionType.JUDGMENT, "错"), user)


@pytest.mark.parametrize("user", ["A", "√", "对", "正确", "t", "TRUE"])
def test_judgment_true_synonyms(user: str) -> None:
    assert is_correct(_question(QuestionType.JUDGMENT, "正确"), user)


def test_judgment_mismatch_and_fallback() -> None:
    assert not is_correct(_question(QuestionType.JUDGMENT, "对"), "错误")
    # neither side is a synonym: plain comparison
    assert is_judgment_correct("是", "是")
    assert not is_judgment_correct("是", "否")


def test_normalize_answer_strips_noise() -> None:
    assert normalize_answer(" a, b ") == "AB"
    assert normalize_answer("北京。") == "北京"
    assert normalize_answer("") == ""


def test_choice_answers_ignore_case_and_separators() -> None:
    question = _question(QuestionType.MULTIPLE, "A,C", ["A. x", "B. y", "C. z"])
    assert is_correct(question, "AC")
    assert is_correct(question, "a c")
    assert not is_correct(question, "A")


def test_fill_answer_comparison() -> None:
    question = _question(QuestionType.FILL, "away")
    assert is_correct(question, "Away")
    assert is_correct(question, " away. ")
    assert not is_correct(question, "home")


def test_digits_are_dropped_before_comparison() -> None:
    # only letters and CJK ideographs take part in the comparison
    assert is_correct(_question(QuestionType.FILL, "3"), "5")


def test_option_marks_after_reveal() -> None:
    question = _question(QuestionType.MULTIPLE, "AB", ["A. x", "B. y", "C. z"])
    assert option_marks(question, "AC") == [MARK_CORRECT, MARK_CORRECT, MARK_WRONG]
    assert option_marks(question, None) == [MARK_CORRECT, MARK_CORRECT, MARK_NONE]


def test_option_marks_single_choice() -> None:
    question = _question(QuestionType.SINGLE, "B", ["A. x", "B. y"])
    assert option_marks(question, "A") == [MARK_WRONG, MARK_CORRECT]


def test_judgment_marks() -> None:
    question = _question(QuestionType.JUDGMENT, "错")
    assert option_marks(question, "正确") == [MARK_WRONG, MARK_CORRECT]
    assert selection_marks(question, "错误") == [MARK_NONE, MARK_SELECTED]


def test_selection_marks_before_reveal() -> None:
    question = _question(QuestionType.MULTIPLE, "AB", ["A. x", "B. y", "C. z"])
    assert selection_marks(question, "BC") == [MARK_NONE, MARK_SELECTED, MARK_SELECTED]
