"""Answer evaluation for all question types."""
from __future__ import annotations

import re

from models import Question, QuestionType

JUDGMENT_TRUE = frozenset({"对", "正确", "T", "TRUE", "√", "A"})
JUDGMENT_FALSE = frozenset({"错", "错误", "F", "FALSE", "×", "B"})

# Values recorded when the user taps the true/false buttons of a judgment card.
JUDGMENT_CHOICES = ("正确", "错误")

# A-Z and CJK unified ideographs survive normalisation; everything else is noise.
_NOISE_RE = re.compile(r"[^A-Z\u4e00-\u9fa5]")
_ANSWER_KEYS_RE = re.compile(r"[^A-F]")

MARK_CORRECT = "correct"
MARK_WRONG = "wrong"
MARK_SELECTED = "selected"
MARK_NONE = "none"


def normalize_answer(value: str) -> str:
    return _NOISE_RE.sub("", (value or "").upper())


def is_judgment_correct(user_answer: str, reference: str) -> bool:
    user = (user_answer or "").strip().upper()
    real = (reference or "").strip().upper()
    if user in JUDGMENT_TRUE and real in JUDGMENT_TRUE:
        return True
    if user in JUDGMENT_FALSE and real in JUDGMENT_FALSE:
        return True
    return user == real


def is_correct(question: Question, user_answer: str) -> bool:
    """Check a user answer against the question's reference answer.

    Essay answers go through the same letter/ideograph comparison, so their
    result is only advisory.
    """
    if question.type == QuestionType.JUDGMENT:
        return is_judgment_correct(user_answer, question.answer)
    return normalize_answer(user_answer) == normalize_answer(question.answer)


def option_key(index: int) -> str:
    return chr(65 + index)


def _is_selected(question: Question, key: str, user_answer: str) -> bool:
    if question.type == QuestionType.MULTIPLE:
        return key in user_answer
    return user_answer == key


def option_marks(question: Question, user_answer: str | None) -> list[str]:
    """Per-option display marks once the reference answer is visible."""
    user_answer = user_answer or ""
    if question.type == QuestionType.JUDGMENT:
        marks = []
        for choice in JUDGMENT_CHOICES:
            if is_judgment_correct(choice, question.answer):
                marks.append(MARK_CORRECT)
            elif user_answer == choice:
                marks.append(MARK_WRONG)
            else:
                marks.append(MARK_NONE)
        return marks

    answer_keys = _ANSWER_KEYS_RE.sub("", question.answer.upper())
    marks = []
    for index in range(len(question.options)):
        key = option_key(index)
        selected = _is_selected(question, key, user_answer)
        if key in answer_keys:
            marks.append(MARK_CORRECT)
        elif selected:
            marks.append(MARK_WRONG)
        else:
            marks.append(MARK_NONE)
    return marks


def selection_marks(question: Question, user_answer: str | None) -> list[str]:
    """Marks while the reference answer is still hidden (selection only)."""
    user_answer = user_answer or ""
    if question.type == QuestionType.JUDGMENT:
        return [MARK_SELECTED if user_answer == c else MARK_NONE for c in JUDGMENT_CHOICES]
    return [
        MARK_SELECTED if _is_selected(question, option_key(i), user_answer) else MARK_NONE
        for i in range(len(question.options))
    ]
