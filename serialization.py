from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable

from api.utils.time_utils import from_epoch_ms, to_epoch_ms
from core.context import QuizContext
from core.errors import InvalidSnapshotError
from models import UNSET_ANSWER, Category, ExamResult, Question, QuestionType

SNAPSHOT_KEYS = ("questions", "categories", "userState")
CORE_STATE_KEYS = ("wrongList", "examHistory", "randomProgress")


def serialize_question(question: Question) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": question.id,
        "content": question.content,
        "options": list(question.options),
        "answer": question.answer,
        "type": question.type.value,
        "categoryId": question.category_id,
    }
    if question.explanation:
        payload["explanation"] = question.explanation
    return payload


def deserialize_question(payload: object) -> Question:
    if not isinstance(payload, dict):
        raise InvalidSnapshotError("题目格式错误")
    try:
        question_type = QuestionType(payload.get("type"))
    except ValueError:
        raise InvalidSnapshotError(f"未知题型: {payload.get('type')}")
    question_id = payload.get("id")
    content = payload.get("content")
    if not isinstance(question_id, str) or not isinstance(content, str):
        raise InvalidSnapshotError("题目缺少 id 或内容")
    options = payload.get("options") or []
    if not isinstance(options, list):
        raise InvalidSnapshotError("题目选项格式错误")
    return Question(
        id=question_id,
        content=content,
        options=[str(option) for option in options],
        answer=str(payload.get("answer") or UNSET_ANSWER),
        type=question_type,
        category_id=str(payload.get("categoryId") or ""),
        explanation=payload.get("explanation"),
    )


def serialize_category(category: Category, question_count: int | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"id": category.id, "name": category.name}
    if question_count is not None:
        payload["questionCount"] = question_count
    return payload


def serialize_exam_result(result: ExamResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "date": to_epoch_ms(result.timestamp),
        "score": result.score,
        "total": result.total,
        "mode": result.kind,
    }


def deserialize_exam_result(payload: object) -> ExamResult:
    if not isinstance(payload, dict):
        raise InvalidSnapshotError("考试记录格式错误")
    timestamp = from_epoch_ms(payload.get("date")) or datetime.now(timezone.utc)
    return ExamResult(
        id=str(payload.get("id") or uuid.uuid4().hex),
        timestamp=timestamp,
        score=int(payload.get("score") or 0),
        total=int(payload.get("total") or 0),
        kind="random" if payload.get("mode") == "random" else "sequential",
    )


def serialize_questions(questions: Iterable[Question]) -> list[dict[str, Any]]:
    return [serialize_question(question) for question in questions]


def serialize_snapshot(context: QuizContext) -> dict[str, Any]:
    """Full backup document: questions, categories and userState."""
    user_state: dict[str, Any] = dict(context.extras)
    user_state["wrongList"] = dict(context.wrong_list)
    user_state["examHistory"] = [
        serialize_exam_result(result) for result in context.exam_history
    ]
    user_state["randomProgress"] = {
        category_id: sorted(served)
        for category_id, served in context.random_progress.items()
    }
    return {
        "questions": serialize_questions(context.questions),
        "categories": [serialize_category(c) for c in context.categories],
        "userState": user_state,
    }


def deserialize_snapshot(payload: object) -> QuizContext:
    """Rebuild a context from a backup document; raises InvalidSnapshotError."""
    try:
        return _deserialize_snapshot(payload)
    except (AttributeError, TypeError, ValueError) as exc:
        raise InvalidSnapshotError() from exc


def _deserialize_snapshot(payload: object) -> QuizContext:
    if not isinstance(payload, dict) or any(key not in payload for key in SNAPSHOT_KEYS):
        raise InvalidSnapshotError()
    questions = payload["questions"]
    categories = payload["categories"]
    user_state = payload["userState"]
    if not isinstance(questions, list) or not isinstance(categories, list):
        raise InvalidSnapshotError()
    if not isinstance(user_state, dict):
        raise InvalidSnapshotError()

    parsed_categories = []
    for item in categories:
        if not isinstance(item, dict) or "id" not in item:
            raise InvalidSnapshotError("分类格式错误")
        parsed_categories.append(Category(id=str(item["id"]), name=str(item.get("name", ""))))
    if len({c.id for c in parsed_categories}) != len(parsed_categories):
        raise InvalidSnapshotError("分类编号重复")
    parsed_questions = [deserialize_question(item) for item in questions]
    if len({q.id for q in parsed_questions}) != len(parsed_questions):
        raise InvalidSnapshotError("题目编号重复")

    wrong_list = {
        str(key): int(value)
        for key, value in (user_state.get("wrongList") or {}).items()
        if int(value) > 0
    }
    random_progress = {
        str(key): {str(question_id) for question_id in value}
        for key, value in (user_state.get("randomProgress") or {}).items()
    }
    return QuizContext(
        questions=parsed_questions,
        categories=parsed_categories,
        wrong_list=wrong_list,
        random_progress=random_progress,
        exam_history=[
            deserialize_exam_result(item) for item in user_state.get("examHistory") or []
        ],
        extras={k: v for k, v in user_state.items() if k not in CORE_STATE_KEYS},
    )
