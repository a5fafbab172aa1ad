"""Wrong-answer book, random progress and exam history endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_quiz_service
from api.services.quiz_service import QuizService
from api.utils import validate_id
from models import QuestionType
from serialization import serialize_exam_result, serialize_question

router = APIRouter(prefix="/api", tags=["tracking"])


@router.get("/wrong")
def wrong_overview(
    service: Annotated[QuizService, Depends(get_quiz_service)],
    categoryId: str | None = None,
) -> dict[str, object]:
    """Wrong-question totals per category plus the questions themselves."""
    overview = service.wrong_overview()
    overview["questions"] = [
        dict(serialize_question(question), wrongCount=service.mistakes.count(question.id))
        for question in service.wrong_questions(categoryId)
    ]
    return overview


@router.delete("/wrong/categories/{category_id}")
def clear_wrong_category(
    category_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
    type: QuestionType | None = None,
) -> dict[str, object]:
    """Clear the wrong-answer book of a category, optionally one type only."""
    removed = service.clear_wrong_category(validate_id("categoryId", category_id), type)
    return {"status": "cleared", "removed": removed}


@router.delete("/wrong/{question_id}")
def remove_wrong(
    question_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, str]:
    """Mark a question as mastered."""
    service.remove_wrong(validate_id("questionId", question_id))
    return {"status": "removed"}


@router.get("/progress/{category_id}")
def progress_summary(
    category_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    return service.progress_summary(validate_id("categoryId", category_id))


@router.delete("/progress/{category_id}")
def reset_progress(
    category_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Start the random draw of a category over."""
    return service.reset_progress(validate_id("categoryId", category_id))


@router.get("/history")
def exam_history(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> list[dict[str, object]]:
    """Submitted exams, newest first."""
    return [serialize_exam_result(result) for result in reversed(service.history())]
