"""Question bank endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from api.config import UPLOAD_MAX_SIZE_BYTES, UPLOADS_DIR
from api.dependencies import get_quiz_service
from api.models import ImportRequest
from api.services.quiz_service import QuizService
from api.utils import save_upload_file, validate_id, validate_upload_name
from models import QuestionType
from serialization import serialize_category, serialize_question, serialize_questions
from text_extract import DOCX_SUFFIXES, TEXT_SUFFIXES

router = APIRouter(prefix="/api/questions", tags=["questions"])


def _import_response(result: dict[str, object]) -> dict[str, object]:
    response = dict(result)
    response["category"] = serialize_category(result["category"])
    response["questions"] = serialize_questions(result["questions"])
    return response


@router.get("")
def list_questions(
    service: Annotated[QuizService, Depends(get_quiz_service)],
    categoryId: str | None = None,
    type: QuestionType | None = None,
    q: Annotated[str | None, Query(max_length=200)] = None,
) -> list[dict[str, object]]:
    """List questions; ``q`` searches content and returns at most 10 hits."""
    questions = service.list_questions(categoryId, type, q)
    return [
        dict(serialize_question(question), wrongCount=service.mistakes.count(question.id))
        for question in questions
    ]


@router.delete("/{question_id}")
def delete_question(
    question_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Remove one question from the bank."""
    question = service.remove_question(validate_id("questionId", question_id))
    return {"status": "deleted", "question": serialize_question(question)}


@router.post("/import")
def import_text(
    payload: ImportRequest,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Import pasted question text."""
    result = service.import_text(
        payload.text,
        category_name=payload.categoryName,
        category_id=payload.categoryId,
        merge=payload.merge,
    )
    return _import_response(result)


@router.post("/upload")
def upload_questions(
    service: Annotated[QuizService, Depends(get_quiz_service)],
    file: UploadFile = File(...),
    categoryName: str | None = Form(None),
    categoryId: str | None = Form(None),
    merge: bool = Form(False),
) -> dict[str, object]:
    """Import questions from a .txt, .md or .docx file."""
    validate_upload_name(file.filename or "", TEXT_SUFFIXES | DOCX_SUFFIXES)
    file_path = save_upload_file(file, UPLOADS_DIR, max_size=UPLOAD_MAX_SIZE_BYTES)
    try:
        result = service.import_file(
            file_path,
            category_name=categoryName,
            category_id=categoryId,
            merge=merge,
        )
    finally:
        file_path.unlink(missing_ok=True)
    return _import_response(result)
