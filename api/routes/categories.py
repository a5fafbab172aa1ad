"""Category endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_quiz_service
from api.services.quiz_service import QuizService
from api.utils import validate_id
from models import TYPE_LABELS
from serialization import serialize_category

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
def list_categories(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> list[dict[str, object]]:
    """List categories with their question counts."""
    return [
        serialize_category(category, count)
        for category, count in service.list_categories()
    ]


@router.get("/{category_id}/types")
def list_category_types(
    category_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> list[dict[str, object]]:
    """Question types present in a category, for grouped study/exam sessions."""
    groups = service.type_groups(validate_id("categoryId", category_id))
    return [
        {"type": t.value, "label": TYPE_LABELS[t], "count": count}
        for t, count in groups.items()
    ]


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Delete a category with its questions and progress."""
    category_id = validate_id("categoryId", category_id)
    removed = service.delete_category(category_id)
    return {"status": "deleted", "removedQuestions": removed}
