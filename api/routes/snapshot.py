"""Backup export and restore endpoints."""
from typing import Annotated

from fastapi import APIRouter, Body, Depends

from api.dependencies import get_quiz_service
from api.services.quiz_service import QuizService

router = APIRouter(prefix="/api/snapshot", tags=["snapshot"])


@router.get("")
def export_snapshot(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Full backup: questions, categories and userState."""
    return service.export_snapshot()


@router.put("")
def restore_snapshot(
    service: Annotated[QuizService, Depends(get_quiz_service)],
    payload: dict[str, object] = Body(...),
) -> dict[str, object]:
    """Replace all data with a backup document."""
    service.restore_snapshot(payload)
    return {
        "status": "restored",
        "questions": len(service.context.questions),
        "categories": len(service.context.categories),
    }
