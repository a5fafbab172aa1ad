"""Study and exam session endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_quiz_service
from api.models import (
    AdvancePayload,
    AnswerPayload,
    RandomSessionStart,
    SessionStart,
    WrongSessionStart,
)
from api.services.quiz_service import QuizService

router = APIRouter(prefix="/api/session", tags=["session"])


@router.post("/study")
def start_study(
    payload: SessionStart,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Start a study session (answers shown per question)."""
    session = service.start_study(
        payload.categoryId, payload.type, payload.questionIds, payload.title, payload.query
    )
    return session.view()


@router.post("/sequential")
def start_sequential(
    payload: SessionStart,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Start an exam in bank order."""
    session = service.start_sequential(
        payload.categoryId, payload.type, payload.questionIds, payload.title
    )
    return session.view()


@router.post("/random")
def start_random(
    payload: RandomSessionStart,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Start the next random exam batch of a category."""
    session = service.start_random(payload.categoryId, payload.type, payload.resetProgress)
    return session.view()


@router.post("/library-random")
def start_library_random(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Start a random exam over the whole library."""
    return service.start_library_random().view()


@router.post("/wrong")
def start_wrong(
    payload: WrongSessionStart,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Study the wrong-answer book, optionally of one category."""
    return service.start_wrong(payload.categoryId).view()


@router.get("")
def get_session(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Current session state."""
    return service.current_session().view()


@router.post("/answer")
def answer(
    payload: AnswerPayload,
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Answer the current question (multiple choice toggles one letter)."""
    return service.answer(payload.value, payload.questionId).view()


@router.post("/reveal")
def reveal(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    return service.reveal().view()


@router.post("/advance")
def advance(
    service: Annotated[QuizService, Depends(get_quiz_service)],
    payload: AdvancePayload | None = None,
) -> dict[str, object]:
    """Go to the next question, immediately or after ``delayMs``."""
    delay_ms = payload.delayMs if payload is not None else 0
    return service.advance(delay_ms).view()


@router.post("/retreat")
def retreat(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    return service.retreat().view()


@router.post("/submit")
def submit(
    service: Annotated[QuizService, Depends(get_quiz_service)],
) -> dict[str, object]:
    """Grade the exam; repeated calls return the same result."""
    return service.submit().view()


@router.delete("")
def discard(
    service: Annotated[QuizService, Depends(get_quiz_service)],
    confirm: bool = False,
) -> dict[str, str]:
    """Leave the session. An unsubmitted exam needs ``confirm=true``."""
    service.discard(confirmed=confirm)
    return {"status": "discarded"}
