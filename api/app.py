"""Main FastAPI application with modularized routes."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import LOG_LEVEL, RANDOM_BATCH_SIZE, SEED_DEMO_DATA
from api.database import SessionLocal, init_db
from api.routes import categories, questions, sessions, snapshot, tracking
from api.services.quiz_service import QuizService
from core.errors import (
    CategoryExistsError,
    CategoryNotFoundError,
    ConfirmationRequiredError,
    NoActiveSessionError,
    ProgressExhaustedError,
    QuestionNotFoundError,
    QuizError,
)
from core.logging_setup import setup_console_logging

setup_console_logging(LOG_LEVEL)

log = logging.getLogger(__name__)

ERROR_STATUS = {
    CategoryNotFoundError: 404,
    QuestionNotFoundError: 404,
    NoActiveSessionError: 404,
    CategoryExistsError: 409,
    ConfirmationRequiredError: 409,
    ProgressExhaustedError: 409,
}

app = FastAPI(title="Text Quiz Trainer API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def status_for(exc: QuizError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


@app.exception_handler(QuizError)
def quiz_error_handler(request: Request, exc: QuizError) -> JSONResponse:
    status_code = status_for(exc)
    log.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Create tables and load the question bank on startup."""
    init_db()
    app.state.quiz_service = QuizService.from_storage(
        SessionLocal, seed_demo=SEED_DEMO_DATA, batch_size=RANDOM_BATCH_SIZE
    )


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# Include routers
app.include_router(categories.router)
app.include_router(questions.router)
app.include_router(sessions.router)
app.include_router(tracking.router)
app.include_router(snapshot.router)
