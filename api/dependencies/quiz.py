"""Quiz service dependency for FastAPI."""
from fastapi import HTTPException, Request, status

from api.services.quiz_service import QuizService


def get_quiz_service(request: Request) -> QuizService:
    """Get the service created at startup.

    Raises:
        HTTPException: 503 while the app has not finished starting.
    """
    service = getattr(request.app.state, "quiz_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting",
        )
    return service
