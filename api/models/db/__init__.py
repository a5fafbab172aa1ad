"""Database models."""
from api.models.db.question_bank import CategoryRecord, QuestionRecord, StorageMeta
from api.models.db.user_state import (
    ExamResultRecord,
    ServedQuestion,
    UserStateExtra,
    WrongEntry,
)

__all__ = [
    "CategoryRecord",
    "QuestionRecord",
    "StorageMeta",
    "ExamResultRecord",
    "ServedQuestion",
    "UserStateExtra",
    "WrongEntry",
]
