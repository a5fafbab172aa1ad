"""Service layer for loading and saving the quiz context."""
import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session as DbSession

from api.models.db import (
    CategoryRecord,
    ExamResultRecord,
    QuestionRecord,
    ServedQuestion,
    StorageMeta,
    UserStateExtra,
    WrongEntry,
)
from core.context import QuizContext, build_demo_context
from models import UNSET_ANSWER, Category, ExamResult, Question, QuestionType

log = logging.getLogger(__name__)

_TABLES = (
    QuestionRecord,
    CategoryRecord,
    WrongEntry,
    ServedQuestion,
    ExamResultRecord,
    UserStateExtra,
)


INITIALIZED_KEY = "initialized"


def is_initialized(db: DbSession) -> bool:
    """True once the store has been loaded or seeded at least one time."""
    return db.get(StorageMeta, INITIALIZED_KEY) is not None


def _question_from_record(record: QuestionRecord) -> Question | None:
    try:
        question_type = QuestionType(record.question_type)
    except ValueError:
        log.warning("Skipping question %s with unknown type %r", record.id, record.question_type)
        return None
    return Question(
        id=record.id,
        content=record.content,
        options=record.options,
        answer=record.answer or UNSET_ANSWER,
        type=question_type,
        category_id=record.category_id,
        explanation=record.explanation,
    )


def load_context(db: DbSession) -> QuizContext:
    """Read every table into a fresh context."""
    categories = [
        Category(id=record.id, name=record.name)
        for record in db.scalars(select(CategoryRecord).order_by(CategoryRecord.position))
    ]
    questions = []
    for record in db.scalars(select(QuestionRecord).order_by(QuestionRecord.position)):
        question = _question_from_record(record)
        if question is not None:
            questions.append(question)

    wrong_list = {
        entry.question_id: entry.count
        for entry in db.scalars(select(WrongEntry))
        if entry.count > 0
    }

    random_progress: dict[str, set[str]] = {}
    for entry in db.scalars(select(ServedQuestion)):
        random_progress.setdefault(entry.category_id, set()).add(entry.question_id)

    exam_history = [
        ExamResult(
            id=record.result_id,
            timestamp=record.taken_at,
            score=record.score,
            total=record.total,
            kind=record.kind,
        )
        for record in db.scalars(select(ExamResultRecord).order_by(ExamResultRecord.position))
    ]
    extras = {record.key: record.value for record in db.scalars(select(UserStateExtra))}

    log.debug(
        "Context loaded: categories=%d questions=%d history=%d",
        len(categories),
        len(questions),
        len(exam_history),
    )
    return QuizContext(
        questions=questions,
        categories=categories,
        wrong_list=wrong_list,
        random_progress=random_progress,
        exam_history=exam_history,
        extras=extras,
    )


def save_context(db: DbSession, context: QuizContext) -> None:
    """Replace every stored row with the context contents.

    The caller owns the transaction (see ``api.database.session_scope``).
    """
    for table in _TABLES:
        db.execute(delete(table))

    for position, category in enumerate(context.categories):
        db.add(CategoryRecord(id=category.id, name=category.name, position=position))

    for position, question in enumerate(context.questions):
        record = QuestionRecord(
            id=question.id,
            category_id=question.category_id,
            position=position,
            question_type=question.type.value,
            content=question.content,
            answer=question.answer,
            explanation=question.explanation,
        )
        record.options = question.options
        db.add(record)

    for question_id, count in context.wrong_list.items():
        if count > 0:
            db.add(WrongEntry(question_id=question_id, count=count))

    for category_id, served in context.random_progress.items():
        for question_id in sorted(served):
            db.add(ServedQuestion(category_id=category_id, question_id=question_id))

    for position, result in enumerate(context.exam_history):
        db.add(
            ExamResultRecord(
                result_id=result.id,
                taken_at=result.timestamp,
                score=result.score,
                total=result.total,
                kind=result.kind,
                position=position,
            )
        )

    for key, value in context.extras.items():
        extra = UserStateExtra(key=key)
        extra.value = value
        db.add(extra)


def load_or_seed(db: DbSession, seed_demo: bool) -> QuizContext:
    """Load the stored context; a store opened for the first time gets the demo bank."""
    if is_initialized(db):
        return load_context(db)

    db.add(StorageMeta(key=INITIALIZED_KEY, value="1"))
    if not seed_demo:
        return load_context(db)
    context = build_demo_context()
    save_context(db, context)
    log.info("Seeded demo question bank (%d questions)", len(context.questions))
    return context
