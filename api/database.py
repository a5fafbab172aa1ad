"""Database engine, session factory and schema bootstrap."""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session as DbSession, sessionmaker

from api.config import DATABASE_URL


def build_engine(url: str) -> Engine:
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Iterator[DbSession]:
    """Session that commits on success and rolls back on any error."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """Create all tables."""
    # Importing the models registers them on Base.metadata
    import api.models.db  # noqa: F401

    Base.metadata.create_all(bind=bind)
