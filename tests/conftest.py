import os
import random
import tempfile
from pathlib import Path

import pytest

# api.config reads the environment on import
_DATA_DIR = Path(tempfile.mkdtemp(prefix="quiz-tests-"))
os.environ["QUIZ_DATA_DIR"] = str(_DATA_DIR)
os.environ["DATABASE_URL"] = f"sqlite:///{_DATA_DIR / 'quiz.db'}"
os.environ["SEED_DEMO_DATA"] = "1"

from core.context import build_demo_context  # noqa: E402


class FakeTimer:
    """Stands in for threading.Timer; tests fire it by hand."""

    created: list["FakeTimer"] = []

    def __init__(self, interval: float, function) -> None:
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        # A real timer that was cancelled after it began waiting for the
        # session lock still runs its callback.
        self.function()


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    return FakeTimer


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def demo_context():
    return build_demo_context()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    import api.models.db  # noqa: F401
    from api.app import app
    from api.database import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client
