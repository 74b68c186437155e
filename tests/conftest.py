# tests/conftest.py
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="workshop-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/tickets.db"
os.environ["EXTRAS_PATH"] = os.path.join(_TMP, "ticket_extras.json")
os.environ["LOCALE"] = "en"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from workshop.core.clock import Clock
from workshop.core.database import Base
from workshop.core.extras_store import ExtrasStore
from workshop.core.guard import WriteCapability
from workshop.core.notifier import Notifier
from workshop.ticket import models  # noqa: F401
from workshop.ticket.record_store import RecordStore
from workshop.ticket.services import TicketService


class StepClock(Clock):
    """Deterministic clock: every call moves one second forward."""

    def __init__(self):
        self.ticks = 0
        self.issued = 0

    def now(self) -> str:
        self.ticks += 1
        return f"2025-01-01T00:{self.ticks // 60:02d}:{self.ticks % 60:02d}.000Z"

    def new_id(self) -> str:
        self.issued += 1
        return f"id-{self.issued:04d}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def records(engine):
    return RecordStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def extras():
    return ExtrasStore()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def notifier():
    return Notifier(locale="en")


@pytest.fixture
def service(records, extras, clock, notifier):
    return TicketService(records, extras, clock=clock, notifier=notifier)


@pytest.fixture
def user_action():
    return WriteCapability.user_action("test")
