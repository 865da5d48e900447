"""Shared pytest fixtures for WorkSession tests."""

import os
import sys
import pytest

# Widgets are created in tests; no display is needed
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from worksession.database.db import configure_engine, init_db
from worksession.database.gateway import PersistenceGateway
from worksession.timer.engine import TimerEngine

from helpers import START_TIME, FakeClock, ManualScheduler


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock(START_TIME)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def engine(qapp, scheduler, clock):
    """Fresh TimerEngine (25/5) driven by a manual scheduler and fake clock."""
    eng = TimerEngine(parent=None, scheduler=scheduler, clock=clock)
    yield eng
    eng.dispose()


@pytest.fixture
def gateway(clock):
    """PersistenceGateway on the in-memory database, sharing the fake clock."""
    return PersistenceGateway(clock=clock)
