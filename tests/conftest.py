"""Shared pytest fixtures for SmartRest tests."""

import os
import sys
import pytest

# Run Qt headless when no display is available (CI / containers).
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from smartrest.analytics.reporter import AnalyticsReporter
from smartrest.database.db import configure_engine, init_db
from smartrest.preferences.gateway import PreferenceGateway
from smartrest.timer.engine import RestTimer

from helpers import ManualClock, RecordingAnalyticsSink, MemoryPreferenceStore, run_now


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
    return ManualClock()


@pytest.fixture
def timer(qapp, clock):
    """Fresh RestTimer seeded at 90 s on a manual clock."""
    return RestTimer(parent=None, clock=clock, initial_time=90)


@pytest.fixture
def analytics_sink():
    return RecordingAnalyticsSink()


@pytest.fixture
def reporter(analytics_sink):
    """Reporter that writes immediately instead of on the next loop pass."""
    return AnalyticsReporter(analytics_sink, defer=run_now)


@pytest.fixture
def store():
    return MemoryPreferenceStore()


@pytest.fixture
def gateway(store):
    return PreferenceGateway(store, defer=run_now)
