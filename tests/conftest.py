"""Shared fixtures: fixed clock, in-memory and file-backed services, API client."""

from datetime import datetime, timedelta

import pytest
import pytz
from fastapi.testclient import TestClient

from questline.core.database import StateStore, BackupManager
from questline.dashboard import create_app
from questline.services import GameService, DebugTools, ServiceManager
from questline.utils.datetime_utils import Clock

# Wednesday; the week started on Sunday 2024-06-02
START = datetime(2024, 6, 5, 12, 0, tzinfo=pytz.utc)


class FakeNow:
    """Callable wall clock that tests can move forward."""

    def __init__(self, moment: datetime = START):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def shift(self, **kwargs) -> None:
        self.moment += timedelta(**kwargs)


@pytest.fixture
def fake_now():
    return FakeNow()


@pytest.fixture
def clock(fake_now):
    return Clock(timezone="UTC", now_func=fake_now)


@pytest.fixture
def service(clock):
    """Service without persistence."""
    return GameService(clock=clock)


@pytest.fixture
def debug_tools(service):
    return DebugTools(service)


@pytest.fixture
def store(tmp_path):
    return StateStore(
        state_file=tmp_path / "state.json",
        offset_file=tmp_path / "offset.json",
        backup_manager=BackupManager(tmp_path / "backups", max_backups=3),
    )


@pytest.fixture
def stored_service(store, fake_now):
    return GameService.from_store(store, timezone="UTC", now_func=fake_now)


@pytest.fixture
def client(stored_service):
    manager = ServiceManager.from_service(stored_service)
    app = create_app(manager=manager, enable_scheduler=False, debug_tools=True)
    with TestClient(app) as test_client:
        yield test_client


def next_day(service: GameService, days: int = 1):
    """Advance the debug date and run the new day's rollover."""
    return DebugTools(service).advance_day(days)
