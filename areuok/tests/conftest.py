import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from areuok.core.config import get_settings
from areuok.db.session import engine
from areuok.main import app
from areuok.models import Base
from areuok.services import clock


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now += timedelta(**delta)
        return self.now

    def set(self, value: datetime) -> datetime:
        self.now = value
        return self.now


@pytest.fixture()
def client() -> TestClient:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def frozen_clock(monkeypatch) -> FakeClock:
    fake = FakeClock(datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(clock, "utcnow", fake)
    return fake


@pytest.fixture()
def settings(monkeypatch):
    current = get_settings()
    for name in ("streak_timezone", "name_cooldown_days", "search_limit", "signin_history_limit"):
        monkeypatch.setattr(current, name, getattr(current, name))
    return current


@pytest.fixture()
def session_factory(tmp_path):
    file_engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'areuok.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(bind=file_engine, autocommit=False, autoflush=False, expire_on_commit=False)
    file_engine.dispose()


@pytest.fixture()
def make_device(client):
    def register(name: str, hardware_id=None, mode: str = "signin") -> dict:
        response = client.post(
            "/api/v1/devices/register",
            json={"device_name": name, "hardware_id": hardware_id, "mode": mode},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return register
