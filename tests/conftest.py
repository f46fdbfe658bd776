import os
import random
import tempfile
from datetime import datetime, timezone
from typing import Generator

# fxconvert.main builds a default app at import time; keep its DB out of the repo
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="fxconvert-test-"))

import pytest
from fastapi.testclient import TestClient

from fxconvert.core.config import Settings
from fxconvert.db.dal import Database
from fxconvert.db.migrate import apply_migrations
from fxconvert.main import create_app
from fxconvert.services.auth import AuthService
from fxconvert.services.rates.resolver import RateResolver

FIXED_EPOCH = 1_760_000_000.0


class FrozenClock:
    """Mutable UTC clock for session expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings(data_dir=tmp_path, db_filename="test.sqlite3")
    s.init_post_load()
    return s


@pytest.fixture
def db(settings: Settings) -> Database:
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def auth_service(db: Database, settings: Settings, clock: FrozenClock) -> AuthService:
    return AuthService(db, settings, clock=clock)


@pytest.fixture
def exact_resolver() -> RateResolver:
    return RateResolver(jitter=False, clock=lambda: FIXED_EPOCH)


@pytest.fixture
def jittered_resolver() -> RateResolver:
    return RateResolver(clock=lambda: FIXED_EPOCH, rng=random.Random(1234))


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        yield c
