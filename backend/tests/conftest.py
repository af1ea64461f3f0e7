import os
import io
import pytest
import sys
import tempfile
import uuid
from datetime import datetime, timedelta
from typing import Generator
from sqlmodel import Session, create_engine
from alembic.config import Config
from alembic import command
from PIL import Image

# backend directory on sys.path
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.dirname(CURRENT_DIR)
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import infra.database.connection as db_connection
from infra.database.schema import init_raw_db


class FakeClock:
    """Deterministic clock; every call moves one second forward."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now

    def advance(self, seconds: int = 60):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture(name="engine", scope="function")
def engine_fixture(mocker):
    """
    A fresh DuckDB file per test. Alembic gets the engine's connection
    so env.py never opens a second writer.
    """
    unique_id = str(uuid.uuid4())
    test_db_path = os.path.join(tempfile.gettempdir(), f"musicon_test_{unique_id}.duckdb")

    os.environ["DB_PATH"] = test_db_path

    connect_args = {'config': {'worker_threads': 4, 'access_mode': 'READ_WRITE'}}
    engine = create_engine(
        f"duckdb:///{test_db_path}",
        connect_args=connect_args
    )

    # swap the application-wide engine for the test one
    mocker.patch.object(db_connection, "engine", engine)
    mocker.patch.object(db_connection, "DB_PATH", test_db_path)
    mocker.patch.object(db_connection, "DATABASE_URL", f"duckdb:///{test_db_path}")

    init_raw_db(engine)

    alembic_cfg = Config(os.path.join(BACKEND_DIR, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(BACKEND_DIR, "alembic"))
    with engine.begin() as connection:
        alembic_cfg.attributes["connection"] = connection
        command.stamp(alembic_cfg, "head")

    # app startup must not bootstrap the real database during tests
    mocker.patch("infra.database.connection.init_db")

    yield engine

    engine.dispose()
    if os.path.exists(test_db_path):
        try:
            os.remove(test_db_path)
        except OSError:
            pass


@pytest.fixture(name="session", scope="function")
def session_fixture(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator:
    """TestClient with the DB session dependency replaced"""
    from fastapi.testclient import TestClient
    from main import app
    from infra.database.connection import get_session

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def song_service(session: Session, clock: FakeClock):
    from app.services.song_app_service import SongAppService
    return SongAppService(session, clock=clock)


@pytest.fixture
def setlist_service(session: Session, clock: FakeClock):
    from app.services.setlist_app_service import SetlistAppService
    return SetlistAppService(session, clock=clock)


def make_png(color=(200, 30, 30), size=(40, 20), mode="RGB") -> bytes:
    img = Image.new(mode, size, color)
    out = io.BytesIO()
    img.save(out, "PNG")
    return out.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()
