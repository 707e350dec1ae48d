import asyncio
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from boiler_leads.domain.inquiries import db_models  # noqa: F401
from boiler_leads.infra.db import Base
from boiler_leads.main import app
from boiler_leads.settings import settings

# Attributes tests may place on app.state; each is cleared after every test.
OVERRIDABLE_STATE = ("inquiry_store", "webhook_notifier", "metrics")


@pytest.fixture(scope="session")
def db_engine(tmp_path_factory):
    database = tmp_path_factory.mktemp("db") / "leads.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{database}",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async def create_schema() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_schema())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture(scope="session")
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture(autouse=True)
def empty_tables(db_engine):
    async def delete_rows() -> None:
        async with db_engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                await conn.execute(table.delete())

    asyncio.run(delete_rows())


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Dev-mode settings for every test; tests change further attributes through monkeypatch."""
    monkeypatch.setattr(settings, "testing", True)
    monkeypatch.setattr(settings, "app_env", "dev")
    return settings


@pytest.fixture(autouse=True)
def isolated_app_state():
    yield
    for name in OVERRIDABLE_STATE:
        setattr(app.state, name, None)


@pytest.fixture()
def client(session_factory):
    app.state.db_session_factory = session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.state.db_session_factory = None
