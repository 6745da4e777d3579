"""Test fixtures for revops-maturity.

Every test gets its own SQLite database file under ``tmp_path`` and an
application whose lifespan has been entered, so ``app.state`` is wired the
same way it is in production.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from revops_maturity.adapters.database import Database, create_database, init_database
from revops_maturity.adapters.repositories import AssessmentStore
from revops_maturity.core.auth import create_admin_token
from revops_maturity.main import create_app
from revops_maturity.settings import Settings

ADMIN_PASSWORD = "correct-horse"
JWT_SECRET = "test-secret"


# ---------------------------------------------------------------------------
# Settings and storage
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file, AI disabled."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'revops.db'}",
        claude_api_key="",
        jwt_secret=JWT_SECRET,
        admin_password=ADMIN_PASSWORD,
        log_level="WARNING",
        _env_file=None,
    )


@pytest_asyncio.fixture()
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Initialised database for repository tests."""
    db = create_database(settings.database_url)
    await init_database(db)
    yield db
    await db.dispose()


@pytest.fixture()
def store(database: Database) -> AssessmentStore:
    """AssessmentStore backed by the per-test database."""
    return AssessmentStore(database.session_factory)


# ---------------------------------------------------------------------------
# Application and HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture()
def ai_client() -> AsyncMock:
    """Unconfigured enrichment client double; tests flip it on as needed."""
    client = AsyncMock()
    client.is_configured = False
    return client


@pytest_asyncio.fixture()
async def app(settings: Settings, ai_client: AsyncMock) -> AsyncGenerator[FastAPI, None]:
    """Application with its lifespan entered."""
    application = create_app(settings, ai_client=ai_client)
    async with application.router.lifespan_context(application):
        yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


@pytest.fixture()
def admin_token(settings: Settings) -> str:
    """A valid admin JWT for the test settings."""
    return create_admin_token(settings)


@pytest.fixture()
def admin_headers(admin_token: str) -> dict[str, Any]:
    """Authorization header carrying the admin token."""
    return {"Authorization": f"Bearer {admin_token}"}
