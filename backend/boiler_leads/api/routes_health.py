import asyncio
import logging
from functools import lru_cache
from pathlib import Path

from alembic.script import ScriptDirectory
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter()
logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "alembic"
READINESS_TIMEOUT_SECONDS = 2.0


@lru_cache(maxsize=1)
def expected_revision() -> str | None:
    """Head revision of the migrations shipped next to the package.

    ``None`` when the migration scripts are not deployed with the service, in
    which case readiness only checks that the database answers.
    """
    if not MIGRATIONS_DIR.is_dir():
        return None
    return ScriptDirectory(str(MIGRATIONS_DIR)).get_current_head()


async def _applied_revision(session_factory) -> str | None:  # noqa: ANN001
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
        try:
            result = await session.execute(text("SELECT version_num FROM alembic_version"))
        except SQLAlchemyError:
            return None
        return result.scalars().first()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.head("/healthz")
async def healthz_head() -> Response:
    return Response(status_code=200)


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    """Ready when the database answers and carries the shipped schema revision."""
    session_factory = getattr(request.app.state, "db_session_factory", None)
    expected = expected_revision()
    database: dict = {"ok": False}
    schema: dict = {"ok": False, "expected": expected, "applied": None}

    if session_factory is None:
        database["error"] = "not_configured"
    else:
        try:
            applied = await asyncio.wait_for(_applied_revision(session_factory), READINESS_TIMEOUT_SECONDS)
        except Exception as exc:  # noqa: BLE001
            logger.warning("readiness_database_unavailable", extra={"extra": {"error_type": type(exc).__name__}})
            database["error"] = type(exc).__name__
        else:
            database["ok"] = True
            schema["applied"] = applied
            schema["ok"] = expected is None or applied == expected

    ready = database["ok"] and schema["ok"]
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"ok": ready, "database": database, "schema": schema},
    )
