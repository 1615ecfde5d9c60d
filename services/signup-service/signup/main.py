"""FastAPI application wiring for the signup service."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg.conninfo import conninfo_to_dict
from psycopg_pool import ConnectionPool

from .api.errors import register_exception_handlers
from .api.routes import router as register_router
from .config import get_settings
from .domain.service import RegistrationService
from .repository import AccountRepository
from .security.passwords import PasswordHasher
from .security.tokens import TokenIssuer

settings = get_settings()

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Route root logging to stdout at the configured level."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )


def _describe_database(url: str) -> str:
    """Return ``host:port/dbname`` for ``url`` without credentials."""
    params = conninfo_to_dict(url)
    return f"{params.get('host', 'localhost')}:{params.get('port', 5432)}/{params.get('dbname', '')}"


def build_service(pool: ConnectionPool) -> RegistrationService:
    """Assemble the registration pipeline around the shared connection pool."""
    hasher = PasswordHasher(settings.bcrypt_rounds)
    repository = AccountRepository(pool, table=settings.accounts_table)
    repository.ensure_schema()
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; every registration will fail at token signing")
    issuer = TokenIssuer(
        settings.jwt_secret,
        ttl_seconds=settings.jwt_ttl_seconds,
        algorithm=settings.jwt_algorithm,
        issuer=settings.jwt_issuer,
    )
    return RegistrationService(repository, hasher, issuer)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_pool_timeout_seconds,
        open=False,
    )
    pool.open()
    logger.info("account store at %s", _describe_database(settings.database_url))
    app.state.pool = pool
    try:
        app.state.registration_service = build_service(pool)
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
register_exception_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(register_router)


def run() -> None:
    """Serve the application with uvicorn on the configured address."""
    configure_logging()
    uvicorn.run(
        app,
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
