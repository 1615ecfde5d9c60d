from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from signup.api import routes
from signup.api.errors import register_exception_handlers
from signup.domain.account import Account
from signup.domain.errors import DuplicateAccountError, StoreError
from signup.domain.service import RegistrationService
from signup.security.passwords import PasswordHasher
from signup.security.tokens import TokenIssuer

SIGNING_KEY = "test-signing-key-0123456789abcdef"


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed unique identity index."""

    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.failure: Exception | None = None

    def insert_account(self, account: Account) -> Account:
        if self.failure is not None:
            raise self.failure
        if account.identity in self.accounts:
            raise DuplicateAccountError("account already exists")
        stored = Account(
            identity=account.identity,
            secret_hash=account.secret_hash,
            created_at=datetime.now(timezone.utc),
        )
        self.accounts[account.identity] = stored
        return stored

    def get_account(self, identity: str) -> Account | None:
        return self.accounts.get(identity)

    def go_offline(self) -> None:
        self.failure = StoreError("account store unavailable")


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def hasher() -> PasswordHasher:
    # minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(SIGNING_KEY)


@pytest.fixture
def service(repository, hasher, issuer) -> RegistrationService:
    return RegistrationService(repository, hasher, issuer)


def build_app(service: RegistrationService) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(routes.router)
    app.state.registration_service = service
    return app


@pytest.fixture
def client_for():
    """Return a factory building test clients around arbitrary services."""
    clients: list[TestClient] = []

    def _make(service: RegistrationService, **kwargs) -> TestClient:
        client = TestClient(build_app(service), **kwargs)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def api_client(service, client_for) -> TestClient:
    """Provide a FastAPI test client with isolated state."""
    return client_for(service)


class FakeCursor:
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def execute(self, query, params=None) -> None:
        if self._conn.error is not None:
            raise self._conn.error
        self._conn.executed.append((query, params))

    def fetchone(self):
        return self._conn.rows.pop(0) if self._conn.rows else None


class FakeConnection:
    def __init__(self) -> None:
        self.executed: list[tuple] = []
        self.rows: list[tuple] = []
        self.error: Exception | None = None
        self.commits = 0

    def cursor(self, row_factory=None) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1


class FakePool:
    """Stand-in for ``psycopg_pool.ConnectionPool`` handing out one connection."""

    def __init__(self) -> None:
        self.conn = FakeConnection()
        self.checkout_error: Exception | None = None

    @contextmanager
    def connection(self):
        if self.checkout_error is not None:
            raise self.checkout_error
        yield self.conn


@pytest.fixture
def pool() -> FakePool:
    return FakePool()
