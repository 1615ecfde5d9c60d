"""Database repository for registered accounts."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

import psycopg
from psycopg import errors, sql
from psycopg.rows import tuple_row
from psycopg_pool import ConnectionPool

from .domain.account import Account
from .domain.errors import DuplicateAccountError, StoreError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class AccountRepository:
    """Postgres-backed account persistence sharing one process-wide pool."""

    def __init__(self, pool: ConnectionPool, table: str = "users") -> None:
        """Store the connection pool and the table holding account rows."""
        if not _IDENTIFIER.match(table):
            raise ValueError(f"invalid accounts table name: {table!r}")
        self._pool = pool
        self._table = sql.Identifier(table)
        self._identity_index = sql.Identifier(f"{table}_identity_key")

    def ensure_schema(self) -> None:
        """Create the accounts table and its unique identity index when missing."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        sql.SQL(
                            """
                            CREATE TABLE IF NOT EXISTS {table} (
                                identity TEXT NOT NULL,
                                secret_hash TEXT NOT NULL,
                                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                            )
                            """
                        ).format(table=self._table)
                    )
                    cur.execute(
                        sql.SQL(
                            "CREATE UNIQUE INDEX IF NOT EXISTS {index} ON {table} (identity)"
                        ).format(index=self._identity_index, table=self._table)
                    )
                    conn.commit()
        except psycopg.Error as exc:
            logger.error("account schema setup failed: %s", exc)
            raise StoreError("account store unavailable") from exc

    def insert_account(self, account: Account) -> Account:
        """Persist a new account row and return it with its creation time.

        Raises
        ------
        DuplicateAccountError
            When an account with the same identity already exists.
        StoreError
            On connectivity loss, pool exhaustion or any other rejected write.
        """
        created_at = account.created_at or datetime.now(timezone.utc)
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        sql.SQL(
                            """
                            INSERT INTO {table} (identity, secret_hash, created_at)
                            VALUES (%s, %s, %s)
                            RETURNING identity, secret_hash, created_at
                            """
                        ).format(table=self._table),
                        (account.identity, account.secret_hash, created_at),
                    )
                    row = cur.fetchone()
                    conn.commit()
        except errors.UniqueViolation as exc:
            raise DuplicateAccountError("account already exists") from exc
        except psycopg.Error as exc:
            logger.warning("account insert failed: %s", exc)
            raise StoreError("account store unavailable") from exc
        return self._map_record(row)

    def get_account(self, identity: str) -> Account | None:
        """Fetch the account registered under ``identity`` or return ``None``."""
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=tuple_row) as cur:
                    cur.execute(
                        sql.SQL(
                            """
                            SELECT identity, secret_hash, created_at
                            FROM {table}
                            WHERE identity = %s
                            """
                        ).format(table=self._table),
                        (identity,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            logger.warning("account lookup failed: %s", exc)
            raise StoreError("account store unavailable") from exc
        if not row:
            return None
        return self._map_record(row)

    def _map_record(self, row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(identity=row[0], secret_hash=row[1], created_at=row[2])
