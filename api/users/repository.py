"""
User persistence (raw SQL over asyncpg).

`PostgresUserStore` wraps an explicitly passed pool. Every method runs one
parameterized statement on a borrowed connection and either returns a `User`
or raises a `users.errors` kind. asyncpg exceptions never leave this module.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import asyncpg

from core import db

from .errors import Backend, Conflict, NotFound, UserError
from .schemas import User

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    CONSTRAINT users_email_key UNIQUE (email)
)
"""

DEMO_USERS = (
    ("Alice", "alice@example.com"),
    ("Bob", "bob@example.com"),
)

# Columns a partial update may touch. SET clauses are built from this tuple only.
UPDATABLE_COLUMNS = ("name", "email")

# Largest value a BIGINT identity can hold; anything outside 1..MAX_USER_ID was never issued.
MAX_USER_ID = 2**63 - 1

_CONSTRAINT_FIELDS = {
    "users_email_key": "email",
}


def _check_issuable(user_id: int) -> None:
    if not 1 <= user_id <= MAX_USER_ID:
        raise NotFound(user_id)


def _to_user(row: Mapping[str, Any]) -> User:
    return User(id=int(row["id"]), name=str(row["name"]), email=str(row["email"]))


def _conflict_field(exc: asyncpg.UniqueViolationError) -> str:
    constraint = getattr(exc, "constraint_name", None) or ""
    # email is the only unique column besides the identity key.
    return _CONSTRAINT_FIELDS.get(constraint, "email")


@contextmanager
def _classified(operation: str) -> Iterator[None]:
    try:
        yield
    except UserError:
        raise
    except asyncpg.UniqueViolationError as exc:
        raise Conflict(_conflict_field(exc)) from exc
    except Exception as exc:
        logger.exception("db_operation_failed operation=%s", operation)
        raise Backend(exc) from exc


async def ensure_schema(pool: asyncpg.Pool) -> None:
    await db.execute(pool, SCHEMA_SQL)
    logger.info("db_schema_ready table=users")


async def seed_demo_users(pool: asyncpg.Pool) -> int:
    """
    Insert the demo users when the table is empty. Returns how many were added.
    """
    row = await db.fetch_one(pool, "SELECT count(*) AS n FROM users")
    if row is not None and int(row["n"]) > 0:
        return 0

    added = 0
    for name, email in DEMO_USERS:
        inserted = await db.fetch_one(
            pool,
            """
            INSERT INTO users (name, email)
            VALUES ($1, $2)
            ON CONFLICT (email) DO NOTHING
            RETURNING id
            """,
            name,
            email,
        )
        if inserted is not None:
            added += 1
    logger.info("db_seeded users_added=%s", added)
    return added


class PostgresUserStore:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    async def close(self) -> None:
        await db.close_pool(self.pool)

    async def insert(self, name: str, email: str) -> User:
        with _classified("insert"):
            row = await db.fetch_one(
                self.pool,
                """
                INSERT INTO users (name, email)
                VALUES ($1, $2)
                RETURNING id, name, email
                """,
                name,
                email,
            )
            if row is None:
                raise Backend("INSERT returned no row.")
        return _to_user(row)

    async def get_by_id(self, user_id: int) -> User:
        _check_issuable(user_id)
        with _classified("get_by_id"):
            row = await db.fetch_one(
                self.pool,
                """
                SELECT id, name, email
                FROM users
                WHERE id = $1
                """,
                user_id,
            )
        if row is None:
            raise NotFound(user_id)
        return _to_user(row)

    async def list_all(self) -> list[User]:
        with _classified("list_all"):
            rows = await db.fetch_all(
                self.pool,
                """
                SELECT id, name, email
                FROM users
                ORDER BY id ASC
                """,
            )
        return [_to_user(row) for row in rows]

    async def update_partial(self, user_id: int, fields: Mapping[str, str]) -> User:
        _check_issuable(user_id)
        columns = [col for col in UPDATABLE_COLUMNS if col in fields]
        if not columns:
            return await self.get_by_id(user_id)

        # $1 is the id; values follow in column order.
        assignments = ", ".join(f"{col} = ${idx}" for idx, col in enumerate(columns, start=2))
        sql = f"""
            UPDATE users
            SET {assignments}
            WHERE id = $1
            RETURNING id, name, email
        """
        with _classified("update_partial"):
            row = await db.fetch_one(self.pool, sql, user_id, *(fields[col] for col in columns))
        if row is None:
            raise NotFound(user_id)
        return _to_user(row)

    async def delete_by_id(self, user_id: int) -> None:
        _check_issuable(user_id)
        with _classified("delete_by_id"):
            row = await db.fetch_one(
                self.pool,
                """
                DELETE FROM users
                WHERE id = $1
                RETURNING id
                """,
                user_id,
            )
        if row is None:
            raise NotFound(user_id)
