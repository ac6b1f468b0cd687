"""
User business logic.

`UserService` validates payloads and delegates to a store. It holds no state
besides the store handle and never caches records between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from core import config, db

from . import repository, validation
from .errors import Backend, UserError
from .memory import InMemoryUserStore
from .schemas import User

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    async def insert(self, name: str, email: str) -> User: ...

    async def get_by_id(self, user_id: int) -> User: ...

    async def list_all(self) -> list[User]: ...

    async def update_partial(self, user_id: int, fields: Mapping[str, str]) -> User: ...

    async def delete_by_id(self, user_id: int) -> None: ...

    async def close(self) -> None: ...


async def open_store() -> UserStore:
    """
    Build the store selected by DATABASE_URL, applying schema and demo seed
    settings.
    """
    if config.uses_memory_store():
        store = InMemoryUserStore()
        if config.seed_demo_users():
            await store.seed_demo_users()
        logger.info("user_store_ready backend=memory")
        return store

    pool = await db.create_pool(config.database_url())
    try:
        if config.auto_create_schema():
            await repository.ensure_schema(pool)
        if config.seed_demo_users():
            await repository.seed_demo_users(pool)
    except Exception:
        await db.close_pool(pool)
        raise
    logger.info("user_store_ready backend=postgres")
    return repository.PostgresUserStore(pool)


class UserService:
    def __init__(self, store: UserStore) -> None:
        self.store = store

    async def create(self, payload: Mapping[str, Any]) -> User:
        try:
            fields = validation.validate_create(payload)
            user = await self.store.insert(fields["name"], fields["email"])
        except UserError as exc:
            self._log_failure("create", exc)
            raise
        logger.info("user_created id=%s", user.id)
        return user

    async def get(self, user_id: int) -> User:
        try:
            return await self.store.get_by_id(user_id)
        except UserError as exc:
            self._log_failure("get", exc, user_id=user_id)
            raise

    async def list(self) -> list[User]:
        try:
            return await self.store.list_all()
        except UserError as exc:
            self._log_failure("list", exc)
            raise

    async def update(self, user_id: int, payload: Mapping[str, Any]) -> User:
        try:
            fields = validation.validate_update(payload)
            user = await self.store.update_partial(user_id, fields)
        except UserError as exc:
            self._log_failure("update", exc, user_id=user_id)
            raise
        logger.info("user_updated id=%s fields=%s", user.id, ",".join(sorted(fields)) or "-")
        return user

    async def delete(self, user_id: int) -> None:
        try:
            await self.store.delete_by_id(user_id)
        except UserError as exc:
            self._log_failure("delete", exc, user_id=user_id)
            raise
        logger.info("user_deleted id=%s", user_id)

    @staticmethod
    def _log_failure(operation: str, exc: UserError, *, user_id: int | None = None) -> None:
        if isinstance(exc, Backend):
            # The store already logged the cause with its traceback.
            logger.error("user_operation_failed operation=%s id=%s", operation, user_id)
            return
        logger.info(
            "user_operation_rejected operation=%s id=%s kind=%s",
            operation,
            user_id,
            exc.kind,
        )
