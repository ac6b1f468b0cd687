"""
In-memory user store.

Same contract as `PostgresUserStore`: ids come from a counter that never goes
backwards, email is unique, list order is ascending id. Used by tests and when
DATABASE_URL is `memory://`.
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import Conflict, NotFound
from .repository import DEMO_USERS, UPDATABLE_COLUMNS
from .schemas import User


class InMemoryUserStore:
    def __init__(self) -> None:
        self._rows: dict[int, User] = {}
        self._last_id = 0

    async def close(self) -> None:
        return None

    def _email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        return any(user.email == email and user.id != exclude_id for user in self._rows.values())

    async def insert(self, name: str, email: str) -> User:
        if self._email_taken(email):
            raise Conflict("email")
        self._last_id += 1
        user = User(id=self._last_id, name=name, email=email)
        self._rows[user.id] = user
        return user

    async def get_by_id(self, user_id: int) -> User:
        user = self._rows.get(user_id)
        if user is None:
            raise NotFound(user_id)
        return user

    async def list_all(self) -> list[User]:
        return [self._rows[key] for key in sorted(self._rows)]

    async def update_partial(self, user_id: int, fields: Mapping[str, str]) -> User:
        current = await self.get_by_id(user_id)
        changes = {col: fields[col] for col in UPDATABLE_COLUMNS if col in fields}
        if not changes:
            return current
        if "email" in changes and self._email_taken(changes["email"], exclude_id=user_id):
            raise Conflict("email")
        updated = current.model_copy(update=changes)
        self._rows[user_id] = updated
        return updated

    async def delete_by_id(self, user_id: int) -> None:
        if self._rows.pop(user_id, None) is None:
            raise NotFound(user_id)

    async def seed_demo_users(self) -> int:
        if self._rows:
            return 0
        for name, email in DEMO_USERS:
            await self.insert(name, email)
        return len(DEMO_USERS)
