"""
Error kinds the user core can raise.

The set is closed: every failure leaving `users/` is one of these four.
Each kind knows its HTTP status and how to render itself without leaking
backend detail.
"""

from __future__ import annotations

from typing import Any


class UserError(Exception):
    status_code: int = 500
    kind: str = "error"

    def to_body(self) -> dict[str, Any]:
        return {"error": self.kind, "detail": str(self)}


class ValidationError(UserError):
    status_code = 400
    kind = "validation"

    def __init__(self, field: str, rule: str) -> None:
        self.field = field
        self.rule = rule
        super().__init__(f"Field '{field}' failed rule '{rule}'.")

    def to_body(self) -> dict[str, Any]:
        return {"error": self.kind, "field": self.field, "rule": self.rule, "detail": str(self)}


class NotFound(UserError):
    status_code = 404
    kind = "not_found"

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found.")

    def to_body(self) -> dict[str, Any]:
        return {"error": self.kind, "id": self.user_id, "detail": str(self)}


class Conflict(UserError):
    status_code = 409
    kind = "conflict"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"A user with this {field} already exists.")

    def to_body(self) -> dict[str, Any]:
        return {"error": self.kind, "field": self.field, "detail": str(self)}


class Backend(UserError):
    status_code = 500
    kind = "backend"

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"Backend failure: {cause}")

    def to_body(self) -> dict[str, Any]:
        # The cause is logged server-side only.
        return {"error": self.kind, "detail": "Internal server error."}
