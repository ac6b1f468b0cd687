"""
User API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str


# Request bodies keep every field optional: required-ness and content rules
# are enforced by `users.validation` so they map to 400, not FastAPI's 422.
class UserCreate(BaseModel):
    name: str | None = Field(default=None, examples=["Alice"])
    email: str | None = Field(default=None, examples=["alice@example.com"])


class UserUpdate(BaseModel):
    name: str | None = Field(default=None)
    email: str | None = Field(default=None)


class ErrorResponse(BaseModel):
    error: str
    detail: str
    field: str | None = None
    rule: str | None = None
    id: int | None = None
