"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from . import schemas
from .service import UserService

router = APIRouter(prefix="/users")

_ERROR_RESPONSES = {
    400: {"model": schemas.ErrorResponse, "description": "Validation error"},
    404: {"model": schemas.ErrorResponse, "description": "User not found"},
    409: {"model": schemas.ErrorResponse, "description": "Email already in use"},
    500: {"model": schemas.ErrorResponse, "description": "Backend failure"},
}


def _responses(*codes: int) -> dict:
    return {code: _ERROR_RESPONSES[code] for code in codes}


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


@router.get(
    "",
    response_model=list[schemas.User],
    responses=_responses(500),
    description="Get all users, ordered by id.",
)
async def list_users(service: UserService = Depends(get_user_service)) -> list[schemas.User]:
    return await service.list()


@router.post(
    "",
    response_model=schemas.User,
    status_code=status.HTTP_201_CREATED,
    responses=_responses(400, 409, 500),
    description="Create a new user.",
)
async def create_user(
    payload: schemas.UserCreate,
    service: UserService = Depends(get_user_service),
) -> schemas.User:
    return await service.create(payload.model_dump(exclude_unset=True))


@router.get(
    "/{user_id}",
    response_model=schemas.User,
    responses=_responses(404, 500),
    description="Get a user by id.",
)
async def get_user(user_id: int, service: UserService = Depends(get_user_service)) -> schemas.User:
    return await service.get(user_id)


@router.patch(
    "/{user_id}",
    response_model=schemas.User,
    responses=_responses(400, 404, 409, 500),
    description="Update the supplied fields of a user.",
)
async def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    service: UserService = Depends(get_user_service),
) -> schemas.User:
    return await service.update(user_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_responses(404, 500),
    description="Delete a user.",
)
async def delete_user(user_id: int, service: UserService = Depends(get_user_service)) -> Response:
    await service.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
