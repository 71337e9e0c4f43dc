"""
Userbase Backend — Users Route Handlers
=========================================

What:  CRUD endpoints for the users collection.
How:   Each handler extracts path/query/body data, calls UserService, and
       chooses the status code. Errors are raised as application exceptions
       and rendered by the handlers registered in main.py.

The router carries only the resource path; create_app() mounts it under the
configured API prefix (default /api).
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status

from app.exceptions import ValidationError
from app.schemas.user import ErrorResponse, UserSchema, UserUpdate
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

USERS_PATH = "/users"

router = APIRouter(prefix=USERS_PATH, tags=["Users"])


def get_user_service(request: Request) -> UserService:
    """Dependency: the UserService assembled by create_app()."""
    return request.app.state.user_service


@router.get(
    "",
    response_model=List[UserSchema],
    responses={
        200: {"description": "All users, ordered by id"},
        503: {"description": "Database unavailable", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List users",
)
async def list_users(
    email: Optional[str] = Query(
        default=None,
        description="Only return the user with this email (empty list if none)",
    ),
    service: UserService = Depends(get_user_service),
) -> List[UserSchema]:
    """
    List every user, or look one up by email.

    An unmatched email yields an empty array with 200, not a 404, so a
    missing user is never confused with a failed request.
    """
    if email is not None:
        user = await service.find_by_email(email)
        return [user] if user else []
    return await service.find_all()


@router.get(
    "/{user_id}",
    response_model=UserSchema,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        503: {"description": "Database unavailable", "model": ErrorResponse},
    },
    summary="Get a single user by ID",
)
async def get_user(
    user_id: str = Path(min_length=1, max_length=64, description="Caller-assigned identifier"),
    service: UserService = Depends(get_user_service),
) -> UserSchema:
    return await service.get(user_id)


@router.post(
    "",
    response_model=UserSchema,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"description": "A user with this id already exists", "model": ErrorResponse},
        503: {"description": "Database unavailable", "model": ErrorResponse},
    },
    summary="Create a user",
)
async def create_user(
    user: UserSchema,
    service: UserService = Depends(get_user_service),
) -> UserSchema:
    return await service.create(user)


@router.put(
    "/{user_id}",
    response_model=UserSchema,
    responses={
        400: {"description": "Body id does not match path id", "model": ErrorResponse},
        503: {"description": "Database unavailable", "model": ErrorResponse},
    },
    summary="Create or replace a user",
    description=(
        "Upsert: creates the user when the id is unused, otherwise replaces "
        "every field. Fields omitted from the body are cleared."
    ),
)
async def save_user(
    body: UserUpdate,
    user_id: str = Path(min_length=1, max_length=64, description="Caller-assigned identifier"),
    service: UserService = Depends(get_user_service),
) -> UserSchema:
    if body.id is not None and body.id != user_id:
        raise ValidationError(
            message=f"Body id '{body.id}' does not match path id '{user_id}'",
            field="id",
        )
    return await service.save(body.to_user(user_id))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        503: {"description": "Database unavailable", "model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    user_id: str = Path(min_length=1, max_length=64, description="Caller-assigned identifier"),
    service: UserService = Depends(get_user_service),
) -> Response:
    user = await service.get(user_id)
    await service.delete(user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
