"""MindPad Backend — Session introspection route."""

from fastapi import APIRouter, Depends

from mindpad.dependencies import get_current_user
from mindpad.schemas.auth import AuthenticatedUser, UserResponse
from mindpad.schemas.note import ErrorResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get(
    "/user",
    response_model=UserResponse,
    responses={401: {"description": "Missing or invalid session", "model": ErrorResponse}},
    summary="Current session user",
)
async def get_user(user: AuthenticatedUser = Depends(get_current_user)) -> UserResponse:
    return UserResponse(id=user.id, email=user.email)
