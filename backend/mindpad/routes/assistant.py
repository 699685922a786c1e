"""
MindPad Backend — AI Proxy Route
=================================

What:  POST /functions/ai-assistant, the AI proxy function.
How:   Three checks run in a fixed order before any outbound call, then the
       request is handed to AssistantService.

Check order:
    1. Gateway credential configured   else 500 "AI_GATEWAY_API_KEY is not configured"
    2. Bearer session present & valid  else 401 "No authorization header" / reason
    3. Known action                    else 500 "Invalid action"

Every error body is `{"error": "<message>"}` (see AssistantError handler in
main.py). Preflight OPTIONS requests never get here: the CORS middleware
answers them.
"""

import logging

from fastapi import APIRouter, Depends, Request

from mindpad.dependencies import get_current_user
from mindpad.exceptions import AssistantAuthorizationError, AuthenticationError
from mindpad.schemas.assistant import (
    AssistantErrorResponse,
    AssistantRequest,
    AssistantResponse,
)
from mindpad.schemas.auth import AuthenticatedUser
from mindpad.services.assistant_service import AssistantService, assistant_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["AI Assistant"])


def get_assistant_service() -> AssistantService:
    return assistant_service


async def require_gateway_configured(
    service: AssistantService = Depends(get_assistant_service),
) -> None:
    service.ensure_configured()


async def get_assistant_user(request: Request) -> AuthenticatedUser:
    """The caller, with session failures reported in the proxy's error shape."""
    try:
        return await get_current_user(request)
    except AuthenticationError as e:
        raise AssistantAuthorizationError(message=e.message, context=e.context) from e


@router.post(
    "/ai-assistant",
    response_model=AssistantResponse,
    dependencies=[Depends(require_gateway_configured)],
    responses={
        200: {"description": "Generated text", "model": AssistantResponse},
        401: {"description": "Missing or invalid session", "model": AssistantErrorResponse},
        402: {"description": "AI credits exhausted", "model": AssistantErrorResponse},
        429: {"description": "AI gateway rate limit", "model": AssistantErrorResponse},
        500: {
            "description": "Credential missing, invalid action or gateway failure",
            "model": AssistantErrorResponse,
        },
    },
    summary="Run an AI action on note content",
    description=(
        "Sends the content to the AI gateway with the prompt of the chosen action "
        "(summarize, rewrite_formal, rewrite_concise, generate_ideas) and records the "
        "result in the note's AI history. One outbound call, no retries."
    ),
)
async def ai_assistant(
    payload: AssistantRequest,
    user: AuthenticatedUser = Depends(get_assistant_user),
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantResponse:
    text = await service.run(
        user_id=user.id,
        action=payload.action,
        content=payload.content,
        note_id=payload.note_id,
    )
    return AssistantResponse(response=text)
