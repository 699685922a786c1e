"""
MindPad Backend — AI Assistant Service (Proxy Orchestrator)
============================================================

What:  The AI proxy workflow: action → prompt → gateway → history row.
How:   Composes the prompt table, a ChatCompletionService and a session
       factory for the history write.
Who:   Called by POST /functions/ai-assistant after the credential and the
       caller's session have been checked.

Orchestration Flow:
    ┌──────────┐    ┌──────────┐    ┌──────────────┐    ┌──────────────┐
    │  Action  │───▶│  Prompt  │───▶│  AI gateway  │───▶│ History row  │
    │  check   │    │  table   │    │  (1 call)    │    │ (own session)│
    └──────────┘    └──────────┘    └──────────────┘    └──────────────┘

    The history write is best effort. It runs in its own session after the
    gateway call; a failure is logged and the generated text is still
    returned. Nothing here retries.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mindpad.database import async_session_factory
from mindpad.exceptions import GatewayConfigurationError
from mindpad.models.ai_history import AIHistory
from mindpad.models.note import Note
from mindpad.services.gateway_service import gateway_service
from mindpad.services.llm_base import ChatCompletionService
from mindpad.services.prompts import AssistantAction, build_messages, parse_action

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]


class AssistantService:
    """
    Args:
        llm:             Completion backend (default: the AI gateway)
        session_factory: Source of sessions for the history write
    """

    def __init__(
        self,
        llm: Optional[ChatCompletionService] = None,
        session_factory: Optional[SessionFactory] = None,
    ):
        self.llm = llm or gateway_service
        self.session_factory = session_factory or async_session_factory

    def ensure_configured(self) -> None:
        """First proxy check: refuse before looking at the caller or the body."""
        if not self.llm.is_configured:
            raise GatewayConfigurationError()

    async def run(
        self,
        user_id: UUID,
        action: object,
        content: str,
        note_id: Optional[UUID] = None,
    ) -> str:
        """
        Execute one AI action and return the generated text.

        Raises:
            InvalidActionError:    unknown action, before any outbound call
            GatewayRateLimitError / GatewayCreditsError / GatewayError:
                                   from the completion backend; no history row
        """
        parsed = parse_action(action)
        messages = build_messages(parsed, content)

        logger.info("AI action %s requested (note=%s, %d chars)", parsed.value, note_id, len(content))
        text = await self.llm.complete(messages)

        if note_id is not None:
            await self.record_history(user_id, note_id, parsed, text)
        return text

    async def record_history(
        self,
        user_id: UUID,
        note_id: UUID,
        action: AssistantAction,
        ai_response: str,
    ) -> bool:
        """
        Insert one ai_history row for a note the caller owns.

        Returns True when a row was written. Never raises for store failures.
        """
        try:
            async with self.session_factory() as session:
                owned = await session.execute(
                    select(Note.id).where(Note.id == note_id, Note.user_id == user_id)
                )
                if owned.scalar_one_or_none() is None:
                    logger.warning(
                        "Skipping AI history for note %s: not found for user %s",
                        note_id,
                        user_id,
                    )
                    return False

                session.add(AIHistory(note_id=note_id, prompt=action.value, ai_response=ai_response))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Error saving AI history for note %s: %s", note_id, str(e), exc_info=True)
            return False

        logger.debug("AI history saved for note %s (%s)", note_id, action.value)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
assistant_service = AssistantService()
