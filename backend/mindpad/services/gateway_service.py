"""
MindPad Backend — AI Gateway Service
=====================================

What:  ChatCompletionService backed by the hosted AI gateway
       (OpenAI-compatible `POST /v1/chat/completions`).
How:   One httpx POST per call with `{model, messages}` and the gateway
       credential as a bearer token; the response status is mapped onto the
       AssistantError family.
Who:   Singleton used by AssistantService.

Status mapping:
    2xx  → choices[0].message.content
    429  → GatewayRateLimitError  (429 to the caller)
    402  → GatewayCreditsError    (402 to the caller)
    else → GatewayError           (500 to the caller; status and body logged)

One attempt per call: no retry, no backoff, and no client-side deadline
(the request waits as long as the gateway takes to answer).
"""

import logging
import time
import uuid
from typing import Dict, List, Optional

import httpx

from mindpad.config import settings
from mindpad.exceptions import (
    GatewayConfigurationError,
    GatewayCreditsError,
    GatewayError,
    GatewayRateLimitError,
)
from mindpad.services.llm_base import ChatCompletionService

logger = logging.getLogger(__name__)


class GatewayService(ChatCompletionService):
    """
    HTTP client for the AI gateway.

    Args:
        api_url:   Chat completion endpoint (default: settings.ai_gateway_url)
        api_key:   Gateway credential (default: settings.ai_gateway_api_key)
        model:     Model identifier (default: settings.ai_model)
        transport: Optional httpx transport, used by tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url if api_url is not None else settings.ai_gateway_url
        self.api_key = api_key if api_key is not None else settings.ai_gateway_api_key
        self.model = model if model is not None else settings.ai_model
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        """Raise GatewayConfigurationError when no credential is set."""
        if not self.is_configured:
            raise GatewayConfigurationError()

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Send one chat completion request and return the generated text.

        Flow:
            1. Fail fast if the credential is missing
            2. POST {model, messages}
            3. Map 429 / 402 / other non-2xx onto proxy errors
            4. Extract choices[0].message.content
        """
        self.ensure_configured()

        request_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={"model": self.model, "messages": messages},
                )
        except httpx.HTTPError as e:
            logger.error("[%s] AI gateway request failed: %s", request_id, str(e))
            raise GatewayError(context={"request_id": request_id, "error_type": type(e).__name__})

        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code == 429:
            logger.warning("[%s] AI gateway rate limited the request", request_id)
            raise GatewayRateLimitError(context={"request_id": request_id})

        if response.status_code == 402:
            logger.warning("[%s] AI gateway credits exhausted", request_id)
            raise GatewayCreditsError(context={"request_id": request_id})

        if not response.is_success:
            logger.error(
                "[%s] AI gateway error: %d %s",
                request_id,
                response.status_code,
                response.text,
            )
            raise GatewayError(
                context={"request_id": request_id, "status": response.status_code}
            )

        try:
            data = response.json()
            text = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(
                "[%s] AI gateway returned an unreadable completion: %s",
                request_id,
                str(e),
            )
            raise GatewayError(context={"request_id": request_id, "error_type": type(e).__name__})

        if not isinstance(text, str):
            raise GatewayError(context={"request_id": request_id, "error_type": "non_text_content"})

        logger.info(
            "[%s] AI gateway completed in %.0fms, generated %d chars",
            request_id,
            duration_ms,
            len(text),
        )
        return text

    async def health_check(self) -> bool:
        """Configured credential only; probing the gateway would spend quota."""
        return self.is_configured


# ── Singleton Instance ────────────────────────────────────────────────────
gateway_service = GatewayService()
