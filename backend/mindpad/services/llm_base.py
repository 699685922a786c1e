"""
MindPad Backend — Abstract Chat Completion Interface
=====================================================

What:  Abstract base class for services that turn a chat conversation into
       generated text.
How:   Concrete implementations inherit from ChatCompletionService and
       implement complete() and health_check().
Who:   Called by AssistantService during the AI proxy workflow.

Implementations:
    - GatewayService: hosted OpenAI-compatible gateway over HTTP (default)
    - Test doubles: `AsyncMock(spec=ChatCompletionService)` in the test suite
"""

from abc import ABC, abstractmethod
from typing import Dict, List


class ChatCompletionService(ABC):
    """
    Contract:
        - complete() accepts role/content messages and returns the first
          completion's text
        - Implementations translate provider failures into AssistantError
          subclasses (rate limit, credits, generic gateway error)
        - Exactly one outbound request per complete() call; no retries
    """

    @property
    def is_configured(self) -> bool:
        """Whether credentials are present. Checked before any request is built."""
        return True

    @abstractmethod
    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Generate a completion for a conversation.

        Args:
            messages: [{"role": "system"|"user", "content": str}, ...]

        Returns:
            str: The generated text of the first choice.

        Raises:
            GatewayConfigurationError: No credential configured.
            GatewayRateLimitError:     Provider answered 429.
            GatewayCreditsError:       Provider answered 402.
            GatewayError:              Anything else that is not a success.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Report whether the service is usable.

        Returns: True if the service can accept requests, False otherwise.
        Must not consume provider quota.
        """
        ...
