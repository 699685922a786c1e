"""
MindPad Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into JSON
       responses with the right HTTP status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    MindPadError (base)
    ├── ValidationError               → 400 Bad Request
    ├── AuthenticationError           → 401 Unauthorized
    ├── NotFoundError                 → 404 Not Found
    ├── DatabaseError                 → 500 Internal Server Error
    └── AssistantError                → rendered as {"error": message}
        ├── GatewayConfigurationError → 500 (gateway credential unset)
        ├── AssistantAuthorizationError → 401 (no/invalid bearer on the proxy)
        ├── InvalidActionError        → 500 (unknown action name)
        ├── GatewayRateLimitError     → 429 (gateway rate limit)
        ├── GatewayCreditsError       → 402 (gateway credits exhausted)
        └── GatewayError              → 500 (any other gateway failure)

    The AssistantError family keeps the proxy function's wire contract
    (`{"error": "..."}` with 200/401/402/429/500) separate from the store
    API's `{error, message, request_id}` envelope.
"""

from typing import Any, Dict, Optional


class MindPadError(Exception):
    """
    Base exception for all MindPad application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MindPadError):
    """
    Raised when client input fails a business rule.

    HTTP: 400 Bad Request. Schema-level problems are still reported by
    FastAPI as 422.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(MindPadError):
    """
    Raised when a request carries no session or an unusable one.

    HTTP: 401 Unauthorized with `WWW-Authenticate: Bearer`.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MindPadError):
    """
    Raised when a requested resource does not exist for the caller.

    Notes owned by another user are reported exactly like missing notes.
    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(MindPadError):
    """
    Raised when database operations fail unexpectedly.

    The client always gets a generic message; the detail stays in the logs.
    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# AI proxy errors
# ══════════════════════════════════════════════════════════════════════════


class AssistantError(MindPadError):
    """
    Base for failures of the AI proxy function.

    `status_code` is the HTTP status returned to the caller; the body is
    always `{"error": message}`.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "AI gateway error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GatewayConfigurationError(AssistantError):
    """The gateway credential is not configured."""

    status_code = 500

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="AI_GATEWAY_API_KEY is not configured", context=context)


class AssistantAuthorizationError(AssistantError):
    """The proxy was called without a usable bearer session."""

    status_code = 401

    def __init__(
        self,
        message: str = "No authorization header",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidActionError(AssistantError):
    """The requested action is not one of the four known actions."""

    status_code = 500

    def __init__(self, action: Any = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["action"] = action
        super().__init__(message="Invalid action", context=ctx)


class GatewayRateLimitError(AssistantError):
    """The gateway answered 429."""

    status_code = 429

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Rate limit exceeded. Please try again later.",
            context=context,
        )


class GatewayCreditsError(AssistantError):
    """The gateway answered 402."""

    status_code = 402

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="AI credits exhausted. Please add credits.",
            context=context,
        )


class GatewayError(AssistantError):
    """Any other gateway failure: non-2xx status, transport error, bad body."""

    status_code = 500

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="AI gateway error", context=context)
