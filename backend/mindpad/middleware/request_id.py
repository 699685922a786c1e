"""
MindPad Backend — Request ID Middleware
========================================

What:  Assigns a short correlation ID to each request and echoes it back.
How:   Reuses the client's `X-Request-ID` header when present, otherwise
       generates one. The ID is stored in a ContextVar for loggers and error
       handlers, in `request.state` for route handlers, and returned in the
       `X-Request-ID` response header.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to the context, the request state and the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
