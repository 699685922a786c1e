"""
MindPad Backend — Permissive CORS Middleware
=============================================

What:  Adds CORS headers to every response and answers every OPTIONS request
       with an empty-bodied 200.
How:   Starlette's CORSMiddleware only short-circuits well-formed preflights
       and replies with a text body; browser clients of the AI proxy expect
       any OPTIONS to succeed with no body, so the handling lives here.

Headers:
    Access-Control-Allow-Origin:  "*" (or the request Origin when
                                  CORS_ORIGINS lists specific origins)
    Access-Control-Allow-Headers: CORS_ALLOW_HEADERS
    Access-Control-Allow-Methods: the methods the API serves

An exception escaping the routes is turned into a response here, through
`error_response`, so unexpected 500s carry the same headers.
"""

from typing import Callable, Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

ErrorResponder = Callable[[Request, Exception], Response]

ALLOWED_METHODS = "GET, POST, PATCH, DELETE, OPTIONS"
EXPOSED_HEADERS = "X-Request-ID, X-Total-Count"


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """
    Args:
        allow_origins:  Origins allowed to read responses; ["*"] for any
        allow_headers:  Value of Access-Control-Allow-Headers
        error_response: Builds the response for an unhandled exception; without
                        one the exception propagates
    """

    def __init__(
        self,
        app,
        allow_origins: List[str],
        allow_headers: str,
        error_response: Optional[ErrorResponder] = None,
    ):
        super().__init__(app)
        self.allow_origins = allow_origins or ["*"]
        self.allow_headers = allow_headers
        self.error_response = error_response

    def _allow_origin(self, origin: Optional[str]) -> Optional[str]:
        if "*" in self.allow_origins:
            return "*"
        if origin and origin in self.allow_origins:
            return origin
        return None

    def cors_headers(self, request: Request) -> Dict[str, str]:
        headers = {
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Expose-Headers": EXPOSED_HEADERS,
        }
        allow_origin = self._allow_origin(request.headers.get("Origin"))
        if allow_origin is not None:
            headers["Access-Control-Allow-Origin"] = allow_origin
            if allow_origin != "*":
                headers["Vary"] = "Origin"
        return headers

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        headers = self.cors_headers(request)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        try:
            response = await call_next(request)
        except Exception as exc:
            if self.error_response is None:
                raise
            response = self.error_response(request, exc)
        for name, value in headers.items():
            response.headers[name] = value
        return response
