"""
CORS Middleware - lets the dashboard origins call the API from a browser.

Allowed origins come from settings.CORS_ALLOWED_ORIGINS. Preflight requests
from an allowed origin are answered directly with 204; preflights from any
other origin get 403. Non-preflight requests pass through and only gain
CORS headers when their origin is allowed.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_METHODS = ["GET", "POST", "OPTIONS"]
DEFAULT_HEADERS = ["Accept", "Authorization", "Content-Type", "X-Request-ID"]


class CORSMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        allowed_origins: list[str] | None = None,
        allow_credentials: bool = True,
        allow_methods: list[str] | None = None,
        allow_headers: list[str] | None = None,
        max_age: int = 600,
    ):
        super().__init__(app)
        self.allowed_origins = set(allowed_origins or [])
        self.allow_credentials = allow_credentials
        self.allow_methods = allow_methods or DEFAULT_METHODS
        self.allow_headers = allow_headers or DEFAULT_HEADERS
        self.max_age = max_age

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        is_allowed_origin = bool(origin) and origin in self.allowed_origins

        if request.method == "OPTIONS" and request.headers.get("access-control-request-method"):
            if is_allowed_origin:
                return self._preflight_response(origin)
            logger.warning("CORS preflight rejected - origin not allowed", origin=origin)
            return Response(status_code=403, content="Origin not allowed")

        response = await call_next(request)

        if is_allowed_origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            if self.allow_credentials:
                response.headers["Access-Control-Allow-Credentials"] = "true"
        elif origin:
            logger.debug("CORS request from disallowed origin", origin=origin, path=request.url.path)

        return response

    def _preflight_response(self, origin: str) -> Response:
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
            "Vary": "Origin",
        }
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return Response(status_code=204, headers=headers)
