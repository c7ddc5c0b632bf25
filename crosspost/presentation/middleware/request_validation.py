"""Request size limits and security response headers."""

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = structlog.get_logger()

# Publish bodies are text plus a few URLs; 25 targets fit easily
MAX_REQUEST_SIZE = 256 * 1024

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}

API_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; form-action 'none'"

# Swagger UI loads its bundle from the jsdelivr CDN
DOCS_CSP = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
        "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com",
        "frame-ancestors 'none'",
    ]
)
DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "message": message})


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared Content-Length is over ``max_size`` bytes."""

    def __init__(self, app, max_size: int = MAX_REQUEST_SIZE) -> None:
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next) -> Response:
        declared = request.headers.get("content-length")
        if declared is None:
            return await call_next(request)

        if not declared.isdigit():
            logger.warning("Malformed Content-Length", value=declared, path=request.url.path)
            return _error(
                status.HTTP_400_BAD_REQUEST, "invalid_request", "Invalid Content-Length header"
            )

        if int(declared) > self.max_size:
            logger.warning(
                "Request body over limit",
                content_length=int(declared),
                max_size=self.max_size,
                path=request.url.path,
            )
            return _error(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                "payload_too_large",
                f"Request body too large. Maximum size: {self.max_size} bytes",
            )

        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        path = request.url.path

        response.headers.update(STATIC_HEADERS)
        response.headers["Content-Security-Policy"] = (
            DOCS_CSP if path.startswith(DOCS_PATHS) else API_CSP
        )
        # Connection listings carry account identities
        if path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        return response
