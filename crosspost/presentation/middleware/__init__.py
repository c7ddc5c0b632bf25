from .auth import (
    ACCESS_TOKEN_COOKIE,
    Caller,
    CognitoTokenVerifier,
    get_caller,
    require_caller,
)
from .correlation import CorrelationIdMiddleware
from .request_validation import (
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "Caller",
    "CognitoTokenVerifier",
    "CorrelationIdMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
    "get_caller",
    "require_caller",
]
