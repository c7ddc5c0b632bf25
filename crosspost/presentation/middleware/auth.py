"""Caller authentication with Cognito-issued access tokens.

Tokens arrive as a Bearer header or in the ``access_token`` cookie set by the
frontend. Only RS256 tokens signed by a key in the pool's JWKS are accepted;
audience and issuer are always checked.
"""

import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any

import httpx
import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwk, jwt

from ...config import settings
from ...domain.errors import AuthenticationError

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "access_token"  # noqa: S105

SIGNING_ALGORITHMS = ("RS256",)
REQUIRED_CLAIMS = ("sub", "exp", "iat", "iss")


@dataclass(frozen=True)
class Caller:
    """The user behind an API request."""

    user_id: str
    email: str | None = None


class JwksCache:
    """Signing keys of one user pool, refetched after ``ttl`` seconds.

    An unknown ``kid`` also forces a refetch, at most once every
    ``min_refetch_interval`` seconds.
    """

    def __init__(self, url: str, ttl: float = 3600, min_refetch_interval: float = 30) -> None:
        self.url = url
        self._ttl = ttl
        self._min_refetch_interval = min_refetch_interval
        self._keys: dict[str, dict[str, Any]] = {}
        self._fetched_at: float | None = None
        self._attempted_at: float | None = None

    async def key_for(self, kid: str) -> dict[str, Any] | None:
        if self._fetched_at is None or time.monotonic() - self._fetched_at >= self._ttl:
            await self._refresh()
        if kid not in self._keys:
            if time.monotonic() - self._attempted_at < self._min_refetch_interval:
                logger.info("Unknown signing key, JWKS refetched recently", kid=kid)
                return None
            # A kid we have not seen yet means the pool rotated its keys
            logger.info("Unknown signing key, refetching JWKS", kid=kid)
            await self._refresh()
        return self._keys.get(kid)

    async def _refresh(self) -> None:
        self._attempted_at = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                document = response.json()
        except httpx.HTTPError as e:
            if not self._keys:
                logger.error("JWKS fetch failed", url=self.url, error=str(e))
                raise JWTError("Unable to fetch JWKS") from e
            logger.warning("JWKS fetch failed, keeping stale keys", url=self.url, error=str(e))
            return

        self._keys = {key["kid"]: key for key in document.get("keys", []) if "kid" in key}
        self._fetched_at = time.monotonic()
        logger.debug("JWKS refreshed", url=self.url, keys=len(self._keys))


class CognitoTokenVerifier:
    """Verifies access tokens issued by one Cognito app client."""

    def __init__(self, jwks_url: str, audience: str, issuer: str, cache_ttl: float = 3600):
        if not audience:
            raise ValueError("Audience (client_id) is required for JWT validation")
        if not issuer:
            raise ValueError("Issuer is required for JWT validation")
        self.audience = audience
        self.issuer = issuer
        self._jwks = JwksCache(jwks_url, cache_ttl)

    async def verify(self, token: str) -> dict[str, Any]:
        """
        Verify a token's signature and claims and return the claims.

        Raises:
            AuthenticationError: ``invalid_token``
        """
        try:
            claims = jwt.decode(
                token,
                jwk.construct(await self._signing_key(token)),
                algorithms=list(SIGNING_ALGORITHMS),
                audience=self.audience,
                issuer=self.issuer,
                options={"require_exp": True, "require_iat": True},
            )
            absent = [name for name in REQUIRED_CLAIMS if not claims.get(name)]
            if absent:
                raise JWTError(f"Missing required claims: {absent}")
        except JWTError as e:
            logger.warning("Access token rejected", error=str(e))
            raise AuthenticationError("invalid_token", "Invalid or expired token") from e
        return claims

    async def _signing_key(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise JWTError("Invalid token header") from e

        # Symmetric algorithms fail here, before any key lookup
        if header.get("alg") not in SIGNING_ALGORITHMS:
            raise JWTError(f"Algorithm {header.get('alg')} not allowed")
        if not header.get("kid"):
            raise JWTError("Token missing kid header")

        key = await self._jwks.key_for(header["kid"])
        if key is None:
            raise JWTError(f"No signing key for kid {header['kid']}")
        return key


@lru_cache(maxsize=1)
def get_token_verifier() -> CognitoTokenVerifier:
    if not settings.cognito_user_pool_id or not settings.cognito_client_id:
        raise RuntimeError("Cognito settings not configured")
    issuer = (
        f"https://cognito-idp.{settings.cognito_region}.amazonaws.com/"
        f"{settings.cognito_user_pool_id}"
    )
    return CognitoTokenVerifier(
        jwks_url=f"{issuer}/.well-known/jwks.json",
        audience=settings.cognito_client_id,
        issuer=issuer,
    )


async def get_caller(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Caller | None:
    """Identify the caller, or return None when the request carries no token."""
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        return None

    if not settings.auth_enabled:
        # Local development: any token stands for the dev user
        return Caller(user_id=settings.dev_user_id, email="dev@example.com")

    claims = await get_token_verifier().verify(token)
    return Caller(user_id=claims["sub"], email=claims.get("email"))


async def require_caller(
    caller: Annotated[Caller | None, Depends(get_caller)],
) -> Caller:
    if caller is None:
        raise AuthenticationError("unauthenticated", "Authentication required")
    return caller
