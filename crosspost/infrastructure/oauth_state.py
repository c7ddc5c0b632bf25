"""Signed OAuth ``state`` tokens.

The state is ``base64url(json) + "." + hex(hmac_sha256(payload))``. It carries
the initiating user, workspace, provider and return path through the provider
redirect, so no server-side session is needed.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time

import structlog

from ..application.ports.outbound import StateSigner
from ..domain.errors import OAuthError
from ..domain.value_objects import OAuthState
from .logging import mask_value

logger = structlog.get_logger()


class OAuthStateSigner(StateSigner):
    """Encode, sign and verify OAuthState values with a server-held key."""

    def __init__(self, secret_key: str, ttl_seconds: int = 600) -> None:
        self._secret_key = secret_key.encode()
        self._ttl_seconds = ttl_seconds

    def _sign(self, payload: str) -> str:
        return hmac.new(
            self._secret_key, payload.encode("utf-8", "surrogatepass"), hashlib.sha256
        ).hexdigest()

    def encode(self, state: OAuthState) -> str:
        raw = json.dumps(state.to_dict(), separators=(",", ":"), sort_keys=True)
        payload = base64.urlsafe_b64encode(raw.encode()).rstrip(b"=").decode()
        return f"{payload}.{self._sign(payload)}"

    def decode(self, token: str | None) -> OAuthState:
        """
        Verify and decode a state token.

        Raises:
            OAuthError: ``invalid_state`` for a bad signature, malformed
                payload, or an expired token
        """
        if not token or "." not in token:
            raise OAuthError("invalid_state", "Missing or malformed state")

        payload, signature = token.rsplit(".", 1)
        expected = self._sign(payload).encode()
        if not hmac.compare_digest(expected, signature.encode("utf-8", "surrogatepass")):
            logger.warning("OAuth state signature mismatch", state=mask_value(token))
            raise OAuthError("invalid_state", "State signature mismatch")

        try:
            padded = payload + "=" * (-len(payload) % 4)
            state = OAuthState.from_dict(json.loads(base64.urlsafe_b64decode(padded)))
        except (binascii.Error, ValueError, KeyError, TypeError) as e:
            raise OAuthError("invalid_state", "Malformed state payload") from e

        age = time.time() - state.issued_at
        if age > self._ttl_seconds or age < -60:
            raise OAuthError("invalid_state", "State expired")

        return state

    def code_verifier(self, state: OAuthState) -> str:
        """PKCE verifier derived from the state nonce; recomputable at callback time."""
        digest = hmac.new(
            self._secret_key, f"pkce:{state.nonce}".encode(), hashlib.sha256
        ).digest()
        # 43 chars of base64url, the minimum RFC 7636 length
        return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()
