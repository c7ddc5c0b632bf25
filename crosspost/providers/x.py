import base64
import hashlib
from typing import Any

import structlog

from ..application.ports.outbound import ProviderError, ProviderIdentity, PublishReceipt, TokenGrant
from ..domain.entities import AccountType
from ..domain.errors import OAuthError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter

logger = structlog.get_logger()


def code_challenge(code_verifier: str) -> str:
    """S256 PKCE challenge: unpadded base64url of the verifier's SHA-256."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class XAdapter(HttpProviderAdapter):
    """X (Twitter) API v2 adapter. OAuth 2.0 with PKCE and a confidential client."""

    BASE_URL = "https://api.twitter.com/2"

    @property
    def provider(self) -> ProviderName:
        return ProviderName.X

    def authorization_params(
        self,
        client_id: str,
        redirect_uri: str,
        state: str,
        code_verifier: str,
    ) -> dict[str, str]:
        params = super().authorization_params(client_id, redirect_uri, state, code_verifier)
        params["code_challenge"] = code_challenge(code_verifier)
        params["code_challenge_method"] = "S256"
        return params

    def _token_request(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        code_verifier: str,
    ) -> tuple[dict[str, str], tuple[str, str] | None]:
        body = {
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
            "code_verifier": code_verifier,
            "client_id": client_id,
        }
        return body, (client_id, client_secret)

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        payload = await self._get_identity(
            f"{self.BASE_URL}/users/me",
            params={"user.fields": "profile_image_url"},
            headers={"Authorization": f"Bearer {grant.access_token}"},
        )
        user = payload.get("data") or {}
        if not user.get("id"):
            raise OAuthError("identity_unavailable", "X did not return a user id")

        username = user.get("username")
        return ProviderIdentity(
            provider_account_id=str(user["id"]),
            display_name=user.get("name") or username or str(user["id"]),
            account_type=AccountType.PROFILE,
            handle=f"@{username}" if username else None,
            avatar_url=user.get("profile_image_url"),
        )

    async def _publish(
        self,
        provider_account_id: str,
        access_token: str,
        content: str,
        link_url: str | None,
        media_url: str | None,
        media_type: MediaType | None,
    ) -> PublishReceipt:
        text = f"{content}\n\n{link_url}" if link_url else content
        if media_url:
            # Media needs the v1.1 chunked upload; the post goes out as text
            logger.info("X media attachment skipped", account_id=provider_account_id)

        async with self._client() as client:
            response = await client.post(
                f"{self.BASE_URL}/tweets",
                headers={"Authorization": f"Bearer {access_token}"},
                json={"text": text},
            )
        tweet = self._check(response).get("data") or {}

        post_id = tweet.get("id")
        return PublishReceipt(
            success=True,
            post_id=post_id,
            post_url=f"https://x.com/i/status/{post_id}" if post_id else None,
        )

    def _error_from(self, payload: Any) -> ProviderError | None:
        error = super()._error_from(payload)
        if error is not None or not isinstance(payload, dict):
            return error
        # {"errors": [{"message": ...}]} or problem+json {"title", "detail", "status"}
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and not payload.get("data"):
            first = errors[0] if isinstance(errors[0], dict) else {}
            code = first.get("code") or first.get("type")
            return ProviderError(
                message=first.get("message") or first.get("detail") or "X API error",
                code=str(code) if code is not None else None,
            )
        if "title" in payload and "status" in payload:
            return ProviderError(
                message=payload.get("detail") or payload["title"],
                code=str(payload["status"]),
            )
        return None
