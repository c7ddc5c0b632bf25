from typing import Any

import structlog

from ..application.ports.outbound import ProviderError, ProviderIdentity, PublishReceipt, TokenGrant
from ..domain.entities import AccountType
from ..domain.errors import OAuthError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter

logger = structlog.get_logger()


class LinkedInAdapter(HttpProviderAdapter):
    """LinkedIn API adapter for member posts."""

    BASE_URL = "https://api.linkedin.com/v2"

    @property
    def provider(self) -> ProviderName:
        return ProviderName.LINKEDIN

    def _headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "X-Restli-Protocol-Version": "2.0.0",
        }

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        data = await self._get_identity(
            f"{self.BASE_URL}/userinfo",
            headers={"Authorization": f"Bearer {grant.access_token}"},
        )
        if not data.get("sub"):
            raise OAuthError("identity_unavailable", "LinkedIn did not return a member id")

        return ProviderIdentity(
            provider_account_id=str(data["sub"]),
            display_name=data.get("name") or str(data["sub"]),
            account_type=AccountType.PERSONAL,
            avatar_url=data.get("picture"),
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
        share: dict[str, Any] = {
            "shareCommentary": {"text": content},
            "shareMediaCategory": "NONE",
        }
        if link_url:
            share["shareMediaCategory"] = "ARTICLE"
            share["media"] = [{"status": "READY", "originalUrl": link_url}]
        elif media_url:
            share["shareMediaCategory"] = "VIDEO" if media_type == MediaType.VIDEO else "IMAGE"
            share["media"] = [{"status": "READY", "originalUrl": media_url}]

        post = {
            "author": f"urn:li:person:{provider_account_id}",
            "lifecycleState": "PUBLISHED",
            "specificContent": {"com.linkedin.ugc.ShareContent": share},
            "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
        }

        async with self._client() as client:
            response = await client.post(
                f"{self.BASE_URL}/ugcPosts",
                headers=self._headers(access_token),
                json=post,
            )
        data = self._check(response)

        post_id = data.get("id") or response.headers.get("x-restli-id")
        return PublishReceipt(
            success=True,
            post_id=post_id,
            post_url=f"https://www.linkedin.com/feed/update/{post_id}" if post_id else None,
        )

    def _error_from(self, payload: Any) -> ProviderError | None:
        # REST errors: {"message": ..., "serviceErrorCode": ..., "status": 4xx}
        error = super()._error_from(payload)
        if error is not None or not isinstance(payload, dict):
            return error
        if "serviceErrorCode" in payload or ("message" in payload and "status" in payload):
            code = payload.get("serviceErrorCode") or payload.get("status")
            return ProviderError(
                message=payload.get("message") or "LinkedIn API error",
                code=str(code) if code is not None else None,
            )
        return None
