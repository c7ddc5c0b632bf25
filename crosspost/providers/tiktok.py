from typing import Any

import structlog

from ..application.ports.outbound import ProviderError, ProviderIdentity, PublishReceipt, TokenGrant
from ..domain.entities import AccountType
from ..domain.errors import OAuthError, ProviderPublishError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter

logger = structlog.get_logger()


class TikTokAdapter(HttpProviderAdapter):
    """TikTok Content Posting API adapter.

    TikTok names the client id ``client_key`` and pulls the video itself
    from the supplied URL.
    """

    BASE_URL = "https://open.tiktokapis.com/v2"
    PRIVACY_LEVEL = "PUBLIC_TO_EVERYONE"

    @property
    def provider(self) -> ProviderName:
        return ProviderName.TIKTOK

    def authorization_params(
        self,
        client_id: str,
        redirect_uri: str,
        state: str,
        code_verifier: str,
    ) -> dict[str, str]:
        params = super().authorization_params(client_id, redirect_uri, state, code_verifier)
        params["client_key"] = params.pop("client_id")
        return params

    def _token_request(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        code_verifier: str,
    ) -> tuple[dict[str, str], tuple[str, str] | None]:
        body, auth = super()._token_request(code, client_id, client_secret, redirect_uri, code_verifier)
        body["client_key"] = body.pop("client_id")
        return body, auth

    def _grant_from(self, data: dict[str, Any]) -> TokenGrant:
        grant = super()._grant_from(data)
        if data.get("open_id"):
            return TokenGrant(
                access_token=grant.access_token,
                refresh_token=grant.refresh_token,
                expires_in=grant.expires_in,
                scope=grant.scope,
                token_type=grant.token_type,
                provider_user_id=str(data["open_id"]),
            )
        return grant

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        payload = await self._get_identity(
            f"{self.BASE_URL}/user/info/",
            params={"fields": "open_id,avatar_url,display_name,username"},
            headers={"Authorization": f"Bearer {grant.access_token}"},
        )
        user = (payload.get("data") or {}).get("user") or {}
        open_id = user.get("open_id") or grant.provider_user_id
        if not open_id:
            raise OAuthError("identity_unavailable", "TikTok did not return an open_id")

        username = user.get("username")
        return ProviderIdentity(
            provider_account_id=str(open_id),
            display_name=user.get("display_name") or username or str(open_id),
            account_type=AccountType.CREATOR,
            handle=f"@{username}" if username else None,
            avatar_url=user.get("avatar_url"),
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
        if not media_url or media_type != MediaType.VIDEO:
            raise ProviderPublishError("media_required", "TikTok posts require a video")

        body = {
            "post_info": {
                "title": content,
                "privacy_level": self.PRIVACY_LEVEL,
                "disable_comment": False,
            },
            "source_info": {
                "source": "PULL_FROM_URL",
                "video_url": media_url,
            },
        }
        async with self._client() as client:
            response = await client.post(
                f"{self.BASE_URL}/post/publish/video/init/",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Content-Type": "application/json; charset=UTF-8",
                },
                json=body,
            )
        data = self._check(response).get("data") or {}

        # Processing is asynchronous; the publish id is all TikTok returns here
        publish_id = data.get("publish_id")
        if not publish_id:
            raise ProviderPublishError("publish_failed", "TikTok did not return a publish id")
        return PublishReceipt(success=True, post_id=str(publish_id))

    def _error_from(self, payload: Any) -> ProviderError | None:
        # Every response carries {"error": {"code": "ok", ...}} on success
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                if error.get("code") in (None, "", "ok"):
                    return None
                return ProviderError(
                    message=error.get("message") or str(error["code"]),
                    code=str(error["code"]),
                )
        return super()._error_from(payload)
