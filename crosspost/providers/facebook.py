import structlog

from ..application.ports.outbound import ProviderIdentity, PublishReceipt, TokenGrant
from ..domain.entities import AccountType
from ..domain.errors import OAuthError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter

logger = structlog.get_logger()


class FacebookAdapter(HttpProviderAdapter):
    """Facebook Graph API adapter for Page posts."""

    BASE_URL = "https://graph.facebook.com/v18.0"

    @property
    def provider(self) -> ProviderName:
        return ProviderName.FACEBOOK

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        data = await self._get_identity(
            f"{self.BASE_URL}/me",
            params={"fields": "id,name,picture", "access_token": grant.access_token},
        )
        if not data.get("id"):
            raise OAuthError("identity_unavailable", "Facebook did not return an account id")

        picture = (data.get("picture") or {}).get("data") or {}
        return ProviderIdentity(
            provider_account_id=str(data["id"]),
            display_name=data.get("name") or str(data["id"]),
            account_type=AccountType.PAGE,
            avatar_url=picture.get("url"),
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
        url = f"{self.BASE_URL}/{provider_account_id}/feed"
        payload = {
            "message": content,
            "access_token": access_token,
        }

        if media_url and media_type == MediaType.VIDEO:
            url = f"{self.BASE_URL}/{provider_account_id}/videos"
            payload = {
                "file_url": media_url,
                "description": content,
                "access_token": access_token,
            }
        elif media_url:
            # Photo posts go through /photos with a caption
            url = f"{self.BASE_URL}/{provider_account_id}/photos"
            payload = {
                "url": media_url,
                "caption": content,
                "access_token": access_token,
            }
        elif link_url:
            payload["link"] = link_url

        async with self._client() as client:
            response = await client.post(url, data=payload)
        data = self._check(response)

        post_id = data.get("post_id") or data.get("id")
        return PublishReceipt(
            success=True,
            post_id=post_id,
            post_url=f"https://facebook.com/{post_id}" if post_id else None,
        )
