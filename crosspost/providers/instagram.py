import structlog

from ..application.ports.outbound import ProviderIdentity, PublishReceipt, TokenGrant
from ..domain.entities import AccountType
from ..domain.errors import OAuthError, ProviderPublishError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter

logger = structlog.get_logger()


class InstagramAdapter(HttpProviderAdapter):
    """Instagram Graph API adapter for business account publishing.

    Publishing is two-step: create a media container, then publish it. A
    container that was created but not published is reported as a failure.
    """

    BASE_URL = "https://graph.facebook.com/v18.0"

    @property
    def provider(self) -> ProviderName:
        return ProviderName.INSTAGRAM

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        """Use the first Page with a linked Instagram business account."""
        data = await self._get_identity(
            f"{self.BASE_URL}/me/accounts",
            params={
                "fields": "instagram_business_account{id,username,name,profile_picture_url}",
                "access_token": grant.access_token,
            },
        )

        for page in data.get("data") or []:
            account = page.get("instagram_business_account")
            if not account or not account.get("id"):
                continue
            username = account.get("username")
            return ProviderIdentity(
                provider_account_id=str(account["id"]),
                display_name=account.get("name") or username or str(account["id"]),
                account_type=AccountType.BUSINESS,
                handle=f"@{username}" if username else None,
                avatar_url=account.get("profile_picture_url"),
            )

        raise OAuthError(
            "no_instagram_business_account",
            "No Instagram business account is linked to the authorized Facebook pages",
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
        if not media_url:
            raise ProviderPublishError("media_required", "Instagram posts require an image or video")

        container_payload = {
            "caption": content,
            "access_token": access_token,
        }
        if media_type == MediaType.VIDEO:
            container_payload["media_type"] = "REELS"
            container_payload["video_url"] = media_url
        else:
            container_payload["image_url"] = media_url

        async with self._client() as client:
            # Step 1: Create media container
            response = await client.post(
                f"{self.BASE_URL}/{provider_account_id}/media", data=container_payload
            )
            container_id = self._check(response).get("id")
            if not container_id:
                raise ProviderPublishError("container_failed", "Instagram did not create a media container")
            logger.debug("Instagram container created", container_id=container_id)

            # Step 2: Publish the container
            response = await client.post(
                f"{self.BASE_URL}/{provider_account_id}/media_publish",
                data={"creation_id": container_id, "access_token": access_token},
            )
            data = self._check(response)

        post_id = data.get("id")
        if not post_id:
            raise ProviderPublishError("publish_failed", "Instagram did not return a post id")
        return PublishReceipt(success=True, post_id=str(post_id))
