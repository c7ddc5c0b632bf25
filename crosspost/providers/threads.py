import structlog

from ..application.ports.outbound import ProviderIdentity, PublishReceipt, TokenGrant
from ..domain.entities import AccountType
from ..domain.errors import OAuthError, ProviderPublishError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter

logger = structlog.get_logger()


class ThreadsAdapter(HttpProviderAdapter):
    """Threads API adapter. Uses the same container-then-publish flow as Instagram."""

    BASE_URL = "https://graph.threads.net/v1.0"

    @property
    def provider(self) -> ProviderName:
        return ProviderName.THREADS

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        data = await self._get_identity(
            f"{self.BASE_URL}/me",
            params={
                "fields": "id,username,name,threads_profile_picture_url",
                "access_token": grant.access_token,
            },
        )
        account_id = data.get("id") or grant.provider_user_id
        if not account_id:
            raise OAuthError("identity_unavailable", "Threads did not return an account id")

        username = data.get("username")
        return ProviderIdentity(
            provider_account_id=str(account_id),
            display_name=data.get("name") or username or str(account_id),
            account_type=AccountType.PROFILE,
            handle=f"@{username}" if username else None,
            avatar_url=data.get("threads_profile_picture_url"),
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
        container_payload = {
            "text": content,
            "access_token": access_token,
        }
        if media_url and media_type == MediaType.VIDEO:
            container_payload["media_type"] = "VIDEO"
            container_payload["video_url"] = media_url
        elif media_url:
            container_payload["media_type"] = "IMAGE"
            container_payload["image_url"] = media_url
        else:
            container_payload["media_type"] = "TEXT"
            if link_url:
                container_payload["link_attachment"] = link_url

        async with self._client() as client:
            response = await client.post(
                f"{self.BASE_URL}/{provider_account_id}/threads", data=container_payload
            )
            container_id = self._check(response).get("id")
            if not container_id:
                raise ProviderPublishError("container_failed", "Threads did not create a media container")
            logger.debug("Threads container created", container_id=container_id)

            response = await client.post(
                f"{self.BASE_URL}/{provider_account_id}/threads_publish",
                data={"creation_id": container_id, "access_token": access_token},
            )
            data = self._check(response)

        post_id = data.get("id")
        if not post_id:
            raise ProviderPublishError("publish_failed", "Threads did not return a post id")
        return PublishReceipt(success=True, post_id=str(post_id))
