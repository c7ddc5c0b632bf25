from datetime import datetime, timezone

import httpx
import structlog

from ..application.ports.outbound import (
    DirectAuthAdapter,
    ProviderIdentity,
    PublishReceipt,
    TokenGrant,
)
from ..domain.entities import AccountType
from ..domain.errors import AuthenticationError, OAuthError, RequestValidationError
from ..domain.value_objects import MediaType, ProviderName
from .base import HttpProviderAdapter, response_json

logger = structlog.get_logger()

POST_COLLECTION = "app.bsky.feed.post"


def link_facet(text: str, link_url: str) -> dict:
    """Rich-text link facet for the last occurrence of link_url in text.

    AT Protocol facets index UTF-8 bytes, not characters.
    """
    encoded = text.encode("utf-8")
    target = link_url.encode("utf-8")
    start = encoded.rfind(target)
    return {
        "index": {"byteStart": start, "byteEnd": start + len(target)},
        "features": [{"$type": "app.bsky.richtext.facet#link", "uri": link_url}],
    }


class BlueskyAdapter(HttpProviderAdapter, DirectAuthAdapter):
    """Bluesky adapter. Authenticates with a handle and app password, not OAuth."""

    def __init__(self, timeout: float = 20.0, service_url: str = "https://bsky.social") -> None:
        super().__init__(timeout)
        self._service_url = service_url.rstrip("/")

    @property
    def provider(self) -> ProviderName:
        return ProviderName.BLUESKY

    def _xrpc(self, method: str) -> str:
        return f"{self._service_url}/xrpc/{method}"

    def authorization_params(
        self,
        client_id: str,
        redirect_uri: str,
        state: str,
        code_verifier: str,
    ) -> dict[str, str]:
        raise RequestValidationError("direct_auth_required", "Bluesky connects with an app password")

    async def exchange_code(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        code_verifier: str,
    ) -> TokenGrant:
        raise RequestValidationError("direct_auth_required", "Bluesky connects with an app password")

    async def create_session(self, identifier: str, secret: str) -> TokenGrant:
        """
        Log in with an app password.

        Raises:
            AuthenticationError: If Bluesky rejects the credentials
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    self._xrpc("com.atproto.server.createSession"),
                    json={"identifier": identifier, "password": secret},
                )
        except httpx.HTTPError as e:
            logger.error("Bluesky session request failed", error=str(e))
            raise OAuthError("session_failed", str(e)) from e

        data = response_json(response)
        if not response.is_success or not data.get("accessJwt"):
            error = self._error_from(data)
            raise AuthenticationError(
                "invalid_credentials",
                error.message if error else "Invalid Bluesky credentials",
            )

        return TokenGrant(
            access_token=data["accessJwt"],
            refresh_token=data.get("refreshJwt"),
            token_type="Bearer",
            provider_user_id=data.get("did"),
        )

    async def fetch_identity(self, grant: TokenGrant) -> ProviderIdentity:
        if not grant.provider_user_id:
            raise OAuthError("identity_unavailable", "Bluesky session has no DID")

        profile = await self._get_identity(
            self._xrpc("app.bsky.actor.getProfile"),
            params={"actor": grant.provider_user_id},
            headers={"Authorization": f"Bearer {grant.access_token}"},
        )

        handle = profile.get("handle")
        return ProviderIdentity(
            provider_account_id=grant.provider_user_id,
            display_name=profile.get("displayName") or handle or grant.provider_user_id,
            account_type=AccountType.PERSONAL,
            handle=f"@{handle}" if handle else None,
            avatar_url=profile.get("avatar"),
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
        record: dict = {
            "$type": POST_COLLECTION,
            "text": text,
            "createdAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        if link_url:
            record["facets"] = [link_facet(text, link_url)]
        if media_url:
            # Images must be uploaded as blobs first; the post goes out as text
            logger.info("Bluesky media attachment skipped", account_id=provider_account_id)

        async with self._client() as client:
            response = await client.post(
                self._xrpc("com.atproto.repo.createRecord"),
                headers={"Authorization": f"Bearer {access_token}"},
                json={
                    "repo": provider_account_id,
                    "collection": POST_COLLECTION,
                    "record": record,
                },
            )
        data = self._check(response)

        uri = data.get("uri")
        post_url = None
        if uri:
            rkey = uri.rsplit("/", 1)[-1]
            post_url = f"https://bsky.app/profile/{provider_account_id}/post/{rkey}"
        return PublishReceipt(success=True, post_id=uri, post_url=post_url)
