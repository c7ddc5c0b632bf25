from unittest.mock import AsyncMock, patch

import pytest

from crosspost.application.ports.outbound import DirectAuthAdapter, TokenGrant
from crosspost.domain.errors import AuthenticationError, RequestValidationError
from crosspost.providers import BlueskyAdapter
from crosspost.providers.bluesky import POST_COLLECTION, link_facet

DID = "did:plc:abc123"


class TestLinkFacet:
    def test_ascii_offsets(self):
        text = "Read https://example.com/"
        facet = link_facet(text, "https://example.com/")
        assert facet["index"] == {"byteStart": 5, "byteEnd": 25}
        assert facet["features"][0]["uri"] == "https://example.com/"

    def test_offsets_count_utf8_bytes(self):
        text = "Hi \U0001F44B\n\nhttps://example.com"
        facet = link_facet(text, "https://example.com")
        # "Hi " is 3 bytes, the emoji 4, the blank line 2
        assert facet["index"] == {"byteStart": 9, "byteEnd": 28}


class TestBlueskyAdapter:
    @pytest.fixture
    def adapter(self):
        return BlueskyAdapter(service_url="https://pds.test/")

    def test_is_direct_auth(self, adapter):
        assert isinstance(adapter, DirectAuthAdapter)

    def test_oauth_not_supported(self, adapter):
        with pytest.raises(RequestValidationError) as excinfo:
            adapter.authorization_params("id", "https://api.test/cb", "s", "v")
        assert excinfo.value.code == "direct_auth_required"

    @pytest.mark.asyncio
    async def test_create_session(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=response(
                    json={"accessJwt": "access", "refreshJwt": "refresh", "did": DID, "handle": "ada.bsky.social"}
                )
            )
            mock_client.return_value.__aenter__.return_value.post = post

            grant = await adapter.create_session("ada.bsky.social", "app-pass")

        assert grant.access_token == "access"
        assert grant.refresh_token == "refresh"
        assert grant.provider_user_id == DID
        assert post.call_args.args[0] == "https://pds.test/xrpc/com.atproto.server.createSession"
        assert post.call_args.kwargs["json"] == {"identifier": "ada.bsky.social", "password": "app-pass"}

    @pytest.mark.asyncio
    async def test_create_session_invalid_credentials(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=response(
                    401, json={"error": "AuthenticationRequired", "message": "Invalid identifier or password"}
                )
            )

            with pytest.raises(AuthenticationError) as excinfo:
                await adapter.create_session("ada.bsky.social", "wrong")

        assert excinfo.value.code == "invalid_credentials"
        assert excinfo.value.message == "Invalid identifier or password"

    @pytest.mark.asyncio
    async def test_fetch_identity(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            get = AsyncMock(
                return_value=response(json={"did": DID, "handle": "ada.bsky.social", "displayName": "Ada"})
            )
            mock_client.return_value.__aenter__.return_value.get = get

            identity = await adapter.fetch_identity(TokenGrant(access_token="access", provider_user_id=DID))

        assert identity.provider_account_id == DID
        assert identity.display_name == "Ada"
        assert identity.handle == "@ada.bsky.social"
        assert get.call_args.kwargs["params"] == {"actor": DID}

    @pytest.mark.asyncio
    async def test_publish_creates_record_with_facet(self, adapter, response):
        uri = f"at://{DID}/app.bsky.feed.post/3kxyz"
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=response(json={"uri": uri, "cid": "bafy"}))
            mock_client.return_value.__aenter__.return_value.post = post

            receipt = await adapter.publish(
                provider_account_id=DID,
                access_token="access",
                content="Hello",
                link_url="https://example.com/",
            )

        assert receipt.success is True
        assert receipt.post_id == uri
        assert receipt.post_url == f"https://bsky.app/profile/{DID}/post/3kxyz"

        body = post.call_args.kwargs["json"]
        assert body["repo"] == DID
        assert body["collection"] == POST_COLLECTION
        assert body["record"]["text"] == "Hello\n\nhttps://example.com/"
        assert body["record"]["createdAt"].endswith("Z")
        assert body["record"]["facets"][0]["index"] == {"byteStart": 7, "byteEnd": 27}
