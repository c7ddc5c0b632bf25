from unittest.mock import AsyncMock, patch

import httpx
import pytest

from crosspost.application.ports.outbound import TokenGrant
from crosspost.domain.entities import AccountType
from crosspost.domain.errors import OAuthError
from crosspost.domain.value_objects import MediaType
from crosspost.providers import LinkedInAdapter, TikTokAdapter, XAdapter
from crosspost.providers.x import code_challenge


class TestXAdapter:
    @pytest.fixture
    def adapter(self):
        return XAdapter()

    def test_code_challenge_rfc7636_vector(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_authorization_params_include_pkce(self, adapter):
        params = adapter.authorization_params("client", "https://api.test/cb", "s", "verifier-123")
        assert params["code_challenge"] == code_challenge("verifier-123")
        assert params["code_challenge_method"] == "S256"
        assert params["scope"] == "tweet.read tweet.write users.read offline.access"

    @pytest.mark.asyncio
    async def test_exchange_code_sends_verifier_and_basic_auth(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=response(
                    json={"access_token": "tok", "refresh_token": "ref", "expires_in": 7200, "token_type": "bearer"}
                )
            )
            mock_client.return_value.__aenter__.return_value.post = post

            grant = await adapter.exchange_code("code-1", "client", "secret", "https://api.test/cb", "verifier-123")

        assert grant.refresh_token == "ref"
        assert post.call_args.kwargs["auth"] == ("client", "secret")
        body = post.call_args.kwargs["data"]
        assert body["code_verifier"] == "verifier-123"
        assert "client_secret" not in body

    @pytest.mark.asyncio
    async def test_exchange_code_rfc_error(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=response(
                    400, json={"error": "invalid_request", "error_description": "Value passed for the authorization code was invalid."}
                )
            )

            with pytest.raises(OAuthError) as excinfo:
                await adapter.exchange_code("bad", "client", "secret", "https://api.test/cb", "v")

        assert excinfo.value.code == "invalid_request"
        assert "authorization code" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_fetch_identity(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=response(json={"data": {"id": "42", "name": "Ada", "username": "ada"}})
            )

            identity = await adapter.fetch_identity(TokenGrant(access_token="tok"))

        assert identity.provider_account_id == "42"
        assert identity.handle == "@ada"
        assert identity.account_type == AccountType.PROFILE

    @pytest.mark.asyncio
    async def test_publish_appends_link(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=response(201, json={"data": {"id": "1789", "text": "..."}}))
            mock_client.return_value.__aenter__.return_value.post = post

            receipt = await adapter.publish(
                provider_account_id="42",
                access_token="tok",
                content="Hello world",
                link_url="https://example.com/",
            )

        assert receipt.success is True
        assert receipt.post_url == "https://x.com/i/status/1789"
        assert post.call_args.kwargs["json"] == {"text": "Hello world\n\nhttps://example.com/"}
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_publish_problem_json_error(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=response(
                    403,
                    json={
                        "title": "Forbidden",
                        "detail": "You are not allowed to create a Tweet with duplicate content.",
                        "status": 403,
                        "type": "about:blank",
                    },
                )
            )

            receipt = await adapter.publish(provider_account_id="42", access_token="tok", content="dup")

        assert receipt.success is False
        assert receipt.error_code == "403"
        assert "duplicate content" in receipt.error

    @pytest.mark.asyncio
    async def test_publish_errors_array(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=response(401, json={"errors": [{"message": "Unauthorized", "code": 89}]})
            )

            receipt = await adapter.publish(provider_account_id="42", access_token="tok", content="Hi")

        assert receipt.error == "Unauthorized"
        assert receipt.error_code == "89"

    @pytest.mark.asyncio
    async def test_unparseable_error_body_uses_status(self, adapter):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=httpx.Response(
                    503, text="Service Unavailable", request=httpx.Request("POST", "https://provider.test")
                )
            )

            receipt = await adapter.publish(provider_account_id="42", access_token="tok", content="Hi")

        assert receipt.success is False
        assert receipt.error_code == "503"


class TestLinkedInAdapter:
    @pytest.fixture
    def adapter(self):
        return LinkedInAdapter()

    @pytest.mark.asyncio
    async def test_fetch_identity(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=response(json={"sub": "abc123", "name": "Grace Hopper", "picture": "https://img.test/g.png"})
            )

            identity = await adapter.fetch_identity(TokenGrant(access_token="tok"))

        assert identity.provider_account_id == "abc123"
        assert identity.account_type == AccountType.PERSONAL

    @pytest.mark.asyncio
    async def test_publish_article_share(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=response(201, json={}, headers={"x-restli-id": "urn:li:share:123"})
            )
            mock_client.return_value.__aenter__.return_value.post = post

            receipt = await adapter.publish(
                provider_account_id="abc123",
                access_token="tok",
                content="Read this",
                link_url="https://example.com/article",
            )

        assert receipt.success is True
        assert receipt.post_id == "urn:li:share:123"
        assert receipt.post_url == "https://www.linkedin.com/feed/update/urn:li:share:123"

        body = post.call_args.kwargs["json"]
        share = body["specificContent"]["com.linkedin.ugc.ShareContent"]
        assert body["author"] == "urn:li:person:abc123"
        assert share["shareMediaCategory"] == "ARTICLE"
        assert share["media"][0]["originalUrl"] == "https://example.com/article"
        assert post.call_args.kwargs["headers"]["X-Restli-Protocol-Version"] == "2.0.0"

    @pytest.mark.asyncio
    async def test_publish_rest_error(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=response(
                    422, json={"message": "Content is a duplicate", "serviceErrorCode": 0, "status": 422}
                )
            )

            receipt = await adapter.publish(provider_account_id="abc123", access_token="tok", content="Hi")

        assert receipt.success is False
        assert receipt.error == "Content is a duplicate"
        assert receipt.error_code == "422"


class TestTikTokAdapter:
    @pytest.fixture
    def adapter(self):
        return TikTokAdapter()

    def test_authorization_params_use_client_key(self, adapter):
        params = adapter.authorization_params("ck", "https://api.test/cb", "s", "v")
        assert params["client_key"] == "ck"
        assert "client_id" not in params
        assert params["scope"] == "user.info.basic,video.publish"

    @pytest.mark.asyncio
    async def test_exchange_code_reads_open_id(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=response(json={"access_token": "tok", "open_id": "oid-1", "expires_in": 86400}))
            mock_client.return_value.__aenter__.return_value.post = post

            grant = await adapter.exchange_code("code", "ck", "cs", "https://api.test/cb", "v")

        assert grant.provider_user_id == "oid-1"
        assert post.call_args.kwargs["data"]["client_key"] == "ck"
        assert "client_id" not in post.call_args.kwargs["data"]

    @pytest.mark.asyncio
    async def test_publish_video(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=response(
                    json={"data": {"publish_id": "v_pub_1"}, "error": {"code": "ok", "message": ""}}
                )
            )
            mock_client.return_value.__aenter__.return_value.post = post

            receipt = await adapter.publish(
                provider_account_id="oid-1",
                access_token="tok",
                content="My clip",
                media_url="https://cdn.example.com/a.mp4",
                media_type=MediaType.VIDEO,
            )

        assert receipt.success is True
        assert receipt.post_id == "v_pub_1"
        body = post.call_args.kwargs["json"]
        assert body["source_info"] == {"source": "PULL_FROM_URL", "video_url": "https://cdn.example.com/a.mp4"}

    @pytest.mark.asyncio
    async def test_publish_error_code(self, adapter, response):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=response(
                    403,
                    json={"error": {"code": "spam_risk_too_many_posts", "message": "Too many posts"}},
                )
            )

            receipt = await adapter.publish(
                provider_account_id="oid-1",
                access_token="tok",
                content="My clip",
                media_url="https://cdn.example.com/a.mp4",
                media_type=MediaType.VIDEO,
            )

        assert receipt.success is False
        assert receipt.error_code == "spam_risk_too_many_posts"

    @pytest.mark.asyncio
    async def test_publish_requires_video(self, adapter):
        receipt = await adapter.publish(
            provider_account_id="oid-1",
            access_token="tok",
            content="Still image",
            media_url="https://cdn.example.com/a.jpg",
            media_type=MediaType.IMAGE,
        )

        assert receipt.success is False
        assert receipt.error_code == "media_required"
