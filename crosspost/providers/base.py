from abc import abstractmethod
from typing import Any

import httpx
import structlog

from ..application.ports.outbound import (
    ProviderAdapter,
    ProviderError,
    PublishReceipt,
    TokenGrant,
)
from ..domain.errors import CrosspostError, OAuthError, ProviderPublishError
from ..domain.value_objects import MediaType, ProviderConfig, get_provider_config
from ..infrastructure.logging import Timer

logger = structlog.get_logger()


class HttpProviderAdapter(ProviderAdapter):
    """Shared plumbing for adapters talking to a provider over HTTPS.

    Implements the standard authorization-code grant; providers that deviate
    (PKCE, renamed client parameters, non-OAuth login) override the hooks.
    """

    def __init__(self, timeout: float = 20.0) -> None:
        self._timeout = timeout

    @property
    def config(self) -> ProviderConfig:
        return get_provider_config(self.provider)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout)

    # -- OAuth ---------------------------------------------------------------

    def authorization_params(
        self,
        client_id: str,
        redirect_uri: str,
        state: str,
        code_verifier: str,
    ) -> dict[str, str]:
        return {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": self.config.scope,
            "state": state,
        }

    def _token_request(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        code_verifier: str,
    ) -> tuple[dict[str, str], tuple[str, str] | None]:
        """Form body and optional HTTP basic auth for the token endpoint."""
        return (
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
            None,
        )

    async def exchange_code(
        self,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        code_verifier: str,
    ) -> TokenGrant:
        body, auth = self._token_request(code, client_id, client_secret, redirect_uri, code_verifier)
        try:
            async with self._client() as client:
                if auth:
                    response = await client.post(self.config.token_url, data=body, auth=auth)
                else:
                    response = await client.post(self.config.token_url, data=body)
        except httpx.HTTPError as e:
            logger.error(
                "Token exchange request failed", provider=self.provider.value, error=str(e)
            )
            raise OAuthError("token_exchange_failed", str(e)) from e

        data = self._check(response, OAuthError)
        if not data.get("access_token"):
            raise OAuthError(
                "token_exchange_failed", f"{self.config.display_name} returned no access token"
            )
        return self._grant_from(data)

    async def _get_identity(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET a profile endpoint; transport and provider errors become OAuthError."""
        try:
            async with self._client() as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Identity request failed", provider=self.provider.value, error=str(e))
            raise OAuthError("identity_failed", str(e) or type(e).__name__) from e
        return self._check(response, OAuthError)

    def _grant_from(self, data: dict[str, Any]) -> TokenGrant:
        expires_in = data.get("expires_in")
        return TokenGrant(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=int(expires_in) if expires_in else None,
            scope=data.get("scope") or self.config.scope,
            token_type=data.get("token_type"),
            provider_user_id=str(data["user_id"]) if data.get("user_id") else None,
        )

    # -- Publishing ----------------------------------------------------------

    async def publish(
        self,
        provider_account_id: str,
        access_token: str,
        content: str,
        link_url: str | None = None,
        media_url: str | None = None,
        media_type: MediaType | None = None,
    ) -> PublishReceipt:
        """Publish and fold provider failures into a receipt."""
        try:
            with Timer() as timer:
                receipt = await self._publish(
                    provider_account_id, access_token, content, link_url, media_url, media_type
                )
        except ProviderPublishError as e:
            logger.error(
                "Provider publish failed",
                provider=self.provider.value,
                error=e.message,
                error_code=e.code,
            )
            return PublishReceipt.failed(ProviderError(e.message, e.code))
        except httpx.TimeoutException:
            logger.error("Provider publish timed out", provider=self.provider.value)
            return PublishReceipt.failed(
                ProviderError(f"{self.config.display_name} request timed out", "timeout")
            )
        except httpx.HTTPError as e:
            logger.error("Provider publish failed", provider=self.provider.value, error=str(e))
            return PublishReceipt.failed(ProviderError(str(e) or type(e).__name__, "network_error"))

        logger.info(
            "Provider post created",
            provider=self.provider.value,
            post_id=receipt.post_id,
            duration_ms=timer.duration_ms,
        )
        return receipt

    @abstractmethod
    async def _publish(
        self,
        provider_account_id: str,
        access_token: str,
        content: str,
        link_url: str | None,
        media_url: str | None,
        media_type: MediaType | None,
    ) -> PublishReceipt:
        """Provider call sequence. Raises ProviderPublishError on rejection."""
        ...

    # -- Error normalization -------------------------------------------------

    def _error_from(self, payload: Any) -> ProviderError | None:
        """Reduce a provider error payload to ProviderError, or None if it is not one.

        Handles the Graph shape ``{"error": {"message", "code"}}`` and the
        RFC 6749 shape ``{"error": "...", "error_description": "..."}``.
        """
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if isinstance(error, dict):
            code = error.get("code") or error.get("type")
            return ProviderError(
                message=error.get("message") or f"{self.config.display_name} API error",
                code=str(code) if code is not None else "provider_error",
            )
        if isinstance(error, str) and error:
            return ProviderError(
                message=payload.get("error_description") or payload.get("message") or error,
                code=error,
            )
        return None

    def _check(
        self,
        response: httpx.Response,
        error_cls: type[CrosspostError] = ProviderPublishError,
    ) -> dict[str, Any]:
        """Parse a JSON response, raising error_cls for provider-reported errors."""
        data = response_json(response)
        error = self._error_from(data)
        if error is None and not response.is_success:
            error = ProviderError(
                message=f"{self.config.display_name} API error: {response.status_code}",
                code=str(response.status_code),
            )
        if error is not None:
            raise error_cls(error.code, error.message)
        return data


def response_json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
