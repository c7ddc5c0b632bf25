from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from ....application.dtos import (
    AckDTO,
    AuthorizationUrlDTO,
    BlueskySessionRequestDTO,
    BlueskySessionResponseDTO,
    ConnectedAccountDTO,
    ConnectRequestDTO,
    DisconnectRequestDTO,
)
from ....application.services import ConnectionService
from ....config import settings
from ....domain.errors import CrosspostError, OAuthError
from ....domain.value_objects import DEFAULT_RETURN_PATH, ProviderName
from ...middleware import Caller, require_caller
from ..dependencies import get_connection_service

router = APIRouter(prefix="/connections", tags=["connections"])
logger = structlog.get_logger()


def _app_redirect(return_path: str, **params: str) -> RedirectResponse:
    separator = "&" if "?" in return_path else "?"
    url = f"{settings.app_url.rstrip('/')}{return_path}{separator}{urlencode(params)}"
    return RedirectResponse(url, status_code=302)


@router.post(
    "/bluesky/session",
    response_model=BlueskySessionResponseDTO,
    summary="Connect a Bluesky account",
    description="Log in with a Bluesky handle and app password and store the session.",
)
async def create_bluesky_session(
    request: BlueskySessionRequestDTO,
    caller: Caller = Depends(require_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> BlueskySessionResponseDTO:
    account = await service.authenticate_direct(
        identifier=request.identifier,
        app_password=request.app_password,
        user_id=caller.user_id,
        workspace_id=request.workspace_id,
        provider=ProviderName.BLUESKY.value,
    )
    return BlueskySessionResponseDTO(account=ConnectedAccountDTO.from_entity(account))


@router.post(
    "/disconnect",
    response_model=AckDTO,
    summary="Disconnect an account",
)
async def disconnect(
    request: DisconnectRequestDTO,
    caller: Caller = Depends(require_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> AckDTO:
    """Remove an account and its tokens. Succeeds if the account is already gone."""
    await service.disconnect(request.account_id, request.workspace_id, caller.user_id)
    return AckDTO()


@router.post(
    "/{provider}/connect",
    response_model=AuthorizationUrlDTO,
    summary="Start an OAuth connection",
    description="Returns the provider URL the browser should be sent to.",
)
async def connect(
    provider: str,
    request: ConnectRequestDTO,
    caller: Caller = Depends(require_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> AuthorizationUrlDTO:
    url = await service.initiate_connection(
        user_id=caller.user_id,
        workspace_id=request.workspace_id,
        provider=provider,
        return_path=request.return_path,
    )
    return AuthorizationUrlDTO(authorization_url=url)


@router.get(
    "/{provider}/callback",
    summary="OAuth redirect target",
    response_class=RedirectResponse,
    status_code=302,
)
async def callback(
    provider: str,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    service: ConnectionService = Depends(get_connection_service),
) -> RedirectResponse:
    """Finish the OAuth flow and send the browser back to the app."""
    return_path = DEFAULT_RETURN_PATH
    try:
        return_path = service.verify_state(provider, state).return_path
        if error:
            raise OAuthError(error, error_description or error)
        await service.complete_connection(provider, code or "", state)
    except CrosspostError as e:
        logger.warning(
            "OAuth callback failed", provider=provider, error_code=e.code, error=e.message
        )
        return _app_redirect(return_path, error=e.code)

    return _app_redirect(return_path, connected=provider)
