from .oauth_state import DEFAULT_RETURN_PATH, OAuthState, safe_return_path
from .provider import (
    PROVIDER_CONFIGS,
    MediaType,
    ProviderConfig,
    ProviderName,
    get_provider_config,
)

__all__ = [
    "DEFAULT_RETURN_PATH",
    "MediaType",
    "OAuthState",
    "PROVIDER_CONFIGS",
    "ProviderConfig",
    "ProviderName",
    "get_provider_config",
    "safe_return_path",
]
