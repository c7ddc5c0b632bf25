from dataclasses import dataclass
from enum import Enum


class ProviderName(str, Enum):
    """Supported social platforms."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    X = "x"
    THREADS = "threads"
    TIKTOK = "tiktok"
    BLUESKY = "bluesky"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable, process-wide configuration for one platform."""

    name: ProviderName
    display_name: str
    max_length: int
    authorization_url: str | None = None
    token_url: str | None = None
    scopes: tuple[str, ...] = ()
    scope_separator: str = " "
    requires_media: bool = False
    supports_links: bool = True
    uses_oauth: bool = True
    media_types: frozenset[MediaType] = frozenset({MediaType.IMAGE, MediaType.VIDEO})

    @property
    def scope(self) -> str:
        return self.scope_separator.join(self.scopes)


_GRAPH_DIALOG = "https://www.facebook.com/v18.0/dialog/oauth"
_GRAPH_TOKEN = "https://graph.facebook.com/v18.0/oauth/access_token"

PROVIDER_CONFIGS: dict[ProviderName, ProviderConfig] = {
    ProviderName.FACEBOOK: ProviderConfig(
        name=ProviderName.FACEBOOK,
        display_name="Facebook",
        max_length=63206,
        authorization_url=_GRAPH_DIALOG,
        token_url=_GRAPH_TOKEN,
        scopes=("pages_manage_posts", "pages_read_engagement", "pages_show_list"),
    ),
    ProviderName.INSTAGRAM: ProviderConfig(
        name=ProviderName.INSTAGRAM,
        display_name="Instagram",
        max_length=2200,
        authorization_url=_GRAPH_DIALOG,
        token_url=_GRAPH_TOKEN,
        scopes=(
            "instagram_basic",
            "instagram_content_publish",
            "pages_show_list",
            "pages_read_engagement",
        ),
        requires_media=True,
        supports_links=False,  # Links in bio only
    ),
    ProviderName.LINKEDIN: ProviderConfig(
        name=ProviderName.LINKEDIN,
        display_name="LinkedIn",
        max_length=3000,
        authorization_url="https://www.linkedin.com/oauth/v2/authorization",
        token_url="https://www.linkedin.com/oauth/v2/accessToken",
        scopes=("openid", "profile", "w_member_social"),
    ),
    ProviderName.X: ProviderConfig(
        name=ProviderName.X,
        display_name="X (Twitter)",
        max_length=280,
        authorization_url="https://twitter.com/i/oauth2/authorize",
        token_url="https://api.twitter.com/2/oauth2/token",
        scopes=("tweet.read", "tweet.write", "users.read", "offline.access"),
    ),
    ProviderName.THREADS: ProviderConfig(
        name=ProviderName.THREADS,
        display_name="Threads",
        max_length=500,
        authorization_url="https://threads.net/oauth/authorize",
        token_url="https://graph.threads.net/oauth/access_token",
        scopes=("threads_basic", "threads_content_publish"),
        scope_separator=",",
    ),
    ProviderName.TIKTOK: ProviderConfig(
        name=ProviderName.TIKTOK,
        display_name="TikTok",
        max_length=2200,
        authorization_url="https://www.tiktok.com/v2/auth/authorize/",
        token_url="https://open.tiktokapis.com/v2/oauth/token/",
        scopes=("user.info.basic", "video.publish"),
        scope_separator=",",
        requires_media=True,
        supports_links=False,
        media_types=frozenset({MediaType.VIDEO}),
    ),
    ProviderName.BLUESKY: ProviderConfig(
        name=ProviderName.BLUESKY,
        display_name="Bluesky",
        max_length=300,
        uses_oauth=False,
        media_types=frozenset({MediaType.IMAGE}),
    ),
}


def get_provider_config(provider: ProviderName | str) -> ProviderConfig:
    """Look up a provider's configuration.

    Raises:
        ValueError: If the provider is unknown
    """
    return PROVIDER_CONFIGS[ProviderName(provider)]
