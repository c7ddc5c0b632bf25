import secrets
import time
from dataclasses import asdict, dataclass, field

DEFAULT_RETURN_PATH = "/channels"


def safe_return_path(path: str | None) -> str:
    """Only same-origin relative paths may be used as a post-connect redirect."""
    if not path or not path.startswith("/") or path.startswith("//") or "\\" in path:
        return DEFAULT_RETURN_PATH
    return path


@dataclass(frozen=True)
class OAuthState:
    """Context carried through the provider redirect round-trip."""

    user_id: str
    workspace_id: str
    provider: str
    return_path: str = DEFAULT_RETURN_PATH
    nonce: str = field(default_factory=lambda: secrets.token_urlsafe(16))
    issued_at: int = field(default_factory=lambda: int(time.time()))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "OAuthState":
        return cls(
            user_id=str(data["user_id"]),
            workspace_id=str(data["workspace_id"]),
            provider=str(data["provider"]),
            return_path=str(data["return_path"]),
            nonce=str(data["nonce"]),
            issued_at=int(data["issued_at"]),
        )
