from abc import ABC, abstractmethod

from ....domain.value_objects import OAuthState


class StateSigner(ABC):
    """Output port for tamper-proof OAuth ``state`` values."""

    @abstractmethod
    def encode(self, state: OAuthState) -> str: ...

    @abstractmethod
    def decode(self, token: str | None) -> OAuthState:
        """
        Raises:
            OAuthError: ``invalid_state`` if the token is forged, malformed or expired
        """
        ...

    @abstractmethod
    def code_verifier(self, state: OAuthState) -> str:
        """PKCE verifier bound to this state."""
        ...
