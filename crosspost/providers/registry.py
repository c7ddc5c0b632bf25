from ..application.ports.outbound import AdapterLookup, ProviderAdapter
from ..domain.value_objects import ProviderName
from .bluesky import BlueskyAdapter
from .facebook import FacebookAdapter
from .instagram import InstagramAdapter
from .linkedin import LinkedInAdapter
from .threads import ThreadsAdapter
from .tiktok import TikTokAdapter
from .x import XAdapter


class ProviderAdapterRegistry(AdapterLookup):
    """
    Lookup table from provider name to adapter.

    Adapters are stateless, so one instance per provider is created lazily
    and shared across requests.
    """

    def __init__(self, timeout: float = 20.0, bluesky_service_url: str = "https://bsky.social") -> None:
        self._timeout = timeout
        self._bluesky_service_url = bluesky_service_url
        self._instances: dict[ProviderName, ProviderAdapter] = {}

    def get(self, provider: ProviderName) -> ProviderAdapter:
        """
        Get or create the adapter for a provider.

        Raises:
            ValueError: If the provider is not supported
        """
        provider = ProviderName(provider)
        if provider not in self._instances:
            self._instances[provider] = self._create(provider)
        return self._instances[provider]

    def register(self, adapter: ProviderAdapter) -> None:
        """Replace the adapter for its provider (used by tests)."""
        self._instances[adapter.provider] = adapter

    def reset(self) -> None:
        self._instances.clear()

    def _create(self, provider: ProviderName) -> ProviderAdapter:
        match provider:
            case ProviderName.FACEBOOK:
                return FacebookAdapter(self._timeout)
            case ProviderName.INSTAGRAM:
                return InstagramAdapter(self._timeout)
            case ProviderName.LINKEDIN:
                return LinkedInAdapter(self._timeout)
            case ProviderName.X:
                return XAdapter(self._timeout)
            case ProviderName.THREADS:
                return ThreadsAdapter(self._timeout)
            case ProviderName.TIKTOK:
                return TikTokAdapter(self._timeout)
            case ProviderName.BLUESKY:
                return BlueskyAdapter(self._timeout, service_url=self._bluesky_service_url)
            case _:
                raise ValueError(f"Unsupported provider: {provider}")
