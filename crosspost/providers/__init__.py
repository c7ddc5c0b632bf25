from .base import HttpProviderAdapter
from .bluesky import BlueskyAdapter
from .facebook import FacebookAdapter
from .instagram import InstagramAdapter
from .linkedin import LinkedInAdapter
from .registry import ProviderAdapterRegistry
from .threads import ThreadsAdapter
from .tiktok import TikTokAdapter
from .x import XAdapter

__all__ = [
    "BlueskyAdapter",
    "FacebookAdapter",
    "HttpProviderAdapter",
    "InstagramAdapter",
    "LinkedInAdapter",
    "ProviderAdapterRegistry",
    "ThreadsAdapter",
    "TikTokAdapter",
    "XAdapter",
]
