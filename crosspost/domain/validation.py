"""Request validation for publishing.

Pure functions: nothing here performs provider I/O. URL validation needs a
hostname resolver to apply the SSRF guard; the default one uses the system
resolver and callers may inject their own.
"""

import ipaddress
import socket
from collections.abc import Callable, Iterable, Sequence
from urllib.parse import urlsplit, urlunsplit
from uuid import UUID

from .entities import PublishRequest
from .errors import RequestValidationError
from .value_objects import MediaType, ProviderConfig

MAX_CONTENT_LENGTH = 63206
MAX_TARGETS = 25
MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = frozenset({"http", "https"})
BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "ip6-localhost", "ip6-loopback"})

HostResolver = Callable[[str], Iterable[str]]


def system_resolver(hostname: str) -> list[str]:
    """Resolve a hostname to its IP address strings."""
    infos = socket.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    return [info[4][0] for info in infos]


def validate_identifier(value: str | UUID) -> UUID:
    """Accept only canonical UUIDs."""
    if isinstance(value, UUID):
        return value
    try:
        parsed = UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        raise RequestValidationError("bad_id", f"Invalid identifier: {value!r}") from None
    if str(parsed) != str(value).lower():
        raise RequestValidationError("bad_id", f"Invalid identifier: {value!r}")
    return parsed


def validate_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise RequestValidationError("empty_content", "Content cannot be empty")
    if len(text) > MAX_CONTENT_LENGTH:
        raise RequestValidationError(
            "too_long", f"Content cannot exceed {MAX_CONTENT_LENGTH} characters"
        )
    return text


def validate_targets(target_ids: Sequence[str | UUID] | None) -> tuple[UUID, ...]:
    """Validate target ids, collapsing duplicates in first-seen order."""
    if not target_ids:
        raise RequestValidationError("no_targets", "At least one target account is required")
    unique = tuple(dict.fromkeys(validate_identifier(t) for t in target_ids))
    if len(unique) > MAX_TARGETS:
        raise RequestValidationError(
            "too_many_targets", f"At most {MAX_TARGETS} target accounts per request"
        )
    return unique


def is_public_address(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped:
        ip = ip.ipv4_mapped
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


def validate_url(url: str, resolver: HostResolver = system_resolver) -> str:
    """Validate a caller-supplied URL and return it re-serialized.

    Rejects non-http(s) schemes, credentials in the authority, and any host
    that is, or resolves to, a loopback/private/link-local/reserved address.
    """
    if not url or len(url) > MAX_URL_LENGTH:
        raise RequestValidationError("bad_url", "URL is empty or too long")
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        raise RequestValidationError("bad_url", "URL could not be parsed") from None

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise RequestValidationError("bad_url", "Only http and https URLs are allowed")
    hostname = (parts.hostname or "").rstrip(".").lower()
    if not hostname:
        raise RequestValidationError("bad_url", "URL must be absolute")
    if parts.username is not None or parts.password is not None:
        raise RequestValidationError("unsafe_url", "Credentials in URLs are not allowed")

    if hostname in BLOCKED_HOSTNAMES or hostname.endswith(".localhost"):
        raise RequestValidationError("unsafe_url", "URL points at a local host")

    try:
        ipaddress.ip_address(hostname)
        addresses = [hostname]
    except ValueError:
        try:
            addresses = list(resolver(hostname))
        except (OSError, UnicodeError):
            raise RequestValidationError("bad_url", f"Host {hostname} cannot be resolved") from None

    if not addresses or not all(is_public_address(a) for a in addresses):
        raise RequestValidationError("unsafe_url", "URL points at a private or reserved address")

    host = f"[{hostname}]" if ":" in hostname else hostname
    netloc = f"{host}:{port}" if port else host
    return urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", parts.query, ""))


def validate_media_type(media_type: str | None, media_url: str | None) -> MediaType | None:
    if not media_url:
        return None
    if media_type is None:
        return MediaType.IMAGE
    try:
        return MediaType(media_type)
    except ValueError:
        raise RequestValidationError(
            "bad_media_type", "media_type must be 'image' or 'video'"
        ) from None


def validate_publish_request(
    workspace_id: str | UUID,
    content: str | None,
    target_account_ids: Sequence[str | UUID] | None,
    link_url: str | None = None,
    media_url: str | None = None,
    media_type: str | None = None,
    resolver: HostResolver = system_resolver,
) -> PublishRequest:
    """Validate a whole publish request, failing fast on the first problem."""
    return PublishRequest(
        workspace_id=validate_identifier(workspace_id),
        content=validate_content(content),
        target_account_ids=validate_targets(target_account_ids),
        link_url=validate_url(link_url, resolver) if link_url else None,
        media_url=validate_url(media_url, resolver) if media_url else None,
        media_type=validate_media_type(media_type, media_url),
    )


def check_platform_constraints(config: ProviderConfig, request: PublishRequest) -> None:
    """Validate one target's platform rules. Affects that target only."""
    if len(request.content) > config.max_length:
        raise RequestValidationError(
            "too_long",
            f"{config.display_name} posts cannot exceed {config.max_length} characters",
        )
    if config.requires_media and not request.media_url:
        raise RequestValidationError(
            "media_required", f"{config.display_name} requires an image or video"
        )
    if request.media_type and request.media_type not in config.media_types:
        raise RequestValidationError(
            "unsupported_media_type",
            f"{config.display_name} does not support {request.media_type.value} posts",
        )
