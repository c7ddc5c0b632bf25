from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from ..value_objects import MediaType, ProviderName


class PublishStatus(str, Enum):
    PUBLISHED = "published"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class PublishRequest:
    """A validated publish request. Transient, never persisted."""

    workspace_id: UUID
    content: str
    target_account_ids: tuple[UUID, ...]
    link_url: str | None = None
    media_url: str | None = None
    media_type: MediaType | None = None


@dataclass(frozen=True)
class PublishResult:
    """Outcome for one target account."""

    account_id: UUID
    provider: ProviderName | None  # None when the target could not be resolved
    success: bool
    post_id: str | None = None
    post_url: str | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(
        cls,
        account_id: UUID,
        provider: ProviderName | None,
        error: str,
        error_code: str | None = None,
    ) -> "PublishResult":
        return cls(
            account_id=account_id,
            provider=provider,
            success=False,
            error=error,
            error_code=error_code or error,
        )


@dataclass(frozen=True)
class PublishSummary:
    total: int
    succeeded: int
    failed: int


@dataclass(frozen=True)
class PublishOutcome:
    """Aggregate of per-target results; status is derived, never stored."""

    results: tuple[PublishResult, ...] = field(default_factory=tuple)

    @property
    def summary(self) -> PublishSummary:
        succeeded = sum(1 for r in self.results if r.success)
        return PublishSummary(
            total=len(self.results),
            succeeded=succeeded,
            failed=len(self.results) - succeeded,
        )

    @property
    def status(self) -> PublishStatus:
        summary = self.summary
        if summary.total and summary.succeeded == summary.total:
            return PublishStatus.PUBLISHED
        if summary.succeeded == 0:
            return PublishStatus.FAILED
        return PublishStatus.PARTIAL

    def counts_by_provider(self) -> dict[str, dict[str, int]]:
        counts: dict[str, dict[str, int]] = {}
        for result in self.results:
            key = result.provider.value if result.provider else "unknown"
            bucket = counts.setdefault(key, {"succeeded": 0, "failed": 0})
            bucket["succeeded" if result.success else "failed"] += 1
        return counts
