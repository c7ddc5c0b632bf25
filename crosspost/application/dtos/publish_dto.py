from uuid import UUID

from pydantic import BaseModel, Field

from ...domain.entities import PublishOutcome, PublishStatus
from ...domain.value_objects import ProviderName


class PublishRequestDTO(BaseModel):
    """Raw publish request body.

    Fields stay loosely typed here; ids, URLs and limits are checked by the
    validation layer so every failure carries a stable error code.
    """

    workspace_id: str
    content: str
    target_account_ids: list[str] = Field(default_factory=list)
    link_url: str | None = None
    media_url: str | None = None
    media_type: str | None = None


class PublishResultDTO(BaseModel):
    account_id: UUID
    provider: ProviderName | None = None
    success: bool
    post_id: str | None = None
    post_url: str | None = None
    error: str | None = Field(
        default=None,
        description="Human-readable failure message; wording may change",
    )
    error_code: str | None = Field(
        default=None,
        description="Stable machine-readable failure code, e.g. no_access_token, timeout, too_long",
    )


class PublishSummaryDTO(BaseModel):
    total: int
    succeeded: int
    failed: int


class PublishOutcomeDTO(BaseModel):
    status: PublishStatus
    results: list[PublishResultDTO]
    summary: PublishSummaryDTO

    @classmethod
    def from_outcome(cls, outcome: PublishOutcome) -> "PublishOutcomeDTO":
        summary = outcome.summary
        return cls(
            status=outcome.status,
            results=[
                PublishResultDTO(
                    account_id=r.account_id,
                    provider=r.provider,
                    success=r.success,
                    post_id=r.post_id,
                    post_url=r.post_url,
                    error=r.error,
                    error_code=r.error_code,
                )
                for r in outcome.results
            ],
            summary=PublishSummaryDTO(
                total=summary.total,
                succeeded=summary.succeeded,
                failed=summary.failed,
            ),
        )
