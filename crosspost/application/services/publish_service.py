"""
Publish Dispatcher: validates a publish request and fans it out to providers.

Request-level problems (access, malformed input, no usable targets) raise
before any provider is contacted. After that, each target ends up as exactly
one PublishResult and no target's failure affects another.
"""

import asyncio
from collections.abc import Sequence
from uuid import UUID

import structlog

from ...domain.entities import (
    PUBLISH_ROLES,
    AuditRecord,
    ConnectedAccount,
    Credential,
    PublishOutcome,
    PublishRequest,
    PublishResult,
)
from ...domain.errors import NotFoundError, RequestValidationError
from ...domain.validation import (
    HostResolver,
    check_platform_constraints,
    system_resolver,
    validate_identifier,
    validate_publish_request,
)
from ...domain.value_objects import get_provider_config
from ..ports.outbound import (
    AccountRepository,
    AdapterLookup,
    AuditLog,
    CredentialRepository,
)
from .audit import record_audit
from .workspace_access import WorkspaceAccessService

logger = structlog.get_logger()


class PublishDispatcher:
    """Publishes one piece of content to many connected accounts."""

    def __init__(
        self,
        accounts: AccountRepository,
        credentials: CredentialRepository,
        access: WorkspaceAccessService,
        adapters: AdapterLookup,
        audit_log: AuditLog | None = None,
        concurrency: int = 5,
        timeout_seconds: float = 30.0,
        report_unresolved_targets: bool = False,
        resolver: HostResolver = system_resolver,
    ) -> None:
        self._accounts = accounts
        self._credentials = credentials
        self._access = access
        self._adapters = adapters
        self._audit_log = audit_log
        self._concurrency = max(1, concurrency)
        self._timeout_seconds = timeout_seconds
        self._report_unresolved = report_unresolved_targets
        self._resolver = resolver

    async def publish(
        self,
        user_id: str,
        workspace_id: str,
        content: str,
        target_account_ids: Sequence[str],
        link_url: str | None = None,
        media_url: str | None = None,
        media_type: str | None = None,
    ) -> PublishOutcome:
        """
        Publish content to the requested accounts.

        Raises:
            AuthorizationError: Caller may not publish in the workspace
            RequestValidationError: Malformed or unsafe request
            NotFoundError: ``no_valid_accounts`` if no target is a connected
                account of the workspace
        """
        workspace = validate_identifier(workspace_id)
        await self._access.require_role(workspace, user_id, PUBLISH_ROLES)

        # URL checks resolve hostnames, which blocks
        request = await asyncio.to_thread(
            validate_publish_request,
            workspace,
            content,
            target_account_ids,
            link_url,
            media_url,
            media_type,
            self._resolver,
        )

        accounts = await self._accounts.get_connected(workspace, request.target_account_ids)
        by_id = {account.id: account for account in accounts}
        resolved = [by_id[t] for t in request.target_account_ids if t in by_id]
        unresolved = [t for t in request.target_account_ids if t not in by_id]

        if unresolved:
            logger.warning(
                "Excluded unresolved publish targets",
                workspace_id=str(workspace),
                account_ids=[str(t) for t in unresolved],
            )
        if not resolved:
            raise NotFoundError("no_valid_accounts", "No valid connected accounts found")

        credentials = await self._credentials.get_for_accounts([a.id for a in resolved])
        results = await self._fan_out(request, resolved, credentials)

        if self._report_unresolved:
            results.update(
                {
                    t: PublishResult.failure(t, None, "Account not found or not connected", "not_found")
                    for t in unresolved
                }
            )
        outcome = PublishOutcome(
            results=tuple(results[t] for t in request.target_account_ids if t in results)
        )

        summary = outcome.summary
        logger.info(
            "Publish completed",
            workspace_id=str(workspace),
            status=outcome.status.value,
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
        )
        await record_audit(
            self._audit_log,
            AuditRecord.create(
                workspace_id=workspace,
                actor_user_id=user_id,
                action="post.published",
                entity_type="post",
                details={
                    "status": outcome.status.value,
                    "providers": outcome.counts_by_provider(),
                    "total": summary.total,
                    "succeeded": summary.succeeded,
                    "failed": summary.failed,
                },
            ),
        )
        return outcome

    async def _fan_out(
        self,
        request: PublishRequest,
        accounts: list[ConnectedAccount],
        credentials: dict[UUID, Credential],
    ) -> dict[UUID, PublishResult]:
        semaphore = asyncio.Semaphore(self._concurrency)
        gathered = asyncio.gather(
            *(
                self._publish_target(semaphore, request, account, credentials.get(account.id))
                for account in accounts
            )
        )
        try:
            # Provider side effects cannot be undone, so in-flight calls outlive the caller
            results = await asyncio.shield(gathered)
        except asyncio.CancelledError:
            logger.warning(
                "Publish cancelled by caller, waiting for in-flight provider calls",
                workspace_id=str(request.workspace_id),
                targets=len(accounts),
            )
            gathered.add_done_callback(_log_discarded)
            raise
        return {result.account_id: result for result in results}

    async def _publish_target(
        self,
        semaphore: asyncio.Semaphore,
        request: PublishRequest,
        account: ConnectedAccount,
        credential: Credential | None,
    ) -> PublishResult:
        config = get_provider_config(account.provider)
        try:
            check_platform_constraints(config, request)
        except RequestValidationError as e:
            return PublishResult.failure(account.id, account.provider, e.message, e.code)

        if credential is None:
            logger.warning("No access token for account", account_id=str(account.id))
            return PublishResult.failure(
                account.id, account.provider, "No access token found", "no_access_token"
            )

        adapter = self._adapters.get(account.provider)
        async with semaphore:
            try:
                receipt = await asyncio.wait_for(
                    adapter.publish(
                        provider_account_id=account.provider_account_id,
                        access_token=credential.access_token,
                        content=request.content,
                        link_url=request.link_url if config.supports_links else None,
                        media_url=request.media_url,
                        media_type=request.media_type,
                    ),
                    timeout=self._timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.error(
                    "Provider call timed out",
                    provider=account.provider.value,
                    account_id=str(account.id),
                    timeout_seconds=self._timeout_seconds,
                )
                return PublishResult.failure(
                    account.id,
                    account.provider,
                    f"{config.display_name} did not respond within {self._timeout_seconds:g}s",
                    "timeout",
                )
            except Exception as e:
                logger.exception(
                    "Unexpected publish error",
                    provider=account.provider.value,
                    account_id=str(account.id),
                )
                return PublishResult.failure(
                    account.id, account.provider, str(e) or type(e).__name__, "unexpected_error"
                )

        if not receipt.success:
            return PublishResult.failure(
                account.id,
                account.provider,
                receipt.error or f"{config.display_name} rejected the post",
                receipt.error_code or "provider_error",
            )
        return PublishResult(
            account_id=account.id,
            provider=account.provider,
            success=True,
            post_id=receipt.post_id,
            post_url=receipt.post_url,
        )


def _log_discarded(future: asyncio.Future) -> None:
    if future.cancelled():
        return
    results = future.result()
    logger.warning(
        "Discarded publish results after cancellation",
        succeeded=sum(1 for r in results if r.success),
        failed=sum(1 for r in results if not r.success),
    )
