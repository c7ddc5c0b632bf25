from uuid import uuid4

import pytest

from crosspost.domain.entities import (
    AccountStatus,
    AccountType,
    ConnectedAccount,
    Credential,
    PublishOutcome,
    PublishResult,
    PublishStatus,
)
from crosspost.domain.value_objects import ProviderName


def _result(success: bool, provider: ProviderName = ProviderName.X) -> PublishResult:
    if success:
        return PublishResult(account_id=uuid4(), provider=provider, success=True, post_id="1")
    return PublishResult.failure(uuid4(), provider, "boom", "provider_error")


class TestPublishOutcome:
    def test_all_succeeded_is_published(self):
        outcome = PublishOutcome(results=(_result(True), _result(True)))
        assert outcome.status == PublishStatus.PUBLISHED
        assert outcome.summary.total == 2
        assert outcome.summary.succeeded == 2

    def test_none_succeeded_is_failed(self):
        outcome = PublishOutcome(results=(_result(False), _result(False)))
        assert outcome.status == PublishStatus.FAILED
        assert outcome.summary.failed == 2

    def test_mixed_is_partial(self):
        outcome = PublishOutcome(results=(_result(True), _result(False)))
        assert outcome.status == PublishStatus.PARTIAL

    def test_empty_is_failed(self):
        assert PublishOutcome().status == PublishStatus.FAILED

    def test_counts_by_provider(self):
        outcome = PublishOutcome(
            results=(
                _result(True, ProviderName.X),
                _result(False, ProviderName.X),
                _result(True, ProviderName.FACEBOOK),
            )
        )
        assert outcome.counts_by_provider() == {
            "x": {"succeeded": 1, "failed": 1},
            "facebook": {"succeeded": 1, "failed": 0},
        }

    def test_failure_defaults_error_code_to_error(self):
        result = PublishResult.failure(uuid4(), ProviderName.X, "no_access_token")
        assert result.success is False
        assert result.error_code == "no_access_token"


class TestConnectedAccount:
    def test_create_is_connected(self, make_account):
        account = make_account()
        assert account.status == AccountStatus.CONNECTED
        assert account.is_publishable

    def test_reconnect_refreshes_fields(self, make_account):
        account = make_account(display_name="Old name")
        account.mark_needs_refresh()
        assert not account.is_publishable

        fresh = make_account(display_name="New name")
        original_id = account.id
        account.reconnect(fresh)

        assert account.id == original_id
        assert account.display_name == "New name"
        assert account.status == AccountStatus.CONNECTED
        assert account.last_connected_at == fresh.last_connected_at

    def test_reconnect_rejects_other_identity(self, make_account):
        account = make_account(provider_account_id="a")
        with pytest.raises(ValueError):
            account.reconnect(make_account(provider_account_id="b"))

    def test_needs_refresh_only_from_connected(self, make_account):
        account = make_account()
        account.mark_error()
        with pytest.raises(ValueError):
            account.mark_needs_refresh()


class TestCredential:
    def test_expires_at_from_expires_in(self):
        credential = Credential.create(account_id=uuid4(), access_token="secret", expires_in=60)
        assert credential.expires_at is not None
        assert credential.token_type == "Bearer"

    def test_no_expiry_when_not_reported(self):
        credential = Credential.create(account_id=uuid4(), access_token="secret")
        assert credential.expires_at is None

    def test_repr_hides_tokens(self):
        credential = Credential.create(
            account_id=uuid4(), access_token="super-secret", refresh_token="also-secret"
        )
        assert "super-secret" not in repr(credential)
        assert "also-secret" not in repr(credential)


def test_account_type_values():
    assert {t.value for t in AccountType} == {"page", "profile", "business", "creator", "personal"}
