from uuid import UUID

import pytest
import pytest_asyncio

from crosspost.domain.entities import AccountType, ConnectedAccount, Credential
from crosspost.domain.value_objects import ProviderName
from crosspost.infrastructure.persistence import Database

WORKSPACE_ID = UUID("11111111-1111-4111-8111-111111111111")
USER_ID = "00000000-0000-0000-0000-000000000001"

_HOSTS = {
    "example.com": ["93.184.216.34"],
    "cdn.example.com": ["93.184.216.35", "2606:2800:220:1:248:1893:25c8:1946"],
    "intranet.example.com": ["10.0.0.5"],
    "rebind.example.com": ["93.184.216.34", "127.0.0.1"],
}


def offline_resolver(hostname: str) -> list[str]:
    """Resolver used by tests so URL validation never touches DNS."""
    if hostname not in _HOSTS:
        raise OSError(f"unknown host {hostname}")
    return _HOSTS[hostname]


@pytest.fixture
def workspace_id() -> UUID:
    return WORKSPACE_ID


@pytest.fixture
def user_id() -> str:
    return USER_ID


@pytest.fixture
def resolver():
    return offline_resolver


@pytest.fixture
def make_account(workspace_id):
    def _make(
        provider: ProviderName = ProviderName.X,
        provider_account_id: str = "ext-1",
        display_name: str = "Test Account",
        account_type: AccountType = AccountType.PROFILE,
    ) -> ConnectedAccount:
        return ConnectedAccount.create(
            workspace_id=workspace_id,
            provider=provider,
            provider_account_id=provider_account_id,
            display_name=display_name,
            account_type=account_type,
        )

    return _make


@pytest.fixture
def make_credential():
    def _make(account: ConnectedAccount, access_token: str = "token-abc") -> Credential:
        return Credential.create(account_id=account.id, access_token=access_token, expires_in=3600)

    return _make


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'crosspost.db'}")
    await db.create_tables()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session
