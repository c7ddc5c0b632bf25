from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..logging import current_correlation_id
from .models import Base


def _tag_statement(conn, cursor, statement, parameters, context, executemany):
    """Prefix SQL with the request's correlation id so slow-query logs can be traced."""
    cid = current_correlation_id()
    if cid:
        statement = f"/* correlation_id={cid} */ {statement}"
    return statement, parameters


class Database:
    """Owns the async engine and hands out sessions."""

    def __init__(self, url: str, pool_size: int = 5, max_overflow: int = 10) -> None:
        options: dict = {"pool_pre_ping": True}
        # SQLite (tests, local runs) uses a pool that takes no sizing options
        if make_url(url).get_backend_name() != "sqlite":
            options.update(pool_size=pool_size, max_overflow=max_overflow)

        self._engine: AsyncEngine = create_async_engine(url, **options)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)
        event.listen(self._engine.sync_engine, "before_cursor_execute", _tag_statement, retval=True)

    def session(self) -> AsyncSession:
        return self._sessions()

    async def create_tables(self) -> None:
        """Create the schema directly, bypassing migrations."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def close(self) -> None:
        await self._engine.dispose()
