import pytest
from sqlalchemy import text

from crosspost.infrastructure.logging import set_correlation_id


class TestDatabase:
    @pytest.mark.asyncio
    async def test_ping(self, database):
        assert await database.ping() is True

    @pytest.mark.asyncio
    async def test_queries_run_with_correlation_comment(self, database):
        set_correlation_id("req-123")
        try:
            async with database.session() as session:
                result = await session.execute(text("SELECT 1"))
                assert result.scalar_one() == 1
        finally:
            set_correlation_id("")
