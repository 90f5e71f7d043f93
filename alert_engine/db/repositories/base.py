# alert_engine/db/repositories/base.py
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def ping(self) -> None:
        """Issue a trivial round-trip against the store."""
        await self.session.execute(text("SELECT 1"))
