"""Repository layer for scan history."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leakscope.database.models import HistoryRecord
from leakscope.models.report import HistoryEntry


class HistoryRepository:
    """Bounded scan history, oldest entries evicted first."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, entry: HistoryEntry, limit: int = 100) -> HistoryRecord:
        """Insert an entry and trim the table to ``limit`` rows."""
        record = HistoryRecord.from_entry(entry)
        self.session.add(record)
        await self.session.flush()
        await self.evict(limit)
        return record

    async def evict(self, limit: int) -> int:
        """Delete the oldest rows beyond ``limit``. Returns the number removed."""
        total = await self.count()
        excess = total - limit
        if excess <= 0:
            return 0

        oldest = (
            select(HistoryRecord.id)
            .order_by(HistoryRecord.timestamp.asc(), HistoryRecord.id.asc())
            .limit(excess)
        )
        ids = list((await self.session.execute(oldest)).scalars().all())
        await self.session.execute(delete(HistoryRecord).where(HistoryRecord.id.in_(ids)))
        await self.session.flush()
        return len(ids)

    async def list_recent(self, limit: int = 20) -> list[HistoryEntry]:
        """Newest entries first."""
        result = await self.session.execute(
            select(HistoryRecord)
            .order_by(HistoryRecord.timestamp.desc(), HistoryRecord.id.desc())
            .limit(limit)
        )
        return [record.to_entry() for record in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(HistoryRecord))
        return result.scalar_one()

    async def clear(self) -> int:
        """Delete every history row."""
        result = await self.session.execute(delete(HistoryRecord))
        await self.session.flush()
        return result.rowcount or 0
