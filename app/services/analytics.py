from typing import List, Dict, Any

from sqlalchemy import String, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.event import Event
from app.schemas.analytics import GroupBy
import structlog

logger = structlog.get_logger()

# Keys are cut from the normalized timestamp (2024-03-01T10:15:00.000Z)
DAY_KEY = func.substr(Event.timestamp, literal_column("1"), literal_column("10"), type_=String)
HOUR_KEY = (
    DAY_KEY
    + literal_column("' '", String)
    + func.substr(Event.timestamp, literal_column("12"), literal_column("2"), type_=String)
    + literal_column("':00'", String)
)


class AnalyticsService:
    """Grouped count queries over one organization's events"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_events(self, org_id: str) -> int:
        """Total number of events stored for an organization"""
        stmt = select(func.count()).select_from(Event).where(Event.org_id == org_id)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def aggregate(
            self,
            org_id: str,
            event_name: str | None = None,
            start: str | None = None,
            end: str | None = None,
            group_by: GroupBy = GroupBy.NAME,
            limit: int | None = None
    ) -> List[Dict[str, Any]]:
        """
        Count events grouped by name, day or hour

        Name buckets come back as {"name", "count"} ordered by count
        descending; day and hour buckets as {"date", "count"} ordered by
        date ascending. ``start`` and ``end`` are inclusive bounds in the
        stored timestamp format (a date prefix such as "2024-03-01" also
        works as a lower bound).
        """
        count = func.count().label("count")

        if group_by == GroupBy.NAME:
            key = Event.name.label("name")
            order = (count.desc(), Event.name.asc())
        else:
            key = (DAY_KEY if group_by == GroupBy.DAY else HOUR_KEY).label("date")
            order = (key.asc(),)

        # The tenant filter is always first and never replaced by caller filters
        conditions = [Event.org_id == org_id]
        if event_name:
            conditions.append(Event.name == event_name)
        if start:
            conditions.append(Event.timestamp >= start)
        if end:
            conditions.append(Event.timestamp <= end)

        stmt = (
            select(key, count)
            .where(*conditions)
            .group_by(key)
            .order_by(*order)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        rows = [dict(row._mapping) for row in result]

        logger.info(
            "analytics_query",
            org_id=org_id,
            group_by=group_by.value,
            event_name=event_name,
            buckets=len(rows)
        )

        return rows
