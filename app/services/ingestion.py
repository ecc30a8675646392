from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.event import Event, format_timestamp
from app.schemas.event import EventCreate
import structlog

logger = structlog.get_logger()


class IngestionService:
    """Service for writing event batches atomically"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _build_event(self, org_id: str, event: EventCreate, received_at: str) -> Event:
        return Event(
            org_id=org_id,
            name=event.name,
            properties=event.properties,
            user_identifier=event.user_id,
            session_id=event.session_id,
            timestamp=format_timestamp(event.timestamp) if event.timestamp else received_at
        )

    async def ingest_events(self, org_id: str, events: list[EventCreate]) -> int:
        """
        Write all events for an organization in a single transaction

        Either the whole batch is committed or nothing is; a storage fault
        rolls back and re-raises.

        Returns:
            number of events ingested
        """
        if not events:
            return 0

        received_at = format_timestamp(datetime.now(timezone.utc))

        try:
            self.db.add_all([
                self._build_event(org_id, event, received_at)
                for event in events
            ])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("batch_rolled_back", org_id=org_id, total=len(events), error=str(e))
            raise

        logger.info("events_ingested", org_id=org_id, total=len(events))

        return len(events)
