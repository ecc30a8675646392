# /analytics/* - event ingestion, aggregate queries and insights

from datetime import datetime, time, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import CurrentUser, get_current_user
from app.core.database import get_db
from app.models.event import format_timestamp
from app.schemas.analytics import GroupBy, InsightsResponse, QueryResponse
from app.schemas.event import EventBatchCreate, BatchIngestResponse
from app.services.analytics import AnalyticsService
from app.services.ingestion import IngestionService
from app.services.insights import InsightService
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/analytics", tags=["analytics"])


def _invalid(field: str, message: str) -> RequestValidationError:
    return RequestValidationError([
        {"loc": ("query", field), "msg": message, "type": "value_error"}
    ])


def _parse_bound(value: str | None, field: str, end_of_day: bool = False) -> str | None:
    """Parse an ISO-8601 query bound into the stored timestamp form

    A bare date used as an upper bound covers that whole day.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise _invalid(field, "must be an ISO-8601 date or timestamp")

    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max, tzinfo=timezone.utc)
    try:
        return format_timestamp(parsed)
    except OverflowError:
        raise _invalid(field, "is out of range once converted to UTC")


def _parse_group_by(value: str | None) -> GroupBy:
    if not value:
        return GroupBy.NAME
    try:
        return GroupBy(value)
    except ValueError:
        raise _invalid("group_by", "must be one of: name, day, hour")


@router.post("/events", response_model=BatchIngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest_events(
        batch: EventBatchCreate,
        user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Ingest a batch of events for the caller's organization.

    - **events**: 1 to 1000 events, each with a required `name`
    - The batch is written atomically: all events persist or none do
    """
    try:
        service = IngestionService(db)
        ingested = await service.ingest_events(user.org_id, batch.events)
    except SQLAlchemyError as e:
        logger.error("ingestion_failed", org_id=user.org_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to ingest events"
        )

    return BatchIngestResponse(
        ingested=ingested,
        message=f"{ingested} events ingested successfully"
    )


@router.get("/query", response_model=QueryResponse)
async def query_analytics(
        event_name: str | None = Query(default=None, description="Exact event name"),
        start_date: str | None = Query(default=None, description="Inclusive lower bound (ISO-8601)"),
        end_date: str | None = Query(default=None, description="Inclusive upper bound (ISO-8601)"),
        group_by: str | None = Query(default=None, description="name (default), day or hour"),
        user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Count the caller's events grouped by name, day or hour.

    - **group_by=name**: `{name, count}` buckets, most frequent first
    - **group_by=day|hour**: `{date, count}` buckets, oldest first
    """
    mode = _parse_group_by(group_by)
    start = _parse_bound(start_date, "start_date")
    end = _parse_bound(end_date, "end_date", end_of_day=True)

    try:
        service = AnalyticsService(db)
        data = await service.aggregate(
            user.org_id,
            event_name=event_name or None,
            start=start,
            end=end,
            group_by=mode
        )
    except SQLAlchemyError as e:
        logger.error("analytics_query_failed", org_id=user.org_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to query analytics"
        )

    return {"data": data}


@router.get("/insights", response_model=InsightsResponse)
async def get_insights(
        user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Heuristic insights derived from the caller's current event aggregates,
    together with the summary numbers they were computed from.
    """
    try:
        service = InsightService(db)
        return await service.build_report(user.org_id)
    except SQLAlchemyError as e:
        logger.error("insights_failed", org_id=user.org_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate insights"
        )
