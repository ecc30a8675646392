from datetime import datetime, timedelta, timezone
from typing import List, Dict, Any

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas.analytics import GroupBy
from app.services.analytics import AnalyticsService
import structlog

logger = structlog.get_logger()


class InsightThresholds(BaseModel):
    """Fixed heuristic constants for insight generation"""

    surge_pct: float = 20.0
    drop_pct: float = -20.0
    top_events_limit: int = 5
    trend_window_days: int = 7

    model_config = {"frozen": True}


DEFAULT_THRESHOLDS = InsightThresholds()


def percent_change(previous: int, last: int) -> float:
    """Day-over-day change in percent, rounded to one decimal.

    A previous count of zero yields 0 rather than an infinite change.
    """
    if not previous:
        return 0.0
    return round((last - previous) / previous * 100, 1)


def _format_percent(value: float) -> str:
    """Render a one-decimal percentage without a trailing .0 (30.0 -> "30")"""
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def _insight(type_: str, title: str, description: str, priority: str) -> Dict[str, str]:
    return {"type": type_, "title": title, "description": description, "priority": priority}


def generate_insights(
        total: int,
        top_events: List[Dict[str, Any]],
        recent_trend: List[Dict[str, Any]],
        thresholds: InsightThresholds = DEFAULT_THRESHOLDS
) -> List[Dict[str, str]]:
    """
    Derive ordered insights from aggregate summaries

    Args:
        total: total event count for the organization
        top_events: name buckets ordered by count descending
        recent_trend: day buckets ordered by date ascending
        thresholds: heuristic constants

    Returns:
        list of insight dicts (type, title, description, priority)
    """
    if total == 0:
        return [_insight(
            "info",
            "Get Started",
            "Start sending events to see analytics insights. Use the API to track "
            "user actions, page views, and custom events.",
            "high"
        )]

    insights = []

    if len(recent_trend) >= 2:
        change = percent_change(recent_trend[-2]["count"], recent_trend[-1]["count"])

        if change > thresholds.surge_pct:
            insights.append(_insight(
                "positive",
                "Traffic Surge Detected",
                f"Event volume increased by {change:.1f}% compared to the previous day. "
                "Investigate what's driving this growth.",
                "high"
            ))
        elif change < thresholds.drop_pct:
            insights.append(_insight(
                "warning",
                "Traffic Drop Alert",
                f"Event volume decreased by {_format_percent(abs(change))}% compared to the previous day. "
                "Check for potential issues.",
                "high"
            ))

    if top_events:
        top = top_events[0]
        insights.append(_insight(
            "info",
            "Most Popular Event",
            f'"{top["name"]}" is your most tracked event with {top["count"]} occurrences.',
            "medium"
        ))

    insights.append(_insight(
        "info",
        "Event Volume Summary",
        f"You've tracked {total} total events across {len(top_events)} event types.",
        "low"
    ))

    return insights


class InsightService:
    """Builds the insight report for one organization from current aggregates"""

    def __init__(self, db: AsyncSession, thresholds: InsightThresholds = DEFAULT_THRESHOLDS):
        self.analytics = AnalyticsService(db)
        self.thresholds = thresholds

    async def build_report(self, org_id: str, now: datetime | None = None) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        window_start = (now.date() - timedelta(days=self.thresholds.trend_window_days)).isoformat()

        total = await self.analytics.count_events(org_id)
        top_events = await self.analytics.aggregate(
            org_id,
            group_by=GroupBy.NAME,
            limit=self.thresholds.top_events_limit
        )
        recent_trend = await self.analytics.aggregate(
            org_id,
            start=window_start,
            group_by=GroupBy.DAY
        )

        insights = generate_insights(total, top_events, recent_trend, self.thresholds)

        logger.info("insights_generated", org_id=org_id, total_events=total, insights=len(insights))

        return {
            "insights": insights,
            "summary": {
                "total_events": total,
                "top_events": top_events,
                "recent_trend": recent_trend
            }
        }
