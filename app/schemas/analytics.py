from enum import Enum
from typing import List, Literal

from pydantic import BaseModel


class GroupBy(str, Enum):
    """Bucketing mode for aggregate queries"""
    NAME = "name"
    DAY = "day"
    HOUR = "hour"


class NameBucket(BaseModel):
    """Event count for one event name"""
    name: str
    count: int


class TimeBucket(BaseModel):
    """Event count for one day (YYYY-MM-DD) or hour (YYYY-MM-DD HH:00)"""
    date: str
    count: int


class QueryResponse(BaseModel):
    data: List[NameBucket] | List[TimeBucket]


class Insight(BaseModel):
    type: Literal["info", "positive", "warning"]
    title: str
    description: str
    priority: Literal["high", "medium", "low"]


class InsightSummary(BaseModel):
    total_events: int
    top_events: List[NameBucket]
    recent_trend: List[TimeBucket]


class InsightsResponse(BaseModel):
    insights: List[Insight]
    summary: InsightSummary
