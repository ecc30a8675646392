from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, Field


class DashboardCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)


class DashboardUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    layout: dict[str, Any] | list[Any] | None = None


class DashboardOut(BaseModel):
    id: str
    org_id: str
    name: str
    description: str | None
    layout: Any
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DashboardSummary(DashboardOut):
    creator_name: str
    widget_count: int


class WidgetCreate(BaseModel):
    type: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1, max_length=200)
    config: dict[str, Any] = Field(default_factory=dict)
    position_x: int = Field(default=0, ge=0)
    position_y: int = Field(default=0, ge=0)
    width: int = Field(default=4, ge=1)
    height: int = Field(default=3, ge=1)


class WidgetUpdate(BaseModel):
    type: str | None = Field(default=None, min_length=1, max_length=64)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    config: dict[str, Any] | None = None
    position_x: int | None = Field(default=None, ge=0)
    position_y: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)


class WidgetOut(BaseModel):
    id: str
    dashboard_id: str
    type: str
    title: str
    config: dict[str, Any]
    position_x: int
    position_y: int
    width: int
    height: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DashboardListResponse(BaseModel):
    dashboards: List[DashboardSummary]


class DashboardResponse(BaseModel):
    dashboard: DashboardOut


class DashboardDetailResponse(BaseModel):
    dashboard: DashboardSummary
    widgets: List[WidgetOut]


class WidgetResponse(BaseModel):
    widget: WidgetOut


class WidgetListResponse(BaseModel):
    widgets: List[WidgetOut]


class MessageResponse(BaseModel):
    message: str
