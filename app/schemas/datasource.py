from datetime import datetime
from typing import Any, List, Literal

from pydantic import BaseModel, Field

DatasourceType = Literal["postgresql", "mysql", "csv", "api", "webhook", "javascript"]


class DatasourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: DatasourceType
    config: dict[str, Any] = Field(default_factory=dict)


class DatasourceOut(BaseModel):
    """Datasource as returned to clients; config stays server side"""
    id: str
    org_id: str
    type: str
    name: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class DatasourceResponse(BaseModel):
    datasource: DatasourceOut


class DatasourceListResponse(BaseModel):
    datasources: List[DatasourceOut]
