# /dashboards/* and /widgets/* - organization-scoped dashboard management

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.dashboard import (
    DashboardCreate,
    DashboardDetailResponse,
    DashboardListResponse,
    DashboardResponse,
    DashboardUpdate,
    MessageResponse,
    WidgetCreate,
    WidgetListResponse,
    WidgetResponse,
    WidgetUpdate
)
from app.services.dashboards import DashboardService
import structlog

logger = structlog.get_logger()
router = APIRouter(tags=["dashboards"])


def get_service(
        user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
) -> DashboardService:
    return DashboardService(db, user.org_id)


def _not_found(resource: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found")


def _storage_error(action: str, e: SQLAlchemyError) -> HTTPException:
    logger.error("dashboard_storage_failed", action=action, error=str(e))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )


@router.get("/dashboards", response_model=DashboardListResponse)
async def list_dashboards(service: DashboardService = Depends(get_service)):
    try:
        return {"dashboards": await service.list_dashboards()}
    except SQLAlchemyError as e:
        raise _storage_error("fetch dashboards", e)


@router.post("/dashboards", response_model=DashboardResponse, status_code=status.HTTP_201_CREATED)
async def create_dashboard(
        data: DashboardCreate,
        user: CurrentUser = Depends(get_current_user),
        service: DashboardService = Depends(get_service)
):
    try:
        return {"dashboard": await service.create_dashboard(data, user.id)}
    except SQLAlchemyError as e:
        raise _storage_error("create dashboard", e)


@router.get("/dashboards/{dashboard_id}", response_model=DashboardDetailResponse)
async def get_dashboard(dashboard_id: str, service: DashboardService = Depends(get_service)):
    """Dashboard details with its widgets in grid order"""
    try:
        detail = await service.get_dashboard_detail(dashboard_id)
    except SQLAlchemyError as e:
        raise _storage_error("fetch dashboard", e)

    if detail is None:
        raise _not_found("Dashboard")
    return detail


@router.put("/dashboards/{dashboard_id}", response_model=DashboardResponse)
async def update_dashboard(
        dashboard_id: str,
        data: DashboardUpdate,
        service: DashboardService = Depends(get_service)
):
    try:
        dashboard = await service.update_dashboard(dashboard_id, data)
    except SQLAlchemyError as e:
        raise _storage_error("update dashboard", e)

    if dashboard is None:
        raise _not_found("Dashboard")
    return {"dashboard": dashboard}


@router.delete("/dashboards/{dashboard_id}", response_model=MessageResponse)
async def delete_dashboard(dashboard_id: str, service: DashboardService = Depends(get_service)):
    try:
        deleted = await service.delete_dashboard(dashboard_id)
    except SQLAlchemyError as e:
        raise _storage_error("delete dashboard", e)

    if not deleted:
        raise _not_found("Dashboard")
    return {"message": "Dashboard deleted successfully"}


@router.get("/dashboards/{dashboard_id}/widgets", response_model=WidgetListResponse)
async def list_widgets(dashboard_id: str, service: DashboardService = Depends(get_service)):
    try:
        widgets = await service.list_widgets(dashboard_id)
    except SQLAlchemyError as e:
        raise _storage_error("fetch widgets", e)

    if widgets is None:
        raise _not_found("Dashboard")
    return {"widgets": widgets}


@router.post(
    "/dashboards/{dashboard_id}/widgets",
    response_model=WidgetResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_widget(
        dashboard_id: str,
        data: WidgetCreate,
        service: DashboardService = Depends(get_service)
):
    try:
        widget = await service.create_widget(dashboard_id, data)
    except SQLAlchemyError as e:
        raise _storage_error("create widget", e)

    if widget is None:
        raise _not_found("Dashboard")
    return {"widget": widget}


@router.put("/widgets/{widget_id}", response_model=WidgetResponse)
async def update_widget(
        widget_id: str,
        data: WidgetUpdate,
        service: DashboardService = Depends(get_service)
):
    try:
        widget = await service.update_widget(widget_id, data)
    except SQLAlchemyError as e:
        raise _storage_error("update widget", e)

    if widget is None:
        raise _not_found("Widget")
    return {"widget": widget}


@router.delete("/widgets/{widget_id}", response_model=MessageResponse)
async def delete_widget(widget_id: str, service: DashboardService = Depends(get_service)):
    try:
        deleted = await service.delete_widget(widget_id)
    except SQLAlchemyError as e:
        raise _storage_error("delete widget", e)

    if not deleted:
        raise _not_found("Widget")
    return {"message": "Widget deleted successfully"}
