from typing import List, Dict, Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.account import User
from app.models.base import utcnow
from app.models.dashboard import Dashboard, Widget
from app.schemas.dashboard import DashboardCreate, DashboardUpdate, WidgetCreate, WidgetUpdate
import structlog

logger = structlog.get_logger()


class DashboardService:
    """Organization-scoped dashboards and their widgets

    Lookups always filter by organization, so a resource owned by another
    tenant is indistinguishable from one that does not exist (None).
    """

    def __init__(self, db: AsyncSession, org_id: str):
        self.db = db
        self.org_id = org_id

    def _summary_query(self):
        widget_counts = (
            select(Widget.dashboard_id, func.count().label("widget_count"))
            .group_by(Widget.dashboard_id)
            .subquery()
        )
        return (
            select(
                Dashboard,
                User.name.label("creator_name"),
                func.coalesce(widget_counts.c.widget_count, 0).label("widget_count")
            )
            .join(User, Dashboard.created_by == User.id)
            .outerjoin(widget_counts, widget_counts.c.dashboard_id == Dashboard.id)
            .where(Dashboard.org_id == self.org_id)
        )

    @staticmethod
    def _summary(row) -> Dict[str, Any]:
        dashboard, creator_name, widget_count = row
        return {
            "id": dashboard.id,
            "org_id": dashboard.org_id,
            "name": dashboard.name,
            "description": dashboard.description,
            "layout": dashboard.layout,
            "created_by": dashboard.created_by,
            "created_at": dashboard.created_at,
            "updated_at": dashboard.updated_at,
            "creator_name": creator_name,
            "widget_count": widget_count,
        }

    async def list_dashboards(self) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            self._summary_query().order_by(Dashboard.updated_at.desc())
        )
        return [self._summary(row) for row in result.all()]

    async def get_dashboard(self, dashboard_id: str) -> Dashboard | None:
        result = await self.db.execute(
            select(Dashboard).where(Dashboard.id == dashboard_id, Dashboard.org_id == self.org_id)
        )
        return result.scalar_one_or_none()

    async def get_dashboard_detail(self, dashboard_id: str) -> Dict[str, Any] | None:
        result = await self.db.execute(
            self._summary_query().where(Dashboard.id == dashboard_id)
        )
        row = result.first()
        if row is None:
            return None

        return {
            "dashboard": self._summary(row),
            "widgets": await self._list_widgets(dashboard_id)
        }

    async def create_dashboard(self, data: DashboardCreate, user_id: str) -> Dashboard:
        dashboard = Dashboard(
            org_id=self.org_id,
            name=data.name,
            description=data.description,
            created_by=user_id
        )
        self.db.add(dashboard)
        await self.db.commit()

        logger.info("dashboard_created", org_id=self.org_id, dashboard_id=dashboard.id)
        return dashboard

    async def update_dashboard(self, dashboard_id: str, data: DashboardUpdate) -> Dashboard | None:
        dashboard = await self.get_dashboard(dashboard_id)
        if dashboard is None:
            return None

        for field, value in data.model_dump(exclude_unset=True).items():
            # Only the description may be cleared
            if value is None and field != "description":
                continue
            setattr(dashboard, field, value)
        dashboard.updated_at = utcnow()

        await self.db.commit()
        return dashboard

    async def delete_dashboard(self, dashboard_id: str) -> bool:
        dashboard = await self.get_dashboard(dashboard_id)
        if dashboard is None:
            return False

        await self.db.delete(dashboard)
        await self.db.commit()

        logger.info("dashboard_deleted", org_id=self.org_id, dashboard_id=dashboard_id)
        return True

    async def _list_widgets(self, dashboard_id: str) -> List[Widget]:
        result = await self.db.execute(
            select(Widget)
            .where(Widget.dashboard_id == dashboard_id)
            .order_by(Widget.position_y, Widget.position_x)
        )
        return list(result.scalars().all())

    async def list_widgets(self, dashboard_id: str) -> List[Widget] | None:
        if await self.get_dashboard(dashboard_id) is None:
            return None
        return await self._list_widgets(dashboard_id)

    async def create_widget(self, dashboard_id: str, data: WidgetCreate) -> Widget | None:
        if await self.get_dashboard(dashboard_id) is None:
            return None

        widget = Widget(dashboard_id=dashboard_id, **data.model_dump())
        self.db.add(widget)
        await self.db.commit()

        logger.info("widget_created", org_id=self.org_id, widget_id=widget.id)
        return widget

    async def get_widget(self, widget_id: str) -> Widget | None:
        result = await self.db.execute(
            select(Widget)
            .join(Dashboard, Widget.dashboard_id == Dashboard.id)
            .where(Widget.id == widget_id, Dashboard.org_id == self.org_id)
        )
        return result.scalar_one_or_none()

    async def update_widget(self, widget_id: str, data: WidgetUpdate) -> Widget | None:
        widget = await self.get_widget(widget_id)
        if widget is None:
            return None

        for field, value in data.model_dump(exclude_none=True).items():
            setattr(widget, field, value)
        widget.updated_at = utcnow()

        await self.db.commit()
        return widget

    async def delete_widget(self, widget_id: str) -> bool:
        widget = await self.get_widget(widget_id)
        if widget is None:
            return False

        await self.db.delete(widget)
        await self.db.commit()
        return True
