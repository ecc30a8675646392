from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.datasource import Datasource
from app.schemas.datasource import DatasourceCreate
import structlog

logger = structlog.get_logger()


class DatasourceService:
    """Organization-scoped datasource definitions"""

    def __init__(self, db: AsyncSession, org_id: str):
        self.db = db
        self.org_id = org_id

    async def list_datasources(self) -> List[Datasource]:
        result = await self.db.execute(
            select(Datasource)
            .where(Datasource.org_id == self.org_id)
            .order_by(Datasource.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_datasource(self, data: DatasourceCreate) -> Datasource:
        datasource = Datasource(
            org_id=self.org_id,
            type=data.type,
            name=data.name,
            config=data.config
        )
        self.db.add(datasource)
        await self.db.commit()

        logger.info("datasource_created", org_id=self.org_id, datasource_id=datasource.id, type=data.type)
        return datasource

    async def delete_datasource(self, datasource_id: str) -> bool:
        result = await self.db.execute(
            select(Datasource).where(Datasource.id == datasource_id, Datasource.org_id == self.org_id)
        )
        datasource = result.scalar_one_or_none()
        if datasource is None:
            return False

        await self.db.delete(datasource)
        await self.db.commit()
        return True
