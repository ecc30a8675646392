# /datasources/*

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.dashboard import MessageResponse
from app.schemas.datasource import DatasourceCreate, DatasourceListResponse, DatasourceResponse
from app.services.datasources import DatasourceService
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/datasources", tags=["datasources"])


def get_service(
        user: CurrentUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
) -> DatasourceService:
    return DatasourceService(db, user.org_id)


@router.get("", response_model=DatasourceListResponse)
async def list_datasources(service: DatasourceService = Depends(get_service)):
    try:
        return {"datasources": await service.list_datasources()}
    except SQLAlchemyError as e:
        logger.error("list_datasources_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch data sources"
        )


@router.post("", response_model=DatasourceResponse, status_code=status.HTTP_201_CREATED)
async def create_datasource(data: DatasourceCreate, service: DatasourceService = Depends(get_service)):
    """
    Register a data source.

    - **type**: one of postgresql, mysql, csv, api, webhook, javascript
    - **config**: stored as-is and never echoed back
    """
    try:
        return {"datasource": await service.create_datasource(data)}
    except SQLAlchemyError as e:
        logger.error("create_datasource_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create data source"
        )


@router.delete("/{datasource_id}", response_model=MessageResponse)
async def delete_datasource(datasource_id: str, service: DatasourceService = Depends(get_service)):
    try:
        deleted = await service.delete_datasource(datasource_id)
    except SQLAlchemyError as e:
        logger.error("delete_datasource_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete data source"
        )

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Data source not found")
    return {"message": "Data source deleted successfully"}
