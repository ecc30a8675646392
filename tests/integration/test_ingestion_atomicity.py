import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.api import analytics as analytics_api
from app.models.account import Organization
from app.schemas.event import EventCreate
from app.services.analytics import AnalyticsService
from app.services.ingestion import IngestionService


class FaultyIngestionService(IngestionService):
    """Writes a row the database rejects whenever an event is named 'boom'"""

    def _build_event(self, org_id, event, received_at):
        row = super()._build_event(org_id, event, received_at)
        if event.name == "boom":
            row.name = None
        return row


@pytest.mark.asyncio
async def test_failed_batch_leaves_no_events(database):
    async with database.session_factory() as session:
        organization = Organization(name="Atomic Inc")
        session.add(organization)
        await session.commit()
        org_id = organization.id

    batch = [EventCreate(name="ok"), EventCreate(name="boom"), EventCreate(name="ok")]

    async with database.session_factory() as session:
        with pytest.raises(SQLAlchemyError):
            await FaultyIngestionService(session).ingest_events(org_id, batch)

    async with database.session_factory() as session:
        assert await AnalyticsService(session).count_events(org_id) == 0

        # A clean batch for the same organization still goes through
        assert await IngestionService(session).ingest_events(org_id, [EventCreate(name="ok")]) == 1
        assert await AnalyticsService(session).count_events(org_id) == 1


@pytest.mark.asyncio
async def test_storage_fault_returns_500_without_partial_write(client, auth_headers, monkeypatch):
    monkeypatch.setattr(analytics_api, "IngestionService", FaultyIngestionService)

    response = await client.post("/analytics/events", headers=auth_headers, json={
        "events": [{"name": "ok"}, {"name": "boom"}]
    })
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to ingest events"

    response = await client.get("/analytics/query", headers=auth_headers)
    assert response.json() == {"data": []}


@pytest.mark.asyncio
async def test_ingest_empty_list_is_a_no_op(database):
    async with database.session_factory() as session:
        assert await IngestionService(session).ingest_events("any-org", []) == 0
