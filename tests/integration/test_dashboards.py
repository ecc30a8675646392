import pytest


async def first_dashboard_id(client, headers):
    response = await client.get("/dashboards", headers=headers)
    return response.json()["dashboards"][0]["id"]


@pytest.mark.asyncio
async def test_dashboard_crud(client, auth_headers):
    response = await client.post("/dashboards", headers=auth_headers, json={
        "name": "Growth",
        "description": "Signups and activation",
    })
    assert response.status_code == 201
    dashboard = response.json()["dashboard"]
    assert dashboard["name"] == "Growth"
    assert dashboard["layout"] == {}

    response = await client.get("/dashboards", headers=auth_headers)
    dashboards = response.json()["dashboards"]
    assert {d["name"] for d in dashboards} == {"Growth", "My First Dashboard"}
    assert all(d["creator_name"] == "Test User" for d in dashboards)
    assert all(d["widget_count"] == 0 for d in dashboards)

    response = await client.put(f"/dashboards/{dashboard['id']}", headers=auth_headers, json={
        "name": "Growth KPIs",
        "layout": {"columns": 12},
    })
    assert response.status_code == 200
    updated = response.json()["dashboard"]
    assert updated["name"] == "Growth KPIs"
    assert updated["description"] == "Signups and activation"
    assert updated["layout"] == {"columns": 12}

    # Explicit null clears the description only
    response = await client.put(f"/dashboards/{dashboard['id']}", headers=auth_headers, json={
        "name": None,
        "description": None,
    })
    assert response.json()["dashboard"]["name"] == "Growth KPIs"
    assert response.json()["dashboard"]["description"] is None

    response = await client.delete(f"/dashboards/{dashboard['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Dashboard deleted successfully"}

    response = await client.get(f"/dashboards/{dashboard['id']}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Dashboard not found"


@pytest.mark.asyncio
async def test_widgets_lifecycle(client, auth_headers):
    dashboard_id = await first_dashboard_id(client, auth_headers)

    response = await client.post(f"/dashboards/{dashboard_id}/widgets", headers=auth_headers, json={
        "type": "line_chart",
        "title": "Daily events",
        "config": {"group_by": "day"},
        "position_y": 1,
    })
    assert response.status_code == 201
    lower = response.json()["widget"]
    assert (lower["width"], lower["height"]) == (4, 3)

    response = await client.post(f"/dashboards/{dashboard_id}/widgets", headers=auth_headers, json={
        "type": "counter",
        "title": "Total events",
    })
    top = response.json()["widget"]

    # Widgets come back in grid order
    response = await client.get(f"/dashboards/{dashboard_id}", headers=auth_headers)
    detail = response.json()
    assert detail["dashboard"]["widget_count"] == 2
    assert [w["id"] for w in detail["widgets"]] == [top["id"], lower["id"]]

    response = await client.get(f"/dashboards/{dashboard_id}/widgets", headers=auth_headers)
    assert len(response.json()["widgets"]) == 2

    response = await client.put(f"/widgets/{top['id']}", headers=auth_headers, json={
        "title": "All events",
        "width": 6,
    })
    assert response.status_code == 200
    widget = response.json()["widget"]
    assert widget["title"] == "All events"
    assert widget["width"] == 6
    assert widget["type"] == "counter"

    response = await client.delete(f"/widgets/{top['id']}", headers=auth_headers)
    assert response.json() == {"message": "Widget deleted successfully"}

    response = await client.delete(f"/widgets/{top['id']}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Widget not found"


@pytest.mark.asyncio
async def test_deleting_dashboard_removes_widgets(client, auth_headers):
    dashboard_id = await first_dashboard_id(client, auth_headers)
    response = await client.post(f"/dashboards/{dashboard_id}/widgets", headers=auth_headers, json={
        "type": "table",
        "title": "Top events",
    })
    widget_id = response.json()["widget"]["id"]

    await client.delete(f"/dashboards/{dashboard_id}", headers=auth_headers)

    response = await client.put(f"/widgets/{widget_id}", headers=auth_headers, json={"title": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_dashboards_are_tenant_scoped(client, auth_headers, other_auth_headers):
    dashboard_id = await first_dashboard_id(client, auth_headers)
    response = await client.post(f"/dashboards/{dashboard_id}/widgets", headers=auth_headers, json={
        "type": "counter",
        "title": "Private",
    })
    widget_id = response.json()["widget"]["id"]

    response = await client.get("/dashboards", headers=other_auth_headers)
    assert dashboard_id not in [d["id"] for d in response.json()["dashboards"]]

    assert (await client.get(f"/dashboards/{dashboard_id}", headers=other_auth_headers)).status_code == 404
    assert (await client.put(
        f"/dashboards/{dashboard_id}", headers=other_auth_headers, json={"name": "Hijacked"}
    )).status_code == 404
    assert (await client.delete(f"/dashboards/{dashboard_id}", headers=other_auth_headers)).status_code == 404
    assert (await client.get(f"/dashboards/{dashboard_id}/widgets", headers=other_auth_headers)).status_code == 404
    assert (await client.post(
        f"/dashboards/{dashboard_id}/widgets", headers=other_auth_headers, json={"type": "x", "title": "y"}
    )).status_code == 404
    assert (await client.put(
        f"/widgets/{widget_id}", headers=other_auth_headers, json={"title": "Hijacked"}
    )).status_code == 404
    assert (await client.delete(f"/widgets/{widget_id}", headers=other_auth_headers)).status_code == 404

    # Owner still sees everything untouched
    response = await client.get(f"/dashboards/{dashboard_id}", headers=auth_headers)
    assert response.json()["dashboard"]["name"] == "My First Dashboard"
    assert response.json()["widgets"][0]["title"] == "Private"


@pytest.mark.asyncio
async def test_dashboard_validation_and_auth(client, auth_headers):
    response = await client.post("/dashboards", headers=auth_headers, json={"name": ""})
    assert response.status_code == 400

    response = await client.get("/dashboards")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_datasource_lifecycle(client, auth_headers, other_auth_headers):
    response = await client.post("/datasources", headers=auth_headers, json={
        "name": "Warehouse",
        "type": "postgresql",
        "config": {"host": "db.internal", "password": "hunter2"},
    })
    assert response.status_code == 201
    datasource = response.json()["datasource"]
    assert datasource["status"] == "active"
    assert "config" not in datasource

    response = await client.get("/datasources", headers=auth_headers)
    assert [d["name"] for d in response.json()["datasources"]] == ["Warehouse"]

    response = await client.get("/datasources", headers=other_auth_headers)
    assert response.json() == {"datasources": []}

    response = await client.delete(f"/datasources/{datasource['id']}", headers=other_auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Data source not found"

    response = await client.delete(f"/datasources/{datasource['id']}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get("/datasources", headers=auth_headers)
    assert response.json() == {"datasources": []}


@pytest.mark.asyncio
async def test_datasource_type_is_validated(client, auth_headers):
    response = await client.post("/datasources", headers=auth_headers, json={
        "name": "Mainframe",
        "type": "cobol",
    })
    assert response.status_code == 400
    assert any(error.startswith("type") for error in response.json()["errors"])
