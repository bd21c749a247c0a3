"""Tests for the tenant, workflow, transfer and catalog JSON API."""

from __future__ import annotations

import json

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from halo.models import Tenant
from halo.services import workflow_svc


GENERATION = {
    "action": "build_workflow",
    "nodes": [
        {"id": "n1", "integration": "webhook", "name": "Webhook Trigger", "type": "trigger",
         "position": {"x": 100, "y": 100}},
        {"id": "n2", "integration": "slack", "name": "Slack", "type": "action",
         "position": {"x": 300, "y": 100}, "config": {"channel": "#leads"}},
    ],
    "connections": [{"source": "n1", "target": "n2"}],
}


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"

    res = await client.get("/ready")
    assert res.json() == {"status": "ready", "database": "sqlite"}


@pytest.mark.asyncio
async def test_create_and_list_tenants(client: AsyncClient):
    res = await client.post("/api/tenants", json={"name": "Acme", "subdomain": "Acme"})
    assert res.status_code == 201
    assert res.json()["subdomain"] == "acme"

    dup = await client.post("/api/tenants", json={"name": "Again", "subdomain": "acme"})
    assert dup.status_code == 409

    res = await client.get("/api/tenants")
    assert [t["subdomain"] for t in res.json()] == ["acme"]


@pytest.mark.asyncio
async def test_invalid_subdomain(client: AsyncClient):
    res = await client.post("/api/tenants", json={"name": "Bad", "subdomain": "no spaces"})
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_unknown_tenant(client: AsyncClient):
    res = await client.get("/api/t/nobody/workflows")
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_workflow_crud(client: AsyncClient, tenant: Tenant):
    res = await client.post("/api/t/acme/workflows", json={"name": "Intake"})
    assert res.status_code == 201
    wf = res.json()
    assert wf["status"] == "draft"
    assert wf["version"] == 1

    res = await client.get(f"/api/t/acme/workflows/{wf['id']}")
    assert res.json()["name"] == "Intake"

    res = await client.patch(f"/api/t/acme/workflows/{wf['id']}", json={"description": "Leads"})
    assert res.json()["description"] == "Leads"
    assert res.json()["version"] == 2

    res = await client.post(f"/api/t/acme/workflows/{wf['id']}/status", json={"status": "active"})
    assert res.json()["status"] == "active"

    res = await client.get("/api/t/acme/workflows")
    assert len(res.json()) == 1

    res = await client.delete(f"/api/t/acme/workflows/{wf['id']}")
    assert res.json()["deleted"] is True
    res = await client.get(f"/api/t/acme/workflows/{wf['id']}")
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_invalid_status(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Status")
    res = await client.post(f"/api/t/acme/workflows/{wf.id}/status", json={"status": "running"})
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_stale_patch_conflicts(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Race")
    await client.patch(f"/api/t/acme/workflows/{wf.id}", json={"name": "First"})
    res = await client.patch(
        f"/api/t/acme/workflows/{wf.id}", json={"name": "Second", "expected_version": 1}
    )
    assert res.status_code == 409
    assert res.json()["detail"]["current_version"] == 2


@pytest.mark.asyncio
async def test_patch_rejects_null_fields(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Keep Me")
    for body in ({"name": None}, {"status": None}, {"name": ""}):
        res = await client.patch(f"/api/t/acme/workflows/{wf.id}", json=body)
        assert res.status_code == 422

    res = await client.get(f"/api/t/acme/workflows/{wf.id}")
    assert res.json()["name"] == "Keep Me"
    assert res.json()["version"] == 1


@pytest.mark.asyncio
async def test_canvas_save_ignores_malformed_node_parts(
    client: AsyncClient, tenant: Tenant, db: AsyncSession
):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Odd Nodes")
    nodes = [
        {"id": "a", "position": [1, 2], "data": {"integration": "slack", "config": ["x"]}},
        {"id": "b", "data": "nope"},
    ]
    res = await client.put(f"/api/t/acme/workflows/{wf.id}/canvas", json={"nodes": nodes})
    assert res.status_code == 200
    assert res.json()["saved"] == 2

    res = await client.get(f"/api/t/acme/workflows/{wf.id}/canvas")
    loaded = res.json()["nodes"]
    assert [n["id"] for n in loaded] == ["a", "b"]
    assert loaded[0]["data"]["config"] == {}


@pytest.mark.asyncio
async def test_generate_then_save_and_load(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Generated")

    res = await client.post(f"/api/t/acme/workflows/{wf.id}/generate", json=GENERATION)
    assert res.status_code == 200
    body = res.json()
    assert body["applied"] is True
    assert body["counts"] == {"nodeCount": 2, "edgeCount": 1}
    assert body["notifications"][0]["title"] == "Workflow Generated!"
    canvas = body["canvas"]
    assert canvas["nodes"][0]["data"]["integration"]["icon"] == "zap"
    assert canvas["edges"][0]["type"] == "smoothstep"

    res = await client.put(
        f"/api/t/acme/workflows/{wf.id}/canvas",
        json={"nodes": canvas["nodes"], "edges": canvas["edges"], "expected_version": 1},
    )
    assert res.status_code == 200
    assert res.json()["saved"] == 2
    assert res.json()["version"] == 2
    assert res.json()["notifications"][0]["description"] == "Saved 2 workflow steps successfully."

    res = await client.get(f"/api/t/acme/workflows/{wf.id}/canvas")
    loaded = res.json()
    assert [n["id"] for n in loaded["nodes"]] == ["n1", "n2"]
    assert loaded["nodes"][1]["data"]["integration"]["id"] == "slack"
    assert loaded["nodes"][1]["data"]["config"] == {"channel": "#leads"}
    assert loaded["edges"] == []


@pytest.mark.asyncio
async def test_generate_without_nodes(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Nothing")
    res = await client.post(f"/api/t/acme/workflows/{wf.id}/generate", json={"action": "build_workflow"})
    body = res.json()
    assert body["applied"] is False
    assert body["canvas"] == {"nodes": [], "edges": []}
    assert body["notifications"] == []


@pytest.mark.asyncio
async def test_stale_canvas_save(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(db, tenant.id, name="Stale Canvas")
    await workflow_svc.update_workflow(db, tenant.id, wf.id, name="Moved On")
    res = await client.put(
        f"/api/t/acme/workflows/{wf.id}/canvas", json={"nodes": [], "expected_version": 1}
    )
    assert res.status_code == 409


@pytest.mark.asyncio
async def test_export_and_import(client: AsyncClient, tenant: Tenant, db: AsyncSession):
    wf = await workflow_svc.create_workflow(
        db, tenant.id, name="Lead Intake",
        steps=[{"id": "n1", "type": "trigger", "name": "Webhook Trigger", "config": {},
                "position": {"x": 1, "y": 2}, "order": 0}],
    )
    res = await client.get(f"/api/t/acme/workflows/{wf.id}/export")
    assert res.status_code == 200
    assert 'filename="lead_intake_automation.json"' in res.headers["content-disposition"]
    doc = res.json()
    assert doc["metadata"]["originalId"] == str(wf.id)

    files = {"file": ("lead_intake_automation.json", json.dumps(doc), "application/json")}
    res = await client.post("/api/t/acme/workflows/import", files=files)
    assert res.status_code == 201
    imported = res.json()
    assert imported["name"] == "Lead Intake (Copy)"
    assert imported["status"] == "draft"
    assert imported["steps"] == doc["steps"]


@pytest.mark.asyncio
async def test_import_rejects_bad_files(client: AsyncClient, tenant: Tenant):
    res = await client.post(
        "/api/t/acme/workflows/import", files={"file": ("flow.txt", "{}", "text/plain")}
    )
    assert res.status_code == 422
    assert res.json()["detail"] == "Please select a JSON file"

    res = await client.post(
        "/api/t/acme/workflows/import", files={"file": ("flow.json", "{oops", "application/json")}
    )
    assert res.status_code == 422
    assert res.json()["detail"] == "Failed to parse workflow file"

    res = await client.post(
        "/api/t/acme/workflows/import",
        files={"file": ("flow.json", json.dumps({"name": "x"}), "application/json")},
    )
    assert res.json()["detail"] == "Invalid workflow file format"


@pytest.mark.asyncio
async def test_catalog(client: AsyncClient):
    res = await client.get("/api/catalog", params={"type": "trigger"})
    assert res.status_code == 200
    items = res.json()
    assert items and all(item["type"] == "trigger" for item in items)

    res = await client.get("/api/catalog/categories")
    assert "webhook" in res.json()["webhook"]
