"""Assets API: assignee and team scopes, assignment, retirement, maintenance, stats."""

import pytest
from httpx import AsyncClient


async def _asset(client: AsyncClient, headers: dict, name: str, assign_to: str | None = None) -> dict:
    r = await client.post(
        "/assets/",
        json={"name": name, "category": "hardware", "purchase_price": 1000.0},
        headers=headers,
    )
    assert r.status_code == 201
    asset = r.json()
    if assign_to:
        r = await client.post(f"/assets/{asset['id']}/assign", json={"user_id": assign_to}, headers=headers)
        assert r.status_code == 200
        asset = r.json()
    return asset


@pytest.mark.asyncio
async def test_employee_reads_only_assigned_assets(async_client: AsyncClient, as_user):
    laptop = await _asset(async_client, as_user("a-1"), "Laptop", assign_to="e-1")
    await _asset(async_client, as_user("a-1"), "Phone", assign_to="e-2")

    assert (await async_client.get(f"/assets/{laptop['id']}", headers=as_user("e-1"))).status_code == 200

    denied = await async_client.get(f"/assets/{laptop['id']}", headers=as_user("e-2"))
    assert denied.status_code == 403
    assert denied.json()["reason"] == "out_of_scope"
    assert denied.json()["required"] == ["read:assigned"]

    listed = await async_client.get("/assets/", headers=as_user("e-1"))
    assert [a["name"] for a in listed.json()["items"]] == ["Laptop"]


@pytest.mark.asyncio
async def test_manager_updates_team_assets_only(async_client: AsyncClient, as_user):
    eng = await _asset(async_client, as_user("a-1"), "Eng laptop", assign_to="e-1")
    sales = await _asset(async_client, as_user("a-1"), "Sales laptop", assign_to="s-1")

    ok = await async_client.patch(f"/assets/{eng['id']}", json={"location": "Floor 2"}, headers=as_user("m-eng"))
    assert ok.status_code == 200
    assert ok.json()["location"] == "Floor 2"

    denied = await async_client.patch(f"/assets/{sales['id']}", json={"location": "X"}, headers=as_user("m-eng"))
    assert denied.status_code == 403
    assert denied.json()["reason"] == "out_of_scope"

    listed = await async_client.get("/assets/", headers=as_user("m-eng"))
    assert {a["name"] for a in listed.json()["items"]} == {"Eng laptop"}


@pytest.mark.asyncio
async def test_manager_assigns_within_department(async_client: AsyncClient, as_user):
    spare = await _asset(async_client, as_user("m-eng"), "Spare monitor")
    assert spare["created_by"] == "m-eng"

    ok = await async_client.post(f"/assets/{spare['id']}/assign", json={"user_id": "e-2"}, headers=as_user("m-eng"))
    assert ok.status_code == 200
    assert ok.json()["assigned_to"] == "e-2"
    assert ok.json()["status"] == "in-use"

    denied = await async_client.post(
        f"/assets/{spare['id']}/assign", json={"user_id": "s-1"}, headers=as_user("m-eng")
    )
    assert denied.status_code == 403
    assert denied.json()["required"] == ["assign:team"]

    missing = await async_client.post(
        f"/assets/{spare['id']}/assign", json={"user_id": "ghost"}, headers=as_user("m-eng")
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_manager_cannot_reassign_asset_held_by_other_department(async_client: AsyncClient, as_user):
    sales = await _asset(async_client, as_user("a-1"), "Sales laptop", assign_to="s-1")
    r = await async_client.post(f"/assets/{sales['id']}/assign", json={"user_id": "e-1"}, headers=as_user("m-eng"))
    assert r.status_code == 403
    assert r.json()["reason"] == "out_of_scope"

    held = await async_client.get(f"/assets/{sales['id']}", headers=as_user("a-1"))
    assert held.json()["assigned_to"] == "s-1"


@pytest.mark.asyncio
async def test_employee_cannot_create(async_client: AsyncClient, as_user):
    r = await async_client.post("/assets/", json={"name": "Mine", "category": "other"}, headers=as_user("e-1"))
    assert r.status_code == 403
    body = r.json()
    assert body["reason"] == "forbidden"
    assert body["required"] == ["admin", "manager"]


@pytest.mark.asyncio
async def test_retire_clears_assignment_and_blocks_reassignment(async_client: AsyncClient, as_user):
    asset = await _asset(async_client, as_user("a-1"), "Old laptop", assign_to="e-1")

    retired = await async_client.delete(f"/assets/{asset['id']}", headers=as_user("a-1"))
    assert retired.status_code == 200
    assert retired.json()["status"] == "retired"
    assert retired.json()["assigned_to"] is None

    r = await async_client.post(f"/assets/{asset['id']}/assign", json={"user_id": "e-1"}, headers=as_user("a-1"))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_unassign_and_maintenance(async_client: AsyncClient, as_user):
    asset = await _asset(async_client, as_user("a-1"), "Printer", assign_to="e-1")

    r = await async_client.post(f"/assets/{asset['id']}/unassign", headers=as_user("a-1"))
    assert r.json()["status"] == "available"
    assert r.json()["assigned_to"] is None

    r = await async_client.post(
        f"/assets/{asset['id']}/maintenance",
        json={"date": "2026-01-15T10:00:00Z", "description": "Toner", "cost": 40},
        headers=as_user("a-1"),
    )
    assert r.status_code == 201
    assert len(r.json()["maintenance_history"]) == 1
    assert r.json()["maintenance_history"][0]["description"] == "Toner"


@pytest.mark.asyncio
async def test_unknown_asset_is_404(async_client: AsyncClient, as_user):
    assert (await async_client.get("/assets/nope", headers=as_user("a-1"))).status_code == 404


@pytest.mark.asyncio
async def test_stats_for_managers_and_admins(async_client: AsyncClient, as_user):
    await _asset(async_client, as_user("a-1"), "Eng laptop", assign_to="e-1")
    await _asset(async_client, as_user("a-1"), "Sales laptop", assign_to="s-1")

    admin = await async_client.get("/assets/stats", headers=as_user("a-1"))
    assert admin.status_code == 200
    assert admin.json()["total"] == 2
    assert admin.json()["total_value"] == 2000.0
    assert admin.json()["by_status"] == {"in-use": 2}

    manager = await async_client.get("/assets/stats", headers=as_user("m-eng"))
    assert manager.json()["total"] == 1

    assert (await async_client.get("/assets/stats", headers=as_user("e-1"))).status_code == 403
