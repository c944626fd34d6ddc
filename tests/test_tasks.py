"""Task CRUD, toggle and filter tests."""

import pytest
from httpx import AsyncClient


async def _bootstrap(client: AsyncClient) -> dict:
    resp = await client.post("/v1/workspaces", json={"name": "Tasks", "seed_defaults": False})
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['api_token']}"}


@pytest.mark.asyncio
async def test_create_task_defaults(client: AsyncClient):
    headers = await _bootstrap(client)
    resp = await client.post("/v1/tasks", json={"title": "Book movers"}, headers=headers)
    assert resp.status_code == 201
    task = resp.json()
    assert task["assigned_to"] == "both"
    assert task["priority"] == 2
    assert task["done"] is False


@pytest.mark.asyncio
async def test_assignee_must_be_known(client: AsyncClient):
    headers = await _bootstrap(client)
    resp = await client.post("/v1/tasks", json={"title": "x", "assigned_to": "them"}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_toggle_and_filter(client: AsyncClient):
    headers = await _bootstrap(client)
    task = (await client.post("/v1/tasks", json={
        "title": "Pack books", "assigned_to": "me", "due_date": "2025-06-03", "priority": 1,
    }, headers=headers)).json()
    await client.post("/v1/tasks", json={"title": "Cancel internet"}, headers=headers)

    resp = await client.post(f"/v1/tasks/{task['id']}/toggle", headers=headers)
    assert resp.json()["done"] is True

    done = (await client.get("/v1/tasks", params={"done": "true"}, headers=headers)).json()
    assert [t["title"] for t in done] == ["Pack books"]
    open_tasks = (await client.get("/v1/tasks", params={"done": "false"}, headers=headers)).json()
    assert [t["title"] for t in open_tasks] == ["Cancel internet"]

    resp = await client.post(f"/v1/tasks/{task['id']}/toggle", headers=headers)
    assert resp.json()["done"] is False


@pytest.mark.asyncio
async def test_update_and_delete_task(client: AsyncClient):
    headers = await _bootstrap(client)
    task = (await client.post("/v1/tasks", json={"title": "Old"}, headers=headers)).json()

    resp = await client.patch(f"/v1/tasks/{task['id']}", json={
        "title": "New", "assigned_to": "him",
    }, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "New"
    assert resp.json()["assigned_to"] == "him"

    assert (await client.delete(f"/v1/tasks/{task['id']}", headers=headers)).status_code == 204
    assert (await client.get("/v1/tasks", headers=headers)).json() == []
