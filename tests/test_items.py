"""Shopping item, price history and purchase tests."""

import pytest
from httpx import AsyncClient


async def _bootstrap(client: AsyncClient, name: str = "Items") -> dict:
    resp = await client.post("/v1/workspaces", json={"name": name, "seed_defaults": False})
    assert resp.status_code == 201
    headers = {"Authorization": f"Bearer {resp.json()['api_token']}"}
    room = (await client.post("/v1/rooms", json={"name": "Kitchen"}, headers=headers)).json()
    return {"headers": headers, "room": room}


@pytest.mark.asyncio
async def test_create_item_records_initial_price(client: AsyncClient):
    ctx = await _bootstrap(client)
    resp = await client.post("/v1/items", json={
        "name": "Kettle",
        "room_id": ctx["room"]["id"],
        "est_unit_cents": 3999,
    }, headers=ctx["headers"])
    assert resp.status_code == 201
    item = resp.json()
    assert item["quantity"] == 1
    assert item["priority"] == 2
    assert item["purchased"] is False
    assert item["est_unit_cents"] == 3999
    assert item["actual_unit_cents"] is None
    assert [p["revision"] for p in item["prices"]] == [1]


@pytest.mark.asyncio
async def test_new_price_becomes_current(client: AsyncClient):
    ctx = await _bootstrap(client)
    item = (await client.post("/v1/items", json={
        "name": "Sofa", "est_unit_cents": 90000,
    }, headers=ctx["headers"])).json()

    resp = await client.post(
        f"/v1/items/{item['id']}/prices", json={"est_unit_cents": 75000}, headers=ctx["headers"]
    )
    assert resp.status_code == 201
    assert resp.json()["est_unit_cents"] == 75000
    assert [p["est_unit_cents"] for p in resp.json()["prices"]] == [90000, 75000]


@pytest.mark.asyncio
async def test_purchase_and_unpurchase(client: AsyncClient):
    ctx = await _bootstrap(client)
    headers = ctx["headers"]
    item = (await client.post("/v1/items", json={
        "name": "Plates", "quantity": 2, "est_unit_cents": 1000,
    }, headers=headers)).json()

    resp = await client.post(f"/v1/items/{item['id']}/purchase", json={
        "purchased": True, "actual_unit_cents": 900,
    }, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["purchased"] is True
    assert resp.json()["actual_unit_cents"] == 900
    assert len(resp.json()["prices"]) == 1

    resp = await client.post(
        f"/v1/items/{item['id']}/purchase", json={"purchased": False}, headers=headers
    )
    assert resp.json()["purchased"] is False
    assert resp.json()["actual_unit_cents"] is None


@pytest.mark.asyncio
async def test_summary(client: AsyncClient):
    ctx = await _bootstrap(client)
    headers = ctx["headers"]
    await client.post("/v1/items", json={
        "name": "Cups", "quantity": 2, "est_unit_cents": 1000, "room_id": ctx["room"]["id"],
    }, headers=headers)
    bought = (await client.post("/v1/items", json={
        "name": "Toaster", "est_unit_cents": 2000,
    }, headers=headers)).json()
    await client.post(f"/v1/items/{bought['id']}/purchase", json={
        "purchased": True, "actual_unit_cents": 1800,
    }, headers=headers)

    resp = await client.get("/v1/items/summary", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "total_estimated_cents": 4000,
        "total_spent_cents": 3800,
        "pending_items": 1,
        "purchased_items": 1,
    }


@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient):
    ctx = await _bootstrap(client)
    headers = ctx["headers"]
    await client.post("/v1/items", json={"name": "A", "room_id": ctx["room"]["id"]}, headers=headers)
    await client.post("/v1/items", json={"name": "B"}, headers=headers)

    all_items = (await client.get("/v1/items", headers=headers)).json()
    assert len(all_items) == 2
    in_room = (await client.get(
        "/v1/items", params={"room_id": ctx["room"]["id"]}, headers=headers
    )).json()
    assert [i["name"] for i in in_room] == ["A"]
    pending = (await client.get("/v1/items", params={"purchased": "false"}, headers=headers)).json()
    assert len(pending) == 2


@pytest.mark.asyncio
async def test_update_and_delete_item(client: AsyncClient):
    ctx = await _bootstrap(client)
    headers = ctx["headers"]
    item = (await client.post("/v1/items", json={"name": "Lamp"}, headers=headers)).json()

    resp = await client.patch(f"/v1/items/{item['id']}", json={
        "quantity": 3, "room_id": ctx["room"]["id"],
    }, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["quantity"] == 3
    assert resp.json()["room_id"] == ctx["room"]["id"]

    assert (await client.delete(f"/v1/items/{item['id']}", headers=headers)).status_code == 204
    assert (await client.get(f"/v1/items/{item['id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_foreign_room_rejected(client: AsyncClient):
    ctx_a = await _bootstrap(client, "A")
    ctx_b = await _bootstrap(client, "B")
    resp = await client.post("/v1/items", json={
        "name": "Rug", "room_id": ctx_b["room"]["id"],
    }, headers=ctx_a["headers"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_deleting_room_detaches_items(client: AsyncClient):
    ctx = await _bootstrap(client)
    headers = ctx["headers"]
    item = (await client.post("/v1/items", json={
        "name": "Pan", "room_id": ctx["room"]["id"],
    }, headers=headers)).json()

    assert (await client.delete(f"/v1/rooms/{ctx['room']['id']}", headers=headers)).status_code == 204
    resp = await client.get(f"/v1/items/{item['id']}", headers=headers)
    assert resp.json()["room_id"] is None
