"""Company CRUD, versioned fee rules and quote tests."""

import pytest
from httpx import AsyncClient


async def _bootstrap(client: AsyncClient, name: str = "Fees", tax: float = 0.0825) -> dict:
    resp = await client.post("/v1/workspaces", json={
        "name": name,
        "sales_tax_rate_pct": tax,
        "seed_defaults": False,
    })
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['api_token']}"}


async def _company(client: AsyncClient, headers: dict, **fields) -> dict:
    resp = await client.post("/v1/companies", json={"name": "Movers", **fields}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_company_crud(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers, website="https://movers.example", fees_taxable=True)
    assert company["fees_taxable"] is True
    assert company["tax_override_pct"] is None

    resp = await client.patch(
        f"/v1/companies/{company['id']}", json={"tax_override_pct": 0.05}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["tax_override_pct"] == 0.05

    resp = await client.get("/v1/companies", headers=headers)
    assert [c["name"] for c in resp.json()] == ["Movers"]

    resp = await client.delete(f"/v1/companies/{company['id']}", headers=headers)
    assert resp.status_code == 204
    resp = await client.get(f"/v1/companies/{company['id']}", headers=headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_publishing_rule_deactivates_previous(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)
    url = f"/v1/companies/{company['id']}/fee-rules"

    first = (await client.post(url, json={"type": "flat", "flat_cents": 1299}, headers=headers)).json()
    second = (await client.post(url, json={"type": "percent", "percent_rate": 0.05}, headers=headers)).json()
    assert first["version"] == 1
    assert second["version"] == 2

    rules = (await client.get(url, headers=headers)).json()
    assert [r["version"] for r in rules] == [2, 1]
    assert [r["active"] for r in rules] == [True, False]


@pytest.mark.asyncio
async def test_inactive_rule_keeps_current_active(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)
    url = f"/v1/companies/{company['id']}/fee-rules"

    await client.post(url, json={"type": "flat", "flat_cents": 1299}, headers=headers)
    draft = (await client.post(url, json={
        "type": "flat", "flat_cents": 499, "active": False,
    }, headers=headers)).json()
    assert draft["active"] is False

    rules = (await client.get(url, headers=headers)).json()
    assert sum(r["active"] for r in rules) == 1

    # Re-activating the draft switches the other one off
    resp = await client.patch(f"{url}/{draft['id']}", json={"active": True}, headers=headers)
    assert resp.status_code == 200
    rules = (await client.get(url, headers=headers)).json()
    active = [r for r in rules if r["active"]]
    assert [r["id"] for r in active] == [draft["id"]]


@pytest.mark.asyncio
async def test_publish_returns_rule_body(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)

    resp = await client.post(
        f"/v1/companies/{company['id']}/fee-rules",
        json={"type": "flat", "flat_cents": 599},
        headers=headers,
    )
    assert resp.status_code == 201
    rule = resp.json()
    assert rule["type"] == "flat"
    assert rule["flat_cents"] == 599
    assert rule["company_id"] == company["id"]
    assert rule["version"] == 1
    assert rule["active"] is True
    assert rule["tiers"] == []


@pytest.mark.asyncio
async def test_reactivating_rule_returns_updated_body(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)
    url = f"/v1/companies/{company['id']}/fee-rules"

    draft = (await client.post(url, json={
        "type": "tiered",
        "active": False,
        "tiers": [
            {"threshold_cents": 5000, "fee_cents": 1500},
            {"threshold_cents": 10000, "fee_cents": 800},
        ],
    }, headers=headers)).json()
    await client.post(url, json={"type": "percent", "percent_rate": 0.05}, headers=headers)

    resp = await client.patch(f"{url}/{draft['id']}", json={"active": True}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == draft["id"]
    assert body["type"] == "tiered"
    assert body["active"] is True
    assert body["version"] == 1
    assert [t["threshold_cents"] for t in body["tiers"]] == [5000, 10000]


@pytest.mark.asyncio
async def test_tiered_rule_validation(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)
    url = f"/v1/companies/{company['id']}/fee-rules"

    resp = await client.post(url, json={"type": "tiered", "tiers": []}, headers=headers)
    assert resp.status_code == 422

    resp = await client.post(url, json={"type": "tiered", "tiers": [
        {"threshold_cents": 5000, "fee_cents": 599},
        {"threshold_cents": 5000, "fee_cents": 499},
    ]}, headers=headers)
    assert resp.status_code == 422

    resp = await client.post(url, json={"type": "percent", "percent_rate": 5}, headers=headers)
    assert resp.status_code == 422

    resp = await client.post(url, json={"type": "tiered", "tiers": [
        {"threshold_cents": 10000, "fee_cents": 799},
        {"threshold_cents": 5000, "fee_cents": 599},
    ]}, headers=headers)
    assert resp.status_code == 201
    assert [t["threshold_cents"] for t in resp.json()["tiers"]] == [5000, 10000]


@pytest.mark.asyncio
async def test_quote_tiered_with_taxable_fees(client: AsyncClient):
    headers = await _bootstrap(client, tax=0.0825)
    company = await _company(client, headers, fees_taxable=True)
    base = f"/v1/companies/{company['id']}"
    await client.post(f"{base}/fee-rules", json={"type": "tiered", "tiers": [
        {"threshold_cents": 5000, "fee_cents": 599},
        {"threshold_cents": 60000, "fee_cents": 799},
    ]}, headers=headers)

    resp = await client.post(f"{base}/quote", json={"subtotal_cents": 50000}, headers=headers)
    assert resp.status_code == 200
    quote = resp.json()
    assert quote["delivery_fee_cents"] == 799
    assert quote["taxable_base_cents"] == 50799
    assert quote["tax_cents"] == 4191
    assert quote["total_cents"] == 54990
    assert quote["rule_type"] == "tiered"
    assert quote["total_display"] == "$549.90"

    resp = await client.post(f"{base}/quote", json={"subtotal_cents": 70000}, headers=headers)
    assert resp.json()["delivery_fee_cents"] == 0
    assert resp.json()["notes"]


@pytest.mark.asyncio
async def test_quote_without_rule_and_with_override(client: AsyncClient):
    headers = await _bootstrap(client, tax=0.0825)
    company = await _company(client, headers, tax_override_pct=0.0)

    resp = await client.post(
        f"/v1/companies/{company['id']}/quote", json={"subtotal_cents": 10000}, headers=headers
    )
    quote = resp.json()
    assert quote["delivery_fee_cents"] == 0
    assert quote["tax_cents"] == 0
    assert quote["total_cents"] == 10000
    assert quote["rule_type"] is None


@pytest.mark.asyncio
async def test_negative_subtotal_rejected(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)
    resp = await client.post(
        f"/v1/companies/{company['id']}/quote", json={"subtotal_cents": -1}, headers=headers
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_delete_rule(client: AsyncClient):
    headers = await _bootstrap(client)
    company = await _company(client, headers)
    url = f"/v1/companies/{company['id']}/fee-rules"
    rule = (await client.post(url, json={"type": "flat", "flat_cents": 100}, headers=headers)).json()

    resp = await client.delete(f"{url}/{rule['id']}", headers=headers)
    assert resp.status_code == 204
    assert (await client.get(url, headers=headers)).json() == []


@pytest.mark.asyncio
async def test_companies_are_workspace_scoped(client: AsyncClient):
    headers_a = await _bootstrap(client, "A")
    headers_b = await _bootstrap(client, "B")
    company = await _company(client, headers_a)

    resp = await client.get(f"/v1/companies/{company['id']}", headers=headers_b)
    assert resp.status_code == 404
    resp = await client.get(f"/v1/companies/{company['id']}/fee-rules", headers=headers_b)
    assert resp.status_code == 404
    assert (await client.get("/v1/companies", headers=headers_b)).json() == []
