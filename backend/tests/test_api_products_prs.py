from __future__ import annotations

import pytest


def _product(**extra) -> dict:
    payload = {
        "product_code": "TL-100",
        "description": "Floor tile 600x600",
        "brand": "BRD001",
        "product_type": "Rough",
        "color": "Ivory",
        "category": "Tiles",
        "sub_category": "Floor",
        "mrp": "120.50",
        "gst": "18",
    }
    payload.update(extra)
    return payload


@pytest.mark.anyio
async def test_product_ids_follow_product_sequence(client, make_user):
    headers = await make_user("CLERK")

    first = await client.post("/api/products", json=_product(), headers=headers)
    second = await client.post("/api/products", json=_product(product_code="TL-101"), headers=headers)

    assert first.status_code == 201
    assert first.json()["prod_id"] == "PROD0001"
    assert second.json()["prod_id"] == "PROD0002"


@pytest.mark.anyio
async def test_product_with_supplied_id_syncs_counter(client, make_user):
    headers = await make_user("CLERK")

    manual = await client.post("/api/products", json=_product(prod_id="PROD0042"), headers=headers)
    duplicate = await client.post("/api/products", json=_product(prod_id="PROD0042"), headers=headers)
    auto = await client.post("/api/products", json=_product(), headers=headers)

    assert manual.status_code == 201
    assert duplicate.status_code == 400
    assert auto.json()["prod_id"] == "PROD0043"


@pytest.mark.anyio
async def test_product_validation(client, make_user):
    headers = await make_user("CLERK")

    response = await client.post(
        "/api/products", json=_product(product_type="Glazed", mrp="0"), headers=headers
    )

    assert response.status_code == 422


@pytest.mark.anyio
async def test_product_update_and_filters(client, make_user):
    headers = await make_user("CLERK")
    created = (await client.post("/api/products", json=_product(), headers=headers)).json()
    await client.post(
        "/api/products", json=_product(product_type="Trim", category="Walls"), headers=headers
    )

    updated = await client.put(
        "/api/products/PROD0001",
        json={"expected_updated_at": created["updated_at"], "fresh_stock": 25},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["fresh_stock"] == 25

    trims = await client.get("/api/products", params={"product_type": "Trim"}, headers=headers)
    assert [p["prod_id"] for p in trims.json()["items"]] == ["PROD0002"]

    deleted = await client.delete("/api/products/PROD0002", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get("/api/products/PROD0002", headers=headers)).status_code == 404


@pytest.mark.anyio
async def test_purchase_request_numbers(client, make_user):
    headers = await make_user("CLERK")

    first = await client.post(
        "/api/purchase-requests", json={"pr_vendor": " Tile Depot ", "remarks": "urgent"}, headers=headers
    )
    second = await client.post(
        "/api/purchase-requests", json={"pr_vendor": "Tile Depot"}, headers=headers
    )

    assert first.status_code == 201
    body = first.json()
    assert body["pr_number"] == "PR000001"
    assert body["pr_vendor"] == "Tile Depot"
    assert body["status"] == "pending"
    assert second.json()["pr_number"] == "PR000002"


@pytest.mark.anyio
async def test_purchase_request_blank_vendor_consumes_no_number(client, make_user):
    headers = await make_user("CLERK")

    rejected = await client.post(
        "/api/purchase-requests", json={"pr_vendor": "   "}, headers=headers
    )
    accepted = await client.post(
        "/api/purchase-requests", json={"pr_vendor": "Tile Depot"}, headers=headers
    )

    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "PR Vendor is required"
    assert accepted.json()["pr_number"] == "PR000001"


@pytest.mark.anyio
async def test_purchase_request_status_changes(client, make_user):
    headers = await make_user("CLERK")
    await client.post("/api/purchase-requests", json={"pr_vendor": "Tile Depot"}, headers=headers)

    invalid = await client.put(
        "/api/purchase-requests/PR000001", json={"status": "shipped"}, headers=headers
    )
    approved = await client.put(
        "/api/purchase-requests/PR000001", json={"status": "approved"}, headers=headers
    )
    pending = await client.get(
        "/api/purchase-requests", params={"status": "pending"}, headers=headers
    )

    assert invalid.status_code == 400
    assert approved.json()["status"] == "approved"
    assert pending.json()["total"] == 0


@pytest.mark.anyio
async def test_color_and_series_crud(client, make_user):
    headers = await make_user("CLERK")

    for prefix in ("colors", "series"):
        created = await client.post(f"/api/{prefix}", json={"name": " Ivory "}, headers=headers)
        assert created.status_code == 201
        item_id = created.json()["id"]
        assert created.json()["name"] == "Ivory"

        renamed = await client.put(
            f"/api/{prefix}/{item_id}", json={"name": "Beige"}, headers=headers
        )
        assert renamed.json()["name"] == "Beige"

        listed = await client.get(f"/api/{prefix}", headers=headers)
        assert [item["name"] for item in listed.json()] == ["Beige"]

        assert (await client.delete(f"/api/{prefix}/{item_id}", headers=headers)).status_code == 200
        assert (await client.get(f"/api/{prefix}/{item_id}", headers=headers)).status_code == 404


@pytest.mark.anyio
async def test_sequence_overview(client, make_user):
    headers = await make_user("CLERK")
    await client.post("/api/purchase-requests", json={"pr_vendor": "Tile Depot"}, headers=headers)

    single = await client.get("/api/sequences/PurchaseRequest", headers=headers)
    assert single.json() == {
        "entity_kind": "PurchaseRequest",
        "prefix": "PR",
        "padding_width": 6,
        "last_value": 1,
        "next_code": "PR000002",
    }

    overview = await client.get("/api/sequences", headers=headers)
    by_kind = {item["entity_kind"]: item for item in overview.json()}
    assert by_kind["Brand"]["next_code"] == "BRD001"
    assert "Dispatch" in by_kind

    unknown = await client.get("/api/sequences/Unicorn", headers=headers)
    assert unknown.status_code == 404


@pytest.mark.anyio
async def test_login_and_me(client, make_user):
    await make_user("CLERK", password="s3cret!")

    bad = await client.post("/api/auth/login", json={"username": "clerk", "password": "nope"})
    assert bad.status_code == 401

    good = await client.post("/api/auth/login", json={"username": "clerk", "password": "s3cret!"})
    assert good.status_code == 200
    token = good.json()["access_token"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["inv_user_code"] == "CLERK"


@pytest.mark.anyio
async def test_health_probes(client):
    assert (await client.get("/api/healthz")).json() == {"status": "ok"}
    assert (await client.get("/api/readyz")).json() == {"ready": True}


@pytest.mark.anyio
async def test_product_sync_outage_saves_nothing(client, make_user):
    from inventory_api.core.errors import StoreUnavailable
    from inventory_api.main import app
    from inventory_api.services.sequences import get_sequence_allocator

    headers = await make_user("CLERK")

    class SyncUnavailable:
        async def sync(self, entity_kind: str, floor: int) -> int:
            raise StoreUnavailable(entity_kind, "connection refused")

    async def unavailable():
        return SyncUnavailable()

    app.dependency_overrides[get_sequence_allocator] = unavailable
    failed = await client.post("/api/products", json=_product(prod_id="PROD0007"), headers=headers)
    app.dependency_overrides.clear()

    assert failed.status_code == 503
    assert (await client.get("/api/products/PROD0007", headers=headers)).status_code == 404
    retried = await client.post("/api/products", json=_product(prod_id="PROD0007"), headers=headers)
    assert retried.status_code == 201
