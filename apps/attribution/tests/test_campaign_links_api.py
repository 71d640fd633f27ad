import uuid
from datetime import date

from fastapi.testclient import TestClient

from attribution_service.db import get_db
from attribution_service.main import app
from tests.conftest import ORG_ID, OTHER_ORG_ID, USER_ID, make_ad_metric, make_product, setup_test_db


def setup_client():
    engine, TestingSessionLocal = setup_test_db()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app), TestingSessionLocal


def _link_payload(**overrides):
    payload = {
        "organization_id": str(ORG_ID),
        "user_id": str(USER_ID),
        "campaign_id": "120210000001",
        "campaign_name": "Black Friday",
        "platform": "meta",
        "sku": "ABC",
    }
    payload.update(overrides)
    return payload


def test_link_lifecycle():
    client, Session = setup_client()
    with Session() as db:
        product_id = str(make_product(db, sku="ABC").id)

    create_resp = client.post("/api/campaign-links", json=_link_payload(product_id=product_id))
    assert create_resp.status_code == 201
    link = create_resp.json()
    assert link["link_type"] == "manual"
    assert link["is_active"] is True
    assert link["product_id"] == product_id

    list_resp = client.get("/api/campaign-links", params={"organization_id": str(ORG_ID)})
    assert list_resp.status_code == 200
    assert [item["id"] for item in list_resp.json()] == [link["id"]]

    update_resp = client.patch(
        f"/api/campaign-links/{link['id']}",
        json={"is_active": False, "end_date": "2026-12-31"},
    )
    assert update_resp.status_code == 200
    updated = update_resp.json()
    assert updated["is_active"] is False
    assert updated["end_date"] == "2026-12-31"
    assert updated["campaign_name"] == "Black Friday"

    delete_resp = client.delete(f"/api/campaign-links/{link['id']}")
    assert delete_resp.status_code == 204

    list_resp = client.get("/api/campaign-links", params={"organization_id": str(ORG_ID)})
    assert list_resp.json() == []


def test_list_filters_by_product_and_tenant():
    client, Session = setup_client()
    with Session() as db:
        product_a = str(make_product(db, sku="A").id)
        product_b = str(make_product(db, sku="B").id)

    client.post("/api/campaign-links", json=_link_payload(sku="A", product_id=product_a))
    client.post("/api/campaign-links", json=_link_payload(sku="B", product_id=product_b))
    client.post(
        "/api/campaign-links",
        json=_link_payload(sku="A", organization_id=str(OTHER_ORG_ID)),
    )

    resp = client.get(
        "/api/campaign-links",
        params={"organization_id": str(ORG_ID), "product_id": product_a},
    )
    assert resp.status_code == 200
    assert [item["sku"] for item in resp.json()] == ["A"]

    all_resp = client.get("/api/campaign-links", params={"organization_id": str(ORG_ID)})
    assert len(all_resp.json()) == 2


def test_create_rejects_inverted_date_range():
    client, _ = setup_client()

    resp = client.post(
        "/api/campaign-links",
        json=_link_payload(start_date="2026-05-10", end_date="2026-05-01"),
    )
    assert resp.status_code == 422


def test_update_validates_against_stored_dates():
    client, _ = setup_client()
    link = client.post(
        "/api/campaign-links", json=_link_payload(start_date="2026-05-10")
    ).json()

    resp = client.patch(f"/api/campaign-links/{link['id']}", json={"end_date": "2026-05-01"})
    assert resp.status_code == 422

    resp = client.patch(f"/api/campaign-links/{link['id']}", json={"sku": None})
    assert resp.status_code == 422


def test_missing_link_is_404():
    client, _ = setup_client()
    missing = uuid.uuid4()

    assert client.patch(f"/api/campaign-links/{missing}", json={}).status_code == 404
    assert client.delete(f"/api/campaign-links/{missing}").status_code == 404


def test_available_campaigns_are_deduplicated():
    client, Session = setup_client()
    with Session() as db:
        make_ad_metric(db, "C1", date(2026, 3, 1), 10)
        make_ad_metric(db, "C1", date(2026, 3, 2), 12)
        make_ad_metric(db, "G7", date(2026, 3, 2), 4, platform="google", campaign_name="Search")
        make_ad_metric(db, "X9", date(2026, 3, 2), 4, organization_id=OTHER_ORG_ID)

    resp = client.get(
        "/api/campaign-links/available-campaigns",
        params={"organization_id": str(ORG_ID)},
    )
    assert resp.status_code == 200
    campaigns = {item["campaign_id"]: item for item in resp.json()}
    assert set(campaigns) == {"C1", "G7"}
    assert campaigns["G7"] == {"campaign_id": "G7", "campaign_name": "Search", "platform": "google"}
