# This project was developed with assistance from AI tools.
"""Functional tests: property owner drafting and submitting over HTTP.

Exercises routing, RBAC, response models and the RFC 7807 error mapping
against the real workflow over in-memory storage.
"""

import pytest

from ..factories import (
    complete_payload,
    dealing_assistant,
    other_owner,
    owner,
    rooms,
)

pytestmark = pytest.mark.functional


def _payload(**overrides) -> dict:
    return complete_payload(**overrides).model_dump(mode="json", exclude_none=True)


def _create_and_submit(make_client, **overrides) -> dict:
    client = make_client(owner())
    draft = client.post("/api/applications/", json=_payload(**overrides))
    assert draft.status_code == 201
    resp = client.post(f"/api/applications/{draft.json()['id']}/submit")
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestDrafting:
    def test_create_and_update_draft(self, make_client):
        client = make_client(owner())
        resp = client.post("/api/applications/", json={"property_name": "Apple Orchard Stay"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "draft"
        assert data["current_stage"] == "draft"
        assert data["application_number"] is None

        resp = client.patch(
            f"/api/applications/{data['id']}",
            json={"rooms": {"single_bed_rooms": 2, "single_bed_room_rate": "1200"}},
        )
        assert resp.status_code == 200
        assert resp.json()["total_rooms"] == 2
        assert resp.json()["property_name"] == "Apple Orchard Stay"

    def test_unknown_fields_rejected(self, make_client):
        client = make_client(owner())
        resp = client.post("/api/applications/", json={"property_name": "X", "total_rooms": 4})
        assert resp.status_code == 422
        assert resp.json()["title"] == "Unprocessable Entity"

    def test_reviewer_cannot_create(self, make_client):
        client = make_client(dealing_assistant())
        resp = client.post("/api/applications/", json=_payload())
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Insufficient permissions"


class TestSubmission:
    def test_submit_returns_number_and_fee(self, make_client):
        data = _create_and_submit(make_client)
        assert data["status"] == "submitted"
        assert data["application_number"].startswith("HP-HS-")
        assert data["total_fee"] == "3000.00"
        assert len(data["documents"]) == 5
        assert {d["verification_status"] for d in data["documents"]} == {"pending"}

    def test_validation_failure_is_400(self, make_client):
        client = make_client(owner())
        draft = client.post(
            "/api/applications/",
            json=_payload(rooms=rooms(single_bed_rooms=5, double_bed_rooms=2)),
        ).json()
        resp = client.post(f"/api/applications/{draft['id']}/submit")
        assert resp.status_code == 400
        body = resp.json()
        assert body["title"] == "Bad Request"
        assert "at most 6 rooms; 7 rooms were declared" in body["detail"]

    def test_stale_expected_status_is_409(self, make_client):
        client = make_client(owner())
        draft = client.post("/api/applications/", json=_payload()).json()
        resp = client.post(f"/api/applications/{draft['id']}/submit", params={"expected_status": "submitted"})
        assert resp.status_code == 409
        assert resp.json()["current_status"] == "draft"

    def test_second_application_conflicts(self, make_client):
        first = _create_and_submit(make_client)
        client = make_client(owner())
        resp = client.post("/api/applications/", json=_payload())
        assert resp.status_code == 409
        body = resp.json()
        assert body["current_status"] == "submitted"
        assert first["id"] in body["detail"]

    def test_request_id_echoed(self, make_client):
        client = make_client(owner())
        resp = client.get("/api/applications/missing-id", headers={"x-request-id": "req-42"})
        assert resp.status_code == 404
        assert resp.json()["request_id"] == "req-42"


class TestReads:
    def test_status_and_timeline(self, make_client):
        app = _create_and_submit(make_client)
        client = make_client(owner())

        status = client.get(f"/api/applications/{app['id']}/status").json()
        assert status["status_info"]["label"] == "Submitted"
        assert status["pending_document_count"] == 5

        actions = client.get(f"/api/applications/{app['id']}/actions").json()["data"]
        assert [a["action"] for a in actions] == ["submitted"]
        assert actions[0]["actor_role"] == "property_owner"

    def test_owner_lists_only_own(self, make_client):
        _create_and_submit(make_client)

        client = make_client(other_owner())
        resp = client.get("/api/applications/")
        assert resp.status_code == 200
        assert resp.json()["pagination"]["total"] == 0

        client = make_client(owner())
        body = client.get("/api/applications/").json()
        assert body["pagination"]["total"] == 1
        assert body["pagination"]["has_more"] is False

    def test_other_owner_gets_404(self, make_client):
        app = _create_and_submit(make_client)
        client = make_client(other_owner())
        resp = client.get(f"/api/applications/{app['id']}")
        assert resp.status_code == 404
        assert resp.json()["title"] == "Not Found"

    def test_district_filter_for_reviewers(self, make_client):
        _create_and_submit(make_client)
        client = make_client(dealing_assistant(district="Kullu"))
        assert client.get("/api/applications/").json()["pagination"]["total"] == 0
        client = make_client(dealing_assistant())
        body = client.get("/api/applications/", params={"filter_status": "submitted"}).json()
        assert body["pagination"]["total"] == 1


class TestFeePreview:
    def test_preview_with_rooms(self, make_client):
        client = make_client(owner())
        resp = client.post(
            "/api/applications/fee-preview",
            json={
                "category": "gold",
                "location_type": "mc",
                "certificate_validity_years": 3,
                "owner_gender": "female",
                "rooms": {"double_bed_rooms": 2, "double_bed_room_rate": "1800"},
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        # 3 x 12000, less 10% and 5%
        assert data["fee"]["total_before_discounts"] == "36000.00"
        assert data["fee"]["total_fee"] == "30600.00"
        assert data["suggested_category"] == "silver"
        assert "Silver" in data["category_error"]
