# This project was developed with assistance from AI tools.
"""Functional tests: DA scrutiny, DTDO review and payment over HTTP.

Walks one application from submission to certificate, switching personas
the way the real offices hand it along, and checks the status code and
problem body for every refusal on the way.
"""

from datetime import UTC, datetime, timedelta

import pytest

from ..factories import (
    complete_payload,
    dealing_assistant,
    district_officer,
    kullu_dealing_assistant,
    owner,
    payment_gateway,
)

pytestmark = pytest.mark.functional

REVIEW = "/api/review/applications"


def _submitted(make_client) -> dict:
    client = make_client(owner())
    payload = complete_payload().model_dump(mode="json", exclude_none=True)
    draft = client.post("/api/applications/", json=payload).json()
    return client.post(f"/api/applications/{draft['id']}/submit").json()


def _verify_all(client, app: dict) -> dict:
    body = {
        "verifications": [
            {"document_id": d["id"], "verification_status": "verified"} for d in app["documents"]
        ],
        "remarks": "Revenue papers match the jamabandi",
    }
    resp = client.put(f"{REVIEW}/{app['id']}/documents", json=body)
    assert resp.status_code == 200, resp.text
    return resp.json()


def _with_dtdo(make_client) -> dict:
    app = _submitted(make_client)
    da = make_client(dealing_assistant())
    app = da.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={}).json()
    app = _verify_all(da, app)
    da.post(f"{REVIEW}/{app['id']}/forward", json={"remarks": "Scrutiny complete"})
    dtdo = make_client(district_officer())
    return dtdo.post(f"{REVIEW}/{app['id']}/accept", json={}).json()


class TestScrutiny:
    def test_forward_blocked_until_documents_reviewed(self, make_client):
        app = _submitted(make_client)
        da = make_client(dealing_assistant())

        resp = da.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={"expected_status": "submitted"})
        assert resp.status_code == 200
        app = resp.json()
        assert app["status"] == "under_scrutiny"

        resp = da.post(f"{REVIEW}/{app['id']}/forward", json={"remarks": "Looks fine"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["title"] == "Unprocessable Entity"
        assert len(body["pending_documents"]) == 5
        assert "5 documents are still pending verification" in body["detail"]

        app = _verify_all(da, app)
        assert app["da_remarks"] == "Revenue papers match the jamabandi"

        resp = da.post(
            f"{REVIEW}/{app['id']}/forward",
            json={"remarks": "Looks fine", "expected_status": "under_scrutiny"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "forwarded_to_dtdo"

        resp = da.post(f"{REVIEW}/{app['id']}/forward", json={"remarks": "Again"})
        assert resp.status_code == 409
        assert resp.json()["current_status"] == "forwarded_to_dtdo"

    def test_forward_requires_remarks(self, make_client):
        app = _submitted(make_client)
        da = make_client(dealing_assistant())
        app = da.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={}).json()
        _verify_all(da, app)
        resp = da.post(f"{REVIEW}/{app['id']}/forward", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Scrutiny remarks are required before forwarding."

    def test_send_back_disabled_is_403(self, make_client):
        app = _submitted(make_client)
        da = make_client(dealing_assistant())
        da.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={})
        resp = da.post(f"{REVIEW}/{app['id']}/send-back", json={"reason": "Add fire NOC"})
        assert resp.status_code == 403
        assert "currently disabled" in resp.json()["detail"]

    def test_send_back_enabled(self, make_client, world):
        world[2].da_send_back = True
        app = _submitted(make_client)
        da = make_client(dealing_assistant())
        da.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={})
        resp = da.post(f"{REVIEW}/{app['id']}/send-back", json={"reason": "Add fire NOC"})
        assert resp.status_code == 200
        assert resp.json()["clarification_requested"] == "Add fire NOC"

        owner_client = make_client(owner())
        resp = owner_client.post(f"/api/applications/{app['id']}/resubmit")
        assert resp.status_code == 200
        assert resp.json()["correction_submission_count"] == 1

    def test_other_district_sees_404(self, make_client):
        app = _submitted(make_client)
        da = make_client(kullu_dealing_assistant())
        resp = da.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={})
        assert resp.status_code == 404

    def test_owner_cannot_review(self, make_client):
        app = _submitted(make_client)
        client = make_client(owner())
        resp = client.post(f"{REVIEW}/{app['id']}/start-scrutiny", json={})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Insufficient permissions"


class TestDistrictReview:
    def test_through_to_certificate(self, make_client):
        app = _with_dtdo(make_client)
        assert app["status"] == "dtdo_review"
        dtdo = make_client(district_officer())

        tomorrow = (datetime.now(UTC) + timedelta(days=1)).isoformat()
        resp = dtdo.post(f"{REVIEW}/{app['id']}/schedule-inspection", json={"inspection_date": tomorrow})
        assert resp.status_code == 200
        assert resp.json()["status"] == "inspection_scheduled"

        resp = dtdo.post(f"{REVIEW}/{app['id']}/inspection-outcome", json={"outcome": "satisfactory"})
        assert resp.json()["site_inspection_outcome"] == "satisfactory"

        resp = dtdo.post(f"{REVIEW}/{app['id']}/verify-for-payment", json={"remarks": "Fit for registration"})
        assert resp.json()["status"] == "verified_for_payment"

        owner_client = make_client(owner())
        resp = owner_client.post(f"/api/payments/{app['id']}/initiate", json={})
        assert resp.status_code == 200
        assert resp.json()["status"] == "payment_pending"

        gateway = make_client(payment_gateway())
        resp = gateway.post(f"/api/payments/{app['id']}/confirm", json={"transaction_id": "TXN-77", "amount": "2999"})
        assert resp.status_code == 400
        assert "does not match" in resp.json()["detail"]

        resp = gateway.post(f"/api/payments/{app['id']}/confirm", json={"transaction_id": "TXN-77", "amount": "3000"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "approved"
        assert data["certificate_number"].startswith("HP-HST-")

        actions = make_client(owner()).get(f"/api/applications/{app['id']}/actions").json()["data"]
        assert actions[-1]["action"] == "payment_verified"

    def test_past_inspection_date_is_400(self, make_client):
        app = _with_dtdo(make_client)
        dtdo = make_client(district_officer())
        yesterday = (datetime.now(UTC) - timedelta(days=1)).isoformat()
        resp = dtdo.post(f"{REVIEW}/{app['id']}/schedule-inspection", json={"inspection_date": yesterday})
        assert resp.status_code == 400

    def test_revert_and_reject(self, make_client):
        app = _with_dtdo(make_client)
        dtdo = make_client(district_officer())

        resp = dtdo.post(f"{REVIEW}/{app['id']}/revert", json={"remarks": "Upload clearer photos"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "reverted_by_dtdo"

        resp = dtdo.post(f"{REVIEW}/{app['id']}/reject", json={"reason": "Duplicate registration"})
        assert resp.status_code == 409
        assert resp.json()["current_status"] == "reverted_by_dtdo"

    def test_reject_needs_reason(self, make_client):
        app = _with_dtdo(make_client)
        dtdo = make_client(district_officer())
        resp = dtdo.post(f"{REVIEW}/{app['id']}/reject", json={})
        assert resp.status_code == 400
        resp = dtdo.post(f"{REVIEW}/{app['id']}/reject", json={"reason": "Duplicate registration"})
        assert resp.json()["status"] == "rejected"
        assert resp.json()["rejection_reason"] == "Duplicate registration"

    def test_gateway_only_confirms_payment(self, make_client):
        app = _with_dtdo(make_client)
        dtdo = make_client(district_officer())
        resp = dtdo.post(f"/api/payments/{app['id']}/confirm", json={"transaction_id": "T", "amount": "0"})
        assert resp.status_code == 403
