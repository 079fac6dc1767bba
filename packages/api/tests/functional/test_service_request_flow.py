# This project was developed with assistance from AI tools.
"""Functional tests: existing-certificate onboarding and follow-up requests."""

import pytest

from ..factories import complete_payload, dealing_assistant, owner

pytestmark = pytest.mark.functional

REVIEW = "/api/review/applications"


def _legacy_body() -> dict:
    payload = complete_payload(documents=[]).model_dump(mode="json", exclude_none=True)
    payload["documents"] = [
        {
            "document_type": "legacy_certificate",
            "file_name": "old-rc.pdf",
            "file_path": "uploads/old-rc.pdf",
            "file_size": 300000,
            "mime_type": "application/pdf",
        },
    ]
    payload.update({
        "legacy_certificate_number": "HP-HS-OLD-0457",
        "legacy_certificate_issued_date": "2022-04-01T00:00:00Z",
        "legacy_certificate_expiry_date": "2027-03-31T00:00:00Z",
    })
    return payload


def _verified_legacy(make_client) -> dict:
    client = make_client(owner())
    resp = client.post("/api/applications/legacy", json=_legacy_body())
    assert resp.status_code == 201, resp.text
    app = resp.json()
    assert app["status"] == "legacy_rc_review"

    da = make_client(dealing_assistant())
    doc = app["documents"][0]
    da.put(
        f"{REVIEW}/{app['id']}/documents",
        json={"verifications": [{"document_id": doc["id"], "verification_status": "verified"}]},
    )
    resp = da.post(f"{REVIEW}/{app['id']}/verify-legacy", json={"remarks": "Matches the register"})
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_legacy_certificate_keeps_its_number(make_client):
    app = _verified_legacy(make_client)
    assert app["status"] == "approved"
    assert app["certificate_number"] == "HP-HS-OLD-0457"
    assert app["certificate_expiry_date"].startswith("2027-03-31")


def test_verify_legacy_needs_document_verdicts(make_client):
    client = make_client(owner())
    app = client.post("/api/applications/legacy", json=_legacy_body()).json()
    da = make_client(dealing_assistant())
    resp = da.post(f"{REVIEW}/{app['id']}/verify-legacy", json={})
    assert resp.status_code == 422
    assert resp.json()["pending_documents"] == ["old-rc.pdf"]


def test_cancellation_request(make_client):
    parent = _verified_legacy(make_client)
    client = make_client(owner())

    resp = client.post(
        f"/api/applications/{parent['id']}/service-requests",
        json={"application_kind": "new_registration"},
    )
    assert resp.status_code == 422

    resp = client.post(
        f"/api/applications/{parent['id']}/service-requests",
        json={"application_kind": "cancel_certificate", "note": "Selling the property"},
    )
    assert resp.status_code == 201
    request = resp.json()
    assert request["status"] == "draft"
    assert request["application_kind"] == "cancel_certificate"
    assert request["parent_application_id"] == parent["id"]

    resp = client.post(
        f"/api/applications/{parent['id']}/service-requests",
        json={"application_kind": "cancel_certificate", "note": "Again"},
    )
    assert resp.status_code == 409
