# This project was developed with assistance from AI tools.
"""Shared test factories: personas, payloads and a ready-made workflow.

Fixed user IDs keep cross-test references stable. Persona data scopes match
what ``middleware/auth.py:build_data_scope()`` produces for each role.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from homestay_db.enums import DocumentVerificationStatus, InspectionOutcome, UserRole

from homestay_api.schemas.application import DraftPayload, RoomConfigurationIn
from homestay_api.schemas.auth import DataScope, UserContext
from homestay_api.schemas.document import DocumentIn, DocumentVerificationIn, ScrutinyUpdateRequest
from homestay_api.schemas.workflow import (
    InspectionOutcomeRequest,
    PaymentConfirmation,
    ScheduleInspectionRequest,
)
from homestay_api.services.workflow import ApplicationWorkflow

from .fakes import InMemoryStorage, RecordingNotifier, StaticSettingsProvider

OWNER_ID = "owner-anita-001"
OTHER_OWNER_ID = "owner-rakesh-002"
DA_ID = "da-shimla-001"
DTDO_ID = "dtdo-shimla-001"
KULLU_DA_ID = "da-kullu-001"
GATEWAY_ID = "payment-gateway"
ADMIN_ID = "admin-user"


# ---------------------------------------------------------------------------
# Personas
# ---------------------------------------------------------------------------


def owner(user_id: str = OWNER_ID) -> UserContext:
    return UserContext(
        user_id=user_id,
        role=UserRole.PROPERTY_OWNER,
        email=f"{user_id}@example.com",
        name="Anita Sharma",
        data_scope=DataScope(own_data_only=True, user_id=user_id),
    )


def other_owner() -> UserContext:
    return owner(OTHER_OWNER_ID)


def dealing_assistant(district: str = "Shimla", user_id: str = DA_ID) -> UserContext:
    return UserContext(
        user_id=user_id,
        role=UserRole.DEALING_ASSISTANT,
        email=f"{user_id}@hptourism.gov.in",
        name="Dealing Assistant",
        data_scope=DataScope(district=district),
    )


def kullu_dealing_assistant() -> UserContext:
    return dealing_assistant(district="Kullu", user_id=KULLU_DA_ID)


def district_officer(district: str = "Shimla") -> UserContext:
    return UserContext(
        user_id=DTDO_ID,
        role=UserRole.DISTRICT_TOURISM_OFFICER,
        email="dtdo@hptourism.gov.in",
        name="District Tourism Development Officer",
        data_scope=DataScope(district=district),
    )


def payment_gateway() -> UserContext:
    return UserContext(
        user_id=GATEWAY_ID,
        role=UserRole.PAYMENT_GATEWAY,
        email="gateway@hptourism.gov.in",
        name="Payment Gateway",
        data_scope=DataScope(full_pipeline=True),
    )


def admin() -> UserContext:
    return UserContext(
        user_id=ADMIN_ID,
        role=UserRole.ADMIN,
        email="admin@hptourism.gov.in",
        name="Admin",
        data_scope=DataScope(full_pipeline=True),
    )


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


def required_documents() -> list[DocumentIn]:
    """The full new-registration document set."""
    return [
        DocumentIn(document_type="revenue_papers", file_name="jamabandi.pdf",
                   file_path="uploads/jamabandi.pdf", file_size=400_000, mime_type="application/pdf"),
        DocumentIn(document_type="affidavit_section_29", file_name="affidavit.pdf",
                   file_path="uploads/affidavit.pdf", file_size=250_000, mime_type="application/pdf"),
        DocumentIn(document_type="undertaking_form_c", file_name="form-c.pdf",
                   file_path="uploads/form-c.pdf", file_size=150_000, mime_type="application/pdf"),
        DocumentIn(document_type="property_photo", file_name="front.jpg",
                   file_path="uploads/front.jpg", file_size=900_000, mime_type="image/jpeg"),
        DocumentIn(document_type="property_photo", file_name="room.png",
                   file_path="uploads/room.png", file_size=800_000, mime_type="image/png"),
    ]


def rooms(**overrides) -> RoomConfigurationIn:
    values = {
        "single_bed_rooms": 2,
        "single_bed_room_rate": Decimal("1500"),
        "double_bed_rooms": 1,
        "double_bed_room_rate": Decimal("2000"),
        "attached_washrooms": 3,
    }
    values.update(overrides)
    return RoomConfigurationIn(**values)


def complete_payload(**overrides) -> DraftPayload:
    """A draft that passes every submission rule with the default settings."""
    values = {
        "property_name": "Pine View Homestay",
        "category": "silver",
        "location_type": "gp",
        "certificate_validity_years": 1,
        "district": "Shimla",
        "tehsil": "Shimla Urban",
        "address": "Village Mashobra, PO Mashobra",
        "pincode": "171007",
        "owner_name": "Anita Sharma",
        "owner_gender": "male",
        "owner_mobile": "9816012345",
        "owner_email": "anita@example.com",
        "rooms": rooms(),
        "documents": required_documents(),
    }
    values.update(overrides)
    return DraftPayload(**values)


def verify_all(app, status=DocumentVerificationStatus.VERIFIED) -> ScrutinyUpdateRequest:
    return ScrutinyUpdateRequest(
        verifications=[
            DocumentVerificationIn(document_id=doc.id, verification_status=status)
            for doc in app.documents
        ],
    )


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


def make_workflow(storage=None, settings=None, notifier=None):
    """Return (workflow, storage, settings, notifier) wired with fakes."""
    storage = storage or InMemoryStorage()
    settings = settings or StaticSettingsProvider()
    notifier = notifier or RecordingNotifier()
    return ApplicationWorkflow(storage, settings, notifier), storage, settings, notifier


async def submitted_application(workflow, payload=None, user=None):
    user = user or owner()
    draft = await workflow.submit_draft(user, payload or complete_payload())
    return await workflow.submit_final(user, draft.id)


async def application_in_scrutiny(workflow, payload=None):
    app = await submitted_application(workflow, payload)
    return await workflow.start_scrutiny(dealing_assistant(), app.id)


async def application_with_dtdo(workflow, payload=None):
    app = await application_in_scrutiny(workflow, payload)
    app = await workflow.save_scrutiny(dealing_assistant(), app.id, verify_all(app))
    app = await workflow.forward_to_dtdo(dealing_assistant(), app.id, "All documents verified")
    return await workflow.accept_for_review(district_officer(), app.id)


async def through_inspection(workflow, application_id):
    """Take an application the DTDO has accepted up to verified_for_payment."""
    app = await workflow.schedule_inspection(
        district_officer(),
        application_id,
        ScheduleInspectionRequest(inspection_date=datetime.now(UTC) + timedelta(days=1)),
    )
    app = await workflow.record_inspection_outcome(
        district_officer(), app.id, InspectionOutcomeRequest(outcome=InspectionOutcome.SATISFACTORY),
    )
    return await workflow.verify_for_payment(district_officer(), app.id)


async def approved_application(workflow, payload=None):
    app = await application_with_dtdo(workflow, payload)
    app = await through_inspection(workflow, app.id)
    app = await workflow.initiate_payment(owner(), app.id)
    return await workflow.mark_paid(
        payment_gateway(),
        app.id,
        PaymentConfirmation(transaction_id="TXN-0001", amount=app.total_fee),
    )
