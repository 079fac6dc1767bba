# This project was developed with assistance from AI tools.
"""Tests for onboarding owners who already hold a registration certificate."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from homestay_db.enums import ApplicationStatus

from homestay_api.schemas.application import LegacyOnboardingRequest
from homestay_api.schemas.document import DocumentIn
from homestay_api.services.errors import (
    ActionNotPermittedError,
    ApplicationValidationError,
    IncompleteDocumentsError,
    StateConflictError,
)

from .factories import (
    complete_payload,
    dealing_assistant,
    make_workflow,
    owner,
    rooms,
    submitted_application,
    verify_all,
)
from .fakes import StaticSettingsProvider

S = ApplicationStatus

ISSUED = datetime(2022, 4, 1, tzinfo=UTC)
EXPIRES = datetime(2027, 3, 31, tzinfo=UTC)


def legacy_certificate() -> DocumentIn:
    return DocumentIn(
        document_type="legacy_certificate",
        file_name="old-rc.pdf",
        file_path="uploads/old-rc.pdf",
        file_size=300_000,
        mime_type="application/pdf",
    )


def legacy_request(documents=None, **overrides) -> LegacyOnboardingRequest:
    draft = complete_payload(documents=documents if documents is not None else [legacy_certificate()])
    values = {
        **draft.model_dump(exclude_unset=True),
        "legacy_certificate_number": "HP-HS-OLD-0457",
        "legacy_certificate_issued_date": ISSUED,
        "legacy_certificate_expiry_date": EXPIRES,
    }
    values.update(overrides)
    return LegacyOnboardingRequest(**values)


class TestOnboarding:
    async def test_lands_in_legacy_review_without_fee(self):
        workflow, storage, _, notifier = make_workflow()
        app = await workflow.onboard_legacy(owner(), legacy_request())

        assert app.status == S.LEGACY_RC_REVIEW
        assert app.current_stage == "scrutiny"
        assert app.application_number.startswith("HP-HS-")
        assert app.total_fee == Decimal("0")
        assert app.service_context["legacy_onboarding"] is True
        assert app.service_context["legacy_certificate_number"] == "HP-HS-OLD-0457"
        assert [a.action for a in storage.actions] == ["legacy_onboarding_submitted"]
        assert len(notifier.events) == 1

    async def test_certificate_copy_required(self):
        workflow, *_ = make_workflow()
        with pytest.raises(ApplicationValidationError, match="existing registration certificate"):
            await workflow.onboard_legacy(owner(), legacy_request(documents=[]))

    async def test_blocked_by_application_in_progress(self):
        workflow, *_ = make_workflow()
        await submitted_application(workflow)
        with pytest.raises(StateConflictError, match="Only one application"):
            await workflow.onboard_legacy(owner(), legacy_request())


class TestOnboardingRules:
    """Legacy filings meet the same property rules as a regular submission."""

    async def test_property_name_required(self):
        workflow, storage, *_ = make_workflow()
        with pytest.raises(ApplicationValidationError, match="Property name is required"):
            await workflow.onboard_legacy(owner(), legacy_request(property_name=None))
        assert storage.applications == {}

    async def test_room_limit(self):
        workflow, storage, *_ = make_workflow()
        request = legacy_request(rooms=rooms(single_bed_rooms=6, attached_washrooms=7))
        with pytest.raises(ApplicationValidationError, match="at most 6 rooms"):
            await workflow.onboard_legacy(owner(), request)
        assert storage.applications == {}

    async def test_room_rates_required(self):
        workflow, *_ = make_workflow()
        request = legacy_request(rooms=rooms(single_bed_room_rate=None))
        with pytest.raises(ApplicationValidationError, match="Single bed room rate must be at least"):
            await workflow.onboard_legacy(owner(), request)

    async def test_washroom_per_room(self):
        workflow, *_ = make_workflow()
        request = legacy_request(rooms=rooms(attached_washrooms=0))
        with pytest.raises(ApplicationValidationError, match="own washroom"):
            await workflow.onboard_legacy(owner(), request)

    async def test_category_must_match_tariff(self):
        workflow, storage, *_ = make_workflow()
        with pytest.raises(ApplicationValidationError, match="falls under the Silver category"):
            await workflow.onboard_legacy(owner(), legacy_request(category="diamond"))
        assert storage.actions == []

    async def test_valid_filing_keeps_selected_category(self):
        workflow, *_ = make_workflow()
        app = await workflow.onboard_legacy(owner(), legacy_request())
        assert app.selected_category == app.category
        assert app.total_rooms == 3


class TestVerification:
    async def test_da_verifies_and_keeps_certificate(self):
        workflow, *_ = make_workflow()
        app = await workflow.onboard_legacy(owner(), legacy_request())
        await workflow.save_scrutiny(dealing_assistant(), app.id, verify_all(app))

        app = await workflow.verify_legacy(dealing_assistant(), app.id, "Matches register", S.LEGACY_RC_REVIEW)
        assert app.status == S.APPROVED
        assert app.certificate_number == "HP-HS-OLD-0457"
        assert app.certificate_issued_date == ISSUED
        assert app.certificate_expiry_date == EXPIRES
        assert app.da_remarks == "Matches register"

    async def test_verification_needs_reviewed_documents(self):
        workflow, *_ = make_workflow()
        app = await workflow.onboard_legacy(owner(), legacy_request())
        with pytest.raises(IncompleteDocumentsError, match="old-rc.pdf"):
            await workflow.verify_legacy(dealing_assistant(), app.id)

    async def test_only_legacy_cases_verified_directly(self):
        workflow, *_ = make_workflow()
        app = await submitted_application(workflow)
        with pytest.raises(ApplicationValidationError, match="existing-certificate"):
            await workflow.verify_legacy(dealing_assistant(), app.id)

    async def test_forward_disabled_by_default(self):
        workflow, *_ = make_workflow()
        app = await workflow.onboard_legacy(owner(), legacy_request())
        await workflow.save_scrutiny(dealing_assistant(), app.id, verify_all(app))
        with pytest.raises(ActionNotPermittedError, match="DTDO escalation is currently disabled"):
            await workflow.forward_to_dtdo(dealing_assistant(), app.id, "Needs a site visit")

    async def test_forward_allowed_when_enabled(self):
        workflow, *_ = make_workflow(settings=StaticSettingsProvider(legacy_forward=True))
        app = await workflow.onboard_legacy(owner(), legacy_request())
        await workflow.save_scrutiny(dealing_assistant(), app.id, verify_all(app))
        app = await workflow.forward_to_dtdo(dealing_assistant(), app.id, "Needs a site visit")
        assert app.status == S.FORWARDED_TO_DTDO

    async def test_send_back_and_resubmit_with_certificate_only(self):
        workflow, *_ = make_workflow(settings=StaticSettingsProvider(da_send_back=True))
        app = await workflow.onboard_legacy(owner(), legacy_request())

        app = await workflow.send_back(dealing_assistant(), app.id, "Certificate scan is illegible")
        assert app.status == S.REVERTED_TO_APPLICANT

        app = await workflow.apply_correction(owner(), app.id)
        assert app.status == S.SUBMITTED
        assert app.correction_submission_count == 1
        assert app.total_fee == Decimal("0")

        app = await workflow.start_scrutiny(dealing_assistant(), app.id)
        await workflow.save_scrutiny(dealing_assistant(), app.id, verify_all(app))
        app = await workflow.verify_legacy(dealing_assistant(), app.id)
        assert app.status == S.APPROVED
        assert app.certificate_number == "HP-HS-OLD-0457"
