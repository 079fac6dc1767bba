# This project was developed with assistance from AI tools.
"""Tests for send-back / revert / objection cycles and resubmission."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from homestay_db.enums import ApplicationStatus, DocumentVerificationStatus, NotificationEvent

from homestay_api.schemas.application import DraftPayload
from homestay_api.schemas.workflow import InspectionOutcomeRequest, ScheduleInspectionRequest
from homestay_api.services.corrections import (
    cycle_feedback,
    reset_verifications,
    resubmission_changes,
    revert_changes,
)
from homestay_api.services.errors import ApplicationValidationError, StateConflictError

from .factories import (
    application_in_scrutiny,
    application_with_dtdo,
    dealing_assistant,
    district_officer,
    make_workflow,
    owner,
    required_documents,
)
from .fakes import StaticSettingsProvider

S = ApplicationStatus


class TestBookkeeping:
    def test_revert_clears_previous_round(self):
        changes = revert_changes("Fix the address")
        assert changes == {
            "clarification_requested": "Fix the address",
            "da_remarks": None,
            "dtdo_remarks": None,
            "district_notes": None,
        }
        assert "correction_submission_count" not in changes

    def test_resubmission_increments_by_one(self):
        now = datetime(2025, 3, 1, tzinfo=UTC)
        assert resubmission_changes(None, now)["correction_submission_count"] == 1
        changes = resubmission_changes(4, now)
        assert changes["correction_submission_count"] == 5
        assert changes["clarification_requested"] is None
        assert changes["submitted_at"] == now
        assert "da_remarks" not in changes

    def test_reset_verifications(self):
        docs = [
            SimpleNamespace(
                document_type="revenue_papers",
                file_name="deed.pdf",
                file_path="uploads/deed.pdf",
                file_size=10,
                mime_type="application/pdf",
            ),
        ]
        rows = reset_verifications(docs)
        assert rows[0]["verification_status"] == DocumentVerificationStatus.PENDING
        assert rows[0]["verification_notes"] is None
        assert rows[0]["file_name"] == "deed.pdf"

    def test_cycle_feedback(self):
        assert cycle_feedback(2) == "Applicant resubmitted after corrections (cycle 2)"


# ---------------------------------------------------------------------------
# Send-back by the Dealing Assistant
# ---------------------------------------------------------------------------


class TestSendBack:
    async def test_send_back_then_resubmit(self):
        workflow, storage, _, notifier = make_workflow(settings=StaticSettingsProvider(da_send_back=True))
        app = await application_in_scrutiny(workflow)
        assert app.correction_submission_count == 0

        app = await workflow.send_back(
            dealing_assistant(), app.id, "Add fire-safety certificate", S.UNDER_SCRUTINY,
        )
        assert app.status == S.SENT_BACK_FOR_CORRECTIONS
        assert app.clarification_requested == "Add fire-safety certificate"
        assert app.correction_submission_count == 0
        assert notifier.event_ids[-1] == NotificationEvent.DA_SEND_BACK

        app = await workflow.apply_correction(owner(), app.id)
        assert app.status == S.SUBMITTED
        assert app.correction_submission_count == 1
        assert app.clarification_requested is None
        assert {d.verification_status for d in app.documents} == {DocumentVerificationStatus.PENDING}

        last = storage.actions[-1]
        assert last.action == "correction_resubmitted"
        assert last.previous_status == "sent_back_for_corrections"
        assert last.feedback == "Applicant resubmitted after corrections (cycle 1)"

    async def test_send_back_needs_reason(self):
        workflow, *_ = make_workflow(settings=StaticSettingsProvider(da_send_back=True))
        app = await application_in_scrutiny(workflow)
        with pytest.raises(ApplicationValidationError, match="reason is required"):
            await workflow.send_back(dealing_assistant(), app.id, "  ")

    async def test_cycles_are_unlimited(self):
        workflow, *_ = make_workflow(settings=StaticSettingsProvider(da_send_back=True))
        app = await application_in_scrutiny(workflow)
        for cycle in range(1, 5):
            app = await workflow.send_back(dealing_assistant(), app.id, f"Round {cycle}")
            app = await workflow.apply_correction(owner(), app.id)
            assert app.correction_submission_count == cycle
            app = await workflow.start_scrutiny(dealing_assistant(), app.id)
        assert app.status == S.UNDER_SCRUTINY


# ---------------------------------------------------------------------------
# Revert and objection by the district officer
# ---------------------------------------------------------------------------


class TestDistrictCorrections:
    async def test_revert_clears_reviewer_text(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        assert app.da_remarks == "All documents verified"

        app = await workflow.revert(district_officer(), app.id, "Photos are unclear", S.DTDO_REVIEW)
        assert app.status == S.REVERTED_BY_DTDO
        assert app.clarification_requested == "Photos are unclear"
        assert app.da_remarks is None
        assert app.current_stage == "corrections"

    async def test_revert_requires_remarks(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        with pytest.raises(ApplicationValidationError, match="Remarks are required"):
            await workflow.revert(district_officer(), app.id, None)

    async def test_objection_after_inspection(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        app = await workflow.schedule_inspection(
            district_officer(), app.id,
            ScheduleInspectionRequest(inspection_date=datetime.now(UTC) + timedelta(days=1)),
        )
        app = await workflow.record_inspection_outcome(
            district_officer(), app.id,
            InspectionOutcomeRequest(outcome="minor_issues", findings="No fire extinguisher"),
        )
        app = await workflow.raise_objection(district_officer(), app.id, "Install a fire extinguisher")
        assert app.status == S.OBJECTION_RAISED

        app = await workflow.apply_correction(owner(), app.id, expected_status=S.OBJECTION_RAISED)
        assert app.status == S.SUBMITTED
        assert app.correction_submission_count == 1

    async def test_resubmission_reroutes_on_address_change(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        number = app.application_number
        app = await workflow.revert(district_officer(), app.id, "Property is in Pangi, not Shimla")

        app = await workflow.apply_correction(
            owner(), app.id, DraftPayload(district="Chamba", tehsil="Pangi"),
        )
        assert app.district == "Pangi"
        assert app.is_special_subdivision is True
        assert app.special_subdivision_discount == Decimal("1500.00")
        assert app.application_number == number

    async def test_resubmission_keeps_district_without_address_change(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        app = await workflow.revert(district_officer(), app.id, "Update the property name")
        app = await workflow.apply_correction(owner(), app.id, DraftPayload(property_name="Pine View Cottage"))
        assert app.district == "Shimla"
        assert app.property_name == "Pine View Cottage"

    async def test_resubmission_revalidates(self):
        workflow, storage, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        app = await workflow.revert(district_officer(), app.id, "Update photos")
        one_photo = required_documents()[:-1]
        with pytest.raises(ApplicationValidationError, match="property photos"):
            await workflow.apply_correction(owner(), app.id, DraftPayload(documents=one_photo))
        assert storage.applications[app.id].status == S.REVERTED_BY_DTDO

    async def test_replacement_documents_are_pending(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        app = await workflow.revert(district_officer(), app.id, "Update photos")
        app = await workflow.apply_correction(owner(), app.id, DraftPayload(documents=required_documents()))
        assert len(app.documents) == 5
        assert all(d.verification_status == DocumentVerificationStatus.PENDING for d in app.documents)

    async def test_resubmit_only_from_correction_statuses(self):
        workflow, *_ = make_workflow()
        app = await application_with_dtdo(workflow)
        with pytest.raises(StateConflictError, match="Allowed from"):
            await workflow.apply_correction(owner(), app.id)
