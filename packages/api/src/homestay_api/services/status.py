# This project was developed with assistance from AI tools.
"""Status presentation.

Maps each status to its coarse ``current_stage`` (stored on every write) and
to the text shown to owners and reviewers.
"""

from homestay_db.enums import ApplicationStatus, DocumentVerificationStatus

from ..schemas.auth import UserContext
from ..schemas.status import ApplicationStatusResponse, PendingAction, StatusInfo
from .transitions import available_actions

S = ApplicationStatus

STATUS_STAGE: dict[ApplicationStatus, str] = {
    S.DRAFT: "draft",
    S.SUBMITTED: "submitted",
    S.UNDER_SCRUTINY: "scrutiny",
    S.LEGACY_RC_REVIEW: "scrutiny",
    S.FORWARDED_TO_DTDO: "district_review",
    S.DTDO_REVIEW: "district_review",
    S.INSPECTION_SCHEDULED: "inspection",
    S.INSPECTION_UNDER_REVIEW: "inspection",
    S.VERIFIED_FOR_PAYMENT: "payment",
    S.PAYMENT_PENDING: "payment",
    S.REVERTED_BY_DTDO: "corrections",
    S.OBJECTION_RAISED: "corrections",
    S.SENT_BACK_FOR_CORRECTIONS: "corrections",
    S.REVERTED_TO_APPLICANT: "corrections",
    S.APPROVED: "completed",
    S.REJECTED: "completed",
}

STATUS_INFO: dict[ApplicationStatus, StatusInfo] = {
    S.DRAFT: StatusInfo(
        label="Draft",
        description="Your application has not been submitted yet.",
        next_step="Complete the form, upload documents and submit.",
    ),
    S.SUBMITTED: StatusInfo(
        label="Submitted",
        description="Your application is waiting for a Dealing Assistant.",
        next_step="Document scrutiny will begin shortly.",
    ),
    S.UNDER_SCRUTINY: StatusInfo(
        label="Under Scrutiny",
        description="A Dealing Assistant is verifying your documents.",
        next_step="The application will be forwarded to the district officer once every document is reviewed.",
    ),
    S.LEGACY_RC_REVIEW: StatusInfo(
        label="Existing Certificate Review",
        description="Your existing registration certificate is being verified.",
        next_step="The Dealing Assistant will confirm your certificate details.",
    ),
    S.FORWARDED_TO_DTDO: StatusInfo(
        label="Forwarded to DTDO",
        description="Scrutiny is complete and the district officer has your file.",
        next_step="The district officer will review and schedule a site inspection.",
    ),
    S.DTDO_REVIEW: StatusInfo(
        label="District Review",
        description="The district officer is reviewing your application.",
        next_step="A site inspection will be scheduled.",
    ),
    S.INSPECTION_SCHEDULED: StatusInfo(
        label="Inspection Scheduled",
        description="A site inspection of your property has been scheduled.",
        next_step="Keep the property available on the inspection date.",
    ),
    S.INSPECTION_UNDER_REVIEW: StatusInfo(
        label="Inspection Under Review",
        description="The inspection report is being reviewed.",
        next_step="The district officer will approve for payment or request changes.",
    ),
    S.VERIFIED_FOR_PAYMENT: StatusInfo(
        label="Verified for Payment",
        description="Your application has been verified.",
        next_step="Pay the registration fee to receive your certificate.",
    ),
    S.PAYMENT_PENDING: StatusInfo(
        label="Payment Pending",
        description="We are waiting for the payment gateway to confirm your fee.",
        next_step="Your certificate is issued as soon as payment is confirmed.",
    ),
    S.REVERTED_BY_DTDO: StatusInfo(
        label="Reverted by DTDO",
        description="The district officer returned your application for changes.",
        next_step="Address the remarks and resubmit.",
    ),
    S.OBJECTION_RAISED: StatusInfo(
        label="Objection Raised",
        description="The inspection found issues that need your attention.",
        next_step="Resolve the objections and resubmit.",
    ),
    S.SENT_BACK_FOR_CORRECTIONS: StatusInfo(
        label="Sent Back for Corrections",
        description="The Dealing Assistant returned your application for changes.",
        next_step="Make the requested corrections and resubmit.",
    ),
    S.REVERTED_TO_APPLICANT: StatusInfo(
        label="Returned to Applicant",
        description="Your existing certificate details need changes.",
        next_step="Update the details and resubmit.",
    ),
    S.APPROVED: StatusInfo(
        label="Approved",
        description="Your homestay is registered.",
        next_step="Download your registration certificate.",
    ),
    S.REJECTED: StatusInfo(
        label="Rejected",
        description="Your application was rejected.",
        next_step="See the rejection reason for details.",
    ),
}


def stage_for(status: ApplicationStatus) -> str:
    return STATUS_STAGE[ApplicationStatus(status)]


def build_status(app, user: UserContext) -> ApplicationStatusResponse:
    """Status summary for ``app`` as seen by ``user``."""
    status = ApplicationStatus(app.status)
    documents = list(app.documents or [])
    pending_docs = [
        d for d in documents if d.verification_status == DocumentVerificationStatus.PENDING
    ]

    pending_actions: list[PendingAction] = []
    if status in ApplicationStatus.correction_statuses() and app.clarification_requested:
        pending_actions.append(
            PendingAction(action_type="address_remarks", description=app.clarification_requested)
        )
    flagged = [
        d for d in documents
        if d.verification_status in (
            DocumentVerificationStatus.REJECTED,
            DocumentVerificationStatus.NEEDS_CORRECTION,
        )
    ]
    if status in ApplicationStatus.correction_statuses():
        for doc in flagged:
            note = f": {doc.verification_notes}" if doc.verification_notes else ""
            pending_actions.append(
                PendingAction(action_type="replace_document", description=f"Replace {doc.file_name}{note}")
            )
    if status in ApplicationStatus.scrutiny_statuses() and pending_docs:
        pending_actions.append(
            PendingAction(
                action_type="verify_documents",
                description=f"{len(pending_docs)} document(s) awaiting verification",
            )
        )

    return ApplicationStatusResponse(
        application_id=app.id,
        application_number=app.application_number,
        status=status.value,
        current_stage=stage_for(status),
        status_info=STATUS_INFO[status],
        correction_submission_count=app.correction_submission_count or 0,
        document_count=len(documents),
        pending_document_count=len(pending_docs),
        available_actions=[a.value for a in available_actions(status, user.role)],
        pending_actions=pending_actions,
    )
