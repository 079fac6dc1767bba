# This project was developed with assistance from AI tools.
"""Correction cycle bookkeeping.

A reviewer sending an application back wipes the previous round's
reviewer-facing text and leaves only the new request. The owner's
resubmission bumps ``correction_submission_count`` by exactly one; the
revert itself never touches it. There is no cap on the number of cycles.
"""

from datetime import datetime

from homestay_db.enums import DocumentVerificationStatus

STALE_REVIEWER_FIELDS = (
    "clarification_requested",
    "da_remarks",
    "dtdo_remarks",
    "district_notes",
)

# Cleared when the owner resubmits; da_remarks stays as scrutiny history.
RESUBMISSION_CLEARED_FIELDS = (
    "clarification_requested",
    "dtdo_remarks",
    "district_notes",
)


def revert_changes(reason: str) -> dict:
    """Field writes for a send-back, DTDO revert or objection."""
    changes = {field: None for field in STALE_REVIEWER_FIELDS}
    changes["clarification_requested"] = reason
    return changes


def resubmission_changes(current_count: int | None, now: datetime) -> dict:
    """Field writes for the owner's resubmission."""
    changes = {field: None for field in RESUBMISSION_CLEARED_FIELDS}
    changes["correction_submission_count"] = (current_count or 0) + 1
    changes["submitted_at"] = now
    return changes


def reset_verifications(documents) -> list[dict]:
    """Document rows to re-create, all awaiting verification again."""
    return [
        {
            "document_type": doc.document_type,
            "file_name": doc.file_name,
            "file_path": doc.file_path,
            "file_size": doc.file_size,
            "mime_type": doc.mime_type,
            "verification_status": DocumentVerificationStatus.PENDING,
            "verification_notes": None,
        }
        for doc in documents
    ]


def cycle_feedback(cycle: int) -> str:
    return f"Applicant resubmitted after corrections (cycle {cycle})"
