# This project was developed with assistance from AI tools.
"""Reviewer and payment action payloads.

Every action accepts an optional ``expected_status``: the status the client
last saw. A mismatch is reported as a conflict so the client can refresh
instead of acting on stale state.
"""

from datetime import datetime
from decimal import Decimal

from homestay_db.enums import ApplicationStatus, InspectionOutcome
from pydantic import BaseModel, Field


class TransitionRequest(BaseModel):
    expected_status: ApplicationStatus | None = None
    remarks: str | None = Field(default=None, max_length=5000)


class SendBackRequest(BaseModel):
    expected_status: ApplicationStatus | None = None
    reason: str | None = Field(default=None, max_length=5000)


class RejectRequest(BaseModel):
    expected_status: ApplicationStatus | None = None
    reason: str | None = Field(default=None, max_length=5000)


class ScheduleInspectionRequest(BaseModel):
    expected_status: ApplicationStatus | None = None
    inspection_date: datetime
    inspecting_officer_id: str | None = Field(
        default=None,
        description="Defaults to the scheduling DTDO.",
    )
    notes: str | None = Field(default=None, max_length=5000)


class InspectionOutcomeRequest(BaseModel):
    expected_status: ApplicationStatus | None = None
    outcome: InspectionOutcome
    findings: str | None = Field(default=None, max_length=10000)
    completed_at: datetime | None = None


class PaymentConfirmation(BaseModel):
    """Callback body from the payment gateway."""

    expected_status: ApplicationStatus | None = None
    transaction_id: str = Field(min_length=1, max_length=100)
    amount: Decimal = Field(ge=0)
