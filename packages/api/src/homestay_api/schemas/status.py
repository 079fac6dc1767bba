# This project was developed with assistance from AI tools.
"""Application status response schemas."""

from pydantic import BaseModel


class PendingAction(BaseModel):
    """A single action someone needs to take on the application."""

    action_type: str
    description: str


class StatusInfo(BaseModel):
    """Human-readable info about the current application status."""

    label: str
    description: str
    next_step: str


class ApplicationStatusResponse(BaseModel):
    """Aggregated status summary for an application."""

    application_id: str
    application_number: str | None = None
    status: str
    current_stage: str
    status_info: StatusInfo
    correction_submission_count: int
    document_count: int
    pending_document_count: int
    available_actions: list[str]
    pending_actions: list[PendingAction]
