# This project was developed with assistance from AI tools.
"""Dealing Assistant and District Tourism Development Officer review routes."""

from fastapi import APIRouter, Depends
from homestay_db.enums import UserRole

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.application import ApplicationResponse
from ..schemas.document import ScrutinyUpdateRequest
from ..schemas.workflow import (
    InspectionOutcomeRequest,
    RejectRequest,
    ScheduleInspectionRequest,
    SendBackRequest,
    TransitionRequest,
)
from ._dependencies import Workflow

router = APIRouter()

_da_only = [Depends(require_roles(UserRole.DEALING_ASSISTANT))]
_dtdo_only = [Depends(require_roles(UserRole.DISTRICT_TOURISM_OFFICER))]
_reviewers = [Depends(require_roles(UserRole.DEALING_ASSISTANT, UserRole.DISTRICT_TOURISM_OFFICER))]


# ---------------------------------------------------------------------------
# Dealing Assistant
# ---------------------------------------------------------------------------


@router.post("/{application_id}/start-scrutiny", response_model=ApplicationResponse, dependencies=_da_only)
async def start_scrutiny(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.start_scrutiny(user, application_id, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.put("/{application_id}/documents", response_model=ApplicationResponse, dependencies=_da_only)
async def save_scrutiny(
    application_id: str, body: ScrutinyUpdateRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """Record document verdicts and scrutiny remarks."""
    app = await workflow.save_scrutiny(user, application_id, body)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/forward", response_model=ApplicationResponse, dependencies=_da_only)
async def forward_to_dtdo(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """Forward to the district officer once every document has a verdict."""
    app = await workflow.forward_to_dtdo(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/send-back", response_model=ApplicationResponse, dependencies=_da_only)
async def send_back(
    application_id: str, body: SendBackRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.send_back(user, application_id, body.reason, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/verify-legacy", response_model=ApplicationResponse, dependencies=_da_only)
async def verify_legacy(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """Approve an existing-certificate onboarding case."""
    app = await workflow.verify_legacy(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


# ---------------------------------------------------------------------------
# District Tourism Development Officer
# ---------------------------------------------------------------------------


@router.post("/{application_id}/accept", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def accept_for_review(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.accept_for_review(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/schedule-inspection", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def schedule_inspection(
    application_id: str, body: ScheduleInspectionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.schedule_inspection(user, application_id, body)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/inspection-outcome", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def record_inspection_outcome(
    application_id: str, body: InspectionOutcomeRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.record_inspection_outcome(user, application_id, body)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/verify-for-payment", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def verify_for_payment(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.verify_for_payment(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/revert", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def revert(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.revert(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/objection", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def raise_objection(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.raise_objection(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/approve", response_model=ApplicationResponse, dependencies=_dtdo_only)
async def approve(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.approve(user, application_id, body.remarks, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post("/{application_id}/reject", response_model=ApplicationResponse, dependencies=_reviewers)
async def reject(
    application_id: str, body: RejectRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.reject(user, application_id, body.reason, body.expected_status)
    return ApplicationResponse.model_validate(app)
