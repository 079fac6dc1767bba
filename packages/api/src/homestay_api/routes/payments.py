# This project was developed with assistance from AI tools.
"""Registration fee payment routes."""

from fastapi import APIRouter, Depends
from homestay_db.enums import UserRole

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.application import ApplicationResponse
from ..schemas.workflow import PaymentConfirmation, TransitionRequest
from ._dependencies import Workflow

router = APIRouter()


@router.post(
    "/{application_id}/initiate",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def initiate_payment(
    application_id: str, body: TransitionRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """Owner starts paying the registration fee."""
    app = await workflow.initiate_payment(user, application_id, body.expected_status)
    return ApplicationResponse.model_validate(app)


@router.post(
    "/{application_id}/confirm",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.PAYMENT_GATEWAY))],
)
async def confirm_payment(
    application_id: str, body: PaymentConfirmation, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """Gateway callback. Approves the application and issues the certificate."""
    app = await workflow.mark_paid(user, application_id, body)
    return ApplicationResponse.model_validate(app)
