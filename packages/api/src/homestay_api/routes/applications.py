# This project was developed with assistance from AI tools.
"""Owner-facing application routes: drafts, submission, corrections, service requests."""

from fastapi import APIRouter, Body, Depends, Query, status
from homestay_db.enums import ApplicationStatus, UserRole

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationActionListResponse,
    ApplicationActionResponse,
    ApplicationListResponse,
    ApplicationResponse,
    DraftPayload,
    LegacyOnboardingRequest,
    ServiceRequestCreate,
)
from ..schemas.fees import FeePreviewRequest, FeePreviewResponse
from ..schemas.status import ApplicationStatusResponse
from ._dependencies import Workflow

router = APIRouter()

_ALL_ROLES = (
    UserRole.ADMIN,
    UserRole.PROPERTY_OWNER,
    UserRole.DEALING_ASSISTANT,
    UserRole.DISTRICT_TOURISM_OFFICER,
)


@router.get(
    "/",
    response_model=ApplicationListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_applications(
    user: CurrentUser,
    workflow: Workflow,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: list[ApplicationStatus] | None = Query(default=None),
) -> ApplicationListResponse:
    """List applications visible to the current user's role and data scope."""
    applications, total = await workflow.list_applications(
        user, statuses=filter_status, offset=offset, limit=limit,
    )
    return ApplicationListResponse(
        data=[ApplicationResponse.model_validate(app) for app in applications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def create_draft(body: DraftPayload, user: CurrentUser, workflow: Workflow) -> ApplicationResponse:
    """Create the owner's draft, or update the one they already have."""
    app = await workflow.submit_draft(user, body)
    return ApplicationResponse.model_validate(app)


@router.post(
    "/fee-preview",
    response_model=FeePreviewResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def fee_preview(body: FeePreviewRequest, workflow: Workflow) -> FeePreviewResponse:
    """Fee breakdown and category check for unsaved form values."""
    return await workflow.preview_fee(body)


@router.post(
    "/legacy",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def onboard_legacy(
    body: LegacyOnboardingRequest, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """File an existing registration certificate for DA verification."""
    app = await workflow.onboard_legacy(user, body)
    return ApplicationResponse.model_validate(app)


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_application(application_id: str, user: CurrentUser, workflow: Workflow) -> ApplicationResponse:
    """Get a single application. Returns 404 for out-of-scope resources."""
    app = await workflow.get_application(user, application_id)
    return ApplicationResponse.model_validate(app)


@router.patch(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def update_draft(
    application_id: str, body: DraftPayload, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    app = await workflow.update_draft(user, application_id, body)
    return ApplicationResponse.model_validate(app)


@router.post(
    "/{application_id}/submit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def submit_application(
    application_id: str,
    user: CurrentUser,
    workflow: Workflow,
    body: DraftPayload | None = Body(default=None),
    expected_status: ApplicationStatus | None = Query(default=None),
) -> ApplicationResponse:
    """Submit a draft. Optional body carries last-minute edits."""
    app = await workflow.submit_final(user, application_id, body, expected_status)
    return ApplicationResponse.model_validate(app)


@router.post(
    "/{application_id}/resubmit",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def resubmit_application(
    application_id: str,
    user: CurrentUser,
    workflow: Workflow,
    body: DraftPayload | None = Body(default=None),
    expected_status: ApplicationStatus | None = Query(default=None),
) -> ApplicationResponse:
    """Resubmit after the application was sent back, reverted or objected to."""
    app = await workflow.apply_correction(user, application_id, body, expected_status)
    return ApplicationResponse.model_validate(app)


@router.get(
    "/{application_id}/status",
    response_model=ApplicationStatusResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def get_status(application_id: str, user: CurrentUser, workflow: Workflow) -> ApplicationStatusResponse:
    """Status summary with the actions open to the caller."""
    return await workflow.status(user, application_id)


@router.get(
    "/{application_id}/actions",
    response_model=ApplicationActionListResponse,
    dependencies=[Depends(require_roles(*_ALL_ROLES))],
)
async def list_actions(
    application_id: str, user: CurrentUser, workflow: Workflow,
) -> ApplicationActionListResponse:
    """Timeline of transitions for an application, oldest first."""
    actions = await workflow.list_actions(user, application_id)
    return ApplicationActionListResponse(
        data=[ApplicationActionResponse.model_validate(a) for a in actions],
    )


@router.post(
    "/{application_id}/service-requests",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.PROPERTY_OWNER))],
)
async def create_service_request(
    application_id: str, body: ServiceRequestCreate, user: CurrentUser, workflow: Workflow,
) -> ApplicationResponse:
    """Open a renewal, room change or cancellation against an approved registration."""
    app = await workflow.create_service_request(user, application_id, body)
    return ApplicationResponse.model_validate(app)
