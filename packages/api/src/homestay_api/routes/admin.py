# This project was developed with assistance from AI tools.
"""Admin endpoints for business policy settings."""

from fastapi import APIRouter, Depends
from homestay_db import get_db
from homestay_db.enums import UserRole
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.settings import (
    CategoryRateBands,
    FeeSchedule,
    SettingsSnapshot,
    UploadPolicy,
    WorkflowFlags,
)
from ..services import settings as settings_service

router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN))])


@router.get("/settings", response_model=SettingsSnapshot)
async def get_settings(session: AsyncSession = Depends(get_db)) -> SettingsSnapshot:
    """Current policy, with defaults filled in for anything never configured."""
    return await settings_service.get_snapshot(settings_service.DatabaseSettingsProvider(session))


@router.put("/settings/rate-bands", response_model=CategoryRateBands)
async def put_rate_bands(
    body: CategoryRateBands,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CategoryRateBands:
    """Replace the category tariff bands. Rejects overlaps and gaps."""
    return await settings_service.update_rate_bands(session, user, body)


@router.put("/settings/upload-policy", response_model=UploadPolicy)
async def put_upload_policy(
    body: UploadPolicy,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> UploadPolicy:
    return await settings_service.update_upload_policy(session, user, body)


@router.put("/settings/fee-schedule", response_model=FeeSchedule)
async def put_fee_schedule(
    body: FeeSchedule,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> FeeSchedule:
    return await settings_service.update_fee_schedule(session, user, body)


@router.put("/settings/flags", response_model=WorkflowFlags)
async def put_flags(
    body: WorkflowFlags,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> WorkflowFlags:
    """Toggle DA send-back and legacy DTDO escalation."""
    return await settings_service.update_flags(session, user, body)
