# This project was developed with assistance from AI tools.
"""Business policy read from the ``system_settings`` table.

Nothing here is cached: every workflow operation asks again, so an admin
change applies to the very next request. A missing row yields the built-in
default; a malformed row is logged and also falls back to the default.
"""

import logging
from typing import Protocol

from homestay_db import SystemSetting
from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.settings import (
    CategoryRateBands,
    FeeSchedule,
    SettingsSnapshot,
    UploadPolicy,
    WorkflowFlags,
)
from .fees import validate_rate_bands

logger = logging.getLogger(__name__)

UPLOAD_POLICY_KEY = "upload_policy"
CATEGORY_RATE_BANDS_KEY = "category_rate_bands"
FEE_SCHEDULE_KEY = "fee_schedule"
DA_SEND_BACK_KEY = "da_send_back_enabled"
LEGACY_DTDO_FORWARD_KEY = "legacy_dtdo_forward_enabled"


class SettingsProvider(Protocol):
    """Read-only policy access used by the workflow."""

    async def upload_policy(self) -> UploadPolicy: ...

    async def category_rate_bands(self) -> CategoryRateBands: ...

    async def fee_schedule(self) -> FeeSchedule: ...

    async def da_send_back_enabled(self) -> bool: ...

    async def legacy_dtdo_forward_enabled(self) -> bool: ...


def _coerce_flag(value, default: bool) -> bool:
    """Accept ``true``, ``"true"``, ``1`` or ``{"enabled": true}``."""
    if isinstance(value, dict):
        value = value.get("enabled", default)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    return default


class DatabaseSettingsProvider:
    """SettingsProvider backed by ``system_settings`` rows."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _raw(self, key: str):
        result = await self._session.execute(
            select(SystemSetting.value).where(SystemSetting.key == key)
        )
        return result.scalar_one_or_none()

    async def _model(self, key: str, model: type[BaseModel]):
        raw = await self._raw(key)
        if raw is None:
            return model()
        try:
            return model.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring malformed %s setting; using defaults", key, exc_info=True)
            return model()

    async def upload_policy(self) -> UploadPolicy:
        return await self._model(UPLOAD_POLICY_KEY, UploadPolicy)

    async def category_rate_bands(self) -> CategoryRateBands:
        return await self._model(CATEGORY_RATE_BANDS_KEY, CategoryRateBands)

    async def fee_schedule(self) -> FeeSchedule:
        return await self._model(FEE_SCHEDULE_KEY, FeeSchedule)

    async def da_send_back_enabled(self) -> bool:
        default = WorkflowFlags().da_send_back_enabled
        return _coerce_flag(await self._raw(DA_SEND_BACK_KEY), default)

    async def legacy_dtdo_forward_enabled(self) -> bool:
        default = WorkflowFlags().legacy_dtdo_forward_enabled
        return _coerce_flag(await self._raw(LEGACY_DTDO_FORWARD_KEY), default)


async def get_snapshot(provider: SettingsProvider) -> SettingsSnapshot:
    return SettingsSnapshot(
        upload_policy=await provider.upload_policy(),
        category_rate_bands=await provider.category_rate_bands(),
        fee_schedule=await provider.fee_schedule(),
        flags=WorkflowFlags(
            da_send_back_enabled=await provider.da_send_back_enabled(),
            legacy_dtdo_forward_enabled=await provider.legacy_dtdo_forward_enabled(),
        ),
    )


# ---------------------------------------------------------------------------
# Admin writes
# ---------------------------------------------------------------------------


async def _stage(session: AsyncSession, key: str, value, user: UserContext) -> None:
    """Insert or update one row without committing."""
    row = await session.get(SystemSetting, key)
    if row is None:
        session.add(SystemSetting(key=key, value=value, updated_by=user.user_id))
    else:
        row.value = value
        row.updated_by = user.user_id


async def _upsert(session: AsyncSession, key: str, value, user: UserContext) -> None:
    await _stage(session, key, value, user)
    await session.commit()
    logger.info("Setting %s updated by %s", key, user.user_id)


async def update_rate_bands(session: AsyncSession, user: UserContext, bands: CategoryRateBands) -> CategoryRateBands:
    """Validate and store new category bands."""
    validate_rate_bands(bands)
    await _upsert(session, CATEGORY_RATE_BANDS_KEY, bands.model_dump(mode="json"), user)
    return bands


async def update_upload_policy(session: AsyncSession, user: UserContext, policy: UploadPolicy) -> UploadPolicy:
    await _upsert(session, UPLOAD_POLICY_KEY, policy.model_dump(mode="json"), user)
    return policy


async def update_fee_schedule(session: AsyncSession, user: UserContext, schedule: FeeSchedule) -> FeeSchedule:
    await _upsert(session, FEE_SCHEDULE_KEY, schedule.model_dump(mode="json"), user)
    return schedule


async def update_flags(session: AsyncSession, user: UserContext, flags: WorkflowFlags) -> WorkflowFlags:
    """Store both workflow flags in one commit."""
    await _stage(session, DA_SEND_BACK_KEY, {"enabled": flags.da_send_back_enabled}, user)
    await _stage(session, LEGACY_DTDO_FORWARD_KEY, {"enabled": flags.legacy_dtdo_forward_enabled}, user)
    await session.commit()
    logger.info(
        "Workflow flags updated by %s: da_send_back=%s legacy_dtdo_forward=%s",
        user.user_id,
        flags.da_send_back_enabled,
        flags.legacy_dtdo_forward_enabled,
    )
    return flags
