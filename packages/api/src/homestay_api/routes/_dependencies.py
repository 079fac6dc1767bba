# This project was developed with assistance from AI tools.
"""Shared route dependencies."""

from typing import Annotated

from fastapi import Depends
from homestay_db import get_db
from sqlalchemy.ext.asyncio import AsyncSession

from ..services.notifications import get_notifier
from ..services.settings import DatabaseSettingsProvider
from ..services.storage import SqlApplicationStorage
from ..services.workflow import ApplicationWorkflow


async def get_workflow(session: AsyncSession = Depends(get_db)) -> ApplicationWorkflow:
    """Workflow bound to the request's session."""
    return ApplicationWorkflow(
        SqlApplicationStorage(session),
        DatabaseSettingsProvider(session),
        get_notifier(),
    )


Workflow = Annotated[ApplicationWorkflow, Depends(get_workflow)]
