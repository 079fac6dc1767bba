# This project was developed with assistance from AI tools.
"""Persistence capabilities consumed by the workflow.

The workflow only talks to ``ApplicationStorage``; it never builds queries.
``SqlApplicationStorage`` implements it on an ``AsyncSession``. Status
changes go through ``update_application`` with ``expected_status``, a
single ``UPDATE ... WHERE id = :id AND status = :expected`` that doubles as
the per-application optimistic lock.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

from homestay_db import ApplicationAction, Document, HomestayApplication, User
from homestay_db.enums import ApplicationKind, ApplicationStatus
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import DataScope

logger = logging.getLogger(__name__)


class ApplicationStorage(Protocol):
    async def get_application(self, application_id: str) -> HomestayApplication | None: ...

    async def list_applications(
        self,
        scope: DataScope,
        *,
        statuses: Iterable[ApplicationStatus] | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[HomestayApplication], int]: ...

    async def list_applications_by_owner(self, owner_id: str) -> list[HomestayApplication]: ...

    async def find_active_service_request(self, parent_application_id: str) -> HomestayApplication | None: ...

    async def create_application(
        self, values: dict, documents: list[dict] | None = None,
    ) -> HomestayApplication: ...

    async def update_application(
        self,
        application_id: str,
        changes: dict,
        *,
        expected_status: ApplicationStatus | None = None,
        documents: list[dict] | None = None,
    ) -> HomestayApplication | None: ...

    async def get_documents(self, application_id: str) -> list[Document]: ...

    async def update_documents(
        self,
        application_id: str,
        updates: list[dict],
        *,
        allowed_statuses: Iterable[ApplicationStatus],
        application_changes: dict | None = None,
    ) -> list[Document] | None: ...

    async def append_action(self, values: dict) -> ApplicationAction: ...

    async def list_actions(self, application_id: str) -> list[ApplicationAction]: ...

    async def get_user(self, user_id: str) -> User | None: ...

    async def next_application_sequence(self) -> int: ...

    async def application_number_exists(self, number: str) -> bool: ...

    async def next_certificate_sequence(self) -> int: ...

    async def certificate_number_exists(self, number: str) -> bool: ...


class SqlApplicationStorage:
    """ApplicationStorage on one request-scoped AsyncSession."""

    def __init__(self, session: AsyncSession):
        self._session = session

    # -- Applications --

    async def get_application(self, application_id: str) -> HomestayApplication | None:
        stmt = (
            select(HomestayApplication)
            .options(selectinload(HomestayApplication.documents))
            .where(HomestayApplication.id == application_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def list_applications(
        self,
        scope: DataScope,
        *,
        statuses: Iterable[ApplicationStatus] | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[HomestayApplication], int]:
        filters = []
        if scope.own_data_only:
            filters.append(HomestayApplication.owner_id == scope.user_id)
        elif scope.district:
            filters.append(func.lower(HomestayApplication.district) == scope.district.strip().lower())
        elif not scope.full_pipeline:
            return [], 0
        if statuses is not None:
            filters.append(HomestayApplication.status.in_(list(statuses)))

        count_stmt = select(func.count(HomestayApplication.id)).where(*filters)
        total = (await self._session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(HomestayApplication)
            .options(selectinload(HomestayApplication.documents))
            .where(*filters)
            .order_by(HomestayApplication.updated_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.unique().scalars().all()), total

    async def list_applications_by_owner(self, owner_id: str) -> list[HomestayApplication]:
        stmt = (
            select(HomestayApplication)
            .options(selectinload(HomestayApplication.documents))
            .where(HomestayApplication.owner_id == owner_id)
            .order_by(HomestayApplication.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.unique().scalars().all())

    async def find_active_service_request(self, parent_application_id: str) -> HomestayApplication | None:
        stmt = (
            select(HomestayApplication)
            .where(
                HomestayApplication.parent_application_id == parent_application_id,
                HomestayApplication.application_kind.in_(list(ApplicationKind.service_kinds())),
                HomestayApplication.status.not_in(list(ApplicationStatus.terminal_statuses())),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def create_application(
        self, values: dict, documents: list[dict] | None = None,
    ) -> HomestayApplication:
        app = HomestayApplication(**values)
        app.documents = [Document(**doc) for doc in documents or []]
        self._session.add(app)
        await self._session.commit()
        return await self.get_application(app.id)

    async def update_application(
        self,
        application_id: str,
        changes: dict,
        *,
        expected_status: ApplicationStatus | None = None,
        documents: list[dict] | None = None,
    ) -> HomestayApplication | None:
        """Apply ``changes`` in one statement; None when the status guard missed."""
        stmt = update(HomestayApplication).where(HomestayApplication.id == application_id)
        if expected_status is not None:
            stmt = stmt.where(HomestayApplication.status == expected_status)
        stmt = stmt.values(**changes, updated_at=func.now())

        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            await self._session.rollback()
            logger.info(
                "Conditional update missed for application %s (expected %s)",
                application_id,
                expected_status,
            )
            return None

        if documents is not None:
            await self._session.execute(
                delete(Document).where(Document.application_id == application_id)
            )
            self._session.add_all(
                Document(application_id=application_id, **doc) for doc in documents
            )

        await self._session.commit()
        return await self.get_application(application_id)

    # -- Documents --

    async def get_documents(self, application_id: str) -> list[Document]:
        stmt = (
            select(Document)
            .where(Document.application_id == application_id)
            .order_by(Document.created_at)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_documents(
        self,
        application_id: str,
        updates: list[dict],
        *,
        allowed_statuses: Iterable[ApplicationStatus],
        application_changes: dict | None = None,
    ) -> list[Document] | None:
        """Write verification verdicts while the application is still in scrutiny."""
        guard = (
            update(HomestayApplication)
            .where(
                HomestayApplication.id == application_id,
                HomestayApplication.status.in_(list(allowed_statuses)),
            )
            .values(**(application_changes or {}), updated_at=func.now())
        )
        result = await self._session.execute(guard)
        if result.rowcount == 0:
            await self._session.rollback()
            return None

        for item in updates:
            values = {k: v for k, v in item.items() if k != "id"}
            await self._session.execute(
                update(Document)
                .where(Document.id == item["id"], Document.application_id == application_id)
                .values(**values)
            )
        await self._session.commit()
        return await self.get_documents(application_id)

    # -- Actions --

    async def append_action(self, values: dict) -> ApplicationAction:
        action = ApplicationAction(**values)
        self._session.add(action)
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return action

    async def list_actions(self, application_id: str) -> list[ApplicationAction]:
        stmt = (
            select(ApplicationAction)
            .where(ApplicationAction.application_id == application_id)
            .order_by(ApplicationAction.created_at, ApplicationAction.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # -- Users --

    async def get_user(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    # -- Numbering --

    async def next_application_sequence(self) -> int:
        stmt = select(func.count(HomestayApplication.id)).where(
            HomestayApplication.application_number.is_not(None)
        )
        return ((await self._session.execute(stmt)).scalar() or 0) + 1

    async def application_number_exists(self, number: str) -> bool:
        stmt = select(HomestayApplication.id).where(HomestayApplication.application_number == number)
        return (await self._session.execute(stmt)).first() is not None

    async def next_certificate_sequence(self) -> int:
        stmt = select(func.count(HomestayApplication.id)).where(
            HomestayApplication.certificate_number.is_not(None)
        )
        return ((await self._session.execute(stmt)).scalar() or 0) + 1

    async def certificate_number_exists(self, number: str) -> bool:
        stmt = select(HomestayApplication.id).where(HomestayApplication.certificate_number == number)
        return (await self._session.execute(stmt)).first() is not None
