# This project was developed with assistance from AI tools.
"""Application workflow.

Every operation that changes ``status`` runs the same sequence:

1. authorize the caller's role for the action;
2. compare the stored status with the client's ``expected_status`` and
   look the edge up in the transition table (state conflict on a miss);
3. check the edge's preconditions;
4. write status and side-effect fields in one conditional update;
5. append one action row (failures logged only);
6. queue a notification (fire-and-forget).

Steps 1-3 raise before anything is written.
"""

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from homestay_db import HomestayApplication
from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    DocumentType,
    DocumentVerificationStatus,
    InspectionOutcome,
    NotificationEvent,
    UserRole,
)
from pydantic import TypeAdapter, ValidationError

from ..schemas.application import (
    DraftPayload,
    LegacyOnboardingRequest,
    ServiceRequestCreate,
    SubmissionPayload,
)
from ..schemas.auth import UserContext
from ..schemas.document import ScrutinyUpdateRequest
from ..schemas.fees import FeeBreakdown, FeePreviewRequest, FeePreviewResponse
from ..schemas.status import ApplicationStatusResponse
from ..schemas.workflow import InspectionOutcomeRequest, PaymentConfirmation, ScheduleInspectionRequest
from . import corrections
from .audit import record_action
from .documents import check_required_documents, check_upload_policy, require_complete
from .errors import (
    ActionNotPermittedError,
    ApplicationNotFoundError,
    ApplicationValidationError,
    StateConflictError,
)
from .fees import (
    RoomConfiguration,
    calculate_fee,
    fee_fields,
    fee_for_application,
    format_rupees,
    suggest_category,
    validate_category,
    validate_room_configuration,
    waived_fee,
)
from .notifications import NotificationQueue, build_context
from .numbering import allocate_application_number, allocate_certificate_number
from .routing import is_special_subdivision, resolve_district
from .settings import SettingsProvider
from .status import build_status, stage_for
from .storage import ApplicationStorage
from .transitions import Action, Transition, authorize, lookup

logger = logging.getLogger(__name__)

RENEWAL_WINDOW_DAYS = 90

_COLUMNS = tuple(c.key for c in HomestayApplication.__table__.columns)
_submission_adapter = TypeAdapter(SubmissionPayload)

_FIELD_LABELS = {
    "property_name": "Property name",
    "category": "Category",
    "location_type": "Location type",
    "certificate_validity_years": "Certificate validity",
    "district": "District",
    "tehsil": "Tehsil",
    "address": "Address",
    "pincode": "Pincode",
    "owner_name": "Owner name",
    "owner_gender": "Owner gender",
    "owner_mobile": "Owner mobile number",
    "owner_aadhaar": "Owner Aadhaar number",
    "parent_application_id": "Parent application",
    "parent_certificate_number": "Parent certificate number",
    "note": "Reason",
}


def _now() -> datetime:
    return datetime.now(UTC)


def _add_years(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return moment.replace(year=moment.year + years, day=28)


def _required_text(value: str | None, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ApplicationValidationError(message)
    return text


def _label(app) -> str:
    return app.application_number or app.id


def is_legacy_onboarding(app) -> bool:
    if ApplicationStatus(app.status) == ApplicationStatus.LEGACY_RC_REVIEW:
        return True
    return bool((app.service_context or {}).get("legacy_onboarding"))


def _require_legacy_certificate(documents) -> None:
    for doc in documents:
        value = doc.get("document_type") if isinstance(doc, dict) else doc.document_type
        if DocumentType(value) == DocumentType.LEGACY_CERTIFICATE:
            return
    raise ApplicationValidationError("Upload a copy of your existing registration certificate.")


def _document_rows(documents) -> list[dict]:
    return [
        {**doc.model_dump(), "verification_status": DocumentVerificationStatus.PENDING}
        for doc in documents
    ]


class ApplicationWorkflow:
    """Owner, reviewer and payment operations over one storage session."""

    def __init__(
        self,
        storage: ApplicationStorage,
        settings: SettingsProvider,
        notifier: NotificationQueue,
    ):
        self._storage = storage
        self._settings = settings
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Shared machinery
    # ------------------------------------------------------------------

    @staticmethod
    def _visible(app, user: UserContext) -> bool:
        scope = user.data_scope
        if user.role == UserRole.PROPERTY_OWNER or scope.own_data_only:
            return app.owner_id == user.user_id
        if scope.full_pipeline:
            return True
        if scope.district:
            return (app.district or "").strip().lower() == scope.district.strip().lower()
        return False

    async def _load(self, application_id: str, user: UserContext) -> HomestayApplication:
        app = await self._storage.get_application(application_id)
        if app is None or not self._visible(app, user):
            raise ApplicationNotFoundError(f"Application {application_id} not found")
        return app

    @staticmethod
    def _check(app, user: UserContext, action: Action, expected_status) -> Transition:
        authorize(action, user.role)
        current = ApplicationStatus(app.status)
        if expected_status is not None and ApplicationStatus(expected_status) != current:
            raise StateConflictError(
                f"Application {_label(app)} is now '{current.value}', not "
                f"'{ApplicationStatus(expected_status).value}'. Refresh and try again.",
                current_status=current.value,
            )
        transition = lookup(current, action)
        if user.role not in transition.roles:
            raise ActionNotPermittedError(
                f"Role '{user.role.value}' cannot {action.value.replace('_', ' ')} "
                f"from status '{current.value}'."
            )
        return transition

    def _notify(self, transition: Transition, app, remarks: str | None) -> None:
        if transition.notification is None:
            return
        try:
            self._notifier.queue_notification(transition.notification, build_context(app, remarks))
        except Exception:
            logger.exception(
                "Failed to queue %s notification for application %s",
                transition.notification.value,
                app.id,
            )

    async def _apply(
        self,
        app,
        user: UserContext,
        transition: Transition,
        changes: dict,
        *,
        feedback: str | None = None,
        documents: list[dict] | None = None,
    ) -> HomestayApplication:
        """Steps 4-6: conditional write, action row, notification."""
        values = {
            **changes,
            "status": transition.target,
            "current_stage": stage_for(transition.target),
        }
        updated = await self._storage.update_application(
            app.id, values, expected_status=transition.source, documents=documents,
        )
        if updated is None:
            latest = await self._storage.get_application(app.id)
            now_status = ApplicationStatus(latest.status).value if latest is not None else "unknown"
            raise StateConflictError(
                f"Application {_label(app)} changed while this request was in flight "
                f"(now '{now_status}'). Refresh and try again.",
                current_status=now_status,
            )

        logger.info(
            "Application %s: %s -> %s by %s (%s)",
            updated.id,
            transition.source.value,
            transition.target.value,
            user.user_id,
            transition.action.value,
        )
        await record_action(
            self._storage,
            application_id=updated.id,
            actor=user,
            action=transition.audit_action,
            previous_status=transition.source,
            new_status=transition.target,
            feedback=feedback,
        )
        self._notify(transition, updated, feedback)
        return updated

    # ------------------------------------------------------------------
    # Owner edits
    # ------------------------------------------------------------------

    @staticmethod
    def _require_owner(user: UserContext) -> None:
        if user.role != UserRole.PROPERTY_OWNER:
            raise ActionNotPermittedError("Only property owners can create or edit applications.")

    async def _edit_changes(self, app, payload: DraftPayload | None) -> tuple[dict, list[dict] | None]:
        """Column changes and replacement documents for an owner edit.

        Room totals are re-derived from the merged configuration on every
        edit, whether or not rooms were part of the payload.
        """
        changes: dict = {}
        documents = None
        if payload is not None:
            changes = payload.model_dump(
                exclude_unset=True,
                exclude={"rooms", "documents", "legacy_certificate_number",
                         "legacy_certificate_issued_date", "legacy_certificate_expiry_date"},
            )
            if payload.rooms is not None:
                changes.update(payload.rooms.model_dump())
            if payload.documents is not None:
                check_upload_policy(await self._settings.upload_policy(), payload.documents)
                documents = _document_rows(payload.documents)
        if changes.get("category") is not None:
            changes["selected_category"] = changes["category"]

        current = {} if app is None else {c: getattr(app, c) for c in _COLUMNS}
        rooms = RoomConfiguration.from_source({**current, **changes})
        changes.update(rooms.derived_fields())
        return changes, documents

    async def _prefill_owner(self, user: UserContext, changes: dict) -> None:
        """Fill owner contact fields the form left blank from the portal profile."""
        profile = await self._storage.get_user(user.user_id)
        if profile is None:
            return
        for column, value in (
            ("owner_name", profile.full_name),
            ("owner_mobile", profile.mobile),
            ("owner_email", profile.email),
        ):
            if value and not changes.get(column):
                changes[column] = value

    async def _blocking_application(self, user: UserContext, exclude_id: str | None, kind: ApplicationKind):
        """The owner's in-flight application that forbids another, if any."""
        for other in await self._storage.list_applications_by_owner(user.user_id):
            if other.id == exclude_id:
                continue
            status = ApplicationStatus(other.status)
            if status in (ApplicationStatus.DRAFT, ApplicationStatus.REJECTED):
                continue
            if kind in ApplicationKind.service_kinds() and status == ApplicationStatus.APPROVED:
                # the registration a service request amends
                continue
            return other
        return None

    @staticmethod
    def _conflict_with(existing) -> StateConflictError:
        status = ApplicationStatus(existing.status).value
        return StateConflictError(
            f"You already have an application ({_label(existing)}, id {existing.id}) in "
            f"status \"{status}\". Only one application can be in progress at a time.",
            current_status=status,
        )

    async def submit_draft(self, user: UserContext, payload: DraftPayload) -> HomestayApplication:
        """Create the owner's draft, or update it if one already exists."""
        self._require_owner(user)
        existing_draft = None
        for other in await self._storage.list_applications_by_owner(user.user_id):
            status = ApplicationStatus(other.status)
            if status == ApplicationStatus.DRAFT and other.application_kind == ApplicationKind.NEW_REGISTRATION:
                existing_draft = existing_draft or other
            elif status != ApplicationStatus.REJECTED:
                raise self._conflict_with(other)

        if existing_draft is not None:
            return await self.update_draft(user, existing_draft.id, payload)

        changes, documents = await self._edit_changes(None, payload)
        await self._prefill_owner(user, changes)
        values = {
            **changes,
            "owner_id": user.user_id,
            "application_kind": ApplicationKind.NEW_REGISTRATION,
            "status": ApplicationStatus.DRAFT,
            "current_stage": stage_for(ApplicationStatus.DRAFT),
            "correction_submission_count": 0,
        }
        app = await self._storage.create_application(values, documents=documents)
        logger.info("Draft %s created for owner %s", app.id, user.user_id)
        return app

    async def update_draft(self, user: UserContext, application_id: str, payload: DraftPayload) -> HomestayApplication:
        """Save owner edits to a draft. No submission rules apply yet."""
        self._require_owner(user)
        app = await self._load(application_id, user)
        if ApplicationStatus(app.status) != ApplicationStatus.DRAFT:
            raise StateConflictError(
                f"Application {_label(app)} is '{ApplicationStatus(app.status).value}'; "
                "only drafts can be edited directly.",
                current_status=ApplicationStatus(app.status).value,
            )
        changes, documents = await self._edit_changes(app, payload)
        updated = await self._storage.update_application(
            app.id, changes, expected_status=ApplicationStatus.DRAFT, documents=documents,
        )
        if updated is None:
            raise StateConflictError(
                f"Application {_label(app)} was submitted while this edit was in flight.",
            )
        return updated

    # ------------------------------------------------------------------
    # Submission and resubmission
    # ------------------------------------------------------------------

    async def _validate_submission(self, candidate, documents) -> FeeBreakdown:
        """Full rule set, identical at first submission and every resubmission."""
        fields = {name: getattr(candidate, name, None) for name in _COLUMNS}
        fields["note"] = (candidate.service_context or {}).get("note")
        try:
            _submission_adapter.validate_python(fields)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = str(error["loc"][-1]) if error["loc"] else "application"
            label = _FIELD_LABELS.get(field, field.replace("_", " ").capitalize())
            if error["type"] == "missing" or fields.get(field) in (None, ""):
                raise ApplicationValidationError(f"{label} is required.") from exc
            raise ApplicationValidationError(f"{label} is invalid: {error['msg']}.") from exc

        kind = ApplicationKind(candidate.application_kind)
        if kind != ApplicationKind.CANCEL_CERTIFICATE:
            rooms = RoomConfiguration.from_source(candidate)
            validate_room_configuration(rooms)
            validate_category(candidate.category, rooms.highest_room_rate, await self._settings.category_rate_bands())

        if is_legacy_onboarding(candidate):
            _require_legacy_certificate(documents)
        else:
            check_required_documents(kind, documents)
        check_upload_policy(await self._settings.upload_policy(), documents)

        if kind in ApplicationKind.fee_exempt_kinds() or is_legacy_onboarding(candidate):
            return waived_fee()
        return fee_for_application(candidate, await self._settings.fee_schedule())

    async def _prepare_submission(self, app, payload: DraftPayload | None, *, reroute: bool):
        """Merge edits, validate everything and compute the persisted fields."""
        changes, new_documents = await self._edit_changes(app, payload)
        candidate = SimpleNamespace(**{c: getattr(app, c) for c in _COLUMNS})
        for key, value in changes.items():
            setattr(candidate, key, value)

        if reroute:
            candidate.district = resolve_district(candidate.district or "", candidate.tehsil)
            changes["district"] = candidate.district
            candidate.is_special_subdivision = is_special_subdivision(candidate.district)
            changes["is_special_subdivision"] = candidate.is_special_subdivision

        documents = new_documents if new_documents is not None else list(app.documents or [])
        fee = await self._validate_submission(candidate, documents)

        kind = ApplicationKind(candidate.application_kind)
        if kind in (ApplicationKind.ADD_ROOMS, ApplicationKind.DELETE_ROOMS):
            parent = await self._storage.get_application(candidate.parent_application_id)
            if parent is None:
                raise ApplicationNotFoundError(
                    f"Parent application {candidate.parent_application_id} not found"
                )
            changes["service_context"] = _room_change_context(
                kind, parent, RoomConfiguration.from_source(candidate), candidate.service_context or {},
            )
        changes.update(fee_fields(fee))
        changes["selected_category"] = candidate.category
        return changes, new_documents, candidate

    async def submit_final(
        self,
        user: UserContext,
        application_id: str,
        payload: DraftPayload | None = None,
        expected_status=None,
    ) -> HomestayApplication:
        """Move a complete draft to ``submitted``."""
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.SUBMIT, expected_status)

        blocking = await self._blocking_application(user, app.id, ApplicationKind(app.application_kind))
        if blocking is not None:
            raise self._conflict_with(blocking)

        reroute = ApplicationKind(app.application_kind) == ApplicationKind.NEW_REGISTRATION
        changes, documents, candidate = await self._prepare_submission(app, payload, reroute=reroute)

        if not app.application_number:
            changes["application_number"] = await allocate_application_number(
                self._storage, candidate.district,
            )
        changes["submitted_at"] = _now()
        return await self._apply(
            app, user, transition, changes,
            feedback="Application submitted",
            documents=documents,
        )

    async def apply_correction(
        self,
        user: UserContext,
        application_id: str,
        payload: DraftPayload | None = None,
        expected_status=None,
    ) -> HomestayApplication:
        """Resubmit after a send-back, revert or objection."""
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.RESUBMIT, expected_status)

        address_changed = payload is not None and bool(
            {"district", "tehsil"} & payload.model_fields_set
        )
        changes, documents, _ = await self._prepare_submission(app, payload, reroute=address_changed)
        if documents is None:
            documents = corrections.reset_verifications(app.documents or [])

        cycle_changes = corrections.resubmission_changes(app.correction_submission_count, _now())
        changes.update(cycle_changes)
        return await self._apply(
            app, user, transition, changes,
            feedback=corrections.cycle_feedback(cycle_changes["correction_submission_count"]),
            documents=documents,
        )

    # ------------------------------------------------------------------
    # Dealing Assistant
    # ------------------------------------------------------------------

    async def start_scrutiny(self, user: UserContext, application_id: str, expected_status=None) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.START_SCRUTINY, expected_status)
        return await self._apply(
            app, user, transition,
            {"da_id": user.user_id, "da_review_date": _now()},
            feedback="Scrutiny started",
        )

    async def save_scrutiny(self, user: UserContext, application_id: str, request: ScrutinyUpdateRequest) -> HomestayApplication:
        """Record document verdicts. Only possible while the application is in scrutiny."""
        if user.role != UserRole.DEALING_ASSISTANT:
            raise ActionNotPermittedError("Only a Dealing Assistant can verify documents.")
        app = await self._load(application_id, user)
        status = ApplicationStatus(app.status)
        if request.expected_status is not None and request.expected_status != status.value:
            raise StateConflictError(
                f"Application {_label(app)} is now '{status.value}'. Refresh and try again.",
                current_status=status.value,
            )
        if status not in ApplicationStatus.scrutiny_statuses():
            raise StateConflictError(
                "Document updates are locked once the application leaves scrutiny "
                f"(current status '{status.value}').",
                current_status=status.value,
            )

        known = {doc.id for doc in app.documents or []}
        now = _now()
        updates = []
        for item in request.verifications:
            if item.document_id not in known:
                raise ApplicationValidationError(
                    f"Document {item.document_id} does not belong to application {_label(app)}."
                )
            updates.append({
                "id": item.document_id,
                "verification_status": item.verification_status,
                "verification_notes": item.notes,
                "verified_by": user.user_id,
                "verification_date": now,
            })

        application_changes = {"da_id": user.user_id}
        if request.remarks is not None:
            application_changes["da_remarks"] = request.remarks.strip() or None

        saved = await self._storage.update_documents(
            app.id,
            updates,
            allowed_statuses=ApplicationStatus.scrutiny_statuses(),
            application_changes=application_changes,
        )
        if saved is None:
            raise StateConflictError(
                "Document updates are locked once the application leaves scrutiny.",
            )
        logger.info("Scrutiny saved for application %s: %d verdict(s)", app.id, len(updates))
        return await self._load(app.id, user)

    async def forward_to_dtdo(
        self, user: UserContext, application_id: str, remarks: str | None, expected_status=None,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.FORWARD_TO_DTDO, expected_status)

        remarks = _required_text(remarks, "Scrutiny remarks are required before forwarding.")
        if is_legacy_onboarding(app) and not await self._settings.legacy_dtdo_forward_enabled():
            raise ActionNotPermittedError(
                "Legacy RC onboarding cases must be completed by the DA. "
                "DTDO escalation is currently disabled."
            )
        require_complete(await self._storage.get_documents(app.id))

        now = _now()
        return await self._apply(
            app, user, transition,
            {
                "da_id": user.user_id,
                "da_remarks": remarks,
                "da_review_date": app.da_review_date or now,
                "da_forwarded_date": now,
            },
            feedback=remarks,
        )

    async def send_back(
        self, user: UserContext, application_id: str, reason: str | None, expected_status=None,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.SEND_BACK, expected_status)

        if not await self._settings.da_send_back_enabled():
            raise ActionNotPermittedError(
                "Sending applications back to the applicant is currently disabled."
            )
        reason = _required_text(reason, "A reason is required to send the application back.")
        changes = corrections.revert_changes(reason)
        changes.update({"da_id": user.user_id, "da_review_date": _now()})
        return await self._apply(app, user, transition, changes, feedback=reason)

    async def verify_legacy(
        self, user: UserContext, application_id: str, remarks: str | None = None, expected_status=None,
    ) -> HomestayApplication:
        """Close an existing-certificate onboarding case without DTDO review."""
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.VERIFY_LEGACY, expected_status)
        if not is_legacy_onboarding(app):
            raise ApplicationValidationError(
                "Only existing-certificate onboarding cases can be verified directly by the DA."
            )
        require_complete(await self._storage.get_documents(app.id))

        context = app.service_context or {}
        now = _now()
        changes = {
            "da_id": user.user_id,
            "da_review_date": now,
            "da_remarks": (remarks or "").strip() or None,
            "approved_at": now,
            "certificate_number": context.get("legacy_certificate_number")
            or await allocate_certificate_number(self._storage),
            "certificate_issued_date": _parse_datetime(context.get("legacy_certificate_issued_date")) or now,
            "certificate_expiry_date": _parse_datetime(context.get("legacy_certificate_expiry_date"))
            or _add_years(now, app.certificate_validity_years or 1),
        }
        return await self._apply(
            app, user, transition, changes,
            feedback=changes["da_remarks"] or "Existing registration certificate verified",
        )

    # ------------------------------------------------------------------
    # District Tourism Development Officer
    # ------------------------------------------------------------------

    async def accept_for_review(
        self, user: UserContext, application_id: str, remarks: str | None = None, expected_status=None,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.ACCEPT_FOR_REVIEW, expected_status)
        remarks = (remarks or "").strip() or None
        return await self._apply(
            app, user, transition,
            {"dtdo_id": user.user_id, "dtdo_review_date": _now(), "dtdo_remarks": remarks},
            feedback=remarks or "Accepted for district review",
        )

    async def schedule_inspection(
        self, user: UserContext, application_id: str, request: ScheduleInspectionRequest,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.SCHEDULE_INSPECTION, request.expected_status)

        when = request.inspection_date
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        if when.date() < _now().date():
            raise ApplicationValidationError("Inspection date cannot be in the past.")

        officer = (request.inspecting_officer_id or "").strip() or user.user_id
        feedback = f"Site inspection scheduled for {when:%d %b %Y}"
        if request.notes and request.notes.strip():
            feedback = f"{feedback}. {request.notes.strip()}"
        return await self._apply(
            app, user, transition,
            {
                "dtdo_id": user.user_id,
                "site_inspection_scheduled_date": when,
                "site_inspection_officer_id": officer,
            },
            feedback=feedback,
        )

    async def record_inspection_outcome(
        self, user: UserContext, application_id: str, request: InspectionOutcomeRequest,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.RECORD_INSPECTION_OUTCOME, request.expected_status)

        findings = (request.findings or "").strip() or None
        if request.outcome != InspectionOutcome.SATISFACTORY and findings is None:
            raise ApplicationValidationError("Describe the issues found during the inspection.")
        return await self._apply(
            app, user, transition,
            {
                "site_inspection_outcome": request.outcome,
                "site_inspection_notes": findings,
                "site_inspection_completed_date": request.completed_at or _now(),
            },
            feedback=findings or f"Inspection outcome: {request.outcome.value}",
        )

    async def verify_for_payment(
        self, user: UserContext, application_id: str, remarks: str | None = None, expected_status=None,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.VERIFY_FOR_PAYMENT, expected_status)
        remarks = (remarks or "").strip() or None
        return await self._apply(
            app, user, transition,
            {"dtdo_id": user.user_id, "dtdo_review_date": _now(), "district_notes": remarks},
            feedback=remarks or "Verified for payment",
        )

    async def revert(
        self, user: UserContext, application_id: str, remarks: str | None, expected_status=None,
    ) -> HomestayApplication:
        """Return the application to the owner for corrections."""
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.REVERT, expected_status)
        remarks = _required_text(remarks, "Remarks are required to revert the application.")
        changes = corrections.revert_changes(remarks)
        changes.update({"dtdo_id": user.user_id, "dtdo_review_date": _now()})
        return await self._apply(app, user, transition, changes, feedback=remarks)

    async def raise_objection(
        self, user: UserContext, application_id: str, remarks: str | None, expected_status=None,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.RAISE_OBJECTION, expected_status)
        remarks = _required_text(remarks, "Describe the objections raised after inspection.")
        changes = corrections.revert_changes(remarks)
        changes.update({"dtdo_id": user.user_id, "dtdo_review_date": _now()})
        return await self._apply(app, user, transition, changes, feedback=remarks)

    # ------------------------------------------------------------------
    # Payment and closure
    # ------------------------------------------------------------------

    async def _certificate_changes(self, app, now: datetime) -> dict:
        """Certificate fields stamped at approval."""
        kind = ApplicationKind(app.application_kind)
        changes = {"approved_at": now}
        if kind == ApplicationKind.CANCEL_CERTIFICATE:
            return changes
        if kind in ApplicationKind.service_kinds() and app.parent_certificate_number:
            changes["certificate_number"] = app.parent_certificate_number
            parent = await self._storage.get_application(app.parent_application_id)
            parent_expiry = parent.certificate_expiry_date if parent is not None else None
            if kind == ApplicationKind.RENEWAL:
                start = max(now, parent_expiry) if parent_expiry else now
                changes["certificate_issued_date"] = now
                changes["certificate_expiry_date"] = _add_years(start, app.certificate_validity_years or 1)
            else:
                changes["certificate_issued_date"] = parent.certificate_issued_date if parent else now
                changes["certificate_expiry_date"] = parent_expiry
            return changes
        changes["certificate_number"] = app.certificate_number or await allocate_certificate_number(self._storage)
        changes["certificate_issued_date"] = now
        changes["certificate_expiry_date"] = _add_years(now, app.certificate_validity_years or 1)
        return changes

    async def initiate_payment(self, user: UserContext, application_id: str, expected_status=None) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.INITIATE_PAYMENT, expected_status)
        if not app.total_fee or Decimal(app.total_fee) <= 0:
            raise ApplicationValidationError(
                "No fee is due for this request; the district officer will approve it directly."
            )
        return await self._apply(
            app, user, transition, {},
            feedback=f"Payment of {format_rupees(app.total_fee)} initiated",
        )

    async def mark_paid(
        self, user: UserContext, application_id: str, confirmation: PaymentConfirmation,
    ) -> HomestayApplication:
        """Payment gateway callback: confirm the fee and issue the certificate."""
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.MARK_PAID, confirmation.expected_status)
        due = Decimal(app.total_fee or 0)
        if Decimal(confirmation.amount) != due:
            raise ApplicationValidationError(
                f"Paid amount {format_rupees(confirmation.amount)} does not match the "
                f"fee of {format_rupees(due)}."
            )
        changes = await self._certificate_changes(app, _now())
        return await self._apply(
            app, user, transition, changes,
            feedback=f"Payment confirmed (transaction {confirmation.transaction_id})",
        )

    async def approve(
        self, user: UserContext, application_id: str, remarks: str | None = None, expected_status=None,
    ) -> HomestayApplication:
        """DTDO approval: after offline payment, or directly when no fee is due."""
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.APPROVE, expected_status)
        fee_due = Decimal(app.total_fee or 0) > 0
        if transition.source == ApplicationStatus.VERIFIED_FOR_PAYMENT and fee_due:
            raise StateConflictError(
                f"A fee of {format_rupees(app.total_fee)} is due; the application can be "
                "approved once payment is under way.",
                current_status=transition.source.value,
            )
        remarks = (remarks or "").strip() or None
        changes = await self._certificate_changes(app, _now())
        changes.update({"dtdo_id": user.user_id, "dtdo_review_date": _now()})
        if remarks:
            changes["district_notes"] = remarks
        return await self._apply(app, user, transition, changes, feedback=remarks or "Approved")

    async def reject(
        self, user: UserContext, application_id: str, reason: str | None, expected_status=None,
    ) -> HomestayApplication:
        app = await self._load(application_id, user)
        transition = self._check(app, user, Action.REJECT, expected_status)
        reason = _required_text(reason, "A rejection reason is required.")
        changes = {"rejection_reason": reason}
        reviewer = "da" if user.role == UserRole.DEALING_ASSISTANT else "dtdo"
        changes[f"{reviewer}_id"] = user.user_id
        changes[f"{reviewer}_review_date"] = _now()
        return await self._apply(app, user, transition, changes, feedback=reason)

    # ------------------------------------------------------------------
    # Service requests and legacy onboarding
    # ------------------------------------------------------------------

    async def create_service_request(
        self, user: UserContext, parent_id: str, request: ServiceRequestCreate,
    ) -> HomestayApplication:
        """Open a renewal, room change or cancellation draft against an approved registration."""
        self._require_owner(user)
        parent = await self._load(parent_id, user)
        parent_status = ApplicationStatus(parent.status)
        if parent_status != ApplicationStatus.APPROVED:
            raise StateConflictError(
                f"Service requests need an approved registration; application "
                f"{_label(parent)} is '{parent_status.value}'.",
                current_status=parent_status.value,
            )
        active = await self._storage.find_active_service_request(parent.id)
        if active is not None:
            raise StateConflictError(
                f"Service request {_label(active)} ({ApplicationKind(active.application_kind).value}) "
                f"is already in progress for this registration (status "
                f"\"{ApplicationStatus(active.status).value}\").",
                current_status=ApplicationStatus(active.status).value,
            )

        kind = ApplicationKind(request.application_kind)
        values = {c: getattr(parent, c) for c in _SERVICE_COPY_FIELDS}
        context: dict = {
            "requires_payment": kind not in ApplicationKind.fee_exempt_kinds(),
            "note": (request.note or "").strip() or None,
            "legacy_onboarding": False,
        }
        delta = request.room_delta

        if kind == ApplicationKind.RENEWAL:
            expiry = parent.certificate_expiry_date
            if expiry is None:
                raise ApplicationValidationError("This registration has no certificate expiry date to renew.")
            if expiry.tzinfo is None:
                expiry = expiry.replace(tzinfo=UTC)
            opens = expiry - timedelta(days=RENEWAL_WINDOW_DAYS)
            if _now() < opens:
                raise ApplicationValidationError(
                    f"Renewal opens {RENEWAL_WINDOW_DAYS} days before your certificate expires "
                    f"on {expiry:%d %b %Y} (from {opens:%d %b %Y})."
                )
            context["renewal_window"] = {"opens_at": opens.isoformat(), "expires_at": expiry.isoformat()}
            if request.certificate_validity_years is not None:
                values["certificate_validity_years"] = request.certificate_validity_years

        elif kind in (ApplicationKind.ADD_ROOMS, ApplicationKind.DELETE_ROOMS):
            if delta is None or delta.total < 1:
                verb = "add" if kind == ApplicationKind.ADD_ROOMS else "remove"
                raise ApplicationValidationError(f"Specify at least one room to {verb}.")
            sign = 1 if kind == ApplicationKind.ADD_ROOMS else -1
            for field, label in (
                ("single_bed_rooms", "single bed rooms"),
                ("double_bed_rooms", "double bed rooms"),
                ("family_suites", "family suites"),
            ):
                requested = getattr(delta, field)
                if sign < 0 and requested > (parent_count := getattr(parent, field) or 0):
                    raise ApplicationValidationError(
                        f"Cannot remove {requested} {label}; only {parent_count} registered."
                    )
                values[field] = (getattr(parent, field) or 0) + sign * requested
            if sign < 0 and sum(values[f] for f in ("single_bed_rooms", "double_bed_rooms", "family_suites")) < 1:
                raise ApplicationValidationError(
                    "Removing every room cancels the registration; request a certificate cancellation instead."
                )
            if request.rates is not None:
                rates = request.rates.model_dump(exclude_unset=True)
                for field in ("single_bed_room_rate", "double_bed_room_rate", "family_suite_rate", "attached_washrooms"):
                    if rates.get(field) is not None:
                        values[field] = rates[field]
            context["requested_room_delta"] = delta.model_dump()

        elif kind == ApplicationKind.CANCEL_CERTIFICATE:
            if not context["note"]:
                raise ApplicationValidationError("Give a reason for cancelling the certificate.")

        rooms = RoomConfiguration.from_source(values)
        values.update(rooms.derived_fields())
        context["requested_rooms"] = {
            "single": values["single_bed_rooms"],
            "double": values["double_bed_rooms"],
            "family": values["family_suites"],
            "total": values["total_rooms"],
        }
        values.update({
            "owner_id": user.user_id,
            "application_kind": kind,
            "status": ApplicationStatus.DRAFT,
            "current_stage": stage_for(ApplicationStatus.DRAFT),
            "correction_submission_count": 0,
            "parent_application_id": parent.id,
            "parent_application_number": parent.application_number,
            "parent_certificate_number": parent.certificate_number,
            "service_context": context,
        })
        app = await self._storage.create_application(values)
        logger.info("Service request %s (%s) opened against %s", app.id, kind.value, parent.id)
        return app

    async def onboard_legacy(self, user: UserContext, request: LegacyOnboardingRequest) -> HomestayApplication:
        """File an existing certificate holder straight into DA review."""
        self._require_owner(user)
        blocking = await self._blocking_application(user, None, ApplicationKind.NEW_REGISTRATION)
        if blocking is not None:
            raise self._conflict_with(blocking)

        changes, documents = await self._edit_changes(None, request)
        documents = documents or []
        district = _required_text(changes.get("district"), "District is required.")
        resolved = resolve_district(district, changes.get("tehsil"))
        values = {
            **changes,
            "district": resolved,
            "is_special_subdivision": is_special_subdivision(resolved),
            "owner_id": user.user_id,
            "application_kind": ApplicationKind.NEW_REGISTRATION,
            "status": ApplicationStatus.LEGACY_RC_REVIEW,
            "current_stage": stage_for(ApplicationStatus.LEGACY_RC_REVIEW),
            "correction_submission_count": 0,
            "service_context": {
                "legacy_onboarding": True,
                "requires_payment": False,
                "legacy_certificate_number": request.legacy_certificate_number.strip(),
                "legacy_certificate_issued_date": _iso(request.legacy_certificate_issued_date),
                "legacy_certificate_expiry_date": _iso(request.legacy_certificate_expiry_date),
            },
        }

        # same rules as a regular submission; the fee comes back waived
        candidate = SimpleNamespace(**{c: None for c in _COLUMNS})
        candidate.certificate_validity_years = 1
        for key, value in values.items():
            setattr(candidate, key, value)
        fee = await self._validate_submission(candidate, documents)

        values.update(fee_fields(fee))
        values["selected_category"] = candidate.category
        values["certificate_validity_years"] = candidate.certificate_validity_years
        values["application_number"] = await allocate_application_number(self._storage, resolved)
        values["submitted_at"] = _now()
        app = await self._storage.create_application(values, documents=documents)
        logger.info("Legacy onboarding %s filed by %s", app.id, user.user_id)
        await record_action(
            self._storage,
            application_id=app.id,
            actor=user,
            action="legacy_onboarding_submitted",
            previous_status=None,
            new_status=ApplicationStatus.LEGACY_RC_REVIEW,
            feedback=f"Existing certificate {request.legacy_certificate_number.strip()} submitted for verification",
        )
        try:
            self._notifier.queue_notification(NotificationEvent.APPLICATION_SUBMITTED, build_context(app))
        except Exception:
            logger.exception("Failed to queue submission notification for application %s", app.id)
        return app

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_application(self, user: UserContext, application_id: str) -> HomestayApplication:
        return await self._load(application_id, user)

    async def list_applications(
        self, user: UserContext, *, statuses=None, offset: int = 0, limit: int = 20,
    ) -> tuple[list[HomestayApplication], int]:
        return await self._storage.list_applications(
            user.data_scope,
            statuses=statuses,
            offset=offset,
            limit=limit,
        )

    async def list_actions(self, user: UserContext, application_id: str):
        app = await self._load(application_id, user)
        return await self._storage.list_actions(app.id)

    async def status(self, user: UserContext, application_id: str) -> ApplicationStatusResponse:
        return build_status(await self._load(application_id, user), user)

    async def preview_fee(self, request: FeePreviewRequest) -> FeePreviewResponse:
        """Fee and category check for a form that has not been saved yet."""
        fee = calculate_fee(
            category=request.category,
            location_type=request.location_type,
            validity_years=request.certificate_validity_years,
            owner_gender=request.owner_gender,
            is_special_subdivision=request.is_special_subdivision,
            schedule=await self._settings.fee_schedule(),
        )
        if request.rooms is None:
            return FeePreviewResponse(fee=fee)

        bands = await self._settings.category_rate_bands()
        rate = RoomConfiguration.from_source(request.rooms.model_dump()).highest_room_rate
        category_error = None
        try:
            validate_category(request.category, rate, bands)
        except ApplicationValidationError as exc:
            category_error = str(exc)
        return FeePreviewResponse(
            fee=fee,
            highest_room_rate=rate,
            suggested_category=suggest_category(rate, bands) if rate is not None else None,
            category_error=category_error,
        )


_SERVICE_COPY_FIELDS = (
    "property_name",
    "category",
    "selected_category",
    "location_type",
    "certificate_validity_years",
    "is_special_subdivision",
    "district",
    "district_other",
    "tehsil",
    "tehsil_other",
    "block",
    "block_other",
    "gram_panchayat",
    "gram_panchayat_other",
    "urban_body",
    "urban_body_other",
    "ward",
    "address",
    "pincode",
    "owner_name",
    "owner_gender",
    "owner_mobile",
    "owner_email",
    "owner_aadhaar",
    "single_bed_rooms",
    "single_bed_beds",
    "single_bed_room_rate",
    "double_bed_rooms",
    "double_bed_beds",
    "double_bed_room_rate",
    "family_suites",
    "family_suite_beds",
    "family_suite_rate",
    "attached_washrooms",
)


_ROOM_COUNT_FIELDS = (
    ("single_bed_rooms", "single bed rooms"),
    ("double_bed_rooms", "double bed rooms"),
    ("family_suites", "family suites"),
)


def _room_change_context(kind: ApplicationKind, parent, rooms: RoomConfiguration, context: dict) -> dict:
    """Check edited room counts against the registration they amend.

    Additions may only grow each room type and removals may only shrink it.
    Returns ``context`` with the delta and totals recomputed from ``rooms``.
    """
    adding = kind == ApplicationKind.ADD_ROOMS
    delta = {}
    for field, label in _ROOM_COUNT_FIELDS:
        registered = getattr(parent, field) or 0
        requested = getattr(rooms, field)
        if adding and requested < registered:
            raise ApplicationValidationError(
                f"A room addition cannot reduce {label} ({registered} registered, {requested} requested)."
            )
        if not adding and requested > registered:
            raise ApplicationValidationError(
                f"A room removal cannot increase {label} ({registered} registered, {requested} requested)."
            )
        delta[field] = abs(requested - registered)
    if sum(delta.values()) < 1:
        verb = "add" if adding else "remove"
        raise ApplicationValidationError(f"Specify at least one room to {verb}.")
    return {
        **context,
        "requested_room_delta": delta,
        "requested_rooms": {
            "single": rooms.single_bed_rooms,
            "double": rooms.double_bed_rooms,
            "family": rooms.family_suites,
            "total": rooms.total_rooms,
        },
    }


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None


def _parse_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
