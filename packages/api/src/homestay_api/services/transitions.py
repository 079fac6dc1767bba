# This project was developed with assistance from AI tools.
"""The application transition table.

Every legal status change is one row keyed by ``(current status, action)``
and yields the target status, the roles allowed to trigger it, the action
name written to the audit trail and the notification to queue. Nothing
outside ``workflow.py`` writes ``status``, and ``workflow.py`` only writes
targets found here.
"""

import enum
from dataclasses import dataclass

from homestay_db.enums import ApplicationStatus, NotificationEvent, UserRole

from .errors import ActionNotPermittedError, StateConflictError


class Action(str, enum.Enum):
    SUBMIT = "submit"
    RESUBMIT = "resubmit"
    START_SCRUTINY = "start_scrutiny"
    FORWARD_TO_DTDO = "forward_to_dtdo"
    SEND_BACK = "send_back"
    ACCEPT_FOR_REVIEW = "accept_for_review"
    SCHEDULE_INSPECTION = "schedule_inspection"
    RECORD_INSPECTION_OUTCOME = "record_inspection_outcome"
    VERIFY_FOR_PAYMENT = "verify_for_payment"
    REVERT = "revert"
    RAISE_OBJECTION = "raise_objection"
    INITIATE_PAYMENT = "initiate_payment"
    MARK_PAID = "mark_paid"
    APPROVE = "approve"
    REJECT = "reject"
    VERIFY_LEGACY = "verify_legacy"


@dataclass(frozen=True)
class Transition:
    source: ApplicationStatus
    action: Action
    target: ApplicationStatus
    roles: frozenset[UserRole]
    audit_action: str
    notification: NotificationEvent | None = None


S = ApplicationStatus
OWNER = frozenset({UserRole.PROPERTY_OWNER})
DA = frozenset({UserRole.DEALING_ASSISTANT})
DTDO = frozenset({UserRole.DISTRICT_TOURISM_OFFICER})
REVIEWERS = DA | DTDO
GATEWAY = frozenset({UserRole.PAYMENT_GATEWAY})

_TABLE: dict[tuple[ApplicationStatus, Action], Transition] = {}
_ROLES_BY_ACTION: dict[Action, frozenset[UserRole]] = {}


def _edge(action, sources, target, roles, audit_action, notification=None) -> None:
    for source in sources:
        _TABLE[(source, action)] = Transition(source, action, target, roles, audit_action, notification)
    _ROLES_BY_ACTION[action] = _ROLES_BY_ACTION.get(action, frozenset()) | roles


_edge(Action.SUBMIT, [S.DRAFT], S.SUBMITTED, OWNER, "submitted", NotificationEvent.APPLICATION_SUBMITTED)
_edge(
    Action.RESUBMIT,
    sorted(S.correction_statuses()),
    S.SUBMITTED,
    OWNER,
    "correction_resubmitted",
    NotificationEvent.APPLICATION_SUBMITTED,
)
_edge(Action.START_SCRUTINY, [S.SUBMITTED], S.UNDER_SCRUTINY, DA, "start_scrutiny")
_edge(
    Action.FORWARD_TO_DTDO,
    [S.UNDER_SCRUTINY, S.LEGACY_RC_REVIEW],
    S.FORWARDED_TO_DTDO,
    DA,
    "forwarded_to_dtdo",
    NotificationEvent.FORWARDED_TO_DTDO,
)
_edge(Action.SEND_BACK, [S.UNDER_SCRUTINY], S.SENT_BACK_FOR_CORRECTIONS, DA, "reverted_by_da", NotificationEvent.DA_SEND_BACK)
_edge(Action.SEND_BACK, [S.LEGACY_RC_REVIEW], S.REVERTED_TO_APPLICANT, DA, "reverted_by_da", NotificationEvent.DA_SEND_BACK)
_edge(Action.ACCEPT_FOR_REVIEW, [S.FORWARDED_TO_DTDO], S.DTDO_REVIEW, DTDO, "dtdo_accept")
_edge(
    Action.SCHEDULE_INSPECTION,
    [S.DTDO_REVIEW],
    S.INSPECTION_SCHEDULED,
    DTDO,
    "site_inspection_scheduled",
    NotificationEvent.INSPECTION_SCHEDULED,
)
_edge(Action.RECORD_INSPECTION_OUTCOME, [S.INSPECTION_SCHEDULED], S.INSPECTION_UNDER_REVIEW, DTDO, "inspection_completed")
_edge(
    Action.VERIFY_FOR_PAYMENT,
    [S.INSPECTION_UNDER_REVIEW],
    S.VERIFIED_FOR_PAYMENT,
    DTDO,
    "verified_for_payment",
    NotificationEvent.VERIFIED_FOR_PAYMENT,
)
_edge(
    Action.REVERT,
    [S.DTDO_REVIEW, S.INSPECTION_UNDER_REVIEW],
    S.REVERTED_BY_DTDO,
    DTDO,
    "dtdo_revert",
    NotificationEvent.DTDO_REVERT,
)
_edge(
    Action.RAISE_OBJECTION,
    [S.INSPECTION_UNDER_REVIEW],
    S.OBJECTION_RAISED,
    DTDO,
    "objection_raised",
    NotificationEvent.DTDO_OBJECTION,
)
_edge(Action.INITIATE_PAYMENT, [S.VERIFIED_FOR_PAYMENT], S.PAYMENT_PENDING, OWNER, "payment_initiated")
_edge(Action.MARK_PAID, [S.PAYMENT_PENDING], S.APPROVED, GATEWAY, "payment_verified", NotificationEvent.APPLICATION_APPROVED)
_edge(
    Action.APPROVE,
    [S.PAYMENT_PENDING, S.VERIFIED_FOR_PAYMENT],
    S.APPROVED,
    DTDO,
    "approved",
    NotificationEvent.APPLICATION_APPROVED,
)
_edge(Action.REJECT, sorted(S.review_statuses()), S.REJECTED, REVIEWERS, "rejected", NotificationEvent.APPLICATION_REJECTED)
_edge(
    Action.VERIFY_LEGACY,
    [S.LEGACY_RC_REVIEW, S.SUBMITTED, S.UNDER_SCRUTINY],
    S.APPROVED,
    DA,
    "legacy_verified",
    NotificationEvent.APPLICATION_APPROVED,
)


def authorize(action: Action, role: UserRole) -> None:
    """Raise ActionNotPermittedError unless ``role`` may ever perform ``action``."""
    allowed = _ROLES_BY_ACTION[action]
    if role not in allowed:
        raise ActionNotPermittedError(
            f"Role '{role.value}' cannot {action.value.replace('_', ' ')}. "
            f"Allowed roles: {', '.join(sorted(r.value for r in allowed))}."
        )


def sources_for(action: Action) -> list[ApplicationStatus]:
    return [source for (source, a) in _TABLE if a == action]


def lookup(status: ApplicationStatus, action: Action) -> Transition:
    """Return the edge for ``action`` from ``status`` or raise StateConflictError."""
    status = ApplicationStatus(status)
    transition = _TABLE.get((status, action))
    if transition is None:
        allowed = ", ".join(s.value for s in sources_for(action))
        raise StateConflictError(
            f"Cannot {action.value.replace('_', ' ')} an application in status "
            f"'{status.value}'. Allowed from: {allowed}.",
            current_status=status.value,
        )
    return transition


def available_actions(status: ApplicationStatus, role: UserRole) -> list[Action]:
    """Actions ``role`` could attempt from ``status`` (preconditions aside)."""
    status = ApplicationStatus(status)
    return [
        action
        for (source, action), transition in _TABLE.items()
        if source == status and role in transition.roles
    ]
