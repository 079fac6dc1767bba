# This project was developed with assistance from AI tools.
"""Application action trail.

One append-only ``ApplicationAction`` row per transition. The row is written
after the status change has been committed, so a failure here is logged and
swallowed rather than reported as a failed transition.
"""

import logging

from homestay_db import ApplicationAction

from ..schemas.auth import UserContext

logger = logging.getLogger(__name__)


def _value(status) -> str | None:
    return getattr(status, "value", status)


async def record_action(
    storage,
    *,
    application_id: str,
    actor: UserContext,
    action: str,
    previous_status=None,
    new_status=None,
    feedback: str | None = None,
) -> ApplicationAction | None:
    """Append one action row; returns None if the write failed.

    Args:
        storage: Storage collaborator exposing ``append_action``.
        application_id: Application the transition applied to.
        actor: Caller who triggered the transition.
        action: Action name (e.g. 'forwarded_to_dtdo', 'correction_resubmitted').
        previous_status: Status before the transition.
        new_status: Status after the transition.
        feedback: Remarks or reason shown in the application timeline.
    """
    values = {
        "application_id": application_id,
        "actor_id": actor.user_id,
        "actor_role": actor.role.value,
        "action": action,
        "previous_status": _value(previous_status),
        "new_status": _value(new_status),
        "feedback": feedback,
    }
    try:
        return await storage.append_action(values)
    except Exception:
        logger.exception(
            "Failed to record action %s for application %s (%s -> %s)",
            action,
            application_id,
            values["previous_status"],
            values["new_status"],
        )
        return None
