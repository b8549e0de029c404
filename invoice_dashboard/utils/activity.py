"""Activity log entries for sign-ins and invoice changes."""

from __future__ import annotations

from typing import Optional

from flask_login import current_user

from invoice_dashboard.models import ActivityLog, db


def _acting_user_id(user_id: Optional[int]) -> Optional[int]:
    if user_id is None and current_user and not current_user.is_anonymous:
        return current_user.id
    return user_id


def add_activity(activity: str, user_id: Optional[int] = None) -> ActivityLog:
    """Stage an activity entry in the current session without committing.

    The entry is written by the caller's commit, so it only exists when the
    change it describes was committed too. Defaults to the signed-in user.
    """
    entry = ActivityLog(user_id=_acting_user_id(user_id), activity=activity)
    db.session.add(entry)
    return entry


def log_activity(activity: str, user_id: Optional[int] = None) -> None:
    """Record an activity performed by a user in its own transaction."""
    add_activity(activity, user_id)
    db.session.commit()
