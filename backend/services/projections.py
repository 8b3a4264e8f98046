# services/projections.py — Allow-list projections of ORM rows into response dicts
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from models import Task, User

# Field sets per response shape. Anything not listed is never emitted.
TASK_FULL = ("id", "title", "desc", "done", "user_id", "created_at", "updated_at")
TASK_LISTED = ("id", "title", "desc", "done", "created_at", "updated_at")
TASK_UPDATED = ("id", "title", "desc", "done", "user_id", "updated_at")
TASK_TOGGLED = ("id", "title", "desc", "done", "updated_at")
TASK_DELETED = ("id", "title", "desc", "done")

USER_FULL = ("id", "name", "email", "created_at", "updated_at")
USER_BRIEF = ("id", "name", "email")
USER_UPDATED = ("id", "name", "email", "updated_at")


def _ts(dt) -> Optional[str]:
    if dt is None:
        return None
    return dt.isoformat() if isinstance(dt, datetime) else str(dt)


_TASK_GETTERS = {
    "id": lambda t: t.id,
    "title": lambda t: t.title,
    "desc": lambda t: t.description,
    "done": lambda t: bool(t.done),
    "user_id": lambda t: t.user_id,
    "created_at": lambda t: _ts(t.created_at),
    "updated_at": lambda t: _ts(t.updated_at),
}

_USER_GETTERS = {
    "id": lambda u: u.id,
    "name": lambda u: u.name,
    "email": lambda u: u.email,
    "created_at": lambda u: _ts(u.created_at),
    "updated_at": lambda u: _ts(u.updated_at),
}


def project_task(task: Task, fields: Sequence[str] = TASK_FULL) -> Dict[str, Any]:
    return {name: _TASK_GETTERS[name](task) for name in fields}


def project_user(user: User, fields: Sequence[str] = USER_FULL) -> Dict[str, Any]:
    return {name: _USER_GETTERS[name](user) for name in fields}
