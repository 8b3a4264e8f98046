# services/task_service.py — Ownership-scoped task operations
#
# Every operation receives the id of the authenticated caller. A task whose
# user_id is set belongs to that user alone; tasks with no owner predate
# ownership and stay reachable by any authenticated caller.

import math
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models import Task
from services.errors import NotFound, AccessDenied, InvalidInput
from services.projections import (
    project_task, TASK_FULL, TASK_LISTED, TASK_UPDATED, TASK_TOGGLED, TASK_DELETED,
)
from services.task_queries import TaskQuery

logger = logging.getLogger("todo-api.tasks")

STATUS_COMPLETED = "completed"
STATUS_PENDING = "pending"
STATUS_ALL = "all"


def can_access(owner_id: Optional[int], caller_id: int) -> bool:
    """Allow unless the task has an owner and it is someone else."""
    return owner_id is None or owner_id == caller_id


def completion_rate(completed: int, total: int) -> int:
    """Percentage of completed tasks, rounded half up; 0 for no tasks."""
    if total <= 0:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))


class TaskService:
    def __init__(self, db: AsyncSession, queries: Optional[TaskQuery] = None):
        self.queries = queries or TaskQuery(db)

    async def _get_accessible(self, task_id: int, user_id: int, denial: str) -> Task:
        task = await self.queries.find_task_by_id(task_id)
        if not task:
            raise NotFound("Todo not found")
        if not can_access(task.user_id, user_id):
            logger.warning(f"User {user_id} denied access to todo {task_id}")
            raise AccessDenied(f"Access denied: {denial}")
        return task

    async def create_task(self, payload: Dict[str, Any], user_id: int) -> Dict[str, Any]:
        title = (payload.get("title") or "").strip()
        desc = (payload.get("desc") or "").strip()
        if not title:
            raise InvalidInput("Todo title cannot be empty")
        if not desc:
            raise InvalidInput("Todo description cannot be empty")

        task = await self.queries.create_task(
            title=title,
            description=desc,
            done=bool(payload.get("done") or False),
            user_id=user_id,
        )
        logger.info(f"User {user_id} created todo {task.id}")
        return {
            "message": "Todo created successfully",
            "todo": project_task(task, TASK_FULL),
        }

    async def get_task_by_id(self, task_id: int, user_id: int) -> Dict[str, Any]:
        task = await self._get_accessible(task_id, user_id, "This todo belongs to another user")
        return {"todo": project_task(task, TASK_FULL)}

    async def get_user_tasks(self, user_id: int, status: Optional[str] = None) -> Dict[str, Any]:
        if status == STATUS_COMPLETED:
            tasks = await self.queries.get_completed_tasks(user_id)
        elif status == STATUS_PENDING:
            tasks = await self.queries.get_pending_tasks(user_id)
        else:
            tasks = await self.queries.get_tasks_by_user_id(user_id)

        stats = await self.queries.count_tasks_by_status(user_id)
        return {
            "todos": [project_task(t, TASK_LISTED) for t in tasks],
            "stats": stats,
        }

    async def get_all_tasks(self) -> Dict[str, Any]:
        """Unscoped listing across all owners.

        Meant for administrators, but no role exists to check, so any
        authenticated caller reaches it.
        """
        logger.warning("Unscoped todo listing requested")
        tasks = await self.queries.get_all_tasks()
        stats = await self.queries.count_tasks_by_status()
        return {
            "todos": [project_task(t, TASK_FULL) for t in tasks],
            "stats": stats,
        }

    async def update_task(self, task_id: int, payload: Dict[str, Any], user_id: int) -> Dict[str, Any]:
        await self._get_accessible(task_id, user_id, "You can only update your own todos")

        updates: Dict[str, Any] = {}
        if payload.get("title") is not None:
            title = payload["title"].strip()
            if not title:
                raise InvalidInput("Todo title cannot be empty")
            updates["title"] = title
        if payload.get("desc") is not None:
            desc = payload["desc"].strip()
            if not desc:
                raise InvalidInput("Todo description cannot be empty")
            updates["description"] = desc
        if payload.get("done") is not None:
            updates["done"] = bool(payload["done"])

        task = await self.queries.update_task(task_id, updates)
        return {
            "message": "Todo updated successfully",
            "todo": project_task(task, TASK_UPDATED),
        }

    async def delete_task(self, task_id: int, user_id: int) -> Dict[str, Any]:
        task = await self._get_accessible(task_id, user_id, "You can only delete your own todos")
        snapshot = project_task(task, TASK_DELETED)

        await self.queries.delete_task(task_id)
        logger.info(f"User {user_id} deleted todo {task_id}")
        return {
            "message": "Todo deleted successfully",
            "deleted_todo": snapshot,
        }

    async def toggle_task_status(self, task_id: int, user_id: int) -> Dict[str, Any]:
        task = await self._get_accessible(task_id, user_id, "You can only modify your own todos")

        # Read-modify-write; concurrent toggles resolve last-write-wins
        if task.done:
            task = await self.queries.mark_as_pending(task_id)
        else:
            task = await self.queries.mark_as_completed(task_id)

        state = STATUS_COMPLETED if task.done else STATUS_PENDING
        logger.info(f"User {user_id} marked todo {task_id} as {state}")
        return {
            "message": f"Todo marked as {state}",
            "todo": project_task(task, TASK_TOGGLED),
        }

    async def search_tasks(
        self, search_term: str, user_id: int, status: Optional[str] = None,
    ) -> Dict[str, Any]:
        term = (search_term or "").strip()
        if not term:
            raise InvalidInput("Search term cannot be empty")

        tasks = await self.queries.search_tasks(term, user_id)

        if status == STATUS_COMPLETED:
            tasks = [t for t in tasks if t.done]
        elif status == STATUS_PENDING:
            tasks = [t for t in tasks if not t.done]

        return {
            "search_term": term,
            "status": status or STATUS_ALL,
            "todos": [project_task(t, TASK_LISTED) for t in tasks],
            "count": len(tasks),
        }

    async def get_task_stats(self, user_id: int) -> Dict[str, Any]:
        stats = await self.queries.count_tasks_by_status(user_id)
        return {
            "stats": {
                **stats,
                "completion_rate": completion_rate(stats["completed"], stats["total"]),
            }
        }
