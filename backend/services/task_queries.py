# services/task_queries.py — Persistence access for tasks
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, and_, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from models import Task


class TaskQuery:
    """Thin query layer over the tasks table. Every write commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_task(self, **fields: Any) -> Task:
        task = Task(**fields)
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def find_task_by_id(self, task_id: int) -> Optional[Task]:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def get_all_tasks(self) -> List[Task]:
        stmt = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_tasks_by_user_id(self, user_id: int) -> List[Task]:
        stmt = (
            select(Task)
            .where(Task.user_id == user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_completed_tasks(self, user_id: Optional[int] = None) -> List[Task]:
        stmt = select(Task).where(Task.done.is_(True))
        if user_id is not None:
            stmt = stmt.where(Task.user_id == user_id)
        stmt = stmt.order_by(Task.updated_at.desc(), Task.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_pending_tasks(self, user_id: Optional[int] = None) -> List[Task]:
        stmt = select(Task).where(Task.done.is_(False))
        if user_id is not None:
            stmt = stmt.where(Task.user_id == user_id)
        stmt = stmt.order_by(Task.created_at.desc(), Task.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_task(self, task_id: int, updates: Dict[str, Any]) -> Task:
        task = await self.find_task_by_id(task_id)
        for key, value in updates.items():
            setattr(task, key, value)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def delete_task(self, task_id: int) -> None:
        await self.db.execute(delete(Task).where(Task.id == task_id))
        await self.db.commit()

    async def mark_as_completed(self, task_id: int) -> Task:
        return await self.update_task(task_id, {"done": True})

    async def mark_as_pending(self, task_id: int) -> Task:
        return await self.update_task(task_id, {"done": False})

    async def count_tasks_by_status(self, user_id: Optional[int] = None) -> Dict[str, int]:
        """Count total/completed/pending, optionally scoped to one owner."""
        def _count(*conditions):
            stmt = select(func.count(Task.id))
            if user_id is not None:
                stmt = stmt.where(Task.user_id == user_id)
            for condition in conditions:
                stmt = stmt.where(condition)
            return stmt

        total = (await self.db.execute(_count())).scalar() or 0
        completed = (await self.db.execute(_count(Task.done.is_(True)))).scalar() or 0
        pending = (await self.db.execute(_count(Task.done.is_(False)))).scalar() or 0
        return {"total": total, "completed": completed, "pending": pending}

    async def search_tasks(self, search_term: str, user_id: Optional[int] = None) -> List[Task]:
        """Substring match on title or description. Case sensitivity follows the DB collation."""
        matches = or_(
            Task.title.contains(search_term, autoescape=True),
            Task.description.contains(search_term, autoescape=True),
        )
        if user_id is not None:
            matches = and_(matches, Task.user_id == user_id)
        stmt = select(Task).where(matches).order_by(Task.created_at.desc(), Task.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

