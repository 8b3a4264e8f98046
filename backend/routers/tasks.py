# routers/tasks.py — Todo CRUD, search and statistics
from typing import Optional, Literal

from fastapi import APIRouter, Depends, Path, Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from auth import get_current_user, CurrentUser
from database import get_db_session
from services.task_service import TaskService

router = APIRouter(prefix="/api/todos", tags=["Todos"])


# ============================================================
# SCHEMAS
# ============================================================

MAX_TITLE_LENGTH = 255
MAX_DESC_LENGTH = 1000
MAX_SEARCH_LENGTH = 255


def _strip(v):
    return v.strip() if isinstance(v, str) else v


# Limits apply to the trimmed value. Emptiness after trimming is a business
# rule checked by TaskService.
class TaskCreate(BaseModel):
    title: str = Field(..., max_length=MAX_TITLE_LENGTH)
    desc: str = Field(..., max_length=MAX_DESC_LENGTH)
    done: Optional[bool] = None

    @field_validator("title", "desc", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH)
    desc: Optional[str] = Field(default=None, max_length=MAX_DESC_LENGTH)
    done: Optional[bool] = None

    @field_validator("title", "desc", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


def search_term(q: str = Query(..., description="Text to find in title or description")) -> str:
    """Trimmed search text, at most MAX_SEARCH_LENGTH characters"""
    term = q.strip()
    if len(term) > MAX_SEARCH_LENGTH:
        raise RequestValidationError([{
            "type": "string_too_long",
            "loc": ("query", "q"),
            "msg": f"String should have at most {MAX_SEARCH_LENGTH} characters",
            "input": q,
        }])
    return term


def get_task_service(db: AsyncSession = Depends(get_db_session)) -> TaskService:
    return TaskService(db)


# ============================================================
# COLLECTION ENDPOINTS
# ============================================================

@router.get("")
async def list_todos(
    status: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """List the caller's todos, optionally filtered by status"""
    # Anything other than completed or pending lists every todo
    return await service.get_user_tasks(user.id, status)


@router.post("", status_code=201)
async def create_todo(
    data: TaskCreate,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a todo owned by the caller"""
    return await service.create_task(data.model_dump(), user.id)


# Fixed paths are registered before /{todo_id}

@router.get("/search")
async def search_todos(
    q: str = Depends(search_term),
    status: Optional[Literal["all", "completed", "pending"]] = None,
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Search the caller's todos by title or description"""
    return await service.search_tasks(q, user.id, None if status == "all" else status)


@router.get("/stats")
async def todo_stats(
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Totals and completion rate for the caller's todos"""
    return await service.get_task_stats(user.id)


@router.get("/admin/all")
async def list_all_todos(
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """List every todo (intended for administrators; no role check exists)"""
    return await service.get_all_tasks()


# ============================================================
# ITEM ENDPOINTS
# ============================================================

@router.get("/{todo_id}")
async def get_todo(
    todo_id: int = Path(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.get_task_by_id(todo_id, user.id)


@router.put("/{todo_id}")
async def update_todo(
    data: TaskUpdate,
    todo_id: int = Path(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.update_task(todo_id, data.model_dump(exclude_unset=True), user.id)


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: int = Path(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.delete_task(todo_id, user.id)


@router.patch("/{todo_id}/toggle")
async def toggle_todo(
    todo_id: int = Path(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Flip a todo between completed and pending"""
    return await service.toggle_task_status(todo_id, user.id)
