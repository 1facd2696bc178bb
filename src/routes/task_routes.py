"""
CaseDesk Legal - Task Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import TokenIdentity, require_identity
from src.database import get_db
from src.errors import ValidationError, unclassified
from src.schemas import TaskFields
from src.stores.tasks import TaskStore


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("")
async def list_tasks(
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """The caller's tasks, soonest due first, then most urgent."""
    with unclassified("Failed to fetch tasks"):
        return await TaskStore(db).list_for_owner(identity.id)


@router.post("", status_code=201)
async def create_task(
    body: TaskFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    if not body.title or not body.title.strip():
        raise ValidationError("Title is required")

    payload = body.to_payload()
    payload["user_id"] = identity.id
    with unclassified("Failed to create task"):
        task_id = await TaskStore(db).add(payload)
    return {"id": task_id}


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    body: TaskFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = TaskStore(db)
    with unclassified("Failed to update task"):
        await store.get_owned(task_id, identity.id)
        await store.update(task_id, body.to_payload())
    return {"success": True}


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = TaskStore(db)
    with unclassified("Failed to delete task"):
        await store.get_owned(task_id, identity.id)
        await store.delete(task_id)
    return {"success": True}
