# app/routers/task.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.task import TaskStatus, TaskPriority
from app.schemas import TaskCreate, TaskUpdate, TaskOut, TaskPermissions
from app.services.task_store import TaskStore
from app.utils.auth import get_current_principal
from app.utils.authorization import AuthorizationEngine
from app.utils.hierarchy import HierarchyManager
from app.utils.principal import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_authorization_engine(db: Session = Depends(get_db)) -> AuthorizationEngine:
    return AuthorizationEngine(HierarchyManager(db))


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    return TaskStore(db)


def _storage_failure(store: TaskStore, action: str, error: SQLAlchemyError):
    store.db.rollback()
    logger.error("Database error while trying to %s: %s", action, error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Server error while trying to {action}",
    )


@router.get("", response_model=List[TaskOut])
def get_tasks(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
    store: TaskStore = Depends(get_task_store),
):
    """Get tasks visible to the caller

    - admin: every task
    - manager: tasks assigned to self or to direct reports
    - user: tasks assigned to self
    """
    scope = engine.visibility_scope(principal)
    try:
        return store.list_where(scope, status=status, priority=priority, skip=skip, limit=limit)
    except SQLAlchemyError as e:
        raise _storage_failure(store, "fetch tasks", e)


@router.get("/access-scope", response_model=dict)
def get_access_scope(
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
):
    """Describe which tasks the caller can see"""
    return engine.access_scope_info(principal)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
    store: TaskStore = Depends(get_task_store),
):
    return engine.authorize_get(principal, store.fetch_by_id(task_id))


@router.get("/{task_id}/permissions", response_model=TaskPermissions)
def get_task_permissions(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
    store: TaskStore = Depends(get_task_store),
):
    """Check which actions the caller may take on a task"""
    task = engine.authorize_get(principal, store.fetch_by_id(task_id))
    return {
        "task_id": task.id,
        "can_view": True,
        "can_update": engine.can_update(principal, task),
        "can_delete": engine.can_delete(principal, task),
    }


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
    store: TaskStore = Depends(get_task_store),
):
    draft = task.model_dump()
    if draft.get("assignee_id") is None:
        draft["assignee_id"] = principal.id

    values = engine.authorize_create(principal, draft)
    try:
        created = store.create(values)
    except SQLAlchemyError as e:
        raise _storage_failure(store, "create the task", e)
    return store.fetch_by_id(created.id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
    store: TaskStore = Depends(get_task_store),
):
    task = store.fetch_by_id(task_id)
    # Only fields present in the request are applied
    changes = engine.authorize_update(principal, task, task_update.model_dump(exclude_unset=True))
    try:
        store.update(task, changes)
    except SQLAlchemyError as e:
        raise _storage_failure(store, "update the task", e)
    return store.fetch_by_id(task_id)


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AuthorizationEngine = Depends(get_authorization_engine),
    store: TaskStore = Depends(get_task_store),
):
    task = engine.authorize_delete(principal, store.fetch_by_id(task_id))
    try:
        store.delete(task)
    except SQLAlchemyError as e:
        raise _storage_failure(store, "delete the task", e)
    return {"message": "Task deleted successfully"}
