# app/services/task_store.py
"""
SQLAlchemy-backed task storage. Visibility rules are decided elsewhere and
arrive here as a TaskScope that is turned into a query clause.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.task import Task, TaskPriority, TaskStatus
from app.utils.authorization import TaskScope

logger = logging.getLogger(__name__)


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Task).options(
            joinedload(Task.creator),
            joinedload(Task.assignee),
        )

    def fetch_by_id(self, task_id: int) -> Optional[Task]:
        return self._query().filter(Task.id == task_id).first()

    def list_where(
        self,
        scope: TaskScope,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Task]:
        query = self._query()
        if not scope.unrestricted:
            if not scope.assignee_ids:
                return []
            query = query.filter(Task.assignee_id.in_(sorted(scope.assignee_ids)))

        if status:
            query = query.filter(Task.status == status)
        if priority:
            query = query.filter(Task.priority == priority)

        return query.order_by(Task.id).offset(skip).limit(limit).all()

    def create(self, values: Dict[str, Any]) -> Task:
        task = Task(**values)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info("Task %s created by user %s", task.id, task.creator_id)
        return task

    def update(self, task: Task, changes: Dict[str, Any]) -> Task:
        for key, value in changes.items():
            setattr(task, key, value)
        self.db.commit()
        self.db.refresh(task)
        logger.info("Task %s updated fields %s", task.id, sorted(changes))
        return task

    def delete(self, task: Task) -> None:
        task_id = task.id
        self.db.delete(task)
        self.db.commit()
        logger.info("Task %s deleted", task_id)
