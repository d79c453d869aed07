# app/schemas/task.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from app.models.task import TaskStatus, TaskPriority


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime

    @field_validator('title')
    def title_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError('Title must not be blank')
        return v.strip()


class TaskCreate(TaskBase):
    # Defaults to the caller when omitted; creator is never read from input
    assignee_id: Optional[int] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[int] = None

    @field_validator('title', 'description', 'status', 'priority', 'due_date')
    def required_fields_cannot_be_cleared(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be set to null')
        return v

    @field_validator('title')
    def title_must_not_be_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Title must not be blank')
        return v.strip() if v is not None else v


# For returning task data
class UserRef(BaseModel):
    id: int
    name: str

    model_config = {
        "from_attributes": True
    }


class TaskOut(BaseModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime
    creator_id: int
    assignee_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    # Related objects
    creator: Optional[UserRef] = None
    assignee: Optional[UserRef] = None

    model_config = {
        "from_attributes": True
    }


class TaskPermissions(BaseModel):
    task_id: int
    can_view: bool
    can_update: bool
    can_delete: bool
