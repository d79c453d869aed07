# app/utils/authorization.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Mapping, Optional, Set

from app.models.user import Role
from app.utils.exceptions import Forbidden, InvalidAssignment, NotFound
from app.utils.principal import Principal

logger = logging.getLogger(__name__)

# Fields a caller can never write through an update
IMMUTABLE_FIELDS = frozenset({"id", "creator_id", "created_at", "updated_at"})

ASSIGNABLE_ROLES_FOR_MANAGER = frozenset({Role.USER, Role.MANAGER})

SCOPE_DESCRIPTIONS = {
    Role.ADMIN: "Can view all tasks in the system",
    Role.MANAGER: "Can view tasks assigned to self or to direct reports",
    Role.USER: "Can view only tasks assigned to self",
}


@dataclass(frozen=True)
class TaskScope:
    """Declarative visibility filter handed to the task store.

    ``assignee_ids`` of None means every task is visible.
    """

    assignee_ids: Optional[FrozenSet[int]] = None

    @property
    def unrestricted(self) -> bool:
        return self.assignee_ids is None

    def matches(self, task: Any) -> bool:
        if self.assignee_ids is None:
            return True
        return task.assignee_id is not None and task.assignee_id in self.assignee_ids


class AuthorizationEngine:
    """Stateless access-control policy for tasks.

    ``directory`` supplies ``direct_reports_of(id)`` and ``role_of(id)``;
    the engine never touches storage itself.
    """

    def __init__(self, directory):
        self.directory = directory

    def _reports(self, principal: Principal) -> Set[int]:
        if not principal.is_manager:
            return set()
        return set(self.directory.direct_reports_of(principal.id))

    def _deny(self, principal: Principal, action: str, task_id: Any = None, exc=Forbidden, detail: Optional[str] = None):
        logger.info(
            "Denied %s for principal %s (%s) on task %s",
            action, principal.id, principal.role.value, task_id,
        )
        raise exc(detail)

    # list / get

    def visibility_scope(self, principal: Principal) -> TaskScope:
        if principal.is_admin:
            return TaskScope()
        visible = {principal.id}
        visible |= self._reports(principal)
        return TaskScope(assignee_ids=frozenset(visible))

    def authorize_get(self, principal: Principal, task: Any) -> Any:
        if task is None:
            raise NotFound()
        if not self.visibility_scope(principal).matches(task):
            self._deny(principal, "get", task.id, detail="You do not have permission to view this task")
        return task

    # create / assignment

    def check_assignment(self, principal: Principal, assignee_id: Optional[int]) -> None:
        """Raise InvalidAssignment when ``principal`` may not assign to ``assignee_id``"""
        if principal.is_admin:
            if assignee_id is not None and self.directory.role_of(assignee_id) is None:
                self._deny(principal, "assign", exc=InvalidAssignment, detail="Assignee does not exist")
            return

        if assignee_id is not None and assignee_id == principal.id:
            return

        if principal.role is Role.USER:
            self._deny(
                principal, "assign", exc=InvalidAssignment,
                detail="Regular users can only assign tasks to themselves",
            )

        # Managers may assign to direct reports or to any user/manager
        if assignee_id is not None:
            if assignee_id in self._reports(principal):
                return
            if self.directory.role_of(assignee_id) in ASSIGNABLE_ROLES_FOR_MANAGER:
                return
        self._deny(
            principal, "assign", exc=InvalidAssignment,
            detail="Managers can only assign tasks to themselves, their team, or other users and managers",
        )

    def authorize_create(self, principal: Principal, draft: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate a task draft and stamp the creator onto it"""
        values = {key: value for key, value in draft.items() if key not in IMMUTABLE_FIELDS}
        self.check_assignment(principal, values.get("assignee_id"))
        values["creator_id"] = principal.id
        return values

    # update / delete

    def can_update(self, principal: Principal, task: Any) -> bool:
        if principal.is_admin:
            return True
        if principal.role is Role.USER:
            return task.assignee_id == principal.id
        if principal.id in (task.creator_id, task.assignee_id):
            return True
        return task.assignee_id is not None and task.assignee_id in self._reports(principal)

    def can_delete(self, principal: Principal, task: Any) -> bool:
        if principal.is_admin:
            return True
        if principal.role is Role.USER:
            return task.creator_id == principal.id
        if principal.id in (task.creator_id, task.assignee_id):
            return True
        return task.creator_id in self._reports(principal)

    def authorize_update(self, principal: Principal, task: Any, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the subset of ``changes`` that may be applied to ``task``.

        Immutable fields such as ``creator_id`` are dropped without error.
        """
        if task is None:
            raise NotFound()
        if not self.can_update(principal, task):
            self._deny(principal, "update", task.id, detail="You do not have permission to update this task")

        allowed = {key: value for key, value in changes.items() if key not in IMMUTABLE_FIELDS}
        if "assignee_id" in allowed and allowed["assignee_id"] != task.assignee_id:
            self.check_assignment(principal, allowed["assignee_id"])
        return allowed

    def authorize_delete(self, principal: Principal, task: Any) -> Any:
        if task is None:
            raise NotFound()
        if not self.can_delete(principal, task):
            self._deny(principal, "delete", task.id, detail="You do not have permission to delete this task")
        return task

    def access_scope_info(self, principal: Principal) -> Dict[str, Any]:
        scope = self.visibility_scope(principal)
        return {
            "user_id": principal.id,
            "user_role": principal.role.value,
            "scope_description": SCOPE_DESCRIPTIONS[principal.role],
            "all_tasks": scope.unrestricted,
            "assignee_ids": None if scope.unrestricted else sorted(scope.assignee_ids),
        }
