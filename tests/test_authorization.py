from types import SimpleNamespace

import pytest

from app.models.user import Role
from app.utils.authorization import AuthorizationEngine, TaskScope
from app.utils.exceptions import Forbidden, InvalidAssignment, NotFound
from app.utils.principal import Principal


class FakeDirectory:
    """In-memory team directory: manager id -> direct report ids"""

    def __init__(self, roles, reports):
        self.roles = roles
        self.reports = reports
        self.report_lookups = 0

    def direct_reports_of(self, principal_id):
        self.report_lookups += 1
        return set(self.reports.get(principal_id, set()))

    def role_of(self, principal_id):
        return self.roles.get(principal_id)


ADMIN = Principal(id=1, role=Role.ADMIN)
BOSS = Principal(id=2, role=Role.MANAGER)
ALICE = Principal(id=3, role=Role.USER, manager_id=2)
LEAD = Principal(id=4, role=Role.MANAGER, manager_id=2)
CAROL = Principal(id=5, role=Role.USER, manager_id=4)
EVE = Principal(id=6, role=Role.USER)
OTHER_BOSS = Principal(id=7, role=Role.MANAGER)


@pytest.fixture
def directory():
    return FakeDirectory(
        roles={
            1: Role.ADMIN, 2: Role.MANAGER, 3: Role.USER, 4: Role.MANAGER,
            5: Role.USER, 6: Role.USER, 7: Role.MANAGER, 8: Role.ADMIN,
        },
        reports={2: {3, 4}, 4: {5}},
    )


@pytest.fixture
def engine(directory):
    return AuthorizationEngine(directory)


def task(task_id=10, creator_id=1, assignee_id=None):
    return SimpleNamespace(id=task_id, creator_id=creator_id, assignee_id=assignee_id)


ALL_TASKS = [
    task(10, creator_id=1, assignee_id=1),
    task(11, creator_id=1, assignee_id=2),
    task(12, creator_id=2, assignee_id=3),
    task(13, creator_id=2, assignee_id=4),
    task(14, creator_id=4, assignee_id=5),
    task(15, creator_id=6, assignee_id=6),
    task(16, creator_id=3, assignee_id=None),
    task(17, creator_id=3, assignee_id=6),
]


class TestVisibilityScope:
    def test_admin_sees_everything(self, engine):
        scope = engine.visibility_scope(ADMIN)

        assert scope.unrestricted
        assert all(scope.matches(t) for t in ALL_TASKS)

    @pytest.mark.parametrize("principal", [ALICE, CAROL, EVE])
    def test_user_sees_only_tasks_assigned_to_self(self, engine, principal):
        scope = engine.visibility_scope(principal)

        visible = {t.id for t in ALL_TASKS if scope.matches(t)}
        expected = {t.id for t in ALL_TASKS if t.assignee_id == principal.id}
        assert visible == expected

    def test_user_does_not_see_tasks_they_only_created(self, engine):
        scope = engine.visibility_scope(ALICE)

        assert not scope.matches(task(17, creator_id=3, assignee_id=6))

    def test_manager_sees_self_and_direct_reports_only(self, engine):
        scope = engine.visibility_scope(BOSS)

        visible = {t.id for t in ALL_TASKS if scope.matches(t)}
        # 14 belongs to carol, who reports to lead, not to boss
        assert visible == {11, 12, 13}

    def test_manager_without_reports_sees_own_tasks(self, engine):
        scope = engine.visibility_scope(OTHER_BOSS)

        assert scope == TaskScope(assignee_ids=frozenset({7}))

    def test_unassigned_tasks_only_visible_to_admin(self, engine):
        unassigned = task(16, creator_id=3, assignee_id=None)

        assert engine.visibility_scope(ADMIN).matches(unassigned)
        assert not engine.visibility_scope(ALICE).matches(unassigned)
        assert not engine.visibility_scope(BOSS).matches(unassigned)

    def test_users_never_hit_the_directory(self, engine, directory):
        engine.visibility_scope(ALICE)
        engine.visibility_scope(ADMIN)

        assert directory.report_lookups == 0


class TestAuthorizeGet:
    def test_missing_task_is_not_found_for_everyone(self, engine):
        for principal in (ADMIN, BOSS, ALICE):
            with pytest.raises(NotFound):
                engine.authorize_get(principal, None)

    def test_out_of_scope_task_is_forbidden(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_get(ALICE, task(15, creator_id=6, assignee_id=6))

    def test_manager_can_read_report_task(self, engine):
        t = task(12, creator_id=2, assignee_id=3)
        assert engine.authorize_get(BOSS, t) is t


class TestAuthorizeCreate:
    def test_creator_is_always_the_principal(self, engine):
        values = engine.authorize_create(ALICE, {"title": "x", "assignee_id": 3, "creator_id": 99})

        assert values["creator_id"] == 3
        assert values["title"] == "x"

    def test_user_can_assign_to_self(self, engine):
        engine.authorize_create(EVE, {"assignee_id": 6})

    @pytest.mark.parametrize("assignee_id", [1, 2, 5, None, 404])
    def test_user_cannot_assign_to_anyone_else(self, engine, assignee_id):
        with pytest.raises(InvalidAssignment):
            engine.authorize_create(ALICE, {"assignee_id": assignee_id})

    def test_invalid_assignment_is_a_forbidden(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_create(ALICE, {"assignee_id": 6})

    @pytest.mark.parametrize("assignee_id", [2, 3, 4])
    def test_manager_can_assign_to_self_and_reports(self, engine, assignee_id):
        engine.authorize_create(BOSS, {"assignee_id": assignee_id})

    @pytest.mark.parametrize("assignee_id", [5, 6, 7])
    def test_manager_can_assign_to_any_user_or_manager(self, engine, assignee_id):
        engine.authorize_create(BOSS, {"assignee_id": assignee_id})

    @pytest.mark.parametrize("assignee_id", [1, 8, 404, None])
    def test_manager_cannot_assign_to_admins_or_unknown_users(self, engine, assignee_id):
        with pytest.raises(InvalidAssignment):
            engine.authorize_create(BOSS, {"assignee_id": assignee_id})

    @pytest.mark.parametrize("assignee_id", [1, 2, 3, 8, None])
    def test_admin_is_unrestricted(self, engine, assignee_id):
        engine.authorize_create(ADMIN, {"assignee_id": assignee_id})

    def test_admin_cannot_assign_to_missing_user(self, engine):
        with pytest.raises(InvalidAssignment, match="does not exist"):
            engine.authorize_create(ADMIN, {"assignee_id": 404})


class TestAuthorizeUpdate:
    def test_missing_task_is_not_found_even_for_admin(self, engine):
        with pytest.raises(NotFound):
            engine.authorize_update(ADMIN, None, {"title": "x"})

    def test_user_can_update_assigned_task(self, engine):
        changes = engine.authorize_update(ALICE, task(12, creator_id=2, assignee_id=3), {"title": "x"})

        assert changes == {"title": "x"}

    def test_user_cannot_update_task_they_only_created(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_update(ALICE, task(17, creator_id=3, assignee_id=6), {"title": "x"})

    def test_manager_can_update_as_creator(self, engine):
        engine.authorize_update(OTHER_BOSS, task(20, creator_id=7, assignee_id=6), {"title": "x"})

    def test_manager_can_update_report_assigned_task(self, engine):
        engine.authorize_update(BOSS, task(14, creator_id=1, assignee_id=4), {"title": "x"})

    def test_manager_cannot_update_task_of_indirect_report(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_update(BOSS, task(14, creator_id=4, assignee_id=5), {"title": "x"})

    def test_manager_update_scope_follows_assignee_not_creator(self, engine):
        # alice reports to boss but the task is assigned to eve
        with pytest.raises(Forbidden):
            engine.authorize_update(BOSS, task(17, creator_id=3, assignee_id=6), {"title": "x"})

    def test_admin_can_update_anything(self, engine):
        engine.authorize_update(ADMIN, task(15, creator_id=6, assignee_id=6), {"status": "completed"})

    @pytest.mark.parametrize("principal", [ADMIN, BOSS, ALICE])
    def test_creator_and_system_fields_are_dropped(self, engine, principal):
        t = task(12, creator_id=2, assignee_id=3)

        changes = engine.authorize_update(
            principal, t, {"creator_id": 99, "id": 5, "created_at": "now", "title": "x"},
        )

        assert changes == {"title": "x"}

    def test_user_cannot_reassign_own_task(self, engine):
        with pytest.raises(InvalidAssignment):
            engine.authorize_update(ALICE, task(12, creator_id=2, assignee_id=3), {"assignee_id": 6})

    def test_unchanged_assignee_is_not_rechecked(self, engine):
        changes = engine.authorize_update(BOSS, task(13, creator_id=1, assignee_id=4), {"assignee_id": 4})

        assert changes == {"assignee_id": 4}

    def test_manager_reassignment_follows_create_rule(self, engine):
        t = task(12, creator_id=2, assignee_id=3)

        engine.authorize_update(BOSS, t, {"assignee_id": 6})
        with pytest.raises(InvalidAssignment):
            engine.authorize_update(BOSS, t, {"assignee_id": 1})


class TestAuthorizeDelete:
    def test_missing_task_is_not_found(self, engine):
        with pytest.raises(NotFound):
            engine.authorize_delete(ADMIN, None)

    def test_user_can_delete_task_they_created(self, engine):
        t = task(17, creator_id=3, assignee_id=6)
        assert engine.authorize_delete(ALICE, t) is t

    def test_user_cannot_delete_task_merely_assigned(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_delete(ALICE, task(12, creator_id=2, assignee_id=3))

    def test_user_cannot_delete_unrelated_task(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_delete(EVE, task(12, creator_id=2, assignee_id=3))

    def test_manager_can_delete_task_created_by_report(self, engine):
        engine.authorize_delete(BOSS, task(17, creator_id=3, assignee_id=6))

    def test_manager_delete_scope_follows_creator_not_assignee(self, engine):
        with pytest.raises(Forbidden):
            engine.authorize_delete(BOSS, task(30, creator_id=6, assignee_id=3))

    def test_manager_can_delete_task_assigned_to_self(self, engine):
        engine.authorize_delete(OTHER_BOSS, task(31, creator_id=1, assignee_id=7))

    def test_admin_can_delete_anything(self, engine):
        engine.authorize_delete(ADMIN, task(15, creator_id=6, assignee_id=6))


class TestAccessScopeInfo:
    def test_describes_manager_scope(self, engine):
        info = engine.access_scope_info(BOSS)

        assert info["user_role"] == "manager"
        assert info["all_tasks"] is False
        assert info["assignee_ids"] == [2, 3, 4]

    def test_describes_admin_scope(self, engine):
        info = engine.access_scope_info(ADMIN)

        assert info["all_tasks"] is True
        assert info["assignee_ids"] is None
