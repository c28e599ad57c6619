"""Tests for the task lifecycle service."""

from datetime import date, datetime

import pytest

from taskflow.errors import InvalidArgument, NotFound, PermissionDenied
from taskflow.models import Task, TaskStatus, TaskTimeLog
from taskflow.services.task_service import TaskService, status_for_progress
from taskflow.services.time_tracking import TaskTimer
from taskflow.services.transitions import TransitionPolicy


@pytest.fixture
def service(db, clock):
    return TaskService(db, clock=clock, policy=TransitionPolicy(strict=False))


@pytest.fixture
def assigned(make_task, team):
    return make_task(title="Banner", assignee=team.alice, deadline=date(2024, 6, 12))


class TestCreateTask:
    def test_computes_buffer_deadline(self, service, team, clock):
        task = service.create_task(
            team.admin,
            title="  Launch reel  ",
            task_type_id=team.graphic.id,
            deadline=date(2024, 6, 10),
            urgency="high",
            assigned_to=team.alice.id,
        )

        assert task.title == "Launch reel"
        assert task.buffer_deadline == date(2024, 6, 8)
        assert task.status == TaskStatus.PENDING.value
        assert task.progress == 0
        assert task.revision_count == 0
        assert task.completed_at is None
        assert task.created_by == team.admin.id
        assert task.created_at == clock.now
        assert task.assignee_name == "Alice"
        assert task.task_type_name == "Graphic Design"
        assert task.role_name == "Designer"

    def test_defaults_to_medium_urgency(self, service, team):
        task = service.create_task(team.admin, title="Post", task_type_id=team.blog.id, deadline=date(2024, 6, 12))
        assert task.urgency == "medium"
        assert task.buffer_deadline == date(2024, 6, 10)

    def test_requires_admin(self, service, team):
        with pytest.raises(PermissionDenied):
            service.create_task(team.alice, title="Post", task_type_id=team.blog.id, deadline=date(2024, 6, 12))

    def test_blank_title(self, service, team):
        with pytest.raises(InvalidArgument):
            service.create_task(team.admin, title="   ", task_type_id=team.blog.id, deadline=date(2024, 6, 12))

    def test_unknown_task_type(self, service, team):
        with pytest.raises(NotFound):
            service.create_task(team.admin, title="Post", task_type_id=9999, deadline=date(2024, 6, 12))

    def test_unknown_urgency(self, service, team):
        with pytest.raises(InvalidArgument):
            service.create_task(
                team.admin, title="Post", task_type_id=team.blog.id, deadline=date(2024, 6, 12), urgency="urgent"
            )

    def test_inactive_assignee(self, service, db, team):
        team.bob.is_active = False
        db.commit()
        with pytest.raises(NotFound):
            service.create_task(
                team.admin, title="Post", task_type_id=team.graphic.id, deadline=date(2024, 6, 12),
                assigned_to=team.bob.id,
            )
        assert db.query(Task).count() == 0


class TestUpdateTask:
    def test_deadline_change_recomputes_buffer(self, service, team, assigned):
        task = service.update_task(team.admin, assigned.id, {"deadline": date(2024, 6, 17)})
        # Medium: two working days back from Monday skips Sunday
        assert task.buffer_deadline == date(2024, 6, 14)

    def test_urgency_change_recomputes_buffer(self, service, team, assigned):
        task = service.update_task(team.admin, assigned.id, {"urgency": "critical"})
        assert task.buffer_deadline == task.deadline

    def test_omitted_fields_are_kept(self, service, team, make_task):
        task = make_task(assignee=team.alice, description="Blue palette", client_name="Acme")

        updated = service.update_task(team.admin, task.id, {"title": "Banner v2"})

        assert updated.title == "Banner v2"
        assert updated.description == "Blue palette"
        assert updated.client_name == "Acme"
        assert updated.assigned_to == team.alice.id

    def test_explicit_null_clears_optional_fields(self, service, team, make_task):
        task = make_task(assignee=team.alice, description="Blue palette")

        updated = service.update_task(team.admin, task.id, {"description": None, "assigned_to": None})

        assert updated.description is None
        assert updated.assigned_to is None

    def test_explicit_null_keeps_required_fields(self, service, team, assigned):
        updated = service.update_task(team.admin, assigned.id, {"title": None, "deadline": None})
        assert updated.title == "Banner"
        assert updated.deadline == date(2024, 6, 12)

    def test_task_type_cannot_change(self, service, team, assigned):
        with pytest.raises(InvalidArgument):
            service.update_task(team.admin, assigned.id, {"task_type_id": team.story.id})

    def test_requires_admin(self, service, team, assigned):
        with pytest.raises(PermissionDenied):
            service.update_task(team.alice, assigned.id, {"title": "Mine now"})

    def test_missing_task(self, service, team):
        with pytest.raises(NotFound):
            service.update_task(team.admin, 9999, {"title": "Ghost"})

    def test_unknown_assignee_rolls_back(self, service, db, team, assigned):
        with pytest.raises(NotFound):
            service.update_task(team.admin, assigned.id, {"title": "Renamed", "assigned_to": 9999})
        db.expire_all()
        assert db.get(Task, assigned.id).title == "Banner"

    def test_completing_sets_completed_at(self, service, team, assigned, clock):
        task = service.update_task(team.admin, assigned.id, {"status": "completed"})
        assert task.completed_at == clock.now


class TestUpdateProgress:
    @pytest.mark.parametrize("progress,expected", [
        (0, TaskStatus.PENDING),
        (1, TaskStatus.IN_PROGRESS),
        (99, TaskStatus.IN_PROGRESS),
        (100, TaskStatus.COMPLETED),
    ])
    def test_status_follows_progress(self, progress, expected):
        assert status_for_progress(progress) == expected

    def test_full_progress_completes_once(self, service, team, assigned, clock):
        first = service.update_progress(team.alice, assigned.id, 100)
        completed_at = first.completed_at
        assert first.status == TaskStatus.COMPLETED.value
        assert completed_at == datetime(2024, 6, 10, 9, 0, 0)

        clock.advance(hours=2)
        reopened = service.update_progress(team.alice, assigned.id, 50)
        assert reopened.status == TaskStatus.IN_PROGRESS.value
        assert reopened.completed_at == completed_at

        clock.advance(hours=2)
        again = service.update_progress(team.alice, assigned.id, 100)
        assert again.completed_at == completed_at

    def test_values_are_clamped(self, service, team, assigned):
        assert service.update_progress(team.alice, assigned.id, 150).progress == 100
        task = service.update_progress(team.alice, assigned.id, -5)
        assert task.progress == 0
        assert task.status == TaskStatus.PENDING.value

    def test_numeric_strings_are_accepted(self, service, team, assigned):
        assert service.update_progress(team.alice, assigned.id, "40").progress == 40

    def test_non_numeric_progress(self, service, team, assigned):
        with pytest.raises(InvalidArgument):
            service.update_progress(team.alice, assigned.id, "half")

    def test_only_assignee_or_admin(self, service, team, assigned):
        with pytest.raises(PermissionDenied):
            service.update_progress(team.bob, assigned.id, 10)
        assert service.update_progress(team.admin, assigned.id, 10).progress == 10

    def test_refused_update_leaves_task_unchanged(self, service, db, team, assigned):
        with pytest.raises(PermissionDenied):
            service.update_progress(team.bob, assigned.id, 100)

        db.expire_all()
        task = db.query(Task).filter(Task.id == assigned.id).one()
        assert task.progress == 0
        assert task.status == TaskStatus.PENDING.value
        assert task.completed_at is None

    def test_unassigned_task_is_admin_only(self, service, team, make_task):
        task = make_task(assignee=None)
        with pytest.raises(PermissionDenied):
            service.update_progress(team.alice, task.id, 10)

    def test_missing_task(self, service, team):
        with pytest.raises(NotFound):
            service.update_progress(team.alice, 9999, 10)


class TestUpdateStatus:
    def test_completion_stamps_but_keeps_progress(self, service, team, assigned, clock):
        task = service.update_status(team.alice, assigned.id, "completed")
        assert task.status == TaskStatus.COMPLETED.value
        assert task.progress == 0
        assert task.completed_at == clock.now

    def test_reopening_keeps_completed_at(self, service, team, assigned, clock):
        completed_at = service.update_status(team.alice, assigned.id, "completed").completed_at
        clock.advance(days=1)

        reopened = service.update_status(team.alice, assigned.id, "in_progress")
        assert reopened.completed_at == completed_at

        clock.advance(days=1)
        assert service.update_status(team.alice, assigned.id, "completed").completed_at == completed_at

    @pytest.mark.parametrize("value", ["revision", "done", ""])
    def test_rejects_non_canonical_values(self, service, team, assigned, value):
        with pytest.raises(InvalidArgument):
            service.update_status(team.alice, assigned.id, value)

    def test_only_assignee_or_admin(self, service, team, assigned):
        with pytest.raises(PermissionDenied):
            service.update_status(team.bob, assigned.id, "on_hold")

    def test_refused_update_leaves_task_unchanged(self, service, db, team, assigned):
        with pytest.raises(PermissionDenied):
            service.update_status(team.bob, assigned.id, "completed")

        db.expire_all()
        task = db.query(Task).filter(Task.id == assigned.id).one()
        assert task.status == TaskStatus.PENDING.value
        assert task.progress == 0
        assert task.completed_at is None

    def test_strict_policy_refuses_unlisted_moves(self, db, clock, team, assigned):
        strict = TaskService(db, clock=clock, policy=TransitionPolicy(strict=True))

        with pytest.raises(InvalidArgument):
            strict.update_status(team.alice, assigned.id, "client_feedback")

        # Admins bypass the table
        assert strict.update_status(team.admin, assigned.id, "client_feedback").status == "client_feedback"

    def test_leaving_active_work_stops_running_timer(self, service, db, team, assigned, clock):
        TaskTimer(db, clock).start_timer(team.alice.id, assigned.id)
        clock.advance(minutes=30)

        service.update_status(team.alice, assigned.id, "client_feedback")

        log = db.query(TaskTimeLog).filter(TaskTimeLog.task_id == assigned.id).one()
        assert log.ended_at == clock.now
        assert log.duration_secs == 1800

    def test_on_hold_keeps_timer_running(self, service, db, team, assigned, clock):
        TaskTimer(db, clock).start_timer(team.alice.id, assigned.id)
        service.update_status(team.alice, assigned.id, "on_hold")
        assert TaskTimer(db, clock).active_timer(team.alice.id) is not None


class TestSubmitFeedback:
    def test_increments_revisions(self, service, team, assigned):
        service.submit_feedback(team.wendy, assigned.id, "Logo too small")
        task = service.submit_feedback(team.wendy, assigned.id, "Colours off")

        assert task.revision_count == 2
        assert task.status == TaskStatus.REVISION.value
        assert task.feedback_notes == "Colours off"

    def test_empty_notes_are_cleared(self, service, team, assigned):
        assert service.submit_feedback(team.alice, assigned.id, "").feedback_notes is None

    def test_missing_task(self, service, team):
        with pytest.raises(NotFound):
            service.submit_feedback(team.alice, 9999, "Hello")


class TestDeleteTask:
    def test_removes_task_and_sessions(self, service, db, team, assigned, clock):
        timer = TaskTimer(db, clock)
        timer.start_timer(team.alice.id, assigned.id)
        clock.advance(minutes=5)
        timer.stop_timer(team.alice.id, assigned.id)
        timer.start_timer(team.alice.id, assigned.id)

        assert service.delete_task(team.admin, assigned.id) == {"success": True, "id": assigned.id}

        db.expire_all()
        assert db.query(Task).count() == 0
        assert db.query(TaskTimeLog).count() == 0
        assert timer.active_timer(team.alice.id) is None

    def test_requires_admin(self, service, team, assigned):
        with pytest.raises(PermissionDenied):
            service.delete_task(team.alice, assigned.id)

    def test_missing_task(self, service, team):
        with pytest.raises(NotFound):
            service.delete_task(team.admin, 9999)


class TestListing:
    def test_ordered_by_urgency_then_deadline(self, service, team, make_task):
        make_task(title="low", assignee=team.alice, urgency="low", deadline=date(2024, 6, 11))
        make_task(title="critical late", assignee=team.alice, urgency="critical", deadline=date(2024, 6, 20))
        make_task(title="critical soon", assignee=team.alice, urgency="critical", deadline=date(2024, 6, 12))
        make_task(title="high", assignee=team.bob, urgency="high", deadline=date(2024, 6, 11))

        titles = [task.title for task in service.list_tasks(team.admin)]

        assert titles == ["critical soon", "critical late", "high", "low"]

    def test_members_only_see_their_tasks(self, service, team, make_task):
        make_task(title="mine", assignee=team.alice)
        make_task(title="theirs", assignee=team.bob)

        assert [task.title for task in service.list_tasks(team.alice)] == ["mine"]

    def test_my_tasks_hides_completed(self, service, team, make_task):
        make_task(title="open", assignee=team.alice)
        make_task(title="done", assignee=team.alice, status=TaskStatus.COMPLETED.value)

        assert [task.title for task in service.my_tasks(team.alice)] == ["open"]

    def test_get_missing_task(self, service):
        with pytest.raises(NotFound):
            service.get_task(9999)
