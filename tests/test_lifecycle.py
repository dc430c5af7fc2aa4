"""Tests for pure job lifecycle rules.

These tests run on unsaved Job instances - no database access.
"""

import datetime

import pytest

from django_workorders.authorization import Actor
from django_workorders.exceptions import Forbidden, InvalidTransition, ValidationError
from django_workorders.lifecycle import (
    allowed_transitions,
    apply_assignment,
    apply_transition,
    check_transition,
)
from django_workorders.models import Job

PM = Actor(user=None, role="pm")
GF = Actor(user=None, role="gf")
CREW = Actor(user=None, role="crew")
FOREMAN = Actor(user=None, role="foreman")


class TestCheckTransition:
    """Tests for check_transition."""

    def test_unknown_target_is_validation_error(self):
        """A status that does not exist is rejected as input."""
        job = Job(status="new")

        with pytest.raises(ValidationError):
            check_transition(job, "done", PM)

    def test_unreachable_target_is_invalid_transition(self):
        """A known status that is not an edge is InvalidTransition."""
        job = Job(status="new")

        with pytest.raises(InvalidTransition) as exc_info:
            check_transition(job, "scheduled", PM)

        assert exc_info.value.from_state == "new"
        assert exc_info.value.to_state == "scheduled"

    def test_graph_checked_before_role(self):
        """An unreachable edge is reported even for unauthorized roles."""
        with pytest.raises(InvalidTransition):
            check_transition(Job(status="new"), "billed", CREW)

    def test_wrong_role_is_forbidden(self):
        """crew cannot assign a GF."""
        with pytest.raises(Forbidden):
            check_transition(Job(status="new"), "assigned_to_gf", CREW)

    def test_scheduled_requires_crew_date(self):
        """Entering scheduled without a crew date fails."""
        job = Job(status="pre_fielding")

        with pytest.raises(ValidationError) as exc_info:
            check_transition(job, "scheduled", GF)

        assert exc_info.value.field == "crew_scheduled_date"

    def test_stuck_requires_reason(self):
        """Entering stuck needs a non-blank reason."""
        with pytest.raises(ValidationError):
            check_transition(Job(status="scheduled"), "stuck", FOREMAN, reason="   ")

    def test_replay_is_noop(self):
        """Replaying the current status reports nothing to do."""
        job = Job(status="scheduled", crew_scheduled_date=datetime.date(2025, 6, 1))

        assert check_transition(job, "scheduled", CREW) is False

    def test_replay_still_checks_requirements(self):
        """A replay into scheduled without a date still fails."""
        with pytest.raises(ValidationError):
            check_transition(Job(status="scheduled"), "scheduled", GF)

    def test_unrecognized_current_status(self):
        """A stored status outside the graph cannot move."""
        with pytest.raises(InvalidTransition):
            check_transition(Job(status="pending"), "assigned_to_gf", PM)


class TestApplyTransition:
    """Tests for apply_transition side effects."""

    def test_assigned_to_gf_stamps(self):
        """assigned_to_gf stamps the time."""
        job = Job(status="new")

        changed = apply_transition(job, "assigned_to_gf", PM)

        assert job.status == "assigned_to_gf"
        assert job.assigned_to_gf_at is not None
        assert "assigned_to_gf_at" in changed

    def test_pre_field_date_set_once(self):
        """pre_field_date is only set the first time."""
        first = datetime.datetime(2025, 5, 1, tzinfo=datetime.timezone.utc)
        job = Job(status="assigned_to_gf", pre_field_date=first)

        apply_transition(job, "pre_fielding", GF)

        assert job.pre_field_date == first

    def test_stuck_and_resume(self):
        """Stuck fields are set on entry and cleared on resume."""
        job = Job(status="pre_fielding")

        apply_transition(job, "stuck", GF, reason="Waiting on permit")
        assert job.stuck_reason == "Waiting on permit"
        assert job.stuck_at is not None

        changed = apply_transition(job, "pre_fielding", GF)
        assert job.status == "pre_fielding"
        assert job.stuck_reason == ""
        assert job.stuck_at is None
        assert "stuck_reason" in changed

    @pytest.mark.parametrize("from_status,to_status,actor,field", [
        ("in_progress", "pending_gf_review", CREW, "crew_submitted_at"),
        ("pending_pm_approval", "ready_to_submit", PM, "completed_at"),
        ("ready_to_submit", "submitted", PM, "utility_submitted_at"),
        ("submitted", "billed", PM, "billed_at"),
        ("billed", "invoiced", PM, "invoiced_at"),
    ])
    def test_status_stamps(self, from_status, to_status, actor, field):
        """Each milestone status records when it was reached."""
        job = Job(status=from_status)

        changed = apply_transition(job, to_status, actor)

        assert getattr(job, field) is not None
        assert field in changed

    def test_go_back_flags_failed_audit(self):
        """A utility go-back marks the job as having failed audit."""
        job = Job(status="submitted")

        apply_transition(job, "go_back", Actor(user=None, role="qa"))

        assert job.has_failed_audit is True

    def test_failure_leaves_job_untouched(self):
        """A rejected move does not modify the job."""
        job = Job(status="new")

        with pytest.raises(Forbidden):
            apply_transition(job, "assigned_to_gf", CREW)

        assert job.status == "new"
        assert job.assigned_to_gf_at is None

    def test_replay_changes_nothing(self):
        """Replay returns no changed fields."""
        job = Job(status="in_progress")

        assert apply_transition(job, "in_progress", CREW) == []


class TestAllowedTransitions:
    """Tests for allowed_transitions."""

    def test_without_actor(self):
        """All graph targets are listed without an actor."""
        job = Job(status="pending_gf_review")

        assert set(allowed_transitions(job)) == {
            "pending_pm_approval", "pending_qa_review", "in_progress", "stuck",
        }

    def test_filtered_by_role(self):
        """Only edges the role may use are listed."""
        job = Job(status="new")

        assert allowed_transitions(job, CREW) == []
        assert allowed_transitions(job, PM) == ["assigned_to_gf", "stuck"]


class TestApplyAssignment:
    """Tests for apply_assignment."""

    def test_requires_user(self):
        """A crew user is required."""
        with pytest.raises(ValidationError):
            apply_assignment(Job(), None, datetime.date(2025, 6, 1))

    def test_end_before_start_rejected(self, django_user_model):
        """End date cannot precede the start date."""
        user = django_user_model(username="crew")

        with pytest.raises(ValidationError):
            apply_assignment(
                Job(), user, datetime.date(2025, 6, 2),
                crew_scheduled_end_date=datetime.date(2025, 6, 1),
            )

    def test_sets_fields_without_status_change(self, django_user_model):
        """Assignment fills schedule fields and leaves status alone."""
        user = django_user_model(username="crew")
        job = Job(status="pre_fielding")

        apply_assignment(job, user, datetime.date(2025, 6, 1), notes="Bring the vac truck")

        assert job.assigned_to is user
        assert job.crew_scheduled_date == datetime.date(2025, 6, 1)
        assert job.assignment_notes == "Bring the vac truck"
        assert job.assigned_at is not None
        assert job.status == "pre_fielding"
