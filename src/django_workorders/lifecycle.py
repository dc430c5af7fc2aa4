"""
Pure job lifecycle rules.

Functions here validate a move and mutate an in-memory Job; they never
save. services.jobs wraps them in a transaction and persists the result.
Statuses must already be canonical (see choices.resolve_status).
"""

from django.utils import timezone

from .authorization import can, require
from .choices import JobStatus
from .exceptions import InvalidTransition, ValidationError
from .graph import JOB_TRANSITIONS, get_allowed_job_transitions


def check_transition(job, to_status: str, actor, reason: str = None) -> bool:
    """
    Validate moving ``job`` to ``to_status``.

    Returns False when the job already holds ``to_status`` and the entry
    requirements still hold (a replay with nothing to do), True when a
    real transition should be applied.

    Raises:
        ValidationError: unknown target, or entry requirements not met
        InvalidTransition: target not reachable from the current status
        Forbidden: actor's role may not use the edge
    """
    to_status = str(to_status)
    if to_status not in JobStatus.values:
        raise ValidationError(f"Unknown job status '{to_status}'", field="status")

    from_status = str(job.status)
    if from_status == to_status:
        _check_entry_requirements(job, to_status, reason or job.stuck_reason)
        return False

    if from_status not in JOB_TRANSITIONS:
        raise InvalidTransition(
            from_status, to_status,
            f"Job has unrecognized status '{from_status}'",
        )
    if to_status not in JOB_TRANSITIONS[from_status]:
        raise InvalidTransition(from_status, to_status)

    require(actor, (from_status, to_status))
    _check_entry_requirements(job, to_status, reason)
    return True


def _check_entry_requirements(job, to_status: str, reason: str) -> None:
    if to_status == JobStatus.SCHEDULED and not job.crew_scheduled_date:
        raise ValidationError(
            "Crew scheduled date is required to schedule a job",
            field="crew_scheduled_date",
        )
    if to_status == JobStatus.STUCK and not (reason or "").strip():
        raise ValidationError("A reason is required to mark a job stuck", field="reason")


def apply_transition(job, to_status: str, actor, reason: str = None, now=None):
    """
    Validate and apply a status change to an unsaved-in-memory job.

    Returns the list of changed field names (empty for a replay).
    """
    if not check_transition(job, to_status, actor, reason):
        return []

    now = now or timezone.now()
    user = getattr(actor, "user", None)
    from_status = str(job.status)
    to_status = str(to_status)
    changed = ["status"]
    job.status = to_status

    if from_status == JobStatus.STUCK:
        job.stuck_reason = ""
        job.stuck_at = None
        job.stuck_by = None
        changed += ["stuck_reason", "stuck_at", "stuck_by"]

    if to_status == JobStatus.ASSIGNED_TO_GF:
        job.assigned_to_gf_at = now
        job.assigned_to_gf_by = user
        changed += ["assigned_to_gf_at", "assigned_to_gf_by"]
    elif to_status == JobStatus.PRE_FIELDING:
        if job.pre_field_date is None:
            job.pre_field_date = now
            changed.append("pre_field_date")
        if job.assigned_to_gf_id is None and user is not None:
            job.assigned_to_gf = user
            changed.append("assigned_to_gf")
    elif to_status == JobStatus.STUCK:
        job.stuck_reason = reason.strip()
        job.stuck_at = now
        job.stuck_by = user
        changed += ["stuck_reason", "stuck_at", "stuck_by"]
    elif to_status == JobStatus.PENDING_GF_REVIEW:
        job.crew_submitted_at = now
        changed.append("crew_submitted_at")
    elif to_status == JobStatus.READY_TO_SUBMIT:
        job.completed_at = now
        changed.append("completed_at")
    elif to_status == JobStatus.SUBMITTED:
        job.utility_submitted_at = now
        changed.append("utility_submitted_at")
    elif to_status == JobStatus.GO_BACK:
        job.has_failed_audit = True
        changed.append("has_failed_audit")
    elif to_status == JobStatus.BILLED:
        job.billed_at = now
        changed.append("billed_at")
    elif to_status == JobStatus.INVOICED:
        job.invoiced_at = now
        changed.append("invoiced_at")

    return changed


def allowed_transitions(job, actor=None) -> list[str]:
    """Next statuses for ``job``, filtered by ``actor``'s role when given."""
    targets = get_allowed_job_transitions(job.status)
    if actor is None:
        return targets
    return [t for t in targets if can(actor, (str(job.status), t))]


def apply_assignment(
    job,
    user,
    crew_scheduled_date,
    crew_scheduled_end_date=None,
    notes=None,
    actor=None,
    now=None,
) -> list[str]:
    """Set crew assignment fields. Status is never changed here."""
    if user is None:
        raise ValidationError("A crew user is required", field="user")
    if crew_scheduled_date is None:
        raise ValidationError("Crew scheduled date is required", field="crew_scheduled_date")
    if crew_scheduled_end_date is not None and crew_scheduled_end_date < crew_scheduled_date:
        raise ValidationError(
            "Crew scheduled end date cannot be before the start date",
            field="crew_scheduled_end_date",
        )

    job.assigned_to = user
    job.assigned_by = getattr(actor, "user", None)
    job.assigned_at = now or timezone.now()
    job.crew_scheduled_date = crew_scheduled_date
    job.crew_scheduled_end_date = crew_scheduled_end_date
    changed = [
        "assigned_to",
        "assigned_by",
        "assigned_at",
        "crew_scheduled_date",
        "crew_scheduled_end_date",
    ]
    if notes is not None:
        job.assignment_notes = notes
        changed.append("assignment_notes")
    return changed
