"""Job lifecycle services.

Provides:
- get_job: Fetch a job or raise NotFound
- transition: Move a job to a new status (role-gated, audited)
- assign: Set the crew assignment and schedule
- get_allowed_transitions: Next statuses, optionally filtered by role
"""

import logging

from django.db import transaction
from django.utils import timezone

from .. import lifecycle
from ..authorization import require
from ..choices import is_legacy_status, resolve_status
from ..exceptions import NotFound, ValidationError
from ..models import Job, JobStatusChange
from ..signals import job_status_changed, send_after_commit

logger = logging.getLogger(__name__)


def get_job(job_id) -> Job:
    try:
        return Job.objects.get(pk=job_id)
    except (Job.DoesNotExist, ValueError, TypeError):
        raise NotFound("Job", job_id)


@transaction.atomic
def transition(job: Job, target_status: str, actor, reason: str = None) -> Job:
    """
    Move ``job`` to ``target_status``.

    Legacy status strings (on the job or in the request) are translated
    first. Replaying the status the job already holds is a no-op.

    Creates a JobStatusChange row and sends job_status_changed after
    commit.

    Raises:
        ValidationError: missing/unknown target or unmet entry requirement
        InvalidTransition: target not reachable from the current status
        Forbidden: actor's role may not use the edge
    """
    if not target_status:
        raise ValidationError("Status is required", field="status")

    stored_status = job.status
    from_status = resolve_status(stored_status)
    to_status = resolve_status(target_status)

    job.status = from_status
    try:
        changed = lifecycle.apply_transition(job, to_status, actor, reason=reason)
    except Exception:
        job.status = stored_status
        raise

    if not changed:
        if is_legacy_status(stored_status):
            job.save(update_fields=["status", "updated_at"])
        return job

    job.save(update_fields=sorted(set(changed)) + ["updated_at"])
    JobStatusChange.objects.create(
        job=job,
        from_status=from_status,
        to_status=to_status,
        changed_by=getattr(actor, "user", None),
        role=str(getattr(actor, "role", "") or ""),
        reason=reason or "",
        changed_at=timezone.now(),
    )
    logger.info(
        "Job %s moved %s -> %s by %s",
        job.pk, from_status, to_status, getattr(actor, "role", None),
    )
    send_after_commit(
        job_status_changed,
        sender=Job,
        job=job,
        from_status=from_status,
        to_status=to_status,
        actor=actor,
    )
    return job


@transaction.atomic
def assign(
    job: Job,
    user,
    crew_scheduled_date,
    crew_scheduled_end_date=None,
    notes: str = None,
    actor=None,
) -> Job:
    """
    Assign a crew user and schedule dates. The job's status is untouched.

    Raises:
        ValidationError: user or start date missing, end before start
        Forbidden: actor given and not allowed to assign
    """
    if actor is not None:
        require(actor, "job.assign")

    changed = lifecycle.apply_assignment(
        job,
        user,
        crew_scheduled_date,
        crew_scheduled_end_date=crew_scheduled_end_date,
        notes=notes,
        actor=actor,
    )
    job.save(update_fields=changed + ["updated_at"])
    logger.info("Job %s assigned to user %s for %s", job.pk, user.pk, crew_scheduled_date)
    return job


def get_allowed_transitions(job: Job, actor=None) -> list[str]:
    """Statuses ``job`` may move to next (for ``actor``'s role, when given)."""
    if job.status != resolve_status(job.status):
        job = Job(pk=job.pk, status=resolve_status(job.status))
    return lifecycle.allowed_transitions(job, actor)
