"""Pre-field dependency services.

A dependency cycles required -> scheduled -> not_required -> required.
``scheduled_date`` is set only while a dependency is scheduled.
"""

import logging

from django.db import transaction
from django.db.models import Max

from ..authorization import require
from ..choices import DEPENDENCY_DESCRIPTIONS, DependencyStatus, DependencyType
from ..exceptions import NotFound, ValidationError
from ..graph import next_dependency_status
from ..models import Job, JobDependency

logger = logging.getLogger(__name__)


def list_dependencies(job: Job) -> list[JobDependency]:
    return list(job.dependencies.order_by("position", "id"))


def get_dependency(job: Job, dependency_id) -> JobDependency:
    """Fetch a dependency that belongs to ``job``."""
    try:
        return job.dependencies.get(pk=dependency_id)
    except (JobDependency.DoesNotExist, ValueError, TypeError):
        raise NotFound("Dependency", dependency_id)


def _next_position(job: Job) -> int:
    current = job.dependencies.aggregate(top=Max("position"))["top"]
    return 0 if current is None else current + 1


def create_dependency(
    job: Job,
    dependency_type: str,
    description: str = "",
    notes: str = "",
    ticket_number: str = "",
) -> JobDependency:
    """Append a ``required`` dependency. No role check; callers gate access."""
    if dependency_type not in DependencyType.values:
        raise ValidationError(f"Unknown dependency type '{dependency_type}'", field="type")
    return JobDependency.objects.create(
        job=job,
        type=dependency_type,
        status=DependencyStatus.REQUIRED,
        description=description or DEPENDENCY_DESCRIPTIONS[dependency_type],
        notes=notes or "",
        ticket_number=ticket_number or "",
        position=_next_position(job),
    )


@transaction.atomic
def add_dependency(
    job: Job,
    dependency_type: str,
    actor,
    description: str = "",
    notes: str = "",
    ticket_number: str = "",
) -> JobDependency:
    """
    Add a dependency to the end of the job's list.

    Raises:
        ValidationError: unknown dependency type
        Forbidden: actor's role may not add dependencies
    """
    require(actor, "dependency.add")
    dependency = create_dependency(
        job, dependency_type,
        description=description, notes=notes, ticket_number=ticket_number,
    )
    logger.info("Job %s: added %s dependency %s", job.pk, dependency.type, dependency.pk)
    return dependency


def _apply_status(dependency: JobDependency, status: str, scheduled_date) -> None:
    if status not in DependencyStatus.values:
        raise ValidationError(f"Unknown dependency status '{status}'", field="status")
    if status == DependencyStatus.SCHEDULED:
        if not scheduled_date:
            raise ValidationError(
                "A scheduled date is required to schedule a dependency",
                field="scheduled_date",
            )
        dependency.scheduled_date = scheduled_date
    else:
        dependency.scheduled_date = None
    dependency.status = status
    dependency.save(update_fields=["status", "scheduled_date", "updated_at"])


@transaction.atomic
def cycle_dependency(job: Job, dependency_id, actor, scheduled_date=None) -> JobDependency:
    """
    Advance a dependency one step along its status cycle.

    Raises:
        NotFound: dependency_id does not belong to job
        ValidationError: entering scheduled without a date
        Forbidden: actor's role may not update dependencies
    """
    require(actor, "dependency.update")
    dependency = get_dependency(job, dependency_id)
    _apply_status(dependency, next_dependency_status(dependency.status), scheduled_date)
    logger.info("Job %s: dependency %s now %s", job.pk, dependency.pk, dependency.status)
    return dependency


@transaction.atomic
def set_dependency_status(
    job: Job,
    dependency_id,
    status: str,
    actor,
    scheduled_date=None,
) -> JobDependency:
    """Write a dependency status directly, with the same date rules as cycling."""
    require(actor, "dependency.update")
    dependency = get_dependency(job, dependency_id)
    _apply_status(dependency, status, scheduled_date)
    logger.info("Job %s: dependency %s set to %s", job.pk, dependency.pk, dependency.status)
    return dependency
