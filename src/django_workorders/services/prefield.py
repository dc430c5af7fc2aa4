"""Pre-field checklist processing.

A checklist maps dependency type keys to ``{"checked": bool, "notes": str}``.
Checked items become required dependencies and the job moves to
pre_fielding, all in one transaction. The raw checklist is then offered to
prefield_checklist_captured receivers (training capture) after commit.
"""

import logging

from django.db import transaction

from ..authorization import require
from ..choices import DependencyType, JobStatus
from ..conf import capture_checklists
from ..exceptions import ValidationError
from ..models import Job
from ..signals import prefield_checklist_captured, send_after_commit
from .dependencies import create_dependency
from .jobs import transition

logger = logging.getLogger(__name__)


def validate_checklist(checklist) -> dict:
    """Check shape and keys; return a normalized copy."""
    if not isinstance(checklist, dict):
        raise ValidationError("Checklist must be an object", field="checklist")

    normalized = {}
    for key, item in checklist.items():
        if key not in DependencyType.values:
            raise ValidationError(f"Unknown checklist item '{key}'", field=f"checklist.{key}")
        if not isinstance(item, dict) or not isinstance(item.get("checked"), bool):
            raise ValidationError(
                f"Checklist item '{key}' needs a boolean 'checked'",
                field=f"checklist.{key}",
            )
        notes = item.get("notes") or ""
        if not isinstance(notes, str):
            raise ValidationError(
                f"Checklist item '{key}' notes must be text", field=f"checklist.{key}"
            )
        normalized[key] = {"checked": item["checked"], "notes": notes.strip()}
    return normalized


def apply_checklist(job: Job, checklist: dict, actor) -> Job:
    """
    Turn checked items into dependencies and move the job to pre_fielding.

    Either every dependency is created and the job moves, or nothing
    changes. Capture receivers run after commit; their failures are logged.

    Raises:
        Forbidden: actor may not add dependencies or pre-field the job
        ValidationError: malformed checklist
        InvalidTransition: from the pre_fielding transition
    """
    require(actor, "dependency.add")
    items = validate_checklist(checklist)

    with transaction.atomic():
        created = [
            create_dependency(job, key, notes=item["notes"])
            for key, item in items.items()
            if item["checked"]
        ]
        transition(job, JobStatus.PRE_FIELDING, actor)

        if capture_checklists():
            send_after_commit(
                prefield_checklist_captured,
                sender=Job,
                job=job,
                checklist=checklist,
                actor=actor,
            )

    logger.info("Job %s: pre-field checklist created %d dependencies", job.pk, len(created))
    return job
