"""JSON API views for django-workorders.

Authentication is handled outside this app; ``request.user`` is the acting
user and their role comes from Actor.for_user(). WorkOrderError subclasses
are answered with their ``status_code`` and ``to_dict()`` body.
"""

import json
import logging
from functools import wraps

from django.contrib.auth import get_user_model
from django.http import JsonResponse
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from . import services
from .authorization import Actor
from .exceptions import InvalidTransition, NotFound, ValidationError, WorkOrderError

logger = logging.getLogger(__name__)


def api_view(view):
    """Parse the JSON body, resolve the actor and map errors to responses."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"error": "Authentication required"}, status=401)
        try:
            if request.body:
                body = json.loads(request.body)
                if not isinstance(body, dict):
                    raise ValidationError("Request body must be a JSON object")
            else:
                body = {}
        except json.JSONDecodeError:
            return JsonResponse({"error": "Invalid JSON"}, status=400)
        except ValidationError as e:
            return JsonResponse(e.to_dict(), status=e.status_code)

        request.actor = Actor.for_user(request.user)
        try:
            return view(request, body, *args, **kwargs)
        except WorkOrderError as e:
            return JsonResponse(e.to_dict(), status=e.status_code)

    return wrapper


def _param(body: dict, *names, default=None):
    for name in names:
        if body.get(name) not in (None, ""):
            return body[name]
    return default


def _date(value, field: str):
    if value in (None, ""):
        return None
    parsed = parse_date(str(value)[:10])
    if parsed is None:
        raise ValidationError(f"'{value}' is not a valid date", field=field)
    return parsed


def _iso(value):
    return value.isoformat() if value else None


def _str(value):
    return str(value) if value is not None else None


def serialize_job(job) -> dict:
    return {
        "id": job.pk,
        "company_id": job.company_id,
        "wo_number": job.wo_number,
        "pm_number": job.pm_number,
        "address": job.address,
        "city": job.city,
        "status": job.status,
        "assigned_to_gf": job.assigned_to_gf_id,
        "assigned_to_gf_at": _iso(job.assigned_to_gf_at),
        "pre_field_date": _iso(job.pre_field_date),
        "assigned_to": job.assigned_to_id,
        "assigned_at": _iso(job.assigned_at),
        "crew_scheduled_date": _iso(job.crew_scheduled_date),
        "crew_scheduled_end_date": _iso(job.crew_scheduled_end_date),
        "assignment_notes": job.assignment_notes,
        "stuck_reason": job.stuck_reason,
        "stuck_at": _iso(job.stuck_at),
        "crew_submitted_at": _iso(job.crew_submitted_at),
        "completed_at": _iso(job.completed_at),
        "utility_submitted_at": _iso(job.utility_submitted_at),
        "has_failed_audit": job.has_failed_audit,
        "billed_at": _iso(job.billed_at),
        "invoiced_at": _iso(job.invoiced_at),
    }


def serialize_dependency(dependency) -> dict:
    return {
        "id": dependency.pk,
        "type": dependency.type,
        "status": dependency.status,
        "description": dependency.description,
        "scheduled_date": _iso(dependency.scheduled_date),
        "ticket_number": dependency.ticket_number,
        "notes": dependency.notes,
    }


def serialize_unit_entry(entry) -> dict:
    return {
        "id": entry.pk,
        "job": entry.job_id,
        "company_id": entry.company_id,
        "claim_id": entry.claim_id,
        "item_code": entry.item_code,
        "description": entry.description,
        "unit": entry.unit,
        "quantity": _str(entry.quantity),
        "unit_price": _str(entry.unit_price),
        "total_amount": _str(entry.total_amount),
        "location": {
            "latitude": _str(entry.latitude),
            "longitude": _str(entry.longitude),
            "accuracy": _str(entry.gps_accuracy),
            "captured_at": _iso(entry.location_captured_at),
        },
        "gps_quality": entry.gps_quality,
        "performed_by_tier": entry.performed_by_tier,
        "work_category": entry.work_category,
        "work_date": _iso(entry.work_date),
        "status": entry.status,
        "submitted_at": _iso(entry.submitted_at),
        "verified_at": _iso(entry.verified_at),
        "approved_at": _iso(entry.approved_at),
        "is_disputed": entry.is_disputed,
        "dispute_reason": entry.dispute_reason,
        "dispute_category": entry.dispute_category,
        "dispute_resolved_at": _iso(entry.dispute_resolved_at),
        "is_deleted": entry.is_deleted,
    }


# =============================================================================
# Jobs
# =============================================================================

@csrf_exempt
@require_http_methods(["PUT"])
@api_view
def job_status(request, body, job_id):
    """Transition a job. Unreachable edges answer 400 on this route."""
    job = services.get_job(job_id)
    status = _param(body, "status")
    if not status:
        raise ValidationError("Status is required", field="status")
    try:
        services.transition(job, status, request.actor, reason=_param(body, "reason"))
    except InvalidTransition as e:
        return JsonResponse(e.to_dict(), status=400)
    return JsonResponse(serialize_job(job))


@csrf_exempt
@require_http_methods(["PUT"])
@api_view
def job_assign(request, body, job_id):
    job = services.get_job(job_id)
    user_id = _param(body, "userId", "user_id")
    if user_id is None:
        raise ValidationError("userId is required", field="userId")
    try:
        user = get_user_model().objects.get(pk=user_id)
    except (get_user_model().DoesNotExist, ValueError, TypeError):
        raise NotFound("User", user_id)

    services.assign(
        job,
        user,
        _date(_param(body, "crewScheduledDate", "crew_scheduled_date"), "crewScheduledDate"),
        crew_scheduled_end_date=_date(
            _param(body, "crewScheduledEndDate", "crew_scheduled_end_date"),
            "crewScheduledEndDate",
        ),
        notes=_param(body, "assignmentNotes", "assignment_notes"),
        actor=request.actor,
    )
    return JsonResponse(serialize_job(job))


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
def job_dependencies(request, body, job_id):
    job = services.get_job(job_id)
    if request.method == "GET":
        return JsonResponse({
            "dependencies": [serialize_dependency(d) for d in services.list_dependencies(job)],
        })

    dependency = services.add_dependency(
        job,
        _param(body, "type"),
        request.actor,
        description=_param(body, "description", default=""),
        notes=_param(body, "notes", default=""),
        ticket_number=_param(body, "ticketNumber", "ticket_number", default=""),
    )
    status = _param(body, "status")
    if status and status != dependency.status:
        dependency = services.set_dependency_status(
            job, dependency.pk, status, request.actor,
            scheduled_date=_date(_param(body, "scheduledDate", "scheduled_date"), "scheduledDate"),
        )
    return JsonResponse(serialize_dependency(dependency), status=201)


@csrf_exempt
@require_http_methods(["PUT"])
@api_view
def job_dependency_detail(request, body, job_id, dependency_id):
    job = services.get_job(job_id)
    status = _param(body, "status")
    if not status:
        raise ValidationError("Status is required", field="status")
    dependency = services.set_dependency_status(
        job, dependency_id, status, request.actor,
        scheduled_date=_date(_param(body, "scheduledDate", "scheduled_date"), "scheduledDate"),
    )
    return JsonResponse(serialize_dependency(dependency))


@csrf_exempt
@require_http_methods(["POST"])
@api_view
def job_dependency_cycle(request, body, job_id, dependency_id):
    job = services.get_job(job_id)
    dependency = services.cycle_dependency(
        job, dependency_id, request.actor,
        scheduled_date=_date(_param(body, "scheduledDate", "scheduled_date"), "scheduledDate"),
    )
    return JsonResponse(serialize_dependency(dependency))


@csrf_exempt
@require_http_methods(["POST"])
@api_view
def job_prefield_checklist(request, body, job_id):
    job = services.get_job(job_id)
    checklist = _param(body, "decisions", "checklist", default={})
    services.apply_checklist(job, checklist, request.actor)
    data = serialize_job(job)
    data["dependencies"] = [serialize_dependency(d) for d in services.list_dependencies(job)]
    return JsonResponse(data)


# =============================================================================
# Unit entries
# =============================================================================

@csrf_exempt
@require_http_methods(["PUT"])
@api_view
def unit_action(request, body, entry_id, action):
    entry = services.get_unit_entry(entry_id)
    actor = request.actor

    if action == "submit":
        services.submit(entry, actor)
    elif action == "verify":
        services.verify(entry, actor, notes=_param(body, "notes", default=""))
    elif action == "approve":
        services.approve(entry, actor, notes=_param(body, "notes", default=""))
    elif action == "dispute":
        services.dispute(
            entry, actor,
            reason=_param(body, "reason", default=""),
            category=_param(body, "category"),
        )
    elif action == "resolve-dispute":
        services.resolve_dispute(
            entry, actor,
            resolution=_param(body, "resolution", default=""),
            action=_param(body, "action"),
            adjusted_quantity=_param(body, "adjustedQuantity", "adjusted_quantity"),
            reason=_param(body, "reason", default=""),
        )
    else:
        raise NotFound("Action", action)

    return JsonResponse(serialize_unit_entry(entry))


@csrf_exempt
@require_http_methods(["DELETE"])
@api_view
def unit_detail(request, body, entry_id):
    entry = services.get_unit_entry(entry_id)
    services.soft_delete(entry, request.actor, _param(body, "reason", default=""))
    return JsonResponse({"id": entry.pk, "is_deleted": True})


@require_GET
@api_view
def job_units(request, body, job_id):
    job = services.get_job(job_id)
    include_deleted = request.GET.get("include_deleted", "").lower() in ("1", "true", "yes")
    entries = services.get_by_job(job, include_deleted=include_deleted)
    return JsonResponse({"units": [serialize_unit_entry(e) for e in entries]})


def _company_id(request) -> str:
    company_id = request.GET.get("company_id")
    if company_id:
        return company_id
    crew_member = getattr(request.user, "crew_member", None)
    if crew_member is not None and crew_member.company_id:
        return crew_member.company_id
    raise ValidationError("company_id is required", field="company_id")


@require_GET
@api_view
def units_unbilled(request, body):
    entries = services.get_unbilled_by_company(_company_id(request))
    return JsonResponse({"units": [serialize_unit_entry(e) for e in entries]})


@require_GET
@api_view
def units_disputed(request, body):
    entries = services.get_disputed(_company_id(request))
    return JsonResponse({"units": [serialize_unit_entry(e) for e in entries]})
