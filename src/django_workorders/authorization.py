"""
Role gate for job transitions and ledger actions.

The permission tables are plain data so they can be audited and tested
without the controllers:

- JOB_EDGE_ROLES: (from_status, to_status) -> roles allowed to move a job
- ACTION_ROLES: "unit.<action>" / "dependency.<action>" -> roles

``admin`` passes every check. Anything not listed is denied.

Usage:
    actor = Actor.for_user(request.user)
    if can(actor, ("new", "assigned_to_gf")):
        ...
    require(actor, "unit.approve")  # raises Forbidden
"""

from dataclasses import dataclass

from .choices import JobStatus, Role
from .conf import get_role_resolver
from .exceptions import Forbidden
from .graph import JOB_TRANSITIONS, STUCK_EXEMPT


ALL_ROLES = frozenset(Role)
FIELD_ROLES = frozenset({Role.CREW, Role.FOREMAN, Role.GF, Role.PM, Role.ADMIN})
GF_ROLES = frozenset({Role.GF, Role.PM, Role.ADMIN})
QA_ROLES = frozenset({Role.QA, Role.PM, Role.ADMIN})
PM_ROLES = frozenset({Role.PM, Role.ADMIN})
REVIEW_ROLES = frozenset({Role.GF, Role.QA, Role.PM, Role.ADMIN})
STUCK_ROLES = frozenset({Role.FOREMAN, Role.GF, Role.QA, Role.PM, Role.ADMIN})


_S = JobStatus

_JOB_EDGE_ROLES = {
    (_S.NEW, _S.ASSIGNED_TO_GF): PM_ROLES,
    (_S.ASSIGNED_TO_GF, _S.PRE_FIELDING): GF_ROLES,
    (_S.PRE_FIELDING, _S.SCHEDULED): GF_ROLES,
    (_S.SCHEDULED, _S.IN_PROGRESS): FIELD_ROLES,
    (_S.IN_PROGRESS, _S.PENDING_GF_REVIEW): FIELD_ROLES,
    (_S.PENDING_GF_REVIEW, _S.PENDING_PM_APPROVAL): GF_ROLES,
    (_S.PENDING_GF_REVIEW, _S.PENDING_QA_REVIEW): GF_ROLES,
    (_S.PENDING_GF_REVIEW, _S.IN_PROGRESS): GF_ROLES,
    (_S.PENDING_QA_REVIEW, _S.PENDING_PM_APPROVAL): QA_ROLES,
    (_S.PENDING_QA_REVIEW, _S.PENDING_GF_REVIEW): QA_ROLES,
    (_S.PENDING_PM_APPROVAL, _S.READY_TO_SUBMIT): PM_ROLES,
    (_S.PENDING_PM_APPROVAL, _S.PENDING_QA_REVIEW): PM_ROLES,
    (_S.PENDING_PM_APPROVAL, _S.PENDING_GF_REVIEW): PM_ROLES,
    (_S.READY_TO_SUBMIT, _S.SUBMITTED): PM_ROLES,
    (_S.SUBMITTED, _S.BILLED): PM_ROLES,
    (_S.SUBMITTED, _S.GO_BACK): QA_ROLES,
    (_S.GO_BACK, _S.IN_PROGRESS): REVIEW_ROLES,
    (_S.GO_BACK, _S.PENDING_GF_REVIEW): REVIEW_ROLES,
    (_S.BILLED, _S.INVOICED): PM_ROLES,
    (_S.STUCK, _S.PRE_FIELDING): GF_ROLES,
}
_JOB_EDGE_ROLES.update({
    (source, _S.STUCK): STUCK_ROLES
    for source in JobStatus
    if str(source) not in STUCK_EXEMPT
})

JOB_EDGE_ROLES = {
    (str(source), str(target)): frozenset(str(r) for r in roles)
    for (source, target), roles in _JOB_EDGE_ROLES.items()
}

ACTION_ROLES = {
    "unit.create": ALL_ROLES,
    "unit.submit": ALL_ROLES,
    "unit.verify": REVIEW_ROLES,
    "unit.approve": PM_ROLES,
    "unit.dispute": REVIEW_ROLES,
    "unit.resolve_dispute": GF_ROLES,
    "unit.adjust": GF_ROLES,
    "unit.delete": ALL_ROLES,
    # Deleting anything past draft.
    "unit.delete_any": frozenset({Role.ADMIN}),
    "unit.invoice": PM_ROLES,
    "unit.pay": PM_ROLES,
    "job.assign": GF_ROLES,
    "dependency.add": GF_ROLES,
    "dependency.update": GF_ROLES,
}


@dataclass(frozen=True)
class Actor:
    """Who is acting, and in which role."""

    user: object
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def for_user(cls, user) -> "Actor":
        """
        Resolve a user's role.

        Order: WORKORDERS_ROLE_RESOLVER, the user's CrewMember row,
        superuser -> admin, otherwise crew.
        """
        resolver = get_role_resolver()
        if resolver is not None:
            return cls(user=user, role=str(resolver(user)))

        from .models import CrewMember

        role = CrewMember.objects.filter(user=user).values_list("role", flat=True).first()
        if role:
            return cls(user=user, role=role)
        if getattr(user, "is_superuser", False):
            return cls(user=user, role=Role.ADMIN)
        return cls(user=user, role=Role.CREW)


def edge_key(edge) -> tuple[str, str] | str:
    if isinstance(edge, tuple):
        return (str(edge[0]), str(edge[1]))
    return str(edge)


def allowed_roles(edge) -> frozenset:
    """Roles permitted for a job edge tuple or an action name."""
    key = edge_key(edge)
    if isinstance(key, tuple):
        roles = JOB_EDGE_ROLES.get(key, frozenset())
    else:
        roles = ACTION_ROLES.get(key, frozenset())
    return frozenset(str(r) for r in roles)


def can(actor: Actor, edge) -> bool:
    """Whether ``actor`` may traverse ``edge`` (job edge tuple or action name)."""
    if actor is None:
        return False
    if actor.is_admin:
        return True
    return str(actor.role) in allowed_roles(edge)


def require(actor: Actor, edge) -> None:
    """Raise Forbidden unless ``can(actor, edge)``."""
    if not can(actor, edge):
        key = edge_key(edge)
        label = "->".join(key) if isinstance(key, tuple) else key
        raise Forbidden(getattr(actor, "role", None), label)


def uncovered_job_edges() -> list[tuple[str, str]]:
    """Graph edges with no role entry (should be empty)."""
    missing = []
    for source, targets in JOB_TRANSITIONS.items():
        for target in targets:
            if (source, target) not in JOB_EDGE_ROLES:
                missing.append((source, target))
    return missing
