"""
State tables for jobs, dependencies and unit entries.

Pure data plus pure functions; nothing here touches models or the database.
All values are canonical status strings (legacy aliases are resolved before
they reach these tables).
"""

from collections import deque

from .choices import DependencyStatus, JobStatus, UnitStatus


# Main line, QA step, review rejections and the utility go-back loop.
_JOB_EDGES = {
    JobStatus.NEW: [JobStatus.ASSIGNED_TO_GF],
    JobStatus.ASSIGNED_TO_GF: [JobStatus.PRE_FIELDING],
    JobStatus.PRE_FIELDING: [JobStatus.SCHEDULED],
    JobStatus.SCHEDULED: [JobStatus.IN_PROGRESS],
    JobStatus.IN_PROGRESS: [JobStatus.PENDING_GF_REVIEW],
    JobStatus.PENDING_GF_REVIEW: [
        JobStatus.PENDING_PM_APPROVAL,
        JobStatus.PENDING_QA_REVIEW,
        JobStatus.IN_PROGRESS,
    ],
    JobStatus.PENDING_QA_REVIEW: [
        JobStatus.PENDING_PM_APPROVAL,
        JobStatus.PENDING_GF_REVIEW,
    ],
    JobStatus.PENDING_PM_APPROVAL: [
        JobStatus.READY_TO_SUBMIT,
        JobStatus.PENDING_QA_REVIEW,
        JobStatus.PENDING_GF_REVIEW,
    ],
    JobStatus.READY_TO_SUBMIT: [JobStatus.SUBMITTED],
    JobStatus.SUBMITTED: [JobStatus.BILLED, JobStatus.GO_BACK],
    JobStatus.GO_BACK: [JobStatus.IN_PROGRESS, JobStatus.PENDING_GF_REVIEW],
    JobStatus.BILLED: [JobStatus.INVOICED],
    JobStatus.INVOICED: [],
    # Resume only; never back to an arbitrary prior status.
    JobStatus.STUCK: [JobStatus.PRE_FIELDING],
}

# Billing statuses (and stuck itself) cannot be parked as stuck.
STUCK_EXEMPT = frozenset(str(s) for s in (
    JobStatus.STUCK,
    JobStatus.SUBMITTED,
    JobStatus.BILLED,
    JobStatus.INVOICED,
))


def _build_job_transitions() -> dict[str, list[str]]:
    transitions = {}
    for source, targets in _JOB_EDGES.items():
        targets = [str(t) for t in targets]
        if str(source) not in STUCK_EXEMPT:
            targets.append(str(JobStatus.STUCK))
        transitions[str(source)] = targets
    return transitions


JOB_TRANSITIONS = _build_job_transitions()
JOB_INITIAL_STATE = str(JobStatus.NEW)
JOB_TERMINAL_STATES = [str(JobStatus.INVOICED)]


# action -> (allowed source statuses, target status)
UNIT_ACTIONS = {
    "submit": (frozenset({"draft"}), "submitted"),
    "verify": (frozenset({"submitted"}), "verified"),
    "approve": (frozenset({"verified"}), "approved"),
    "dispute": (frozenset({"submitted", "verified"}), "disputed"),
    "invoice": (frozenset({"approved"}), "invoiced"),
    "pay": (frozenset({"invoiced"}), "paid"),
}

# Dispute resolution is the only way back to the main line.
UNIT_RESOLUTION_TARGETS = {
    "accept": "approved",
    "adjust": "approved",
    "void": "draft",
    "resubmit": "draft",
}


def _build_unit_transitions() -> dict[str, list[str]]:
    transitions = {str(s): [] for s in UnitStatus}
    for sources, target in UNIT_ACTIONS.values():
        for source in sources:
            transitions[str(source)].append(str(target))
    for target in UNIT_RESOLUTION_TARGETS.values():
        if str(target) not in transitions[str(UnitStatus.DISPUTED)]:
            transitions[str(UnitStatus.DISPUTED)].append(str(target))
    return transitions


UNIT_TRANSITIONS = _build_unit_transitions()
UNIT_INITIAL_STATE = str(UnitStatus.DRAFT)
UNIT_TERMINAL_STATES = [str(UnitStatus.PAID)]


DEPENDENCY_CYCLE = [
    str(DependencyStatus.REQUIRED),
    str(DependencyStatus.SCHEDULED),
    str(DependencyStatus.NOT_REQUIRED),
]


def next_dependency_status(status: str) -> str:
    """Next status in the required -> scheduled -> not_required cycle."""
    index = DEPENDENCY_CYCLE.index(status)
    return DEPENDENCY_CYCLE[(index + 1) % len(DEPENDENCY_CYCLE)]


def get_allowed_job_transitions(status: str) -> list[str]:
    """Statuses reachable in one step from a canonical job status."""
    return list(JOB_TRANSITIONS.get(str(status), []))


def is_job_transition_allowed(from_status: str, to_status: str) -> bool:
    return str(to_status) in JOB_TRANSITIONS.get(str(from_status), [])


def reachable_from(start: str, transitions: dict[str, list[str]]) -> set[str]:
    """Statuses reachable from ``start``, start included."""
    seen = {start}
    pending = deque([start])
    while pending:
        for target in transitions.get(pending.popleft(), []):
            if target not in seen:
                seen.add(target)
                pending.append(target)
    return seen


def table_errors(
    name: str,
    statuses: list[str],
    transitions: dict[str, list[str]],
    initial: str,
    terminal: list[str],
) -> list[str]:
    """
    Problems with one status table; empty when it is usable.

    Every status named by an edge must be known, final statuses have no
    way out and every status can be reached from ``initial``.
    """
    known = set(statuses)
    errors = []

    for status in [initial, *terminal]:
        if status not in known:
            errors.append(f"{name}: unknown status '{status}'")

    for source, targets in transitions.items():
        for status in (source, *targets):
            if status not in known:
                errors.append(f"{name}: edge from '{source}' names unknown status '{status}'")

    for status in terminal:
        if transitions.get(status):
            errors.append(f"{name}: final status '{status}' has outgoing edges")

    if initial in known:
        for status in sorted(known - reachable_from(initial, transitions)):
            errors.append(f"{name}: '{status}' cannot be reached from '{initial}'")

    return errors


def state_table_errors() -> list[str]:
    """Check the job and unit tables together."""
    return table_errors(
        "job", JobStatus.values, JOB_TRANSITIONS, JOB_INITIAL_STATE, JOB_TERMINAL_STATES,
    ) + table_errors(
        "unit", UnitStatus.values, UNIT_TRANSITIONS, UNIT_INITIAL_STATE, UNIT_TERMINAL_STATES,
    )
