"""django-workorders services.

Re-exports all services for convenient importing.
"""

from .dependencies import (
    add_dependency,
    cycle_dependency,
    get_dependency,
    list_dependencies,
    set_dependency_status,
)
from .jobs import (
    assign,
    get_allowed_transitions,
    get_job,
    transition,
)
from .prefield import apply_checklist, validate_checklist
from .units import (
    adjust,
    approve,
    attach_to_claim,
    create_unit_entry,
    dispute,
    get_by_job,
    get_disputed,
    get_unbilled_by_company,
    get_unit_entry,
    mark_paid,
    resolve_dispute,
    soft_delete,
    submit,
    verify,
)

__all__ = [
    # Job services
    "assign",
    "get_allowed_transitions",
    "get_job",
    "transition",
    # Dependency services
    "add_dependency",
    "cycle_dependency",
    "get_dependency",
    "list_dependencies",
    "set_dependency_status",
    # Pre-field
    "apply_checklist",
    "validate_checklist",
    # Unit ledger
    "adjust",
    "approve",
    "attach_to_claim",
    "create_unit_entry",
    "dispute",
    "get_by_job",
    "get_disputed",
    "get_unbilled_by_company",
    "get_unit_entry",
    "mark_paid",
    "resolve_dispute",
    "soft_delete",
    "submit",
    "verify",
]
