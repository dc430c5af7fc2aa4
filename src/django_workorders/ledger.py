"""
Pure unit-entry ledger rules.

Each function validates an action against an in-memory UnitEntry, stamps
the fields it changes and returns their names. Nothing is saved here;
services.units persists the result inside a transaction.

Amounts are Decimals quantized to cents (ROUND_HALF_UP).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.utils import timezone

from .authorization import require
from .choices import ContractorTier, DisputeAction, DisputeCategory, UnitStatus, WorkCategory
from .exceptions import InvalidTransition, ValidationError
from .graph import UNIT_ACTIONS, UNIT_RESOLUTION_TARGETS

CENTS = Decimal("0.01")

# Stamp fields written by each main-line action: (at, by, notes)
_ACTION_STAMPS = {
    "submit": ("submitted_at", "submitted_by", None),
    "verify": ("verified_at", "verified_by", "verification_notes"),
    "approve": ("approved_at", "approved_by", "approval_notes"),
    "invoice": ("invoiced_at", None, None),
    "pay": ("paid_at", None, None),
}


def to_amount(value, name: str = "amount") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{name} must be a number", field=name)
    if not amount.is_finite():
        raise ValidationError(f"{name} must be a number", field=name)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_total(quantity, unit_price) -> Decimal:
    """round(quantity * unit_price, 2)"""
    return (Decimal(str(quantity)) * Decimal(str(unit_price))).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )


def validate_quantity(value, name: str = "quantity") -> Decimal:
    quantity = to_amount(value, name)
    if quantity <= 0:
        raise ValidationError(f"{name} must be greater than zero", field=name)
    return quantity


def validate_performed_by(performed_by: dict) -> dict:
    """
    Check tier-specific identity and return UnitEntry field values.

    prime needs a foreman (name or user), sub needs the subcontractor name,
    sub_of_sub additionally needs the prime contractor's name.
    """
    if not isinstance(performed_by, dict):
        raise ValidationError("performed_by is required", field="performed_by")

    tier = performed_by.get("tier")
    if tier not in ContractorTier.values:
        raise ValidationError(f"Invalid contractor tier '{tier}'", field="performed_by.tier")
    category = performed_by.get("work_category")
    if category not in WorkCategory.values:
        raise ValidationError(
            f"Invalid work category '{category}'", field="performed_by.work_category"
        )

    fields = {
        "performed_by_tier": tier,
        "work_category": category,
        "foreman": performed_by.get("foreman"),
        "foreman_name": (performed_by.get("foreman_name") or "").strip(),
        "sub_contractor_name": (performed_by.get("sub_contractor_name") or "").strip(),
        "sub_contractor_license": (performed_by.get("sub_contractor_license") or "").strip(),
        "prime_contractor_name": (performed_by.get("prime_contractor_name") or "").strip(),
    }

    if tier == ContractorTier.PRIME and not (fields["foreman"] or fields["foreman_name"]):
        raise ValidationError("Prime work requires a foreman", field="performed_by.foreman_name")
    if tier in (ContractorTier.SUB, ContractorTier.SUB_OF_SUB) and not fields["sub_contractor_name"]:
        raise ValidationError(
            "Subcontracted work requires the subcontractor name",
            field="performed_by.sub_contractor_name",
        )
    if tier == ContractorTier.SUB_OF_SUB and not fields["prime_contractor_name"]:
        raise ValidationError(
            "Sub-of-sub work requires the prime contractor name",
            field="performed_by.prime_contractor_name",
        )
    return fields


def validate_photo_evidence(photos, photo_waived: bool, photo_waived_reason: str) -> None:
    if photos:
        return
    if not photo_waived:
        raise ValidationError("At least one photo is required", field="photos")
    if not (photo_waived_reason or "").strip():
        raise ValidationError(
            "A reason is required to waive photos", field="photo_waived_reason"
        )


def _require_status(entry, action: str) -> str:
    sources, target = UNIT_ACTIONS[action]
    if str(entry.status) not in sources:
        raise InvalidTransition(
            entry.status, target,
            f"Cannot {action} an entry in status '{entry.status}'",
        )
    return target


def apply_action(entry, action: str, actor, notes: str = None, now=None) -> list[str]:
    """Run a main-line action: submit, verify, approve, invoice or pay."""
    target = _require_status(entry, action)
    require(actor, f"unit.{action}")

    at_field, by_field, notes_field = _ACTION_STAMPS[action]
    entry.status = target
    setattr(entry, at_field, now or timezone.now())
    changed = ["status", at_field]
    if by_field:
        setattr(entry, by_field, getattr(actor, "user", None))
        changed.append(by_field)
    if notes_field and notes is not None:
        setattr(entry, notes_field, notes)
        changed.append(notes_field)
    return changed


def apply_dispute(entry, actor, reason: str, category: str, now=None) -> list[str]:
    target = _require_status(entry, "dispute")
    require(actor, "unit.dispute")
    if not (reason or "").strip():
        raise ValidationError("A dispute reason is required", field="reason")
    if category not in DisputeCategory.values:
        raise ValidationError(f"Invalid dispute category '{category}'", field="category")

    entry.status = target
    entry.is_disputed = True
    entry.disputed_at = now or timezone.now()
    entry.disputed_by = getattr(actor, "user", None)
    entry.dispute_reason = reason.strip()
    entry.dispute_category = category
    entry.dispute_resolution = ""
    entry.dispute_resolved_at = None
    entry.dispute_resolved_by = None
    return [
        "status",
        "is_disputed",
        "disputed_at",
        "disputed_by",
        "dispute_reason",
        "dispute_category",
        "dispute_resolution",
        "dispute_resolved_at",
        "dispute_resolved_by",
    ]


def build_adjustment(entry, actor, new_quantity, new_total, reason: str, now=None):
    """
    Apply a quantity/total correction and return the unsaved UnitAdjustment.

    Status is never changed.
    """
    from .models import UnitAdjustment

    require(actor, "unit.adjust")
    if not (reason or "").strip():
        raise ValidationError("An adjustment reason is required", field="reason")
    new_quantity = validate_quantity(new_quantity, "new_quantity")
    new_total = to_amount(new_total, "new_total")
    if new_total < 0:
        raise ValidationError("new_total cannot be negative", field="new_total")

    adjustment = UnitAdjustment(
        entry=entry,
        adjusted_by=getattr(actor, "user", None),
        original_quantity=entry.quantity,
        new_quantity=new_quantity,
        original_total=entry.total_amount,
        new_total=new_total,
        reason=reason.strip(),
        adjusted_at=now or timezone.now(),
    )
    entry.quantity = new_quantity
    entry.total_amount = new_total
    return adjustment


def apply_soft_delete(entry, actor, reason: str, now=None) -> list[str]:
    """Drafts may be deleted by any role; anything further along needs admin."""
    if entry.status == UnitStatus.DRAFT:
        require(actor, "unit.delete")
    else:
        require(actor, "unit.delete_any")
    if not (reason or "").strip():
        raise ValidationError("A delete reason is required", field="reason")

    entry.is_deleted = True
    entry.deleted_at = now or timezone.now()
    entry.deleted_by = getattr(actor, "user", None)
    entry.delete_reason = reason.strip()
    return ["is_deleted", "deleted_at", "deleted_by", "delete_reason"]


def resolve_dispute(
    entry,
    actor,
    resolution: str,
    action: str,
    adjusted_quantity=None,
    reason: str = "",
    now=None,
):
    """
    Close an open dispute.

    Returns (changed_fields, adjustment); adjustment is None unless the
    action is ``adjust``.
    """
    if entry.status != UnitStatus.DISPUTED or entry.dispute_resolved_at is not None:
        raise InvalidTransition(
            entry.status, "resolved", "Entry has no open dispute"
        )
    require(actor, "unit.resolve_dispute")
    if action not in DisputeAction.values:
        raise ValidationError(f"Invalid resolution action '{action}'", field="action")
    if not (resolution or "").strip():
        raise ValidationError("A resolution is required", field="resolution")

    now = now or timezone.now()
    user = getattr(actor, "user", None)
    adjustment = None
    changed = [
        "status",
        "is_disputed",
        "dispute_resolution",
        "dispute_resolved_at",
        "dispute_resolved_by",
    ]

    if action == DisputeAction.ADJUST:
        if adjusted_quantity is None:
            raise ValidationError(
                "adjusted_quantity is required to adjust", field="adjusted_quantity"
            )
        quantity = validate_quantity(adjusted_quantity, "adjusted_quantity")
        if quantity == entry.quantity:
            raise ValidationError(
                "adjusted_quantity must differ from the current quantity",
                field="adjusted_quantity",
            )
        adjustment = build_adjustment(
            entry,
            actor,
            quantity,
            compute_total(quantity, entry.unit_price),
            reason or resolution,
            now=now,
        )
        changed += ["quantity", "total_amount"]
    elif action == DisputeAction.VOID:
        entry.is_deleted = True
        entry.deleted_at = now
        entry.deleted_by = user
        entry.delete_reason = resolution.strip()
        changed += ["is_deleted", "deleted_at", "deleted_by", "delete_reason"]

    if action in (DisputeAction.ACCEPT, DisputeAction.ADJUST):
        entry.approved_at = now
        entry.approved_by = user
        changed += ["approved_at", "approved_by"]

    entry.status = UNIT_RESOLUTION_TARGETS[str(action)]
    entry.is_disputed = False
    entry.dispute_resolution = resolution.strip()
    entry.dispute_resolved_at = now
    entry.dispute_resolved_by = user
    return changed, adjustment
