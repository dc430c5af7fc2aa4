"""Unit entry (digital receipt) ledger services.

Provides:
- create_unit_entry: Snapshot a price-book rate into a new draft entry
- submit / verify / approve / dispute / resolve_dispute: status actions
- adjust: Append a quantity/total correction
- soft_delete: Hide an entry, keeping it for the audit trail
- attach_to_claim / mark_paid: Billing hand-off
- get_by_job / get_unbilled_by_company / get_disputed: Read-only queries

Soft-deleted entries are invisible to every mutating call here.
"""

import logging

from django.db import transaction

from .. import ledger
from ..authorization import require
from ..choices import PhotoType, UnitStatus
from ..exceptions import InvalidTransition, NotFound, ValidationError
from ..gps import Location
from ..models import Job, PriceBookItem, UnitEntry, UnitPhoto

logger = logging.getLogger(__name__)


def get_unit_entry(entry_id) -> UnitEntry:
    """Fetch a live (not soft-deleted) entry or raise NotFound."""
    try:
        return UnitEntry.objects.active().get(pk=entry_id)
    except (UnitEntry.DoesNotExist, ValueError, TypeError):
        raise NotFound("UnitEntry", entry_id)


def _ensure_live(entry: UnitEntry) -> UnitEntry:
    if entry.is_deleted:
        raise NotFound("UnitEntry", entry.pk)
    return entry


def _save(entry: UnitEntry, changed) -> UnitEntry:
    entry.save(update_fields=sorted(set(changed)) + ["updated_at"])
    return entry


def _photo_rows(photos) -> list[dict]:
    rows = []
    for photo in photos or ():
        if not isinstance(photo, dict) or not photo.get("url"):
            raise ValidationError("Each photo needs a url", field="photos")
        photo_type = photo.get("photo_type") or PhotoType.AFTER
        if photo_type not in PhotoType.values:
            raise ValidationError(f"Invalid photo type '{photo_type}'", field="photos")
        location = None
        if photo.get("latitude") is not None and photo.get("longitude") is not None:
            location = Location.from_dict(photo)
        rows.append({
            "url": photo["url"],
            "file_name": photo.get("file_name", ""),
            "latitude": location.latitude if location else None,
            "longitude": location.longitude if location else None,
            "gps_accuracy": location.accuracy if location else None,
            "captured_at": location.captured_at if location else None,
            "photo_type": photo_type,
            "description": photo.get("description", ""),
        })
    return rows


@transaction.atomic
def create_unit_entry(
    job: Job,
    actor,
    price_book_item: PriceBookItem,
    quantity,
    work_date,
    location,
    performed_by: dict,
    photos=(),
    photo_waived: bool = False,
    photo_waived_reason: str = "",
    notes: str = "",
) -> UnitEntry:
    """
    Create a draft entry with the price-book rate locked in.

    ``location`` is a gps.Location or a dict accepted by Location.from_dict.
    total_amount = round(quantity * unit_price, 2).

    Raises:
        ValidationError: bad quantity, location, photos/waiver or tier fields
        Forbidden: actor's role may not create entries
    """
    require(actor, "unit.create")
    if price_book_item is None:
        raise ValidationError("A price book item is required", field="price_book_item")
    if work_date is None:
        raise ValidationError("Work date is required", field="work_date")

    quantity = ledger.validate_quantity(quantity)
    if not isinstance(location, Location):
        location = Location.from_dict(location)
    performer = ledger.validate_performed_by(performed_by)
    ledger.validate_photo_evidence(photos, photo_waived, photo_waived_reason)
    photo_rows = _photo_rows(photos)

    user = getattr(actor, "user", None)
    entry = UnitEntry.objects.create(
        job=job,
        company_id=job.company_id,
        price_book_item=price_book_item,
        item_code=price_book_item.item_code,
        description=price_book_item.description,
        unit=price_book_item.unit,
        category=price_book_item.category,
        quantity=quantity,
        unit_price=price_book_item.unit_price,
        total_amount=ledger.compute_total(quantity, price_book_item.unit_price),
        latitude=location.latitude,
        longitude=location.longitude,
        gps_accuracy=location.accuracy,
        location_captured_at=location.captured_at,
        photo_waived=bool(photo_waived) and not photo_rows,
        photo_waived_reason=(photo_waived_reason or "").strip() if not photo_rows else "",
        photo_waived_by=user if photo_waived and not photo_rows else None,
        work_date=work_date,
        entered_by=user,
        notes=notes or "",
        status=UnitStatus.DRAFT,
        **performer,
    )
    for row in photo_rows:
        if row["captured_at"] is None:
            row["captured_at"] = location.captured_at
        UnitPhoto.objects.create(entry=entry, **row)

    logger.info(
        "Unit entry %s created on job %s: %s x %s = %s",
        entry.pk, job.pk, entry.quantity, entry.unit_price, entry.total_amount,
    )
    return entry


def _run_action(entry: UnitEntry, action: str, actor, notes: str = None) -> UnitEntry:
    _ensure_live(entry)
    from_status = entry.status
    changed = ledger.apply_action(entry, action, actor, notes=notes)
    _save(entry, changed)
    logger.info("Unit entry %s %s: %s -> %s", entry.pk, action, from_status, entry.status)
    return entry


@transaction.atomic
def submit(entry: UnitEntry, actor) -> UnitEntry:
    """draft -> submitted"""
    return _run_action(entry, "submit", actor)


@transaction.atomic
def verify(entry: UnitEntry, actor, notes: str = "") -> UnitEntry:
    """submitted -> verified"""
    return _run_action(entry, "verify", actor, notes=notes)


@transaction.atomic
def approve(entry: UnitEntry, actor, notes: str = "") -> UnitEntry:
    """verified -> approved; InvalidTransition from any other status."""
    return _run_action(entry, "approve", actor, notes=notes)


@transaction.atomic
def dispute(entry: UnitEntry, actor, reason: str, category: str) -> UnitEntry:
    """submitted/verified -> disputed"""
    _ensure_live(entry)
    changed = ledger.apply_dispute(entry, actor, reason, category)
    _save(entry, changed)
    logger.info("Unit entry %s disputed (%s)", entry.pk, entry.dispute_category)
    return entry


@transaction.atomic
def resolve_dispute(
    entry: UnitEntry,
    actor,
    resolution: str,
    action: str,
    adjusted_quantity=None,
    reason: str = "",
) -> UnitEntry:
    """
    Close an open dispute.

    accept -> approved, adjust -> adjustment appended then approved,
    void -> soft-deleted draft, resubmit -> draft.
    """
    _ensure_live(entry)
    changed, adjustment = ledger.resolve_dispute(
        entry, actor, resolution, action,
        adjusted_quantity=adjusted_quantity, reason=reason,
    )
    if adjustment is not None:
        adjustment.save()
    _save(entry, changed)
    logger.info("Unit entry %s dispute resolved with %s", entry.pk, action)
    return entry


@transaction.atomic
def adjust(entry: UnitEntry, actor, new_quantity, new_total, reason: str) -> UnitEntry:
    """Record a correction; quantity and total_amount take the new values."""
    _ensure_live(entry)
    adjustment = ledger.build_adjustment(entry, actor, new_quantity, new_total, reason)
    adjustment.save()
    _save(entry, ["quantity", "total_amount"])
    logger.info(
        "Unit entry %s adjusted %s -> %s",
        entry.pk, adjustment.original_total, adjustment.new_total,
    )
    return entry


@transaction.atomic
def soft_delete(entry: UnitEntry, actor, reason: str) -> UnitEntry:
    _ensure_live(entry)
    changed = ledger.apply_soft_delete(entry, actor, reason)
    _save(entry, changed)
    logger.info("Unit entry %s soft-deleted", entry.pk)
    return entry


@transaction.atomic
def attach_to_claim(entry: UnitEntry, claim_id: str, actor) -> UnitEntry:
    """approved -> invoiced, recording the billing claim."""
    _ensure_live(entry)
    if not claim_id:
        raise ValidationError("A claim id is required", field="claim_id")
    if entry.claim_id:
        raise InvalidTransition(
            entry.status, UnitStatus.INVOICED,
            f"Entry already belongs to claim '{entry.claim_id}'",
        )
    changed = ledger.apply_action(entry, "invoice", actor)
    entry.claim_id = str(claim_id)
    _save(entry, changed + ["claim_id"])
    logger.info("Unit entry %s attached to claim %s", entry.pk, entry.claim_id)
    return entry


@transaction.atomic
def mark_paid(entry: UnitEntry, actor) -> UnitEntry:
    """invoiced -> paid"""
    return _run_action(entry, "pay", actor)


def get_by_job(job, include_deleted: bool = False):
    return UnitEntry.objects.for_job(job, include_deleted=include_deleted)


def get_unbilled_by_company(company_id: str):
    return UnitEntry.objects.unbilled(company_id)


def get_disputed(company_id: str):
    return UnitEntry.objects.open_disputes(company_id)
