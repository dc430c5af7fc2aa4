"""Enumerated values shared by the work-order models and state tables.

Legacy job status strings are not members of ``JobStatus``. They are
translated with ``resolve_status()`` at the service boundary before any
transition rule sees them.
"""

from django.db import models


class JobStatus(models.TextChoices):
    """Canonical job workflow statuses."""

    NEW = "new", "New"
    ASSIGNED_TO_GF = "assigned_to_gf", "Assigned to GF"
    PRE_FIELDING = "pre_fielding", "Pre-Fielding"
    SCHEDULED = "scheduled", "Scheduled"
    STUCK = "stuck", "Stuck"
    IN_PROGRESS = "in_progress", "In Progress"
    PENDING_GF_REVIEW = "pending_gf_review", "Pending GF Review"
    PENDING_QA_REVIEW = "pending_qa_review", "Pending QA Review"
    PENDING_PM_APPROVAL = "pending_pm_approval", "Pending PM Approval"
    READY_TO_SUBMIT = "ready_to_submit", "Ready to Submit"
    SUBMITTED = "submitted", "Submitted"
    GO_BACK = "go_back", "Go-Back"
    BILLED = "billed", "Billed"
    INVOICED = "invoiced", "Invoiced"


LEGACY_STATUS_MAP = {
    "pending": JobStatus.NEW,
    "pre-field": JobStatus.PRE_FIELDING,
    "in-progress": JobStatus.IN_PROGRESS,
    "completed": JobStatus.READY_TO_SUBMIT,
}


def resolve_status(status: str) -> str:
    """Map a legacy alias onto its canonical status; other values pass through."""
    if not status or not isinstance(status, str):
        return status
    return str(LEGACY_STATUS_MAP.get(status, status))


def is_legacy_status(status: str) -> bool:
    return status in LEGACY_STATUS_MAP


class DependencyType(models.TextChoices):
    """Pre-field coordination item types (also the checklist keys)."""

    USA = "usa", "USA"
    VEGETATION = "vegetation", "Vegetation"
    TRAFFIC_CONTROL = "traffic_control", "Traffic Control"
    NO_PARKS = "no_parks", "No Parks"
    CWC = "cwc", "CWC"
    AFW_TYPE = "afw_type", "AFW Type"
    SPECIAL_EQUIPMENT = "special_equipment", "Special Equipment"
    CIVIL = "civil", "Civil"


# Default dependency descriptions when the checklist item has no notes.
DEPENDENCY_DESCRIPTIONS = {
    DependencyType.USA.value: "Underground utility locate needed",
    DependencyType.VEGETATION.value: "Vegetation management needed",
    DependencyType.TRAFFIC_CONTROL.value: "TC plan or flaggers needed",
    DependencyType.NO_PARKS.value: "No parks restriction applies",
    DependencyType.CWC.value: "CWC coordination required",
    DependencyType.AFW_TYPE.value: "AFW type specification (if CWC)",
    DependencyType.SPECIAL_EQUIPMENT.value: "Special equipment needed",
    DependencyType.CIVIL.value: "Trenching, boring, or excavation",
}


class DependencyStatus(models.TextChoices):
    REQUIRED = "required", "Required"
    SCHEDULED = "scheduled", "Scheduled"
    NOT_REQUIRED = "not_required", "Not Required"


class UnitStatus(models.TextChoices):
    """Unit entry (digital receipt) billing statuses."""

    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    VERIFIED = "verified", "Verified"
    DISPUTED = "disputed", "Disputed"
    APPROVED = "approved", "Approved"
    INVOICED = "invoiced", "Invoiced"
    PAID = "paid", "Paid"


class DisputeCategory(models.TextChoices):
    QUANTITY = "quantity", "Quantity"
    RATE = "rate", "Rate"
    QUALITY = "quality", "Quality"
    LOCATION = "location", "Location"
    PHOTO = "photo", "Photo"
    DUPLICATE = "duplicate", "Duplicate"
    OTHER = "other", "Other"


class DisputeAction(models.TextChoices):
    """How a dispute is closed out."""

    ACCEPT = "accept", "Accept"
    ADJUST = "adjust", "Adjust"
    VOID = "void", "Void"
    RESUBMIT = "resubmit", "Resubmit"


class ContractorTier(models.TextChoices):
    PRIME = "prime", "Prime"
    SUB = "sub", "Subcontractor"
    SUB_OF_SUB = "sub_of_sub", "Sub-of-Sub"


class WorkCategory(models.TextChoices):
    ELECTRICAL = "electrical", "Electrical"
    CIVIL = "civil", "Civil"
    OVERHEAD = "overhead", "Overhead"
    UNDERGROUND = "underground", "Underground"
    TRAFFIC_CONTROL = "traffic_control", "Traffic Control"
    VEGETATION = "vegetation", "Vegetation"
    INSPECTION = "inspection", "Inspection"
    EMERGENCY = "emergency", "Emergency"
    OTHER = "other", "Other"


class GPSQuality(models.TextChoices):
    HIGH = "high", "High"
    MEDIUM = "medium", "Medium"
    LOW = "low", "Low"
    NONE = "none", "None"


class PhotoType(models.TextChoices):
    BEFORE = "before", "Before"
    DURING = "during", "During"
    AFTER = "after", "After"
    MEASUREMENT = "measurement", "Measurement"
    ISSUE = "issue", "Issue"
    VERIFICATION = "verification", "Verification"
    OTHER = "other", "Other"


class Role(models.TextChoices):
    """Field organization roles, lowest authority first."""

    CREW = "crew", "Crew"
    FOREMAN = "foreman", "Foreman"
    GF = "gf", "General Foreman"
    QA = "qa", "QA"
    PM = "pm", "Project Manager"
    ADMIN = "admin", "Administrator"
