"""Models for django-workorders.

Provides:
- CrewMember: a user's field role (crew, foreman, gf, qa, pm, admin)
- Job: a unit of contracted field work following the job status workflow
- JobDependency: ordered pre-field coordination items of a job
- JobStatusChange: audit log of all job status changes
- PriceBookItem: price-book line that unit entries snapshot their rate from
- UnitEntry: the "digital receipt" for unit-price billing
- UnitPhoto: GPS-stamped photo evidence for a unit entry
- UnitAdjustment: append-only quantity/total corrections
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from .choices import (
    ContractorTier,
    DependencyStatus,
    DependencyType,
    DisputeCategory,
    GPSQuality,
    JobStatus,
    PhotoType,
    Role,
    UnitStatus,
    WorkCategory,
)
from .exceptions import ImmutableRecord
from .gps import classify_accuracy
from .querysets import JobQuerySet, UnitEntryQuerySet


class WorkOrdersBaseModel(models.Model):
    """Base model with timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class CrewMember(WorkOrdersBaseModel):
    """Field role of a user inside a contractor company."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="crew_member",
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CREW,
    )
    company_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        db_index=True,
        help_text="Owning company reference",
    )

    class Meta:
        ordering = ["user_id"]

    def __str__(self):
        return f"{self.user} ({self.role})"


class Job(WorkOrdersBaseModel):
    """
    A unit of contracted field work.

    Status is changed only through services.jobs.transition(); the
    lifecycle fields below are stamped by those transitions.
    """

    company_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    wo_number = models.CharField(max_length=50, blank=True, default="")
    pm_number = models.CharField(max_length=50, blank=True, default="")
    description = models.TextField(blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    due_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=30,
        choices=JobStatus.choices,
        default=JobStatus.NEW,
        db_index=True,
    )

    # GF assignment (PM assigns to GF)
    assigned_to_gf = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="gf_jobs",
    )
    assigned_to_gf_at = models.DateTimeField(null=True, blank=True)
    assigned_to_gf_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    pre_field_date = models.DateTimeField(null=True, blank=True)

    # Crew assignment (GF assigns crew)
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="crew_jobs",
    )
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    assigned_at = models.DateTimeField(null=True, blank=True)
    crew_scheduled_date = models.DateField(null=True, blank=True)
    crew_scheduled_end_date = models.DateField(null=True, blank=True)
    assignment_notes = models.TextField(blank=True, default="")

    stuck_reason = models.TextField(blank=True, default="")
    stuck_at = models.DateTimeField(null=True, blank=True)
    stuck_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    crew_submitted_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    utility_submitted_at = models.DateTimeField(null=True, blank=True)
    has_failed_audit = models.BooleanField(default=False)
    billed_at = models.DateTimeField(null=True, blank=True)
    invoiced_at = models.DateTimeField(null=True, blank=True)

    objects = JobQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["company_id", "status"], name="workorders_job_co_status"),
        ]
        constraints = [
            # stuck_reason is present if and only if the job is stuck
            models.CheckConstraint(
                condition=(
                    models.Q(status="stuck") & ~models.Q(stuck_reason="")
                    | ~models.Q(status="stuck") & models.Q(stuck_reason="")
                ),
                name="workorders_job_stuck_reason_iff_stuck",
            ),
        ]

    def __str__(self):
        return f"{self.wo_number or self.pk} - {self.status}"


class JobDependency(WorkOrdersBaseModel):
    """Pre-field coordination item (USA locate, traffic control, ...)."""

    job = models.ForeignKey(
        Job,
        on_delete=models.CASCADE,
        related_name="dependencies",
    )
    type = models.CharField(max_length=30, choices=DependencyType.choices)
    status = models.CharField(
        max_length=20,
        choices=DependencyStatus.choices,
        default=DependencyStatus.REQUIRED,
    )
    description = models.CharField(max_length=255, blank=True, default="")
    scheduled_date = models.DateField(
        null=True,
        blank=True,
        help_text="Set only while status is scheduled",
    )
    ticket_number = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="USA dig ticket, permit number, etc.",
    )
    notes = models.TextField(blank=True, default="")
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        verbose_name_plural = "job dependencies"

    def __str__(self):
        return f"{self.get_type_display()} ({self.status})"


class JobStatusChange(models.Model):
    """Audit log of job status changes."""

    job = models.ForeignKey(
        Job,
        on_delete=models.CASCADE,
        related_name="status_changes",
    )
    from_status = models.CharField(max_length=30)
    to_status = models.CharField(max_length=30)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    role = models.CharField(max_length=20, blank=True, default="")
    reason = models.TextField(blank=True, default="")
    changed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-changed_at", "-id"]
        indexes = [
            models.Index(fields=["job", "-changed_at"], name="workorders_jsc_job_changed"),
        ]

    def __str__(self):
        return f"{self.job_id}: {self.from_status} -> {self.to_status}"


class PriceBookItem(WorkOrdersBaseModel):
    """A rate line from a company price book."""

    company_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    item_code = models.CharField(max_length=50)
    description = models.CharField(max_length=255)
    unit = models.CharField(max_length=10, help_text='"LF", "EA", "HR", "CY", "SF"')
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    category = models.CharField(max_length=50, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["item_code"]

    def __str__(self):
        return f"{self.item_code} @ {self.unit_price}/{self.unit}"


class UnitEntry(WorkOrdersBaseModel):
    """
    The "digital receipt" for one unit-price billing line.

    Rate fields are a snapshot of the price book at entry time and are
    never recalculated from it. Only adjustments (UnitAdjustment rows)
    change quantity and total_amount.
    """

    job = models.ForeignKey(
        Job,
        on_delete=models.PROTECT,
        related_name="unit_entries",
    )
    company_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    price_book_item = models.ForeignKey(
        PriceBookItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="unit_entries",
    )
    claim_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        db_index=True,
        help_text="Billing claim this entry was added to",
    )

    # Snapshot from price book
    item_code = models.CharField(max_length=50)
    description = models.CharField(max_length=255)
    unit = models.CharField(max_length=10)
    category = models.CharField(max_length=50, blank=True, default="")

    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Locked at entry time",
    )
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)

    # Primary GPS fix
    latitude = models.DecimalField(max_digits=9, decimal_places=6)
    longitude = models.DecimalField(max_digits=9, decimal_places=6)
    gps_accuracy = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Accuracy radius in meters",
    )
    location_captured_at = models.DateTimeField(default=timezone.now)
    location_description = models.CharField(max_length=255, blank=True, default="")
    gps_quality = models.CharField(
        max_length=10,
        choices=GPSQuality.choices,
        default=GPSQuality.NONE,
    )

    photo_waived = models.BooleanField(default=False)
    photo_waived_reason = models.TextField(blank=True, default="")
    photo_waived_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    # Who performed the work
    performed_by_tier = models.CharField(max_length=20, choices=ContractorTier.choices)
    work_category = models.CharField(max_length=30, choices=WorkCategory.choices)
    foreman = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    foreman_name = models.CharField(max_length=255, blank=True, default="")
    sub_contractor_name = models.CharField(max_length=255, blank=True, default="")
    sub_contractor_license = models.CharField(max_length=100, blank=True, default="")
    prime_contractor_name = models.CharField(max_length=255, blank=True, default="")

    work_date = models.DateField()
    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=20,
        choices=UnitStatus.choices,
        default=UnitStatus.DRAFT,
        db_index=True,
    )
    submitted_at = models.DateTimeField(null=True, blank=True)
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    verification_notes = models.TextField(blank=True, default="")
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    approval_notes = models.TextField(blank=True, default="")
    invoiced_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    # Dispute tracking
    is_disputed = models.BooleanField(default=False)
    disputed_at = models.DateTimeField(null=True, blank=True)
    disputed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    dispute_reason = models.TextField(blank=True, default="")
    dispute_category = models.CharField(
        max_length=20,
        choices=DisputeCategory.choices,
        blank=True,
        default="",
    )
    dispute_resolution = models.TextField(blank=True, default="")
    dispute_resolved_at = models.DateTimeField(null=True, blank=True)
    dispute_resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )

    # Soft delete (kept for the audit trail)
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    delete_reason = models.TextField(blank=True, default="")

    objects = UnitEntryQuerySet.as_manager()

    class Meta:
        ordering = ["-work_date", "-created_at"]
        verbose_name_plural = "unit entries"
        indexes = [
            models.Index(fields=["job", "status"], name="workorders_unit_job_status"),
            models.Index(fields=["company_id", "status"], name="workorders_unit_co_status"),
            models.Index(fields=["status", "is_disputed"], name="workorders_unit_disputed"),
        ]

    def __str__(self):
        return f"{self.item_code} x {self.quantity} ({self.status})"

    def save(self, *args, **kwargs):
        """Keep gps_quality in step with the recorded accuracy."""
        self.gps_quality = classify_accuracy(self.gps_accuracy)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "gps_quality" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "gps_quality"]
        super().save(*args, **kwargs)

    @property
    def has_valid_gps(self) -> bool:
        return classify_accuracy(self.gps_accuracy) == GPSQuality.HIGH

    @property
    def is_dispute_open(self) -> bool:
        return self.is_disputed and self.dispute_resolved_at is None


class UnitPhoto(WorkOrdersBaseModel):
    """GPS-stamped photo evidence. Storage lives elsewhere; only the key is kept."""

    entry = models.ForeignKey(
        UnitEntry,
        on_delete=models.CASCADE,
        related_name="photos",
    )
    url = models.CharField(max_length=500)
    file_name = models.CharField(max_length=255, blank=True, default="")
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    gps_accuracy = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    captured_at = models.DateTimeField()
    photo_type = models.CharField(
        max_length=20,
        choices=PhotoType.choices,
        default=PhotoType.AFTER,
    )
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["captured_at", "id"]

    def __str__(self):
        return self.file_name or self.url


class UnitAdjustment(models.Model):
    """
    One correction of a unit entry's quantity/total.

    Append-only: rows are created once and never updated.
    """

    entry = models.ForeignKey(
        UnitEntry,
        on_delete=models.CASCADE,
        related_name="adjustments",
    )
    adjusted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    original_quantity = models.DecimalField(max_digits=12, decimal_places=2)
    new_quantity = models.DecimalField(max_digits=12, decimal_places=2)
    original_total = models.DecimalField(max_digits=14, decimal_places=2)
    new_total = models.DecimalField(max_digits=14, decimal_places=2)
    reason = models.TextField()
    adjusted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["adjusted_at", "id"]

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            raise ImmutableRecord(f"Adjustment {self.pk} cannot be modified")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.original_quantity} -> {self.new_quantity} ({self.reason})"
