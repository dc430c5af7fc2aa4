# Generated manually for standalone django-workorders package

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


ROLE_CHOICES = [
    ("crew", "Crew"),
    ("foreman", "Foreman"),
    ("gf", "General Foreman"),
    ("qa", "QA"),
    ("pm", "Project Manager"),
    ("admin", "Administrator"),
]

JOB_STATUS_CHOICES = [
    ("new", "New"),
    ("assigned_to_gf", "Assigned to GF"),
    ("pre_fielding", "Pre-Fielding"),
    ("scheduled", "Scheduled"),
    ("stuck", "Stuck"),
    ("in_progress", "In Progress"),
    ("pending_gf_review", "Pending GF Review"),
    ("pending_qa_review", "Pending QA Review"),
    ("pending_pm_approval", "Pending PM Approval"),
    ("ready_to_submit", "Ready to Submit"),
    ("submitted", "Submitted"),
    ("go_back", "Go-Back"),
    ("billed", "Billed"),
    ("invoiced", "Invoiced"),
]

DEPENDENCY_TYPE_CHOICES = [
    ("usa", "USA"),
    ("vegetation", "Vegetation"),
    ("traffic_control", "Traffic Control"),
    ("no_parks", "No Parks"),
    ("cwc", "CWC"),
    ("afw_type", "AFW Type"),
    ("special_equipment", "Special Equipment"),
    ("civil", "Civil"),
]

DEPENDENCY_STATUS_CHOICES = [
    ("required", "Required"),
    ("scheduled", "Scheduled"),
    ("not_required", "Not Required"),
]

UNIT_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("submitted", "Submitted"),
    ("verified", "Verified"),
    ("disputed", "Disputed"),
    ("approved", "Approved"),
    ("invoiced", "Invoiced"),
    ("paid", "Paid"),
]

GPS_QUALITY_CHOICES = [
    ("high", "High"),
    ("medium", "Medium"),
    ("low", "Low"),
    ("none", "None"),
]

TIER_CHOICES = [
    ("prime", "Prime"),
    ("sub", "Subcontractor"),
    ("sub_of_sub", "Sub-of-Sub"),
]

WORK_CATEGORY_CHOICES = [
    ("electrical", "Electrical"),
    ("civil", "Civil"),
    ("overhead", "Overhead"),
    ("underground", "Underground"),
    ("traffic_control", "Traffic Control"),
    ("vegetation", "Vegetation"),
    ("inspection", "Inspection"),
    ("emergency", "Emergency"),
    ("other", "Other"),
]

DISPUTE_CATEGORY_CHOICES = [
    ("quantity", "Quantity"),
    ("rate", "Rate"),
    ("quality", "Quality"),
    ("location", "Location"),
    ("photo", "Photo"),
    ("duplicate", "Duplicate"),
    ("other", "Other"),
]

PHOTO_TYPE_CHOICES = [
    ("before", "Before"),
    ("during", "During"),
    ("after", "After"),
    ("measurement", "Measurement"),
    ("issue", "Issue"),
    ("verification", "Verification"),
    ("other", "Other"),
]


def _user_fk(related_name="+"):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to=settings.AUTH_USER_MODEL,
    )


def _id():
    return models.BigAutoField(
        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CrewMember",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "role",
                    models.CharField(choices=ROLE_CHOICES, default="crew", max_length=20),
                ),
                (
                    "company_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        default="",
                        help_text="Owning company reference",
                        max_length=64,
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="crew_member",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["user_id"],
            },
        ),
        migrations.CreateModel(
            name="Job",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company_id",
                    models.CharField(blank=True, db_index=True, default="", max_length=64),
                ),
                ("wo_number", models.CharField(blank=True, default="", max_length=50)),
                ("pm_number", models.CharField(blank=True, default="", max_length=50)),
                ("description", models.TextField(blank=True, default="")),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("due_date", models.DateField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=JOB_STATUS_CHOICES,
                        db_index=True,
                        default="new",
                        max_length=30,
                    ),
                ),
                ("assigned_to_gf", _user_fk("gf_jobs")),
                ("assigned_to_gf_at", models.DateTimeField(blank=True, null=True)),
                ("assigned_to_gf_by", _user_fk()),
                ("pre_field_date", models.DateTimeField(blank=True, null=True)),
                ("assigned_to", _user_fk("crew_jobs")),
                ("assigned_by", _user_fk()),
                ("assigned_at", models.DateTimeField(blank=True, null=True)),
                ("crew_scheduled_date", models.DateField(blank=True, null=True)),
                ("crew_scheduled_end_date", models.DateField(blank=True, null=True)),
                ("assignment_notes", models.TextField(blank=True, default="")),
                ("stuck_reason", models.TextField(blank=True, default="")),
                ("stuck_at", models.DateTimeField(blank=True, null=True)),
                ("stuck_by", _user_fk()),
                ("crew_submitted_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("utility_submitted_at", models.DateTimeField(blank=True, null=True)),
                ("has_failed_audit", models.BooleanField(default=False)),
                ("billed_at", models.DateTimeField(blank=True, null=True)),
                ("invoiced_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["company_id", "status"], name="workorders_job_co_status"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(("status", "stuck"), models.Q(("stuck_reason", ""), _negated=True))
                            | models.Q(
                                models.Q(("status", "stuck"), _negated=True),
                                ("stuck_reason", ""),
                            )
                        ),
                        name="workorders_job_stuck_reason_iff_stuck",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JobDependency",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "type",
                    models.CharField(choices=DEPENDENCY_TYPE_CHOICES, max_length=30),
                ),
                (
                    "status",
                    models.CharField(
                        choices=DEPENDENCY_STATUS_CHOICES, default="required", max_length=20
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "scheduled_date",
                    models.DateField(
                        blank=True,
                        help_text="Set only while status is scheduled",
                        null=True,
                    ),
                ),
                (
                    "ticket_number",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="USA dig ticket, permit number, etc.",
                        max_length=100,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "job",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dependencies",
                        to="django_workorders.job",
                    ),
                ),
            ],
            options={
                "ordering": ["position", "id"],
                "verbose_name_plural": "job dependencies",
            },
        ),
        migrations.CreateModel(
            name="JobStatusChange",
            fields=[
                ("id", _id()),
                ("from_status", models.CharField(max_length=30)),
                ("to_status", models.CharField(max_length=30)),
                ("role", models.CharField(blank=True, default="", max_length=20)),
                ("reason", models.TextField(blank=True, default="")),
                ("changed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("changed_by", _user_fk()),
                (
                    "job",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_changes",
                        to="django_workorders.job",
                    ),
                ),
            ],
            options={
                "ordering": ["-changed_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["job", "-changed_at"], name="workorders_jsc_job_changed"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PriceBookItem",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company_id",
                    models.CharField(blank=True, db_index=True, default="", max_length=64),
                ),
                ("item_code", models.CharField(max_length=50)),
                ("description", models.CharField(max_length=255)),
                (
                    "unit",
                    models.CharField(
                        help_text='"LF", "EA", "HR", "CY", "SF"', max_length=10
                    ),
                ),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12)),
                ("category", models.CharField(blank=True, default="", max_length=50)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["item_code"],
            },
        ),
        migrations.CreateModel(
            name="UnitEntry",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company_id",
                    models.CharField(blank=True, db_index=True, default="", max_length=64),
                ),
                (
                    "claim_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Billing claim this entry was added to",
                        max_length=64,
                        null=True,
                    ),
                ),
                ("item_code", models.CharField(max_length=50)),
                ("description", models.CharField(max_length=255)),
                ("unit", models.CharField(max_length=10)),
                ("category", models.CharField(blank=True, default="", max_length=50)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "unit_price",
                    models.DecimalField(
                        decimal_places=2, help_text="Locked at entry time", max_digits=12
                    ),
                ),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("latitude", models.DecimalField(decimal_places=6, max_digits=9)),
                ("longitude", models.DecimalField(decimal_places=6, max_digits=9)),
                (
                    "gps_accuracy",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Accuracy radius in meters",
                        max_digits=8,
                        null=True,
                    ),
                ),
                (
                    "location_captured_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "location_description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "gps_quality",
                    models.CharField(
                        choices=GPS_QUALITY_CHOICES, default="none", max_length=10
                    ),
                ),
                ("photo_waived", models.BooleanField(default=False)),
                ("photo_waived_reason", models.TextField(blank=True, default="")),
                ("photo_waived_by", _user_fk()),
                (
                    "performed_by_tier",
                    models.CharField(choices=TIER_CHOICES, max_length=20),
                ),
                (
                    "work_category",
                    models.CharField(choices=WORK_CATEGORY_CHOICES, max_length=30),
                ),
                ("foreman", _user_fk()),
                ("foreman_name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "sub_contractor_name",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "sub_contractor_license",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                (
                    "prime_contractor_name",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("work_date", models.DateField()),
                ("entered_by", _user_fk()),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=UNIT_STATUS_CHOICES,
                        db_index=True,
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("submitted_by", _user_fk()),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("verified_by", _user_fk()),
                ("verification_notes", models.TextField(blank=True, default="")),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("approved_by", _user_fk()),
                ("approval_notes", models.TextField(blank=True, default="")),
                ("invoiced_at", models.DateTimeField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("is_disputed", models.BooleanField(default=False)),
                ("disputed_at", models.DateTimeField(blank=True, null=True)),
                ("disputed_by", _user_fk()),
                ("dispute_reason", models.TextField(blank=True, default="")),
                (
                    "dispute_category",
                    models.CharField(
                        blank=True,
                        choices=DISPUTE_CATEGORY_CHOICES,
                        default="",
                        max_length=20,
                    ),
                ),
                ("dispute_resolution", models.TextField(blank=True, default="")),
                ("dispute_resolved_at", models.DateTimeField(blank=True, null=True)),
                ("dispute_resolved_by", _user_fk()),
                ("is_deleted", models.BooleanField(db_index=True, default=False)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("deleted_by", _user_fk()),
                ("delete_reason", models.TextField(blank=True, default="")),
                (
                    "job",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="unit_entries",
                        to="django_workorders.job",
                    ),
                ),
                (
                    "price_book_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="unit_entries",
                        to="django_workorders.pricebookitem",
                    ),
                ),
            ],
            options={
                "ordering": ["-work_date", "-created_at"],
                "verbose_name_plural": "unit entries",
                "indexes": [
                    models.Index(
                        fields=["job", "status"], name="workorders_unit_job_status"
                    ),
                    models.Index(
                        fields=["company_id", "status"], name="workorders_unit_co_status"
                    ),
                    models.Index(
                        fields=["status", "is_disputed"], name="workorders_unit_disputed"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UnitPhoto",
            fields=[
                ("id", _id()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("url", models.CharField(max_length=500)),
                ("file_name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "latitude",
                    models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True),
                ),
                (
                    "longitude",
                    models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True),
                ),
                (
                    "gps_accuracy",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True),
                ),
                ("captured_at", models.DateTimeField()),
                (
                    "photo_type",
                    models.CharField(
                        choices=PHOTO_TYPE_CHOICES, default="after", max_length=20
                    ),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="photos",
                        to="django_workorders.unitentry",
                    ),
                ),
            ],
            options={
                "ordering": ["captured_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="UnitAdjustment",
            fields=[
                ("id", _id()),
                ("original_quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("new_quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("original_total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("new_total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("reason", models.TextField()),
                ("adjusted_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("adjusted_by", _user_fk()),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="adjustments",
                        to="django_workorders.unitentry",
                    ),
                ),
            ],
            options={
                "ordering": ["adjusted_at", "id"],
            },
        ),
    ]
