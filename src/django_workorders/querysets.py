"""QuerySet classes for django-workorders models."""
from django.db import models

from .choices import JobStatus, UnitStatus


class JobQuerySet(models.QuerySet):
    """QuerySet for Job with workflow filters."""

    def legacy(self) -> 'JobQuerySet':
        """Jobs whose stored status is not a canonical status value."""
        return self.exclude(status__in=JobStatus.values)


class UnitEntryQuerySet(models.QuerySet):
    """QuerySet for UnitEntry with ledger filters.

    Soft-deleted entries are excluded by every filter here except
    ``for_job(include_deleted=True)``.
    """

    def active(self) -> 'UnitEntryQuerySet':
        return self.filter(is_deleted=False)

    def for_job(self, job, include_deleted: bool = False) -> 'UnitEntryQuerySet':
        """Entries of one job, newest work first."""
        qs = self.filter(job=job)
        if not include_deleted:
            qs = qs.filter(is_deleted=False)
        return qs.order_by('-work_date', '-created_at')

    def unbilled(self, company_id: str) -> 'UnitEntryQuerySet':
        """Approved entries of a company not yet attached to a claim."""
        return self.active().filter(
            company_id=company_id,
            status=UnitStatus.APPROVED,
            claim_id__isnull=True,
        ).order_by('work_date', 'created_at')

    def open_disputes(self, company_id: str) -> 'UnitEntryQuerySet':
        """Disputed entries of a company still awaiting resolution."""
        return self.active().filter(
            company_id=company_id,
            is_disputed=True,
            dispute_resolved_at__isnull=True,
        ).order_by('-disputed_at')
