"""Management command to rewrite legacy job status strings."""

from django.core.management.base import BaseCommand
from django.db import transaction

from django_workorders.choices import LEGACY_STATUS_MAP
from django_workorders.models import Job


class Command(BaseCommand):
    help = 'Rewrite legacy job statuses (pending, pre-field, ...) to canonical values'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many jobs would change without writing'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        total = 0
        legacy_jobs = Job.objects.legacy()

        with transaction.atomic():
            for legacy, canonical in LEGACY_STATUS_MAP.items():
                canonical = str(canonical)
                qs = legacy_jobs.filter(status=legacy)
                count = qs.count()
                if not count:
                    continue
                total += count
                if dry_run:
                    self.stdout.write(f'  - {legacy} -> {canonical}: {count}')
                else:
                    qs.update(status=canonical)

        if dry_run:
            self.stdout.write(f'Would normalize {total} jobs')
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Normalized {total} jobs')
            )
