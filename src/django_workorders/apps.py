"""Django Workorders app configuration."""

from django.apps import AppConfig


class DjangoWorkordersConfig(AppConfig):
    """Configuration for django-workorders app."""

    name = "django_workorders"
    verbose_name = "Work Orders"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        """Fail fast on a broken status table or a job edge without roles."""
        from .authorization import uncovered_job_edges
        from .graph import state_table_errors

        errors = state_table_errors()
        if errors:
            raise RuntimeError(f"Invalid status tables: {errors}")
        missing = uncovered_job_edges()
        if missing:
            raise RuntimeError(f"Job edges without roles: {missing}")
