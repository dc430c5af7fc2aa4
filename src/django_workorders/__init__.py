"""Django Workorders - Job workflow and unit-price billing ledger for field work.

Provides:
- Job: Contracted field work moving through a role-gated status workflow
- JobDependency: Pre-field coordination items (locates, traffic control, ...)
- UnitEntry: GPS/photo-verified "digital receipt" for unit-price billing
- UnitAdjustment: Append-only corrections of unit quantities and totals
- CrewMember: A user's field role (crew, foreman, gf, qa, pm, admin)

Usage:
    INSTALLED_APPS = [
        ...
        'django_workorders',
    ]

    urlpatterns = [
        path('api/', include('django_workorders.urls')),
    ]

See conf.py for all configuration options.
"""

__version__ = "0.1.0"
