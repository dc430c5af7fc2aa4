"""URL patterns for django-workorders."""
from django.urls import path

from . import views

app_name = 'django_workorders'

urlpatterns = [
    # Jobs
    path('jobs/<int:job_id>/status', views.job_status, name='job_status'),
    path('jobs/<int:job_id>/assign', views.job_assign, name='job_assign'),
    path('jobs/<int:job_id>/dependencies', views.job_dependencies, name='job_dependencies'),
    path(
        'jobs/<int:job_id>/dependencies/<int:dependency_id>',
        views.job_dependency_detail,
        name='job_dependency_detail',
    ),
    path(
        'jobs/<int:job_id>/dependencies/<int:dependency_id>/cycle',
        views.job_dependency_cycle,
        name='job_dependency_cycle',
    ),
    path(
        'jobs/<int:job_id>/prefield-checklist',
        views.job_prefield_checklist,
        name='job_prefield_checklist',
    ),
    path('jobs/<int:job_id>/units', views.job_units, name='job_units'),

    # Unit entries
    path('units/unbilled', views.units_unbilled, name='units_unbilled'),
    path('units/disputed', views.units_disputed, name='units_disputed'),
    path('units/<int:entry_id>', views.unit_detail, name='unit_detail'),
    path(
        'units/<int:entry_id>/<str:action>',
        views.unit_action,
        name='unit_action',
    ),
]
