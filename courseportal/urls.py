"""
URL configuration for the course survey tracker.
"""
from django.contrib import admin
from django.urls import path

from surveys.views import (
    course_create,
    course_delete,
    course_detail,
    course_edit,
    course_list,
    course_roster,
    course_roster_delete,
    dashboard,
    health_status,
    participation_report,
    participation_search,
    set_survey_dates,
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('dashboard/', dashboard, name='dashboard'),
    path('courses/', course_list, name='course_list'),
    path('courses/add/', course_create, name='course_create'),
    path('courses/<slug:short_id>/', course_detail, name='course_detail'),
    path('courses/<slug:short_id>/edit/', course_edit, name='course_edit'),
    path('courses/<slug:short_id>/delete/', course_delete, name='course_delete'),
    path('courses/<slug:short_id>/set-dates/', set_survey_dates, name='set_survey_dates'),
    path('courses/<slug:short_id>/roster/', course_roster, name='course_roster'),
    path('courses/<slug:short_id>/roster/delete/', course_roster_delete, name='course_roster_delete'),
    path(
        'courses/<slug:short_id>/reports/participation/search/',
        participation_search,
        name='participation_search',
    ),
    path(
        'courses/<slug:short_id>/reports/participation/<int:survey_n>/',
        participation_report,
        name='participation_report',
    ),
    path('health/', health_status, name='health_status'),
]
