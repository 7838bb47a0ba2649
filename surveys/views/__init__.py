from .courses import (
    course_create,
    course_delete,
    course_detail,
    course_edit,
    course_list,
    course_roster,
    course_roster_delete,
    set_survey_dates,
)
from .dashboard import dashboard
from .health import health_status
from .reports import participation_report, participation_search

__all__ = [
    "course_list",
    "course_detail",
    "course_create",
    "course_edit",
    "course_delete",
    "set_survey_dates",
    "course_roster",
    "course_roster_delete",
    "dashboard",
    "health_status",
    "participation_report",
    "participation_search",
]
