from functools import wraps
from typing import Callable

from django.contrib.auth.views import redirect_to_login
from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone

from courseportal.settings.config import SURVEYS

from ..models import Course
from ..repository import SurveyRepository


def current_time():
    """Clock used by the views; patched in tests."""
    return timezone.now()


def instructor_required(view_func: Callable[..., HttpResponse]):
    """Redirect to login when no instructor is signed in."""

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect_to_login(request.get_full_path())
        return view_func(request, request.user, *args, **kwargs)

    return wrapper


def get_instructor_course(repository: SurveyRepository, instructor, short_id: str) -> Course:
    """Fetch a course owned by the instructor or raise 404."""
    return get_object_or_404(repository.course_queryset(instructor), short_id=short_id)


def check_survey_number(survey_n: int) -> int:
    if survey_n not in SURVEYS.SURVEY_NUMBERS:
        raise Http404(f"Unknown survey {survey_n}")
    return survey_n


def course_to_json(course: Course) -> dict:
    return {
        "short_id": course.short_id,
        "title": course.title,
        "department": course.department,
        "number_code": course.number_code,
        "n_sections": course.n_sections,
        "n_students": course.n_students,
        "level": course.level,
        "course_format": course.course_format,
        "additional_info": course.additional_info,
    }
