import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.urls import reverse
from django.views.decorators.http import require_http_methods, require_POST

from courseportal.settings.config import FRONTEND, SURVEYS

from ..forms import CourseForm, RosterDeleteForm, RosterUploadForm, SurveyWindowForm
from ..repository import SurveyRepository
from ..services import ProgressService, RosterError, RosterService, WindowService
from . import common
from .common import course_to_json, get_instructor_course, instructor_required

logger = logging.getLogger(__name__)


@instructor_required
def course_list(request: HttpRequest, instructor) -> HttpResponse:
    """Courses of the signed-in instructor with the status of each survey round."""
    repository = SurveyRepository()
    now = common.current_time()
    courses = [
        {
            **course_to_json(course),
            "surveys": [
                progress.to_json_dict()
                for progress in ProgressService.survey_overview(course, repository, now)
            ],
        }
        for course in repository.courses_for(instructor)
    ]
    return JsonResponse(
        {"ok": True, "courses": courses, "poll_interval_ms": FRONTEND.POLL_INTERVAL_MS}
    )


@instructor_required
def course_detail(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """Course details with survey dates and survey links."""
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)
    overview = ProgressService.survey_overview(course, repository, common.current_time())
    return JsonResponse(
        {
            "ok": True,
            "course": course_to_json(course),
            "surveys": [progress.to_json_dict() for progress in overview],
        }
    )


@instructor_required
@require_POST
def course_create(request: HttpRequest, instructor) -> HttpResponse:
    """Register a new course for the signed-in instructor."""
    form = CourseForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

    course = form.save(commit=False)
    course.instructor = instructor
    course.save()
    logger.info("Instructor %s created course %s", instructor.pk, course.short_id)
    return JsonResponse(
        {
            "ok": True,
            "course": course_to_json(course),
            "next": reverse("set_survey_dates", args=[course.short_id]),
        },
        status=201,
    )


@instructor_required
@require_http_methods(["GET", "POST"])
def course_edit(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """Show or update the details of a course; the short id never changes."""
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)

    if request.method == "POST":
        form = CourseForm(request.POST, instance=course)
        if not form.is_valid():
            return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)
        course = form.save()
        logger.info("Instructor %s updated course %s", instructor.pk, course.short_id)

    return JsonResponse({"ok": True, "course": course_to_json(course)})


@instructor_required
@require_POST
def course_delete(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """Delete a course together with its survey windows and responses."""
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)
    deleted, _ = course.delete()
    logger.info(
        "Instructor %s deleted course %s (%d rows)", instructor.pk, short_id, deleted
    )
    return JsonResponse({"ok": True, "deleted": short_id})


@instructor_required
@require_http_methods(["GET", "POST"])
def set_survey_dates(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """
    Show or update the open/close dates of every survey round.

    POST expects "survey<n>-open_at" / "survey<n>-close_at" fields; all
    rounds are validated before any of them is saved.
    """
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)

    if request.method == "POST":
        forms = {
            survey_n: SurveyWindowForm(request.POST, prefix=f"survey{survey_n}")
            for survey_n in SURVEYS.SURVEY_NUMBERS
        }
        errors = {
            str(survey_n): form.errors.get_json_data()
            for survey_n, form in forms.items()
            if not form.is_valid()
        }
        if errors:
            return JsonResponse({"ok": False, "errors": errors}, status=400)
        for survey_n, form in forms.items():
            repository.save_window(
                course,
                survey_n,
                form.cleaned_data["open_at"],
                form.cleaned_data["close_at"],
            )

    # Re-read so freshly saved windows are reported
    course = get_instructor_course(repository, instructor, short_id)
    now = common.current_time()
    windows = repository.windows_for(course)
    return JsonResponse(
        {
            "ok": True,
            "windows": [
                WindowService.get_status(windows.get(survey_n), now, survey_n=survey_n).to_json_dict()
                for survey_n in SURVEYS.SURVEY_NUMBERS
            ],
        }
    )


@instructor_required
@require_http_methods(["GET", "POST"])
def course_roster(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """List tracked students, or preload new student ids as "Not Started"."""
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)
    added: list[str] = []

    if request.method == "POST":
        form = RosterUploadForm(request.POST, request.FILES)
        if not form.is_valid():
            return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)
        try:
            added = RosterService.upload(course, form.get_text(), repository)
        except RosterError as exc:
            return JsonResponse({"ok": False, "error": str(exc)}, status=400)

    students = RosterService.tracked_students(repository.roster_rows(course))
    return JsonResponse(
        {
            "ok": True,
            "added": added,
            "students": [student.to_json_dict() for student in students],
        }
    )


@instructor_required
@require_POST
def course_roster_delete(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """Remove preloaded students that never registered themselves."""
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)
    form = RosterDeleteForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": form.errors.get_json_data()}, status=400)

    if form.cleaned_data["delete_all"]:
        requested = [
            student.student_id
            for student in RosterService.tracked_students(repository.roster_rows(course))
        ]
    else:
        requested = RosterService.parse_student_ids(form.cleaned_data["student_ids"])

    removed = RosterService.delete(course, requested, repository)
    message = (
        f"Removed {len(removed)} student(s)."
        if removed
        else "No eligible manually added students available for deletion."
    )
    return JsonResponse({"ok": True, "removed": removed, "message": message})
