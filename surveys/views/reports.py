from django.http import HttpRequest, HttpResponse, JsonResponse

from ..repository import SurveyRepository
from ..services import ProgressService
from . import common
from .common import check_survey_number, course_to_json, get_instructor_course, instructor_required


@instructor_required
def participation_report(request: HttpRequest, instructor, short_id: str, survey_n: int) -> HttpResponse:
    """Participation report for one survey round, one row per student."""
    check_survey_number(survey_n)
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)
    report = ProgressService.participation_report(
        course, survey_n, repository, common.current_time()
    )
    return JsonResponse({"ok": True, "course": course_to_json(course), **report.to_json_dict()})


@instructor_required
def participation_search(request: HttpRequest, instructor, short_id: str) -> HttpResponse:
    """Search students of a course by id or name across all survey rounds."""
    repository = SurveyRepository()
    course = get_instructor_course(repository, instructor, short_id)
    query = request.GET.get("query", "").strip()
    matches = ProgressService.search_participants(course, query, repository)
    return JsonResponse(
        {
            "ok": True,
            "course": course_to_json(course),
            "query": query,
            "results": [record.to_json_dict() for record in matches],
        }
    )
