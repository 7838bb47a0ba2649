from django.http import HttpRequest, HttpResponse, JsonResponse

from ..repository import SurveyRepository
from ..services import ProgressService
from . import common
from .common import instructor_required


@instructor_required
def dashboard(request: HttpRequest, instructor) -> HttpResponse:
    """Next steps for the instructor; checklist items are synced first."""
    repository = SurveyRepository()
    now = common.current_time()
    ProgressService.sync_checklist(instructor, repository, now)
    show_completed = request.GET.get("showAllTasks") == "true"
    return JsonResponse(
        {
            "ok": True,
            **ProgressService.next_steps(instructor, repository, now, show_completed=show_completed),
        }
    )
