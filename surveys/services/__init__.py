from .participation_service import DisplayMode, ParticipationService, ParticipationSummary
from .progress_service import ParticipationReport, ProgressService, SurveyProgress
from .response_service import ResponseRecord, ResponseService, ResponseStatus, UploadSource
from .roster_service import RosterError, RosterService, TrackedStudent
from .window_service import (
    SurveyWindowRecord,
    SurveyWindowStatus,
    WindowAction,
    WindowService,
    WindowState,
)

__all__ = [
    "DisplayMode",
    "ParticipationReport",
    "ParticipationService",
    "ParticipationSummary",
    "ProgressService",
    "ResponseRecord",
    "ResponseService",
    "ResponseStatus",
    "RosterError",
    "RosterService",
    "SurveyProgress",
    "SurveyWindowRecord",
    "SurveyWindowStatus",
    "TrackedStudent",
    "UploadSource",
    "WindowAction",
    "WindowService",
    "WindowState",
]
