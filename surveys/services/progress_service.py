"""
Course progress service.

Combines window evaluation, response reduction and participation summaries
into the views an instructor works with: the per-course survey overview,
participation reports, participant search and the dashboard checklist.
All data arrives through an explicitly passed repository.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from courseportal.settings.config import SURVEYS

from ..utils import build_survey_link
from .participation_service import ParticipationService, ParticipationSummary
from .response_service import ResponseRecord, ResponseService, ResponseStatus
from .window_service import SurveyWindowStatus, WindowService, WindowState

logger = logging.getLogger(__name__)

ACTIVE_STATES = frozenset({WindowState.OPEN, WindowState.CLOSED})

# Unknown statuses are listed after every known status in reports
REPORT_UNKNOWN_RANK = 4

SETUP_STEPS = [
    ("setup_course", "Set up your course"),
]


def _survey_steps(survey_n: int) -> list[tuple[str, str]]:
    return [
        (f"survey{survey_n}_students", "Send out student surveys"),
        (f"survey{survey_n}_instructor", "Complete instructor surveys"),
    ]


@dataclass
class SurveyProgress:
    """One row of the "My Courses and Surveys" table."""

    survey_n: int
    window: SurveyWindowStatus
    instructor_completed: bool
    participation: ParticipationSummary
    student_link: str = ""
    instructor_link: str = ""

    def to_json_dict(self) -> dict:
        return {
            "survey_n": self.survey_n,
            "window": self.window.to_json_dict(),
            "instructor_completed": self.instructor_completed,
            "participation": self.participation.to_json_dict(),
            "student_link": self.student_link,
            "instructor_link": self.instructor_link,
        }


@dataclass
class ParticipationReport:
    survey_n: int
    window: SurveyWindowStatus
    rows: list[ResponseRecord] = field(default_factory=list)
    summary: Optional[ParticipationSummary] = None

    def to_json_dict(self) -> dict:
        return {
            "survey_n": self.survey_n,
            "window": self.window.to_json_dict(),
            "rows": [row.to_json_dict() for row in self.rows],
            "summary": self.summary.to_json_dict() if self.summary else None,
        }


class ProgressService:
    @staticmethod
    def survey_links(course, survey_n: int) -> dict[str, str]:
        return {
            "student_link": build_survey_link(
                SURVEYS.STUDENT_SURVEY_URL,
                SURVEYS.STUDENT_SURVEY_ID,
                survey_n,
                course_id=course.short_id,
            ),
            "instructor_link": build_survey_link(
                SURVEYS.INSTRUCTOR_SURVEY_URL,
                SURVEYS.INSTRUCTOR_SURVEY_ID,
                survey_n,
                instructor_id=course.instructor_id,
                course_id=course.short_id,
            ),
        }

    @staticmethod
    def instructor_completed(records) -> bool:
        reduced = ResponseService.reduce(records)
        return any(
            record.status == ResponseStatus.COMPLETED.value
            for record in reduced.values()
        )

    @staticmethod
    def survey_overview(
        course,
        repository,
        now: datetime,
        minimum_completed: Optional[int] = None,
    ) -> list[SurveyProgress]:
        """
        Summarize every survey round of a course.

        Returns:
            One SurveyProgress per configured survey number
        """
        windows = repository.windows_for(course)
        overview: list[SurveyProgress] = []
        for survey_n in SURVEYS.SURVEY_NUMBERS:
            status = WindowService.get_status(windows.get(survey_n), now, survey_n=survey_n)
            reduced = ResponseService.reduce(repository.student_records(course, survey_n))
            overview.append(
                SurveyProgress(
                    survey_n=survey_n,
                    window=status,
                    instructor_completed=ProgressService.instructor_completed(
                        repository.instructor_records(course, survey_n)
                    ),
                    participation=ParticipationService.summarize(
                        reduced, minimum_completed, status.state
                    ),
                    **ProgressService.survey_links(course, survey_n),
                )
            )
        return overview

    @staticmethod
    def participation_report(
        course,
        survey_n: int,
        repository,
        now: datetime,
        minimum_completed: Optional[int] = None,
    ) -> ParticipationReport:
        """
        Build the participation report for one survey round.

        Rows are reduced to one per student and ordered Not Started,
        In Progress, Completed, then by student id.
        """
        status = WindowService.get_status(
            repository.windows_for(course).get(survey_n), now, survey_n=survey_n
        )
        reduced = ResponseService.reduce(repository.student_records(course, survey_n))
        rows = sorted(
            reduced.values(),
            key=lambda record: (record.rank or REPORT_UNKNOWN_RANK, record.participant_id),
        )
        return ParticipationReport(
            survey_n=survey_n,
            window=status,
            rows=rows,
            summary=ParticipationService.summarize(reduced, minimum_completed, status.state),
        )

    @staticmethod
    def search_participants(course, query: str, repository) -> list[ResponseRecord]:
        """
        Search students across all survey rounds of a course.

        Each student appears once with their furthest progress. The query
        matches the student id or "first last" name, case-insensitively;
        an empty query returns everyone.
        """
        reduced = ResponseService.reduce(
            record
            for record in repository.student_records(course)
            if ResponseService.status_rank(record.status)
        )
        needle = (query or "").strip().lower()
        matches = [
            record
            for record in reduced.values()
            if not needle
            or needle in record.participant_id.lower()
            or (record.full_name and needle in record.full_name.lower())
        ]
        return sorted(matches, key=lambda record: record.participant_id)

    @staticmethod
    def sync_checklist(
        instructor,
        repository,
        now: datetime,
        minimum_completed: Optional[int] = None,
    ) -> list[str]:
        """
        Auto-complete dashboard checklist items from course data.

        Only surveys whose window is open or closed count as active. Items
        are never reverted once complete.

        Returns:
            Items newly marked complete
        """
        courses = repository.courses_for(instructor)
        completed_items: list[str] = []

        def mark(item: str) -> None:
            if repository.mark_checklist(instructor, item, now):
                completed_items.append(item)

        if courses:
            mark("setup_course")

        for survey_n in SURVEYS.SURVEY_NUMBERS:
            active = []
            for course in courses:
                state = WindowService.evaluate(repository.windows_for(course).get(survey_n), now)
                if state in ACTIVE_STATES:
                    active.append((course, state))
            if not active:
                continue

            students_done = all(
                ParticipationService.summarize(
                    ResponseService.reduce(repository.student_records(course, survey_n)),
                    minimum_completed,
                    state,
                ).meets_threshold
                for course, state in active
            )
            instructor_done = all(
                ProgressService.instructor_completed(repository.instructor_records(course, survey_n))
                for course, _ in active
            )
            if students_done:
                mark(f"survey{survey_n}_students")
            if instructor_done:
                mark(f"survey{survey_n}_instructor")

        if completed_items:
            logger.info(
                "Checklist items completed for instructor %s: %s",
                instructor.pk,
                ", ".join(completed_items),
            )
        return completed_items

    @staticmethod
    def next_steps(
        instructor,
        repository,
        now: datetime,
        show_completed: bool = False,
    ) -> dict:
        """
        Build the dashboard's next-steps sections.

        Setup steps come first. Once setup is complete and the earliest
        survey 1 window has not opened yet, a "come back on <date>" message
        replaces them. Each survey round gets its own section as soon as
        its earliest window has opened.
        """
        checklist = repository.checklist_for(instructor)
        windows_by_course = [repository.windows_for(course) for course in repository.courses_for(instructor)]

        def steps(definitions) -> list[dict]:
            return [
                {"item": item, "title": title, "completed": checklist.get(item, False)}
                for item, title in definitions
                if show_completed or not checklist.get(item, False)
            ]

        setup_complete = all(checklist.get(item, False) for item, _ in SETUP_STEPS)
        first_survey = SURVEYS.SURVEY_NUMBERS[0]
        first_window = WindowService.earliest_open(w.get(first_survey) for w in windows_by_course)
        first_state = WindowService.evaluate(first_window, now)

        message = None
        if setup_complete and first_state not in ACTIVE_STATES:
            opens = (
                WindowService.format_date(first_window.open_at)
                if first_state is WindowState.NOT_YET_OPEN
                else "the scheduled date"
            )
            message = (
                f"Your surveys are all set up! Come back here on {opens} to complete "
                "the instructor survey or change your survey dates."
            )

        survey_sections = []
        for survey_n in SURVEYS.SURVEY_NUMBERS:
            window = WindowService.earliest_open(w.get(survey_n) for w in windows_by_course)
            status = WindowService.get_status(window, now, survey_n=survey_n)
            if status.state not in ACTIVE_STATES:
                continue
            survey_sections.append(
                {
                    "survey_n": survey_n,
                    "window": status.to_json_dict(),
                    "steps": steps(_survey_steps(survey_n)),
                }
            )

        return {
            "setup": {
                "complete": setup_complete,
                "steps": steps(SETUP_STEPS),
                "message": message,
            },
            "surveys": survey_sections,
        }
