"""
Query interface between the Django models and the survey services.

Rows leave this module as SurveyWindowRecord/ResponseRecord values, so the
services never see model instances or loosely typed query results.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from .models import ChecklistEntry, Course, StudentResponse, SurveyWindow
from .services.response_service import ResponseRecord, ResponseStatus, UploadSource
from .services.window_service import SurveyWindowRecord

logger = logging.getLogger(__name__)


class SurveyRepository:
    """ORM-backed repository handed to the orchestrating services."""

    def course_queryset(self, instructor=None) -> QuerySet:
        qs = Course.objects.prefetch_related(
            "survey_windows", "student_responses", "instructor_responses"
        )
        if instructor is not None:
            qs = qs.filter(instructor=instructor)
        return qs

    def courses_for(self, instructor) -> list[Course]:
        return list(self.course_queryset(instructor).order_by("title", "id"))

    def get_course(self, short_id: str, instructor=None) -> Course:
        return self.course_queryset(instructor).get(short_id=short_id)

    def windows_for(self, course: Course) -> dict[int, SurveyWindowRecord]:
        return {
            row.survey_n: SurveyWindowRecord.from_row(row)
            for row in course.survey_windows.all()
        }

    @transaction.atomic
    def save_window(
        self,
        course: Course,
        survey_n: int,
        open_at: Optional[datetime],
        close_at: Optional[datetime],
    ) -> SurveyWindow:
        window, created = SurveyWindow.objects.update_or_create(
            course=course,
            survey_n=survey_n,
            defaults={"open_at": open_at, "close_at": close_at},
        )
        logger.info(
            "%s survey %s window for course %s",
            "Created" if created else "Updated",
            survey_n,
            course.short_id,
        )
        return window

    def student_records(self, course: Course, survey_n: Optional[int] = None) -> list[ResponseRecord]:
        return [
            ResponseRecord.from_row(row)
            for row in course.student_responses.all()
            if survey_n is None or row.survey_n == survey_n
        ]

    def instructor_records(self, course: Course, survey_n: Optional[int] = None) -> list[ResponseRecord]:
        return [
            ResponseRecord.from_row(row)
            for row in course.instructor_responses.all()
            if survey_n is None or row.survey_n == survey_n
        ]

    def roster_rows(self, course: Course) -> list[ResponseRecord]:
        """Student rows of every survey, fetched fresh so recent uploads are included."""
        return [
            ResponseRecord.from_row(row)
            for row in StudentResponse.objects.filter(course=course)
        ]

    @transaction.atomic
    def preload_roster(
        self,
        course: Course,
        student_ids: Iterable[str],
        survey_numbers: Iterable[int],
    ) -> int:
        rows = [
            StudentResponse(
                course=course,
                student_id=student_id,
                survey_n=survey_n,
                status=ResponseStatus.NOT_STARTED.value,
                upload_source=UploadSource.INSTRUCTOR.value,
            )
            for survey_n in survey_numbers
            for student_id in student_ids
        ]
        StudentResponse.objects.bulk_create(rows)
        return len(rows)

    @transaction.atomic
    def delete_preloaded(self, course: Course, student_ids: Iterable[str]) -> int:
        deleted, _ = StudentResponse.objects.filter(
            course=course,
            upload_source=UploadSource.INSTRUCTOR.value,
            student_id__in=list(student_ids),
        ).delete()
        return deleted

    def checklist_for(self, instructor) -> dict[str, bool]:
        return dict(
            ChecklistEntry.objects.filter(instructor=instructor).values_list("item", "completed")
        )

    def mark_checklist(self, instructor, item: str, now: Optional[datetime] = None) -> bool:
        """Mark a checklist item complete. Returns True if it was not complete before."""
        entry, _ = ChecklistEntry.objects.get_or_create(instructor=instructor, item=item)
        if entry.completed:
            return False
        entry.completed = True
        entry.completed_at = now or timezone.now()
        entry.save(update_fields=["completed", "completed_at"])
        return True
