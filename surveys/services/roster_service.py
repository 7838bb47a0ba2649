from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from courseportal.settings.config import SURVEYS

from .response_service import ResponseRecord, UploadSource

logger = logging.getLogger(__name__)

SEPARATORS = re.compile(r"[\r\n,;]+")


class RosterError(ValueError):
    """Raised when a roster upload cannot be processed."""


@dataclass
class TrackedStudent:
    student_id: str
    can_delete: bool

    def to_json_dict(self) -> dict:
        return {"student_id": self.student_id, "can_delete": self.can_delete}


class RosterService:
    """Preloaded student rosters ("Not Started" rows entered by the instructor)."""

    @staticmethod
    def parse_student_ids(text: str) -> list[str]:
        """
        Split pasted roster text into student ids.

        Accepts one id per line or comma/semicolon separated values.
        Blank entries and repeated ids are dropped, order is preserved.
        """
        seen: list[str] = []
        for raw in SEPARATORS.split(text or ""):
            student_id = raw.strip()
            if student_id and student_id not in seen:
                seen.append(student_id)
        return seen

    @staticmethod
    def tracked_students(rows: Iterable[ResponseRecord]) -> list[TrackedStudent]:
        """
        List every student with rows in the course.

        A student can only be removed when all of their rows were preloaded
        by the instructor; any self-registered row protects the student.
        """
        deletable: dict[str, bool] = {}
        for row in rows:
            from_instructor = row.source == UploadSource.INSTRUCTOR.value
            deletable[row.participant_id] = deletable.get(row.participant_id, True) and from_instructor
        return [
            TrackedStudent(student_id=student_id, can_delete=deletable[student_id])
            for student_id in sorted(deletable)
        ]

    @staticmethod
    def upload(
        course,
        text: str,
        repository,
        survey_numbers: Optional[Sequence[int]] = None,
    ) -> list[str]:
        """Preload a "Not Started" row per student id and survey number."""
        student_ids = RosterService.parse_student_ids(text)
        if not student_ids:
            raise RosterError("Please enter at least one student ID.")
        survey_numbers = survey_numbers or SURVEYS.SURVEY_NUMBERS
        created = repository.preload_roster(course, student_ids, survey_numbers)
        logger.info(
            "Preloaded %d roster rows (%d students) for course %s",
            created,
            len(student_ids),
            course.short_id,
        )
        return student_ids

    @staticmethod
    def delete(course, student_ids: Iterable[str], repository) -> list[str]:
        """
        Remove instructor-preloaded students.

        Ids that are unknown or have self-registered rows are skipped.

        Returns:
            The student ids that were removed
        """
        requested = set(student_ids)
        eligible = [
            student.student_id
            for student in RosterService.tracked_students(repository.roster_rows(course))
            if student.can_delete and student.student_id in requested
        ]
        if eligible:
            deleted = repository.delete_preloaded(course, eligible)
            logger.info(
                "Removed %d preloaded students (%d rows) from course %s",
                len(eligible),
                deleted,
                course.short_id,
            )
        return eligible
