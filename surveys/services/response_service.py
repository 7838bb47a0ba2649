"""
Response reduction service.

Survey response tables can hold several rows per participant and survey,
e.g. a preloaded roster row next to the participant's own submission.
This service collapses them to one authoritative row per participant.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from enum import Enum
from typing import Any, Iterable, Optional

from ..utils import coerce_int, ensure_aware, parse_timestamp, pick_value

logger = logging.getLogger(__name__)


class ResponseStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class UploadSource(str, Enum):
    INSTRUCTOR = "Instructor"
    STUDENT = "Student"


STATUS_RANK = {
    ResponseStatus.NOT_STARTED.value: 1,
    ResponseStatus.IN_PROGRESS.value: 2,
    ResponseStatus.COMPLETED.value: 3,
}

# Missing timestamps lose every tie
EARLIEST = datetime.min.replace(tzinfo=dt_timezone.utc)


@dataclass(frozen=True)
class ResponseRecord:
    """One response row for a participant (student or instructor)."""

    participant_id: str
    survey_n: int
    status: str
    updated_at: Optional[datetime] = None
    first_name: str = ""
    last_name: str = ""
    source: str = ""

    @classmethod
    def from_row(cls, row: Any) -> "ResponseRecord":
        """Build a record from a model instance or raw mapping."""
        status = pick_value(row, "status", default="")
        if isinstance(status, Enum):
            status = status.value
        return cls(
            participant_id=str(pick_value(row, "participant_id", "student_id", "instructor_id", default="")),
            survey_n=coerce_int(pick_value(row, "survey_n", "survey_number")),
            status=str(status),
            updated_at=parse_timestamp(pick_value(row, "updated_at")),
            first_name=str(pick_value(row, "first_name", default="")).strip(),
            last_name=str(pick_value(row, "last_name", default="")).strip(),
            source=str(pick_value(row, "upload_source", "source", default="")),
        )

    @property
    def rank(self) -> int:
        return ResponseService.status_rank(self.status)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_json_dict(self) -> dict:
        return {
            "participant_id": self.participant_id,
            "survey_n": self.survey_n,
            "status": self.status,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "name": self.full_name,
        }


class ResponseService:
    @staticmethod
    def status_rank(status: Any) -> int:
        """Rank a status value; anything outside the known set ranks lowest (0)."""
        if isinstance(status, Enum):
            status = status.value
        return STATUS_RANK.get(status, 0)

    @staticmethod
    def _precedence(record: ResponseRecord) -> tuple:
        # Status rank, then recency. The remaining fields only make the
        # order total so that equal-looking rows resolve identically.
        return (
            record.rank,
            ensure_aware(record.updated_at) if record.updated_at else EARLIEST,
            record.survey_n,
            record.status,
            record.source,
            record.first_name,
            record.last_name,
        )

    @staticmethod
    def pick_best(current: Optional[ResponseRecord], candidate: ResponseRecord) -> ResponseRecord:
        """Return whichever of two rows for the same participant should be kept."""
        if current is None:
            return candidate
        if ResponseService._precedence(candidate) > ResponseService._precedence(current):
            return candidate
        return current

    @staticmethod
    def reduce(records: Iterable[ResponseRecord]) -> dict[str, ResponseRecord]:
        """
        Collapse response rows to a single row per participant.

        The row with the furthest progress wins; among rows with equal
        progress the most recently updated one wins.

        Returns:
            Dict mapping participant_id to the retained ResponseRecord
        """
        best: dict[str, ResponseRecord] = {}
        count = 0
        for record in records:
            count += 1
            best[record.participant_id] = ResponseService.pick_best(
                best.get(record.participant_id), record
            )
        logger.debug("Reduced %d response rows to %d participants", count, len(best))
        return best

    @staticmethod
    def reduce_per_survey(records: Iterable[ResponseRecord]) -> dict[int, dict[str, ResponseRecord]]:
        """Reduce separately for each survey number."""
        grouped: dict[int, list[ResponseRecord]] = {}
        for record in records:
            grouped.setdefault(record.survey_n, []).append(record)
        return {
            survey_n: ResponseService.reduce(rows)
            for survey_n, rows in grouped.items()
        }
