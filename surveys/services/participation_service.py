"""
Participation summaries for reduced survey responses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from courseportal.settings.config import SURVEYS

from .response_service import ResponseRecord, ResponseStatus
from .window_service import WindowState


class DisplayMode(str, Enum):
    LIVE = "live"
    PENDING = "pending"


PENDING_STATES = frozenset({WindowState.UNCONFIGURED, WindowState.NOT_YET_OPEN})


@dataclass
class ParticipationSummary:
    """
    Bucketed participation for one survey.

    Attributes:
        not_started: Participant ids without progress (unknown statuses included)
        in_progress: Participant ids with a started survey
        completed: Participant ids with a completed survey
        minimum_completed: Completed responses required to meet the threshold
        meets_threshold: Whether completed_count >= minimum_completed
        window_state: Window state the caller evaluated, passed through
        display_mode: PENDING when counts should be replaced by an "opens on" message
    """
    not_started: list[str] = field(default_factory=list)
    in_progress: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)
    minimum_completed: int = 0
    meets_threshold: bool = False
    window_state: Optional[WindowState] = None
    display_mode: DisplayMode = DisplayMode.LIVE

    @property
    def completed_count(self) -> int:
        return len(self.completed)

    @property
    def counts(self) -> dict[str, int]:
        return {
            ResponseStatus.NOT_STARTED.value: len(self.not_started),
            ResponseStatus.IN_PROGRESS.value: len(self.in_progress),
            ResponseStatus.COMPLETED.value: len(self.completed),
        }

    @property
    def total(self) -> int:
        return len(self.not_started) + len(self.in_progress) + len(self.completed)

    def to_json_dict(self) -> dict:
        return {
            "counts": self.counts,
            "total": self.total,
            "completed_count": self.completed_count,
            "minimum_completed": self.minimum_completed,
            "meets_threshold": self.meets_threshold,
            "window_state": self.window_state.value if self.window_state else None,
            "display_mode": self.display_mode.value,
        }


class ParticipationService:
    @staticmethod
    def summarize(
        reduced: Mapping[str, ResponseRecord],
        minimum_completed: Optional[int] = None,
        window_state: Optional[WindowState] = None,
    ) -> ParticipationSummary:
        """
        Partition reduced responses into status buckets.

        Args:
            reduced: One record per participant, as returned by ResponseService.reduce
            minimum_completed: Threshold for meets_threshold (configured default when None)
            window_state: State of the survey window; unconfigured or not-yet-open
                windows switch the display mode to PENDING

        Returns:
            ParticipationSummary with buckets sorted by participant id
        """
        if minimum_completed is None:
            minimum_completed = SURVEYS.MINIMUM_COMPLETED

        buckets: dict[str, list[str]] = {
            ResponseStatus.NOT_STARTED.value: [],
            ResponseStatus.IN_PROGRESS.value: [],
            ResponseStatus.COMPLETED.value: [],
        }
        for participant_id, record in reduced.items():
            key = record.status.value if isinstance(record.status, Enum) else record.status
            buckets.get(key, buckets[ResponseStatus.NOT_STARTED.value]).append(participant_id)

        for ids in buckets.values():
            ids.sort()

        completed = buckets[ResponseStatus.COMPLETED.value]
        display_mode = DisplayMode.PENDING if window_state in PENDING_STATES else DisplayMode.LIVE
        return ParticipationSummary(
            not_started=buckets[ResponseStatus.NOT_STARTED.value],
            in_progress=buckets[ResponseStatus.IN_PROGRESS.value],
            completed=completed,
            minimum_completed=minimum_completed,
            meets_threshold=len(completed) >= minimum_completed,
            window_state=window_state,
            display_mode=display_mode,
        )
