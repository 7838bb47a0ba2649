"""
Survey window service for deciding what a course's survey schedule allows.

This service classifies a survey's open/close window against an injected
"now", making the rules reusable and testable without a database.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from courseportal.settings.config import SURVEYS

from ..utils import coerce_int, ensure_aware, parse_timestamp, pick_value

logger = logging.getLogger(__name__)


class WindowState(str, Enum):
    UNCONFIGURED = "unconfigured"
    NOT_YET_OPEN = "not_yet_open"
    OPEN = "open"
    CLOSED = "closed"


class WindowAction(str, Enum):
    SUBMIT_RESPONSE = "submit_response"
    VIEW_PARTICIPATION = "view_participation"


# Position of each state along a window's lifetime
STATE_ORDER = {
    WindowState.UNCONFIGURED: 0,
    WindowState.NOT_YET_OPEN: 0,
    WindowState.OPEN: 1,
    WindowState.CLOSED: 2,
}

ALLOWED_ACTIONS = {
    WindowState.UNCONFIGURED: frozenset(),
    WindowState.NOT_YET_OPEN: frozenset(),
    WindowState.OPEN: frozenset({WindowAction.SUBMIT_RESPONSE, WindowAction.VIEW_PARTICIPATION}),
    WindowState.CLOSED: frozenset({WindowAction.VIEW_PARTICIPATION}),
}


@dataclass(frozen=True)
class SurveyWindowRecord:
    """Open/close schedule for one survey number of a course."""

    survey_n: int
    open_at: Optional[datetime] = None
    close_at: Optional[datetime] = None

    def __post_init__(self):
        # Naive timestamps are UTC
        for name in ("open_at", "close_at"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, ensure_aware(value))

    @classmethod
    def from_row(cls, row: Any) -> "SurveyWindowRecord":
        """Build a record from a model instance or raw mapping, dropping bad timestamps."""
        return cls(
            survey_n=coerce_int(pick_value(row, "survey_n", "survey_number")),
            open_at=parse_timestamp(pick_value(row, "open_at")),
            close_at=parse_timestamp(pick_value(row, "close_at")),
        )

    @property
    def is_misconfigured(self) -> bool:
        return (
            self.open_at is not None
            and self.close_at is not None
            and self.close_at < self.open_at
        )


@dataclass
class SurveyWindowStatus:
    """
    Encapsulates the evaluated state of one survey window.

    Attributes:
        survey_n: Survey number the window governs
        state: Evaluated WindowState at the time of evaluation
        window: The evaluated record (None if no window is configured)
        display_text: User-facing description, "Opens <date>" before opening
        allowed_actions: Actions permitted in this state
    """
    survey_n: int
    state: WindowState
    window: Optional[SurveyWindowRecord]
    display_text: str
    allowed_actions: frozenset = field(default_factory=frozenset)

    @property
    def opens_at(self) -> Optional[datetime]:
        return self.window.open_at if self.window else None

    @property
    def closes_at(self) -> Optional[datetime]:
        return self.window.close_at if self.window else None

    def to_json_dict(self) -> dict:
        return {
            "survey_n": self.survey_n,
            "state": self.state.value,
            "display_text": self.display_text,
            "open_at": self.opens_at.isoformat() if self.opens_at else None,
            "close_at": self.closes_at.isoformat() if self.closes_at else None,
            "can_submit": WindowAction.SUBMIT_RESPONSE in self.allowed_actions,
            "can_view_participation": WindowAction.VIEW_PARTICIPATION in self.allowed_actions,
        }


class WindowService:
    """Service for survey window logic."""

    @staticmethod
    def evaluate(window: Optional[SurveyWindowRecord], now: datetime) -> WindowState:
        """
        Classify a survey window at the given moment.

        A window without a close date is open-ended. A close date before
        the open date, or a row without a usable survey number, is treated
        as if no window were configured.
        """
        if window is None or window.open_at is None or window.survey_n < 1:
            return WindowState.UNCONFIGURED
        if window.is_misconfigured:
            logger.warning(
                "Survey %s window closes (%s) before it opens (%s); treating as unconfigured",
                window.survey_n,
                window.close_at.isoformat(),
                window.open_at.isoformat(),
            )
            return WindowState.UNCONFIGURED

        now = ensure_aware(now)
        if now < window.open_at:
            return WindowState.NOT_YET_OPEN
        if window.close_at is not None and now > window.close_at:
            return WindowState.CLOSED
        return WindowState.OPEN

    @staticmethod
    def is_action_allowed(state: WindowState, action: WindowAction) -> bool:
        return action in ALLOWED_ACTIONS[state]

    @staticmethod
    def format_date(value: datetime, date_format: Optional[str] = None) -> str:
        return value.strftime(date_format or SURVEYS.DATE_DISPLAY_FORMAT)

    @staticmethod
    def display_text(
        window: Optional[SurveyWindowRecord],
        state: WindowState,
        date_format: Optional[str] = None,
    ) -> str:
        """
        Describe a window for display.

        Returns:
            "Opens <date>" before opening, "Not set" when unconfigured,
            otherwise the configured range
        """
        if state is WindowState.UNCONFIGURED or window is None or window.open_at is None:
            return "Not set"
        opens = WindowService.format_date(window.open_at, date_format)
        if state is WindowState.NOT_YET_OPEN:
            return f"Opens {opens}"
        if window.close_at is None:
            return f"{opens} (no close date)"
        return f"{opens} to {WindowService.format_date(window.close_at, date_format)}"

    @staticmethod
    def get_status(
        window: Optional[SurveyWindowRecord],
        now: datetime,
        survey_n: Optional[int] = None,
    ) -> SurveyWindowStatus:
        """
        Get the full window status for one survey.

        Args:
            window: The configured window (None if the course has none yet)
            now: Current time from the caller's clock
            survey_n: Survey number, required when window is None

        Returns:
            SurveyWindowStatus with state, actions and display text
        """
        state = WindowService.evaluate(window, now)
        return SurveyWindowStatus(
            survey_n=window.survey_n if window else int(survey_n or 0),
            state=state,
            window=window,
            display_text=WindowService.display_text(window, state),
            allowed_actions=ALLOWED_ACTIONS[state],
        )

    @staticmethod
    def earliest_open(windows) -> Optional[SurveyWindowRecord]:
        """Return the usable window with the earliest open date, if any."""
        usable = [
            w for w in windows
            if w is not None and w.open_at is not None and not w.is_misconfigured
        ]
        if not usable:
            return None
        return min(usable, key=lambda w: (w.open_at, w.close_at is None, w.close_at or w.open_at))
