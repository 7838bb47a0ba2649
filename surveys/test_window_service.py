"""
Tests for the survey window service.

Covers:
- State classification including open-ended and misconfigured windows
- Monotonic progression of states over time
- Display text and permitted actions
- Coercion of raw rows into SurveyWindowRecord
"""
from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from .services.window_service import (
    STATE_ORDER,
    SurveyWindowRecord,
    WindowAction,
    WindowService,
    WindowState,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=dt_timezone.utc)


class WindowEvaluateTestCase(SimpleTestCase):
    """Test WindowService.evaluate()."""

    def setUp(self):
        self.window = SurveyWindowRecord(
            survey_n=1,
            open_at=utc(2025, 9, 1),
            close_at=utc(2025, 9, 30),
        )

    def test_no_window_is_unconfigured(self):
        self.assertEqual(WindowService.evaluate(None, utc(2025, 9, 15)), WindowState.UNCONFIGURED)

    def test_missing_open_date_is_unconfigured(self):
        window = SurveyWindowRecord(survey_n=1, open_at=None, close_at=utc(2025, 9, 30))
        self.assertEqual(WindowService.evaluate(window, utc(2025, 9, 15)), WindowState.UNCONFIGURED)

    def test_before_open_is_not_yet_open(self):
        self.assertEqual(WindowService.evaluate(self.window, utc(2025, 8, 31)), WindowState.NOT_YET_OPEN)

    def test_open_boundaries_are_inclusive(self):
        """The window is open at exactly open_at and exactly close_at."""
        self.assertEqual(WindowService.evaluate(self.window, utc(2025, 9, 1)), WindowState.OPEN)
        self.assertEqual(WindowService.evaluate(self.window, utc(2025, 9, 30)), WindowState.OPEN)

    def test_after_close_is_closed(self):
        after = utc(2025, 9, 30) + timedelta(seconds=1)
        self.assertEqual(WindowService.evaluate(self.window, after), WindowState.CLOSED)

    def test_open_ended_window_before_open(self):
        """Window opening 2025-09-01 without close date, checked on 2025-08-15."""
        window = SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 1))
        self.assertEqual(WindowService.evaluate(window, utc(2025, 8, 15)), WindowState.NOT_YET_OPEN)

    def test_open_ended_window_never_closes(self):
        """Same window checked on 2025-10-01 and years later stays open."""
        window = SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 1))
        self.assertEqual(WindowService.evaluate(window, utc(2025, 10, 1)), WindowState.OPEN)
        self.assertEqual(WindowService.evaluate(window, utc(2040, 1, 1)), WindowState.OPEN)

    def test_close_before_open_is_unconfigured(self):
        window = SurveyWindowRecord(survey_n=2, open_at=utc(2025, 9, 30), close_at=utc(2025, 9, 1))
        self.assertTrue(window.is_misconfigured)
        with self.assertLogs("surveys.services.window_service", level="WARNING"):
            for now in (utc(2025, 8, 1), utc(2025, 9, 15), utc(2025, 12, 1)):
                self.assertEqual(WindowService.evaluate(window, now), WindowState.UNCONFIGURED)

    def test_naive_now_is_treated_as_utc(self):
        self.assertEqual(WindowService.evaluate(self.window, datetime(2025, 9, 15)), WindowState.OPEN)

    def test_naive_window_dates_are_treated_as_utc(self):
        """Windows built from naive datetimes compare against aware and naive clocks."""
        window = SurveyWindowRecord(survey_n=1, open_at=datetime(2025, 9, 1))
        self.assertEqual(window.open_at, utc(2025, 9, 1))
        self.assertEqual(WindowService.evaluate(window, datetime(2025, 8, 15)), WindowState.NOT_YET_OPEN)
        self.assertEqual(WindowService.evaluate(window, utc(2025, 9, 2)), WindowState.OPEN)

    def test_mixed_naive_and_aware_window_dates(self):
        window = SurveyWindowRecord(survey_n=1, open_at=datetime(2025, 9, 1), close_at=utc(2025, 9, 30))
        self.assertFalse(window.is_misconfigured)
        self.assertEqual(WindowService.evaluate(window, utc(2025, 10, 1)), WindowState.CLOSED)

    def test_states_are_monotonic_over_time(self):
        """Later moments never map to an earlier state."""
        windows = [
            self.window,
            SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 1)),
            SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 1), close_at=utc(2025, 9, 1)),
            SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 30), close_at=utc(2025, 9, 1)),
            SurveyWindowRecord(survey_n=1),
        ]
        moments = [utc(2025, 8, 1) + timedelta(hours=12 * step) for step in range(200)]
        for window in windows:
            ranks = [STATE_ORDER[WindowService.evaluate(window, now)] for now in moments]
            self.assertEqual(ranks, sorted(ranks), window)


class WindowActionsTestCase(SimpleTestCase):
    """Test WindowService.is_action_allowed()."""

    def test_submission_only_while_open(self):
        allowed = {
            state for state in WindowState
            if WindowService.is_action_allowed(state, WindowAction.SUBMIT_RESPONSE)
        }
        self.assertEqual(allowed, {WindowState.OPEN})

    def test_participation_visible_once_opened(self):
        allowed = {
            state for state in WindowState
            if WindowService.is_action_allowed(state, WindowAction.VIEW_PARTICIPATION)
        }
        self.assertEqual(allowed, {WindowState.OPEN, WindowState.CLOSED})


class WindowDisplayTestCase(SimpleTestCase):
    """Test display text and status bundling."""

    def test_not_yet_open_surfaces_open_date(self):
        window = SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 1), close_at=utc(2025, 9, 30))
        status = WindowService.get_status(window, utc(2025, 8, 15))
        self.assertEqual(status.state, WindowState.NOT_YET_OPEN)
        self.assertEqual(status.display_text, "Opens 09/01/2025")
        self.assertFalse(status.to_json_dict()["can_submit"])

    def test_open_window_shows_range(self):
        window = SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 1), close_at=utc(2025, 9, 30))
        status = WindowService.get_status(window, utc(2025, 9, 15))
        self.assertEqual(status.display_text, "09/01/2025 to 09/30/2025")
        self.assertTrue(status.to_json_dict()["can_submit"])

    def test_open_ended_window_text(self):
        window = SurveyWindowRecord(survey_n=2, open_at=utc(2025, 9, 1))
        status = WindowService.get_status(window, utc(2025, 10, 1))
        self.assertEqual(status.display_text, "09/01/2025 (no close date)")

    def test_unconfigured_text_and_survey_number(self):
        status = WindowService.get_status(None, utc(2025, 9, 1), survey_n=2)
        self.assertEqual(status.survey_n, 2)
        self.assertEqual(status.display_text, "Not set")
        self.assertEqual(
            status.to_json_dict(),
            {
                "survey_n": 2,
                "state": "unconfigured",
                "display_text": "Not set",
                "open_at": None,
                "close_at": None,
                "can_submit": False,
                "can_view_participation": False,
            },
        )

    def test_earliest_open_skips_unusable_windows(self):
        windows = [
            None,
            SurveyWindowRecord(survey_n=1),
            SurveyWindowRecord(survey_n=1, open_at=utc(2025, 8, 1), close_at=utc(2025, 7, 1)),
            SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 10)),
            SurveyWindowRecord(survey_n=1, open_at=utc(2025, 9, 5)),
        ]
        self.assertEqual(WindowService.earliest_open(windows).open_at, utc(2025, 9, 5))
        self.assertIsNone(WindowService.earliest_open([None]))


class SurveyWindowRecordTestCase(SimpleTestCase):
    """Test SurveyWindowRecord.from_row() coercion."""

    def test_parses_iso_strings(self):
        record = SurveyWindowRecord.from_row(
            {"survey_n": "1", "open_at": "2025-09-01T00:00:00Z", "close_at": "2025-09-30T12:00:00+00:00"}
        )
        self.assertEqual(record.survey_n, 1)
        self.assertEqual(record.open_at, utc(2025, 9, 1))
        self.assertEqual(record.close_at, utc(2025, 9, 30, 12))

    def test_malformed_timestamps_become_absent(self):
        record = SurveyWindowRecord.from_row(
            {"survey_n": 2, "open_at": "not a date", "close_at": "2025-13-45T00:00:00"}
        )
        self.assertIsNone(record.open_at)
        self.assertIsNone(record.close_at)
        self.assertEqual(WindowService.evaluate(record, utc(2025, 9, 1)), WindowState.UNCONFIGURED)

    def test_non_numeric_survey_number_is_unconfigured(self):
        record = SurveyWindowRecord.from_row(
            {"survey_n": "one", "open_at": "2025-09-01T00:00:00Z"}
        )
        self.assertEqual(record.survey_n, 0)
        self.assertEqual(WindowService.evaluate(record, utc(2025, 9, 15)), WindowState.UNCONFIGURED)

    def test_naive_datetimes_become_utc(self):
        record = SurveyWindowRecord.from_row({"survey_n": 1, "open_at": datetime(2025, 9, 1)})
        self.assertEqual(record.open_at, utc(2025, 9, 1))
