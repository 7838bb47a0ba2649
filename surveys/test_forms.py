"""
Tests for surveys forms.

Covers:
- SurveyWindowForm date validation
- RosterUploadForm text and file input
- RosterDeleteForm selection rules
"""

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from .forms import RosterDeleteForm, RosterUploadForm, SurveyWindowForm
from .services import RosterService


class SurveyWindowFormTestCase(SimpleTestCase):
    """Test SurveyWindowForm validation."""

    def test_valid_range(self):
        form = SurveyWindowForm(
            data={"survey1-open_at": "2025-09-01T08:00", "survey1-close_at": "2025-09-30T17:00"},
            prefix="survey1",
        )
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["open_at"].day, 1)
        self.assertEqual(form.cleaned_data["close_at"].hour, 17)

    def test_open_ended_window_allowed(self):
        form = SurveyWindowForm(data={"open_at": "2025-09-01 08:00"})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertIsNone(form.cleaned_data["close_at"])

    def test_empty_form_clears_window(self):
        form = SurveyWindowForm(data={})
        self.assertTrue(form.is_valid())
        self.assertIsNone(form.cleaned_data["open_at"])

    def test_close_before_open_rejected(self):
        form = SurveyWindowForm(
            data={"open_at": "2025-09-30T08:00", "close_at": "2025-09-01T08:00"}
        )
        self.assertFalse(form.is_valid())
        self.assertIn("__all__", form.errors)

    def test_close_without_open_rejected(self):
        form = SurveyWindowForm(data={"close_at": "2025-09-01T08:00"})
        self.assertFalse(form.is_valid())

    def test_unparsable_date_rejected(self):
        form = SurveyWindowForm(data={"open_at": "next tuesday"})
        self.assertFalse(form.is_valid())
        self.assertIn("open_at", form.errors)


class RosterUploadFormTestCase(SimpleTestCase):
    """Test RosterUploadForm.get_text()."""

    def test_pasted_ids_and_file_combined(self):
        upload = SimpleUploadedFile(
            "roster.csv", "\ufeff3003\n4004\n".encode("utf-8"), content_type="text/csv"
        )
        form = RosterUploadForm(data={"student_ids": "1001, 2002"}, files={"csv_file": upload})

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(
            RosterService.parse_student_ids(form.get_text()),
            ["1001", "2002", "3003", "4004"],
        )

    def test_blank_form_is_valid_but_empty(self):
        form = RosterUploadForm(data={})
        self.assertTrue(form.is_valid())
        self.assertEqual(RosterService.parse_student_ids(form.get_text()), [])


class RosterDeleteFormTestCase(SimpleTestCase):
    """Test RosterDeleteForm selection."""

    def test_requires_ids_or_delete_all(self):
        self.assertFalse(RosterDeleteForm(data={}).is_valid())
        self.assertTrue(RosterDeleteForm(data={"student_ids": "1001"}).is_valid())
        self.assertTrue(RosterDeleteForm(data={"delete_all": "on"}).is_valid())
