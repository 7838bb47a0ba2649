"""
Tests for the course progress and roster services against the database.

Covers:
- Per-course survey overview and participation reports
- Participant search across survey rounds
- Dashboard checklist syncing and next steps
- Roster preloading and deletion
"""
from datetime import datetime, timedelta, timezone as dt_timezone

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from .models import ChecklistEntry, Course, InstructorResponse, StudentResponse, SurveyWindow
from .repository import SurveyRepository
from .services import (
    DisplayMode,
    ProgressService,
    RosterError,
    RosterService,
    WindowService,
    WindowState,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=dt_timezone.utc)


class ProgressServiceTestBase(TestCase):
    """Base class with an instructor, a course and helpers for survey data."""

    def setUp(self):
        self.repository = SurveyRepository()
        self.instructor = get_user_model().objects.create_user(
            username="prof", password="secret123"
        )
        self.course = Course.objects.create(
            instructor=self.instructor,
            title="Intro to Biology",
            department="BIO",
            number_code="101",
            n_students=40,
        )

    def create_window(self, course, survey_n, open_at, close_at=None):
        return SurveyWindow.objects.create(
            course=course, survey_n=survey_n, open_at=open_at, close_at=close_at
        )

    def add_students(self, course, survey_n, status, count, prefix="s"):
        for i in range(count):
            StudentResponse.objects.create(
                course=course,
                student_id=f"{prefix}{i:03}",
                survey_n=survey_n,
                status=status,
            )

    def fresh(self, course):
        """Re-read a course so prefetched relations reflect new rows."""
        return self.repository.get_course(course.short_id)


class SurveyOverviewTestCase(ProgressServiceTestBase):
    """Test ProgressService.survey_overview()."""

    def test_short_id_generated_from_course_fields(self):
        self.assertEqual(self.course.short_id, "bio-101-intro-to-biology")
        duplicate = Course.objects.create(
            instructor=self.instructor, title="Intro to Biology", department="BIO", number_code="101"
        )
        self.assertEqual(duplicate.short_id, "bio-101-intro-to-biology-2")

    def test_overview_per_survey(self):
        self.create_window(self.course, 1, utc(2025, 9, 1), utc(2025, 9, 30))
        self.add_students(self.course, 1, "Completed", 12)
        self.add_students(self.course, 1, "Not Started", 2, prefix="n")
        InstructorResponse.objects.create(
            course=self.course, instructor=self.instructor, survey_n=1, status="Completed"
        )

        survey1, survey2 = ProgressService.survey_overview(
            self.fresh(self.course), self.repository, utc(2025, 9, 15), minimum_completed=12
        )

        self.assertEqual(survey1.window.state, WindowState.OPEN)
        self.assertTrue(survey1.instructor_completed)
        self.assertTrue(survey1.participation.meets_threshold)
        self.assertEqual(survey1.participation.total, 14)
        self.assertIn("survey_n=1", survey1.student_link)
        self.assertIn("course_id=bio-101-intro-to-biology", survey1.student_link)
        self.assertIn(f"instructor_id={self.instructor.pk}", survey1.instructor_link)

        self.assertEqual(survey2.window.state, WindowState.UNCONFIGURED)
        self.assertEqual(survey2.participation.display_mode, DisplayMode.PENDING)
        self.assertFalse(survey2.instructor_completed)

    def test_preloaded_row_does_not_hide_submission(self):
        """A roster row next to a completed submission counts once, as completed."""
        self.create_window(self.course, 1, utc(2025, 9, 1))
        RosterService.upload(self.course, "s000", self.repository, survey_numbers=[1])
        self.add_students(self.course, 1, "Completed", 1)

        survey1 = ProgressService.survey_overview(
            self.fresh(self.course), self.repository, utc(2025, 9, 15), minimum_completed=1
        )[0]

        self.assertEqual(survey1.participation.total, 1)
        self.assertEqual(survey1.participation.completed, ["s000"])
        self.assertTrue(survey1.participation.meets_threshold)


class ParticipationReportTestCase(ProgressServiceTestBase):
    """Test ProgressService.participation_report()."""

    def setUp(self):
        super().setUp()
        self.create_window(self.course, 1, utc(2025, 9, 1), utc(2025, 9, 30))
        for student_id, status in [
            ("c1", "Completed"),
            ("a1", "In Progress"),
            ("z1", "Not Started"),
            ("b1", "Not Started"),
            ("x1", "Withdrawn"),
        ]:
            StudentResponse.objects.create(
                course=self.course, student_id=student_id, survey_n=1, status=status
            )
        StudentResponse.objects.create(
            course=self.course, student_id="b1", survey_n=2, status="Completed"
        )

    def test_rows_ordered_by_status_then_id(self):
        report = ProgressService.participation_report(
            self.fresh(self.course), 1, self.repository, utc(2025, 10, 5), minimum_completed=1
        )

        self.assertEqual([row.participant_id for row in report.rows], ["b1", "z1", "a1", "c1", "x1"])
        self.assertEqual(report.window.state, WindowState.CLOSED)
        self.assertTrue(report.summary.meets_threshold)
        self.assertEqual(report.summary.not_started, ["b1", "x1", "z1"])

    def test_report_is_limited_to_one_survey(self):
        report = ProgressService.participation_report(
            self.fresh(self.course), 2, self.repository, utc(2025, 10, 5)
        )
        self.assertEqual([row.participant_id for row in report.rows], ["b1"])
        self.assertEqual(report.summary.display_mode, DisplayMode.PENDING)


class ParticipantSearchTestCase(ProgressServiceTestBase):
    """Test ProgressService.search_participants()."""

    def setUp(self):
        super().setUp()
        StudentResponse.objects.create(
            course=self.course, student_id="1001", survey_n=1, status="Completed",
            first_name="Ada", last_name="Lovelace",
        )
        StudentResponse.objects.create(
            course=self.course, student_id="1001", survey_n=2, status="Not Started",
        )
        StudentResponse.objects.create(
            course=self.course, student_id="2002", survey_n=1, status="In Progress",
            first_name="Alan", last_name="Turing",
        )
        StudentResponse.objects.create(
            course=self.course, student_id="3003", survey_n=1, status="Unknown",
        )

    def test_match_by_name_is_case_insensitive(self):
        results = ProgressService.search_participants(self.fresh(self.course), "ada love", self.repository)
        self.assertEqual([r.participant_id for r in results], ["1001"])
        self.assertEqual(results[0].status, "Completed")

    def test_match_by_id(self):
        results = ProgressService.search_participants(self.fresh(self.course), "200", self.repository)
        self.assertEqual([r.participant_id for r in results], ["2002"])

    def test_empty_query_lists_each_student_once(self):
        results = ProgressService.search_participants(self.fresh(self.course), "", self.repository)
        self.assertEqual([r.participant_id for r in results], ["1001", "2002"])


class ChecklistSyncTestCase(ProgressServiceTestBase):
    """Test ProgressService.sync_checklist() and next_steps()."""

    def setUp(self):
        super().setUp()
        self.now = timezone.now()
        # Far enough ahead that syncs triggered by saves see the window as not yet open
        self.open_at = self.now + timedelta(days=30)
        self.close_at = self.now + timedelta(days=60)
        self.during = self.now + timedelta(days=45)

    def test_setup_marked_when_course_created(self):
        self.assertEqual(self.repository.checklist_for(self.instructor), {"setup_course": True})

    def test_survey_steps_marked_once_window_active(self):
        self.create_window(self.course, 1, self.open_at, self.close_at)
        self.add_students(self.course, 1, "Completed", 12)
        InstructorResponse.objects.create(
            course=self.course, instructor=self.instructor, survey_n=1, status="Completed"
        )
        self.assertFalse(self.repository.checklist_for(self.instructor).get("survey1_students", False))

        completed = ProgressService.sync_checklist(self.instructor, self.repository, self.during)

        self.assertEqual(completed, ["survey1_students", "survey1_instructor"])
        entry = ChecklistEntry.objects.get(instructor=self.instructor, item="survey1_students")
        self.assertEqual(entry.completed_at, self.during)

        # Already complete, nothing new
        self.assertEqual(ProgressService.sync_checklist(self.instructor, self.repository, self.during), [])

    def test_every_active_course_must_meet_threshold(self):
        other = Course.objects.create(instructor=self.instructor, title="Genetics", department="BIO")
        self.create_window(self.course, 1, self.open_at, self.close_at)
        self.create_window(other, 1, self.open_at, self.close_at)
        self.add_students(self.course, 1, "Completed", 12)
        self.add_students(other, 1, "Completed", 3)

        completed = ProgressService.sync_checklist(self.instructor, self.repository, self.during)

        self.assertNotIn("survey1_students", completed)

    def test_courses_without_active_window_are_ignored(self):
        other = Course.objects.create(instructor=self.instructor, title="Genetics", department="BIO")
        self.create_window(self.course, 1, self.open_at, self.close_at)
        self.create_window(other, 1, self.close_at + timedelta(days=10))
        self.add_students(self.course, 1, "Completed", 12)

        completed = ProgressService.sync_checklist(self.instructor, self.repository, self.during)

        self.assertIn("survey1_students", completed)

    def test_completed_items_are_never_reverted(self):
        self.create_window(self.course, 1, self.open_at, self.close_at)
        self.add_students(self.course, 1, "Completed", 12)
        ProgressService.sync_checklist(self.instructor, self.repository, self.during)

        StudentResponse.objects.filter(course=self.course).delete()
        ProgressService.sync_checklist(self.instructor, self.repository, self.during)

        self.assertTrue(self.repository.checklist_for(self.instructor)["survey1_students"])

    def test_next_steps_without_courses(self):
        newcomer = get_user_model().objects.create_user(username="new", password="secret123")
        steps = ProgressService.next_steps(newcomer, self.repository, self.now)

        self.assertFalse(steps["setup"]["complete"])
        self.assertEqual([s["item"] for s in steps["setup"]["steps"]], ["setup_course"])
        self.assertIsNone(steps["setup"]["message"])
        self.assertEqual(steps["surveys"], [])

    def test_next_steps_before_first_survey_opens(self):
        self.create_window(self.course, 1, self.open_at, self.close_at)
        steps = ProgressService.next_steps(self.instructor, self.repository, self.now)

        self.assertTrue(steps["setup"]["complete"])
        self.assertEqual(steps["setup"]["steps"], [])
        self.assertIn(
            f"Come back here on {WindowService.format_date(self.open_at)}",
            steps["setup"]["message"],
        )
        self.assertEqual(steps["surveys"], [])

        shown = ProgressService.next_steps(self.instructor, self.repository, self.now, show_completed=True)
        self.assertEqual(
            shown["setup"]["steps"],
            [{"item": "setup_course", "title": "Set up your course", "completed": True}],
        )

    def test_next_steps_without_dates_uses_generic_message(self):
        steps = ProgressService.next_steps(self.instructor, self.repository, self.now)
        self.assertIn("Come back here on the scheduled date", steps["setup"]["message"])

    def test_next_steps_once_survey_open(self):
        self.create_window(self.course, 1, self.open_at, self.close_at)
        steps = ProgressService.next_steps(self.instructor, self.repository, self.during)

        self.assertIsNone(steps["setup"]["message"])
        self.assertEqual(len(steps["surveys"]), 1)
        section = steps["surveys"][0]
        self.assertEqual(section["survey_n"], 1)
        self.assertEqual(section["window"]["state"], "open")
        self.assertEqual(
            [s["item"] for s in section["steps"]],
            ["survey1_students", "survey1_instructor"],
        )


class RosterServiceTestCase(ProgressServiceTestBase):
    """Test RosterService upload and delete."""

    def test_parse_student_ids(self):
        self.assertEqual(
            RosterService.parse_student_ids("1001\n1002, 1003;1001\r\n\n"),
            ["1001", "1002", "1003"],
        )

    def test_upload_preloads_every_survey(self):
        added = RosterService.upload(self.course, "1001\n1002", self.repository)

        self.assertEqual(added, ["1001", "1002"])
        rows = StudentResponse.objects.filter(course=self.course)
        self.assertEqual(rows.count(), 4)
        self.assertEqual(set(rows.values_list("status", flat=True)), {"Not Started"})
        self.assertEqual(set(rows.values_list("upload_source", flat=True)), {"Instructor"})

    def test_upload_requires_ids(self):
        with self.assertRaises(RosterError):
            RosterService.upload(self.course, " \n,; ", self.repository)

    def test_self_registered_students_are_protected(self):
        RosterService.upload(self.course, "1001, 1002", self.repository)
        StudentResponse.objects.create(
            course=self.course, student_id="1001", survey_n=1, status="In Progress"
        )

        students = RosterService.tracked_students(self.repository.roster_rows(self.course))
        self.assertEqual(
            [(s.student_id, s.can_delete) for s in students],
            [("1001", False), ("1002", True)],
        )

        removed = RosterService.delete(self.course, ["1001", "1002", "9999"], self.repository)

        self.assertEqual(removed, ["1002"])
        self.assertEqual(
            sorted(StudentResponse.objects.filter(course=self.course).values_list("student_id", flat=True)),
            ["1001", "1001", "1001"],
        )


class SurveyRepositoryTestCase(ProgressServiceTestBase):
    """Test SurveyRepository writes."""

    def test_save_window_updates_in_place(self):
        self.repository.save_window(self.course, 1, utc(2025, 9, 1), None)
        self.repository.save_window(self.course, 1, utc(2025, 9, 2), utc(2025, 9, 20))

        windows = self.repository.windows_for(self.fresh(self.course))
        self.assertEqual(list(windows), [1])
        self.assertEqual(windows[1].open_at, utc(2025, 9, 2))
        self.assertEqual(windows[1].close_at, utc(2025, 9, 20))

    def test_mark_checklist_reports_new_completion(self):
        self.assertTrue(self.repository.mark_checklist(self.instructor, "survey2_students"))
        self.assertFalse(self.repository.mark_checklist(self.instructor, "survey2_students"))
