from datetime import datetime, timezone as dt_timezone
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import Client, TestCase

from .models import Course, StudentResponse, SurveyWindow


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=dt_timezone.utc)


class SurveyViewTestBase(TestCase):
    """Signed-in instructor with one course and a survey 1 window in September 2025."""

    def setUp(self):
        User = get_user_model()
        self.instructor = User.objects.create_user(username="prof", password="secret123")
        self.course = Course.objects.create(
            instructor=self.instructor,
            title="Intro to Biology",
            department="BIO",
            number_code="101",
        )
        SurveyWindow.objects.create(
            course=self.course, survey_n=1, open_at=utc(2025, 9, 1), close_at=utc(2025, 9, 30)
        )
        self.client = Client()
        self.client.force_login(self.instructor)

        patcher = mock.patch("surveys.views.common.current_time", return_value=utc(2025, 9, 15))
        self.clock = patcher.start()
        self.addCleanup(patcher.stop)

    def url(self, suffix=""):
        return f"/courses/{self.course.short_id}/{suffix}"


class CourseViewsTestCase(SurveyViewTestBase):
    """Test course list, detail and survey date views."""

    def test_login_required(self):
        response = Client().get("/courses/")
        self.assertEqual(response.status_code, 302)
        self.assertIn("/admin/login/", response["Location"])

    def test_course_list(self):
        response = self.client.get("/courses/")
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertTrue(data["ok"])
        self.assertEqual(data["poll_interval_ms"], 30000)
        course = data["courses"][0]
        self.assertEqual(course["short_id"], "bio-101-intro-to-biology")
        self.assertEqual(
            [s["window"]["state"] for s in course["surveys"]],
            ["open", "unconfigured"],
        )

    def test_other_instructors_course_is_hidden(self):
        other = get_user_model().objects.create_user(username="other", password="secret123")
        foreign = Course.objects.create(instructor=other, title="Chemistry")
        response = self.client.get(f"/courses/{foreign.short_id}/")
        self.assertEqual(response.status_code, 404)

    def test_course_detail_uses_current_time(self):
        self.clock.return_value = utc(2025, 8, 15)
        data = self.client.get(self.url()).json()

        survey1 = data["surveys"][0]
        self.assertEqual(survey1["window"]["display_text"], "Opens 09/01/2025")
        self.assertEqual(survey1["participation"]["display_mode"], "pending")

    def test_set_survey_dates(self):
        response = self.client.post(
            self.url("set-dates/"),
            {
                "survey1-open_at": "2025-09-02T08:00",
                "survey1-close_at": "2025-09-29T17:00",
                "survey2-open_at": "2025-11-01T08:00",
            },
        )
        self.assertEqual(response.status_code, 200)

        windows = response.json()["windows"]
        self.assertEqual([w["state"] for w in windows], ["open", "not_yet_open"])
        self.assertEqual(windows[1]["display_text"], "Opens 11/01/2025")
        self.assertIsNone(SurveyWindow.objects.get(course=self.course, survey_n=2).close_at)

    def test_invalid_dates_save_nothing(self):
        response = self.client.post(
            self.url("set-dates/"),
            {
                "survey1-open_at": "2025-10-01T08:00",
                "survey1-close_at": "2025-09-01T08:00",
                "survey2-open_at": "2025-11-01T08:00",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("1", response.json()["errors"])
        self.assertFalse(SurveyWindow.objects.filter(course=self.course, survey_n=2).exists())
        self.assertEqual(
            SurveyWindow.objects.get(course=self.course, survey_n=1).open_at, utc(2025, 9, 1)
        )


class CourseManagementViewsTestCase(SurveyViewTestBase):
    """Test course registration, editing and deletion."""

    def test_create_course(self):
        response = self.client.post(
            "/courses/add/",
            {
                "title": "Cell Biology",
                "department": "BIO",
                "number_code": "210",
                "n_sections": "2",
                "n_students": "45",
                "level": "Upper division",
                "course_format": "hybrid",
            },
        )
        self.assertEqual(response.status_code, 201)

        data = response.json()
        self.assertEqual(data["course"]["short_id"], "bio-210-cell-biology")
        self.assertEqual(data["next"], "/courses/bio-210-cell-biology/set-dates/")
        course = Course.objects.get(short_id="bio-210-cell-biology")
        self.assertEqual(course.instructor, self.instructor)
        self.assertEqual(course.n_sections, 2)

    def test_create_requires_title_and_sections(self):
        response = self.client.post("/courses/add/", {"title": "  ", "n_sections": "0", "n_students": "5"})
        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertIn("title", errors)
        self.assertIn("n_sections", errors)
        self.assertEqual(Course.objects.count(), 1)

    def test_create_requires_post(self):
        self.assertEqual(self.client.get("/courses/add/").status_code, 405)

    def test_course_titled_add_gets_routable_short_id(self):
        response = self.client.post("/courses/add/", {"title": "Add", "n_sections": "1", "n_students": "0"})
        short_id = response.json()["course"]["short_id"]
        self.assertEqual(short_id, "add-2")
        self.assertEqual(self.client.get(f"/courses/{short_id}/").status_code, 200)

    def test_edit_course_keeps_short_id(self):
        response = self.client.post(
            self.url("edit/"),
            {"title": "Introductory Biology", "department": "BIO", "number_code": "101",
             "n_sections": "3", "n_students": "120"},
        )
        self.assertEqual(response.status_code, 200)

        self.course.refresh_from_db()
        self.assertEqual(self.course.title, "Introductory Biology")
        self.assertEqual(self.course.n_students, 120)
        self.assertEqual(self.course.short_id, "bio-101-intro-to-biology")
        self.assertEqual(response.json()["course"]["title"], "Introductory Biology")

    def test_edit_invalid_data(self):
        response = self.client.post(self.url("edit/"), {"title": "Biology", "n_sections": "1", "n_students": "-1"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("n_students", response.json()["errors"])

    def test_delete_course_removes_survey_data(self):
        StudentResponse.objects.create(course=self.course, student_id="1001", survey_n=1)

        response = self.client.post(self.url("delete/"))

        self.assertEqual(response.json(), {"ok": True, "deleted": "bio-101-intro-to-biology"})
        self.assertFalse(Course.objects.filter(pk=self.course.pk).exists())
        self.assertFalse(SurveyWindow.objects.exists())
        self.assertFalse(StudentResponse.objects.exists())

    def test_cannot_edit_or_delete_other_instructors_course(self):
        other = get_user_model().objects.create_user(username="other", password="secret123")
        foreign = Course.objects.create(instructor=other, title="Chemistry")

        self.assertEqual(self.client.post(f"/courses/{foreign.short_id}/edit/", {"title": "X"}).status_code, 404)
        self.assertEqual(self.client.post(f"/courses/{foreign.short_id}/delete/").status_code, 404)
        self.assertTrue(Course.objects.filter(pk=foreign.pk).exists())


class RosterViewsTestCase(SurveyViewTestBase):
    """Test roster upload and delete views."""

    def test_upload_and_list(self):
        response = self.client.post(self.url("roster/"), {"student_ids": "1001\n1002"})
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data["added"], ["1001", "1002"])
        self.assertEqual(
            data["students"],
            [
                {"student_id": "1001", "can_delete": True},
                {"student_id": "1002", "can_delete": True},
            ],
        )

    def test_empty_upload_rejected(self):
        response = self.client.post(self.url("roster/"), {"student_ids": "  "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Please enter at least one student ID.")

    def test_delete_all_keeps_self_registered_students(self):
        self.client.post(self.url("roster/"), {"student_ids": "1001, 1002"})
        StudentResponse.objects.create(
            course=self.course, student_id="1001", survey_n=1, status="Completed"
        )

        response = self.client.post(self.url("roster/delete/"), {"delete_all": "on"})

        data = response.json()
        self.assertEqual(data["removed"], ["1002"])
        self.assertEqual(data["message"], "Removed 1 student(s).")
        self.assertFalse(StudentResponse.objects.filter(student_id="1002").exists())

    def test_delete_nothing_eligible(self):
        response = self.client.post(self.url("roster/delete/"), {"student_ids": "9999"})
        self.assertEqual(
            response.json()["message"],
            "No eligible manually added students available for deletion.",
        )

    def test_delete_requires_post(self):
        self.assertEqual(self.client.get(self.url("roster/delete/")).status_code, 405)


class ReportViewsTestCase(SurveyViewTestBase):
    """Test participation report and search views."""

    def setUp(self):
        super().setUp()
        StudentResponse.objects.create(
            course=self.course, student_id="1001", survey_n=1, status="Completed",
            first_name="Ada", last_name="Lovelace",
        )
        StudentResponse.objects.create(
            course=self.course, student_id="1002", survey_n=1, status="Not Started",
        )

    def test_participation_report(self):
        data = self.client.get(self.url("reports/participation/1/")).json()

        self.assertEqual([row["participant_id"] for row in data["rows"]], ["1002", "1001"])
        self.assertEqual(data["summary"]["counts"]["Completed"], 1)
        self.assertEqual(data["window"]["state"], "open")

    def test_unknown_survey_number(self):
        response = self.client.get(self.url("reports/participation/3/"))
        self.assertEqual(response.status_code, 404)

    def test_search(self):
        data = self.client.get(self.url("reports/participation/search/"), {"query": "lovelace"}).json()
        self.assertEqual(data["query"], "lovelace")
        self.assertEqual([r["participant_id"] for r in data["results"]], ["1001"])
        self.assertEqual(data["results"][0]["name"], "Ada Lovelace")


class DashboardViewTestCase(SurveyViewTestBase):
    """Test the dashboard next steps."""

    def test_come_back_message_before_first_survey(self):
        self.clock.return_value = utc(2025, 8, 15)
        data = self.client.get("/dashboard/").json()

        self.assertTrue(data["setup"]["complete"])
        self.assertEqual(data["setup"]["steps"], [])
        self.assertIn("Come back here on 09/01/2025", data["setup"]["message"])
        self.assertEqual(data["surveys"], [])

    def test_show_all_tasks(self):
        data = self.client.get("/dashboard/", {"showAllTasks": "true"}).json()

        self.assertEqual([s["item"] for s in data["setup"]["steps"]], ["setup_course"])
        self.assertEqual(data["surveys"][0]["survey_n"], 1)
        self.assertEqual(
            [s["item"] for s in data["surveys"][0]["steps"]],
            ["survey1_students", "survey1_instructor"],
        )


class HealthViewTestCase(TestCase):
    """Test the staff-only health endpoint."""

    def test_staff_only(self):
        User = get_user_model()
        user = User.objects.create_user(username="prof", password="secret123")
        client = Client()
        client.force_login(user)
        self.assertEqual(client.get("/health/").status_code, 302)

    def test_reports_ok(self):
        User = get_user_model()
        staff = User.objects.create_user(username="ops", password="secret123", is_staff=True)
        client = Client()
        client.force_login(staff)

        response = client.get("/health/")

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["health"], {"database": "OK", "cache": "OK", "status": "OK"})
        self.assertIn("cpu_percent", data["metrics"])
        self.assertEqual(data["log_count"], len(data["logs"]))

    def test_cache_failure_reported(self):
        """A failing cache backend turns into a 503 with the error, not a crash."""
        User = get_user_model()
        staff = User.objects.create_user(username="ops", password="secret123", is_staff=True)
        client = Client()
        client.force_login(staff)

        broken_cache = mock.Mock()
        broken_cache.set.side_effect = ConnectionError("cache down")
        with mock.patch("surveys.views.health.cache", broken_cache):
            with self.assertLogs("surveys.views.health", level="ERROR"):
                response = client.get("/health/")

        self.assertEqual(response.status_code, 503)
        data = response.json()
        self.assertEqual(data["health"]["cache"], "ERROR: cache down")
        self.assertEqual(data["health"]["database"], "OK")
        self.assertEqual(data["health"]["status"], "ERROR")


class ParticipationReportCommandTestCase(TestCase):
    """Test the participation_report management command."""

    def setUp(self):
        instructor = get_user_model().objects.create_user(username="prof", password="secret123")
        self.course = Course.objects.create(instructor=instructor, title="Intro to Biology")
        SurveyWindow.objects.create(course=self.course, survey_n=1, open_at=utc(2025, 9, 1))
        StudentResponse.objects.create(
            course=self.course, student_id="1001", survey_n=1, status="Completed"
        )

    def test_prints_counts_and_rows(self):
        out = StringIO()
        call_command("participation_report", self.course.short_id, "1", "--minimum", "1", "--list", stdout=out)

        output = out.getvalue()
        self.assertTrue(output.startswith("Intro to Biology - Survey 1\n"), output)
        self.assertIn("Completed: 1", output)
        self.assertIn("Completed 1 of 1 required", output)
        self.assertIn("1001\tCompleted", output)

    def test_pending_survey(self):
        out = StringIO()
        call_command("participation_report", self.course.short_id, "2", stdout=out)
        self.assertIn("Survey has not opened yet.", out.getvalue())

    def test_unknown_course(self):
        with self.assertRaises(CommandError):
            call_command("participation_report", "missing", "1", stdout=StringIO())

    def test_unknown_survey(self):
        with self.assertRaises(CommandError):
            call_command("participation_report", self.course.short_id, "7", stdout=StringIO())
