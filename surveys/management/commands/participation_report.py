"""
Django management command to print a course's participation for one survey.

Usage:
    python manage.py participation_report <short_id> <survey_n>
    python manage.py participation_report <short_id> <survey_n> --minimum 15 --list
"""
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from courseportal.settings.config import SURVEYS
from surveys.models import Course
from surveys.repository import SurveyRepository
from surveys.services import DisplayMode, ProgressService


class Command(BaseCommand):
    help = "Print participation counts for one survey round of a course"

    def add_arguments(self, parser):
        parser.add_argument("short_id", help="Course short id")
        parser.add_argument("survey_n", type=int, help="Survey number")
        parser.add_argument(
            "--minimum",
            type=int,
            default=None,
            help=f"Completed responses required (default: {SURVEYS.MINIMUM_COMPLETED})",
        )
        parser.add_argument(
            "--list",
            action="store_true",
            help="List every student with their status",
        )

    def handle(self, *args, **options):
        survey_n = options["survey_n"]
        if survey_n not in SURVEYS.SURVEY_NUMBERS:
            raise CommandError(f"Unknown survey {survey_n}")

        repository = SurveyRepository()
        try:
            course = repository.get_course(options["short_id"])
        except Course.DoesNotExist:
            raise CommandError(f"Course not found: {options['short_id']}")

        report = ProgressService.participation_report(
            course, survey_n, repository, timezone.now(), options["minimum"]
        )
        summary = report.summary

        self.stdout.write(f"{course} - Survey {survey_n}")
        self.stdout.write(f"Window: {report.window.display_text}")
        if summary.display_mode is DisplayMode.PENDING:
            self.stdout.write(self.style.WARNING("Survey has not opened yet."))
        for status, count in summary.counts.items():
            self.stdout.write(f"  {status}: {count}")

        line = f"Completed {summary.completed_count} of {summary.minimum_completed} required"
        if summary.meets_threshold:
            self.stdout.write(self.style.SUCCESS(line))
        else:
            self.stdout.write(self.style.ERROR(line))

        if options["list"]:
            for row in report.rows:
                self.stdout.write(f"  {row.participant_id}\t{row.status}")
