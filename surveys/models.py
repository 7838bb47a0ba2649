from django.conf import settings
from django.db import models


SURVEY_CHOICES = [
    (1, "Survey 1"),
    (2, "Survey 2"),
]

STATUS_CHOICES = [
    ("Not Started", "Not Started"),
    ("In Progress", "In Progress"),
    ("Completed", "Completed"),
]


class Course(models.Model):
    """A course registered by an instructor."""

    FORMAT_CHOICES = [
        ("in_person", "In person"),
        ("online", "Online"),
        ("hybrid", "Hybrid"),
    ]

    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="courses",
    )
    short_id = models.SlugField(max_length=40, unique=True, blank=True)
    title = models.CharField(max_length=200)
    department = models.CharField(max_length=100, blank=True)
    number_code = models.CharField(max_length=30, blank=True)
    n_sections = models.PositiveIntegerField(default=1)
    n_students = models.PositiveIntegerField(default=0)
    level = models.CharField(max_length=50, blank=True)
    course_format = models.CharField(max_length=20, choices=FORMAT_CHOICES, blank=True)
    additional_info = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["title", "id"]

    def __str__(self) -> str:
        code = f"{self.department} {self.number_code}".strip()
        return f"{self.title} ({code})" if code else self.title

    def save(self, *args, **kwargs):
        if not self.short_id:
            from .utils import unique_short_id

            self.short_id = unique_short_id(f"{self.department} {self.number_code} {self.title}")
        super().save(*args, **kwargs)


class SurveyWindow(models.Model):
    """Open/close schedule for one survey round of a course."""

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="survey_windows")
    survey_n = models.PositiveSmallIntegerField(choices=SURVEY_CHOICES)
    open_at = models.DateTimeField(null=True, blank=True)
    close_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["course", "survey_n"]
        constraints = [
            models.UniqueConstraint(
                fields=["course", "survey_n"],
                name="unique_course_survey_window",
            )
        ]

    def __str__(self) -> str:
        return f"{self.course} – Survey {self.survey_n}"


class StudentResponse(models.Model):
    """
    A student's progress on one survey round.

    Several rows may exist for the same student and survey (a roster row
    preloaded by the instructor next to the student's own submission).
    """

    SOURCE_CHOICES = [
        ("Instructor", "Preloaded by instructor"),
        ("Student", "Self-registered"),
    ]

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="student_responses")
    student_id = models.CharField(max_length=100)
    survey_n = models.PositiveSmallIntegerField(choices=SURVEY_CHOICES)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    # Free text: rows written by the survey platform are not validated.
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default="Not Started")
    upload_source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default="Student")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["course", "survey_n", "student_id"]
        indexes = [
            models.Index(fields=["course", "survey_n"], name="student_resp_course_survey"),
            models.Index(fields=["course", "student_id"], name="student_resp_course_student"),
        ]

    def __str__(self) -> str:
        return f"{self.student_id} – Survey {self.survey_n}: {self.status}"


class InstructorResponse(models.Model):
    """The instructor's own survey for a course round."""

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="instructor_responses")
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="instructor_responses",
    )
    survey_n = models.PositiveSmallIntegerField(choices=SURVEY_CHOICES)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default="Not Started")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["course", "survey_n"]

    def __str__(self) -> str:
        return f"{self.course} – Survey {self.survey_n}: {self.status}"


class ChecklistEntry(models.Model):
    """Onboarding step on an instructor's dashboard."""

    ITEM_CHOICES = [
        ("setup_course", "Set up your course"),
        ("survey1_students", "Send out student surveys (Survey 1)"),
        ("survey1_instructor", "Complete instructor surveys (Survey 1)"),
        ("survey2_students", "Send out student surveys (Survey 2)"),
        ("survey2_instructor", "Complete instructor surveys (Survey 2)"),
    ]

    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="checklist_entries",
    )
    item = models.CharField(max_length=40, choices=ITEM_CHOICES)
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name_plural = "Checklist entries"
        constraints = [
            models.UniqueConstraint(
                fields=["instructor", "item"],
                name="unique_instructor_checklist_item",
            )
        ]

    def __str__(self) -> str:
        return f"{self.instructor} – {self.get_item_display()}: {'done' if self.completed else 'open'}"
