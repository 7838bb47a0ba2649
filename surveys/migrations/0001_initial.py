from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


SURVEY_CHOICES = [(1, "Survey 1"), (2, "Survey 2")]
STATUS_CHOICES = [
    ("Not Started", "Not Started"),
    ("In Progress", "In Progress"),
    ("Completed", "Completed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("short_id", models.SlugField(blank=True, max_length=40, unique=True)),
                ("title", models.CharField(max_length=200)),
                ("department", models.CharField(blank=True, max_length=100)),
                ("number_code", models.CharField(blank=True, max_length=30)),
                ("n_sections", models.PositiveIntegerField(default=1)),
                ("n_students", models.PositiveIntegerField(default=0)),
                ("level", models.CharField(blank=True, max_length=50)),
                (
                    "course_format",
                    models.CharField(
                        blank=True,
                        choices=[("in_person", "In person"), ("online", "Online"), ("hybrid", "Hybrid")],
                        max_length=20,
                    ),
                ),
                ("additional_info", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "instructor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="courses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["title", "id"],
            },
        ),
        migrations.CreateModel(
            name="SurveyWindow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("survey_n", models.PositiveSmallIntegerField(choices=SURVEY_CHOICES)),
                ("open_at", models.DateTimeField(blank=True, null=True)),
                ("close_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="survey_windows",
                        to="surveys.course",
                    ),
                ),
            ],
            options={
                "ordering": ["course", "survey_n"],
            },
        ),
        migrations.AddConstraint(
            model_name="surveywindow",
            constraint=models.UniqueConstraint(fields=("course", "survey_n"), name="unique_course_survey_window"),
        ),
        migrations.CreateModel(
            name="StudentResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("student_id", models.CharField(max_length=100)),
                ("survey_n", models.PositiveSmallIntegerField(choices=SURVEY_CHOICES)),
                ("first_name", models.CharField(blank=True, max_length=100)),
                ("last_name", models.CharField(blank=True, max_length=100)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="Not Started", max_length=30)),
                (
                    "upload_source",
                    models.CharField(
                        choices=[("Instructor", "Preloaded by instructor"), ("Student", "Self-registered")],
                        default="Student",
                        max_length=20,
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="student_responses",
                        to="surveys.course",
                    ),
                ),
            ],
            options={
                "ordering": ["course", "survey_n", "student_id"],
            },
        ),
        migrations.AddIndex(
            model_name="studentresponse",
            index=models.Index(fields=["course", "survey_n"], name="student_resp_course_survey"),
        ),
        migrations.AddIndex(
            model_name="studentresponse",
            index=models.Index(fields=["course", "student_id"], name="student_resp_course_student"),
        ),
        migrations.CreateModel(
            name="InstructorResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("survey_n", models.PositiveSmallIntegerField(choices=SURVEY_CHOICES)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="Not Started", max_length=30)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="instructor_responses",
                        to="surveys.course",
                    ),
                ),
                (
                    "instructor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="instructor_responses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["course", "survey_n"],
            },
        ),
        migrations.CreateModel(
            name="ChecklistEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "item",
                    models.CharField(
                        choices=[
                            ("setup_course", "Set up your course"),
                            ("survey1_students", "Send out student surveys (Survey 1)"),
                            ("survey1_instructor", "Complete instructor surveys (Survey 1)"),
                            ("survey2_students", "Send out student surveys (Survey 2)"),
                            ("survey2_instructor", "Complete instructor surveys (Survey 2)"),
                        ],
                        max_length=40,
                    ),
                ),
                ("completed", models.BooleanField(default=False)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "instructor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="checklist_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "Checklist entries",
            },
        ),
        migrations.AddConstraint(
            model_name="checklistentry",
            constraint=models.UniqueConstraint(fields=("instructor", "item"), name="unique_instructor_checklist_item"),
        ),
    ]
