from django import forms

from .models import Course


DATETIME_INPUT_FORMATS = ["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S", "%d.%m.%Y %H:%M"]


class CourseForm(forms.ModelForm):
    """Course registration and editing; short_id is generated on first save."""

    n_sections = forms.IntegerField(label="Number of sections", min_value=1, initial=1)
    n_students = forms.IntegerField(label="Number of students", min_value=0, initial=0)

    class Meta:
        model = Course
        fields = [
            "title",
            "department",
            "number_code",
            "n_sections",
            "n_students",
            "level",
            "course_format",
            "additional_info",
        ]


class SurveyWindowForm(forms.Form):
    """Open/close dates for one survey round, used with a "survey<n>" prefix."""

    open_at = forms.DateTimeField(
        label="Open at",
        required=False,
        input_formats=DATETIME_INPUT_FORMATS,
        widget=forms.DateTimeInput(attrs={"type": "datetime-local"}),
    )
    close_at = forms.DateTimeField(
        label="Close at",
        required=False,
        input_formats=DATETIME_INPUT_FORMATS,
        widget=forms.DateTimeInput(attrs={"type": "datetime-local"}),
    )

    def clean(self):
        cleaned = super().clean()
        open_at = cleaned.get("open_at")
        close_at = cleaned.get("close_at")
        if close_at and not open_at:
            raise forms.ValidationError("Set an open date before setting a close date.")
        if open_at and close_at and close_at < open_at:
            raise forms.ValidationError("The close date must not be before the open date.")
        return cleaned


class RosterUploadForm(forms.Form):
    student_ids = forms.CharField(
        label="Student IDs",
        required=False,
        widget=forms.Textarea(attrs={"rows": 10}),
        help_text="One student ID per line, or a comma separated list.",
    )
    csv_file = forms.FileField(
        label="Student ID CSV",
        required=False,
        help_text="Optional file with one student ID per line.",
    )

    def get_text(self) -> str:
        """Combine pasted ids and the uploaded file into one block of text."""
        parts = [self.cleaned_data.get("student_ids") or ""]
        csv_file = self.cleaned_data.get("csv_file")
        if csv_file:
            parts.append(csv_file.read().decode("utf-8-sig"))
        return "\n".join(parts)


class RosterDeleteForm(forms.Form):
    student_ids = forms.CharField(label="Student IDs", required=False)
    delete_all = forms.BooleanField(label="Delete all preloaded students", required=False)

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get("delete_all") and not (cleaned.get("student_ids") or "").strip():
            raise forms.ValidationError("Choose students to delete or select all.")
        return cleaned
