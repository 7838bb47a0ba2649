from django import forms
from django.contrib import admin

from .models import ChecklistEntry, Course, InstructorResponse, StudentResponse, SurveyWindow


class SurveyWindowAdminForm(forms.ModelForm):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        fmt = "%m/%d/%Y %H:%M"
        for name in ("open_at", "close_at"):
            if name in self.fields:
                self.fields[name].input_formats = [fmt]
                self.fields[name].widget.format = fmt
                self.fields[name].widget.attrs.setdefault("placeholder", "mm/dd/yyyy hh:mm")

    class Meta:
        model = SurveyWindow
        fields = "__all__"
        widgets = {
            "open_at": forms.DateTimeInput(
                format="%m/%d/%Y %H:%M", attrs={"placeholder": "mm/dd/yyyy hh:mm"}
            ),
            "close_at": forms.DateTimeInput(
                format="%m/%d/%Y %H:%M", attrs={"placeholder": "mm/dd/yyyy hh:mm"}
            ),
        }


class SurveyWindowInline(admin.TabularInline):
    model = SurveyWindow
    form = SurveyWindowAdminForm
    extra = 0
    max_num = 2
    fields = ("survey_n", "open_at", "close_at")


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "department", "number_code", "short_id", "instructor", "created_at")
    list_filter = ("department", "course_format")
    search_fields = ("title", "department", "number_code", "short_id")
    inlines = [SurveyWindowInline]


@admin.register(SurveyWindow)
class SurveyWindowAdmin(admin.ModelAdmin):
    form = SurveyWindowAdminForm
    list_display = ("course", "survey_n", "display_open", "display_close", "updated_at")
    list_filter = ("survey_n",)
    search_fields = ("course__title", "course__short_id")
    ordering = ("course", "survey_n")

    @admin.display(description="Open")
    def display_open(self, obj):
        return obj.open_at.strftime("%m/%d/%Y %H:%M") if obj.open_at else "—"

    @admin.display(description="Close")
    def display_close(self, obj):
        return obj.close_at.strftime("%m/%d/%Y %H:%M") if obj.close_at else "—"


@admin.register(StudentResponse)
class StudentResponseAdmin(admin.ModelAdmin):
    list_display = ("student_id", "course", "survey_n", "status", "upload_source", "updated_at")
    list_filter = ("survey_n", "status", "upload_source")
    search_fields = ("student_id", "first_name", "last_name", "course__short_id")


@admin.register(InstructorResponse)
class InstructorResponseAdmin(admin.ModelAdmin):
    list_display = ("course", "instructor", "survey_n", "status", "updated_at")
    list_filter = ("survey_n", "status")
    search_fields = ("course__title", "course__short_id")


@admin.register(ChecklistEntry)
class ChecklistEntryAdmin(admin.ModelAdmin):
    list_display = ("instructor", "item", "completed", "completed_at")
    list_filter = ("item", "completed")


admin.site.site_title = "Course Survey Administration"
admin.site.site_header = "Course Survey Administration"
