from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

from .models import Course, InstructorResponse, StudentResponse, SurveyWindow
from .repository import SurveyRepository
from .services.progress_service import ProgressService


def _sync_instructor_checklist(course: Course) -> None:
    ProgressService.sync_checklist(course.instructor, SurveyRepository(), timezone.now())


@receiver(post_save, sender=Course)
def sync_checklist_after_course_saved(sender, instance, **kwargs):
    _sync_instructor_checklist(instance)


@receiver(post_save, sender=SurveyWindow)
@receiver(post_save, sender=StudentResponse)
@receiver(post_save, sender=InstructorResponse)
def sync_checklist_after_progress_change(sender, instance, **kwargs):
    """
    Re-check the owning instructor's checklist when survey data changes.

    Bulk roster uploads bypass post_save; preloaded rows are "Not Started"
    and cannot complete a step anyway.
    """
    _sync_instructor_checklist(instance.course)
