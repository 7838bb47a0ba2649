"""
Centralized configuration for the course survey tracker.

Survey rules, polling intervals and log locations are defined here
and can be overridden via environment variables.
"""
from dataclasses import dataclass
import os


def _survey_numbers(raw: str) -> tuple:
    return tuple(int(part) for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class SurveyConfig:
    """Survey scheduling and participation rules."""

    # Completed student responses needed before a survey step counts as done
    MINIMUM_COMPLETED: int = int(os.getenv('MINIMUM_COMPLETED', '12'))

    # Each course runs two survey rounds
    SURVEY_NUMBERS: tuple = _survey_numbers(os.getenv('SURVEY_NUMBERS', '1,2'))

    # Format used for "Opens <date>" style messages
    DATE_DISPLAY_FORMAT: str = os.getenv('DATE_DISPLAY_FORMAT', '%m/%d/%Y')

    # External survey forms that students and instructors are sent to
    STUDENT_SURVEY_URL: str = os.getenv('STUDENT_SURVEY_URL', 'https://surveys.example.edu/student')
    STUDENT_SURVEY_ID: str = os.getenv('STUDENT_SURVEY_ID', 'student-course-survey-2025')
    INSTRUCTOR_SURVEY_URL: str = os.getenv('INSTRUCTOR_SURVEY_URL', 'https://surveys.example.edu/instructor')
    INSTRUCTOR_SURVEY_ID: str = os.getenv('INSTRUCTOR_SURVEY_ID', 'instructor-course-survey-2025')


@dataclass(frozen=True)
class FrontendConfig:
    """Frontend timing configuration (in milliseconds)."""

    # Polling interval for status changes on the courses page
    POLL_INTERVAL_MS: int = int(os.getenv('POLL_INTERVAL_MS', '30000'))


@dataclass(frozen=True)
class HealthConfig:
    """Health monitoring configuration."""

    # Directory for application logs
    LOG_DIR: str = os.getenv('LOG_DIR', 'logs')

    # Maximum log file size before rotation (10 MB)
    LOG_MAX_BYTES: int = int(os.getenv('LOG_MAX_BYTES', '10485760'))

    # Number of rotated log files to keep
    LOG_BACKUP_COUNT: int = int(os.getenv('LOG_BACKUP_COUNT', '5'))

    # Number of log entries to show in health endpoint
    HEALTH_LOG_ENTRIES: int = int(os.getenv('HEALTH_LOG_ENTRIES', '100'))


# Singleton instances - import these from other modules
SURVEYS = SurveyConfig()
FRONTEND = FrontendConfig()
HEALTH = HealthConfig()
