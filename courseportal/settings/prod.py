"""
Production settings.

Values come from the process environment, optionally seeded from a .env
file next to manage.py (or the file named by COURSEPORTAL_ENV_FILE).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from .base import *

load_dotenv(
    dotenv_path=os.getenv('COURSEPORTAL_ENV_FILE', str(Path(BASE_DIR) / '.env'))
)

DEBUG = False

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("DJANGO_SECRET_KEY environment variable must be set in production")

ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost").split(",")
    if host.strip()
]
CSRF_TRUSTED_ORIGINS = [f"https://{host}" for host in ALLOWED_HOSTS if host != "localhost"]

DATABASES['default']['NAME'] = os.getenv('DATABASE_PATH', DATABASES['default']['NAME'])

# TLS ends at the reverse proxy; cookies follow its setting.
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
CSRF_COOKIE_SECURE = SESSION_COOKIE_SECURE
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

STATIC_ROOT = BASE_DIR / 'staticfiles'

# Everything goes to the rotating file so /health/ can show recent warnings
LOGGING['root'].update({'handlers': ['file', 'console'], 'level': 'INFO'})
LOGGING['loggers']['django']['handlers'] = ['file', 'console']
