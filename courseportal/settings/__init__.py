"""
Select the settings module for the course survey tracker.

DJANGO_ENV=production (or prod) loads production settings; anything else,
including an unset variable, loads development settings.
"""

import os

COURSEPORTAL_ENV = os.getenv('DJANGO_ENV', 'dev').strip().lower()

if COURSEPORTAL_ENV in ('production', 'prod'):
    from .prod import *
else:
    from .dev import *
