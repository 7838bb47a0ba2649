"""
Development settings: debug on, any host.

Set SURVEYS_LOG_LEVEL=DEBUG to see response reduction details on the console.
"""

import os

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

INTERNAL_IPS = ['127.0.0.1']

LOGGING['handlers']['console']['level'] = os.getenv('SURVEYS_LOG_LEVEL', 'INFO')
