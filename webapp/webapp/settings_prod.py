"""
Django production settings for the affiliate API.

Runs in a single process: the robot's running guard and run history live in
memory, so serve with one worker (threads are fine).
"""

import os

from django.core.exceptions import ImproperlyConfigured

from .settings import *  # noqa: F401,F403
from .settings import DATABASES


def require_env(name: str) -> str:
    value = os.environ.get(name, '').strip()
    if not value:
        raise ImproperlyConfigured(f"{name} environment variable must be set for production")
    return value


SECRET_KEY = require_env('SECRET_KEY')

DEBUG = False

# comma separated, e.g. ALLOWED_HOSTS=api.ofertas.example,10.0.0.5
ALLOWED_HOSTS = [host.strip() for host in require_env('ALLOWED_HOSTS').split(',') if host.strip()]

DATABASES['default'].update({
    'PASSWORD': require_env('POSTGRES_PASSWORD'),
    'HOST': os.environ.get('POSTGRES_HOST', 'db'),
    'CONN_MAX_AGE': 600,
    'OPTIONS': {'connect_timeout': 10},
})

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = 'DENY'

if os.environ.get('USE_SSL', 'false').lower() == 'true':
    SECURE_SSL_REDIRECT = True
    SECURE_HSTS_SECONDS = 31536000
    SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# request bodies are small JSON documents
DATA_UPLOAD_MAX_MEMORY_SIZE = 262144

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {'class': 'logging.StreamHandler'},
    },
    'loggers': {
        'django.request': {
            'handlers': ['console'],
            'level': os.environ.get('DJANGO_LOG_LEVEL', 'ERROR'),
            'propagate': False,
        },
    },
}
