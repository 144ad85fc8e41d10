"""
Production settings for the request log sample site

To use this file, set the environment variable:
    export DJANGO_SETTINGS_MODULE=django_config.settings_prod
"""

from django.core.exceptions import ImproperlyConfigured

from .settings import *

DEBUG = False

allowed_hosts_env = os.getenv('DJANGO_ALLOWED_HOSTS')
if not allowed_hosts_env or allowed_hosts_env == '*':
    raise ImproperlyConfigured(
        "DJANGO_ALLOWED_HOSTS must be explicitly set in production. "
        "Set it to a comma-separated list of allowed hostnames."
    )
ALLOWED_HOSTS = [host.strip() for host in allowed_hosts_env.split(',') if host.strip()]

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY')
if not SECRET_KEY or 'django-insecure' in SECRET_KEY:
    raise ImproperlyConfigured("DJANGO_SECRET_KEY must be set to a secure random value in production.")

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

# The request log line is the access log; keep it even when the rest is quieter
LOGGING['root']['level'] = os.getenv('DJANGO_LOG_LEVEL', 'WARNING')
LOGGING['loggers']['request']['level'] = os.getenv('REQUEST_LOG_LEVEL', 'INFO')
