"""
WSGI config for the request log sample site.

    gunicorn django_config.wsgi:application -c gunicorn.conf.py
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'django_config.settings')

application = get_wsgi_application()
