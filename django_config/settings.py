"""
Settings for the request log sample site.

Used by the test suite and by ``manage.py runserver``. Everything that
differs per deployment comes from the environment (or a ``.env`` file next to
``manage.py``). For production overrides see settings_prod.py.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-request-log-sample-site')

DEBUG = os.getenv('DJANGO_DEBUG', 'False').strip().lower() in ('true', '1', 't')

ALLOWED_HOSTS = [host.strip() for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if host.strip()]

INSTALLED_APPS = [
    'django.contrib.sessions',
    'django.contrib.staticfiles',
    'request_log',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'request_log.middleware.RequestLogMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
]

ROOT_URLCONF = 'django_config.urls'
WSGI_APPLICATION = 'django_config.wsgi.application'

# Not using a database
# Sessions are stored in signed cookies
DATABASES = {}
SESSION_ENGINE = 'django.contrib.sessions.backends.signed_cookies'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'OPTIONS': {
            'loaders': [
                ('django.template.loaders.locmem.Loader', {
                    'orders/detail.html': '<h1>Order {{ order_id }}</h1>',
                    'orders/list.html': '<ul>{% for o in orders %}<li>{{ o }}</li>{% endfor %}</ul>',
                    'broken.html': '{% for %}',
                }),
            ],
        },
    },
]

STATIC_URL = '/static/'

USE_TZ = True

# Request log
REQUEST_LOG = {
    'request.log.pathForAction': os.getenv('REQUEST_LOG_PATH_FOR_ACTION', 'Web.'),
    'request.log.maskParams': os.getenv('REQUEST_LOG_MASK_PARAMS', 'password|cvv|cardNumber|card.cvv|card.number'),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'request_id': {
            '()': 'request_log.utils.logging_filters.RequestIdFilter',
        },
    },
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} [{request_id}] {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['request_id'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
    },
    'loggers': {
        'request': {
            'level': os.getenv('REQUEST_LOG_LEVEL', 'INFO'),
        },
    },
}
