"""
Base settings for the Outpost storefront.

Environment values are read from DJANGO_ENV_FILE (or .env next to the
project) before anything else, the same way manage.py does it.
"""

from pathlib import Path
import os

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

_explicit_env_file = os.environ.get('DJANGO_ENV_FILE')
if _explicit_env_file:
    load_dotenv(_explicit_env_file)
else:
    load_dotenv(BASE_DIR / '.env')


def _env_flag(name, default='false'):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-outpost-dev-key')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = _env_flag('DEBUG')

_allowed_hosts_env = (os.environ.get('ALLOWED_HOSTS') or '').strip()
if _allowed_hosts_env:
    ALLOWED_HOSTS = [h.strip() for h in _allowed_hosts_env.split(',') if h.strip()]
else:
    ALLOWED_HOSTS = ['localhost', '127.0.0.1', 'testserver']

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'storefront',
    'productcolors',
    'customizer',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'outpost.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'outpost.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.environ.get('DB_USER', ''),
        'PASSWORD': os.environ.get('DB_PASSWORD', ''),
        'HOST': os.environ.get('DB_HOST', ''),
        'PORT': os.environ.get('DB_PORT', ''),
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'outpost-default',
    },
    # Product groups and the RGB lookup live here; falls back to default if removed.
    'fragments': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'outpost-fragments',
    },
}

LANGUAGE_CODE = 'en-gb'
TIME_ZONE = 'Europe/London'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.MultiPartParser',
        'rest_framework.parsers.FormParser',
    ],
}

# Logo preview engine
CUSTOMIZER = {
    'CANVAS_SIZE': int(os.environ.get('CUSTOMIZER_CANVAS_SIZE', 400)),
    'MAX_LOGO_BYTES': 10 * 1024 * 1024,
    'MIN_LOGO_PX': 800,
    'RECOMMENDED_LOGO_PX': 1200,
    'IMAGE_FETCH_TIMEOUT': 10,
    'PRODUCT_GROUP_CACHE_TIMEOUT': 600,
    'ALLOWED_IMAGE_HOSTS': [
        h.strip() for h in os.environ.get('CUSTOMIZER_IMAGE_HOSTS', '').split(',') if h.strip()
    ],
}

_log_file = os.environ.get('DJANGO_LOG_FILE')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{levelname} {asctime} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': True,
        },
        'storefront': {
            'handlers': ['console'],
            'level': os.environ.get('STOREFRONT_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'productcolors': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'customizer': {
            'handlers': ['console'],
            'level': os.environ.get('CUSTOMIZER_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

if _log_file:
    LOGGING['handlers']['file'] = {
        'level': 'INFO',
        'class': 'logging.FileHandler',
        'filename': _log_file,
        'formatter': 'simple',
    }
    for _logger in LOGGING['loggers'].values():
        _logger['handlers'].append('file')
