"""
Base Django settings for the database backup project.
Common settings shared across all environments.
"""

import os
from pathlib import Path

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Local apps
    "apps.db_backup",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Internationalization
LANGUAGE_CODE = "en"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Celery Configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_ROUTES = {
    "apps.db_backup.tasks.*": {"queue": "backups"},
}

# Database backup configuration
DB_BACKUP = {
    "PATH": os.getenv("DB_BACKUP_PATH", str(BASE_DIR / "storage" / "dumps")),
    "COMPRESS": os.getenv("DB_BACKUP_COMPRESS", "True") == "True",
    "ENCRYPTION_KEY": os.getenv("DB_BACKUP_ENCRYPTION_KEY", ""),
    "S3": {
        "PATH": os.getenv("DB_BACKUP_S3_PATH", "dumps"),
        "ACCESS_KEY_ID": os.getenv("AWS_ACCESS_KEY_ID", ""),
        "SECRET_ACCESS_KEY": os.getenv("AWS_SECRET_ACCESS_KEY", ""),
        "REGION": os.getenv("AWS_DEFAULT_REGION", ""),
        "ENDPOINT_URL": os.getenv("DB_BACKUP_S3_ENDPOINT_URL", ""),
    },
    "DROPBOX": {
        "ACCESS_TOKEN": os.getenv("DROPBOX_ACCESS_TOKEN", ""),
        "APP_SECRET": os.getenv("DROPBOX_APP_SECRET", ""),
        "PREFIX": os.getenv("DROPBOX_PREFIX", "backups"),
    },
    "DUMP_COMMANDS": {
        "postgresql": os.getenv("DB_BACKUP_PG_DUMP", "pg_dump"),
        "mysql": os.getenv("DB_BACKUP_MYSQLDUMP", "mysqldump"),
    },
    "DUMP_TIMEOUT": int(os.getenv("DB_BACKUP_DUMP_TIMEOUT", "0")) or None,
}
