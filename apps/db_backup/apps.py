"""
App configuration for the db_backup app.
"""

from django.apps import AppConfig


class DbBackupConfig(AppConfig):
    """Configuration for the db_backup app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.db_backup"
    verbose_name = "Database Backups"
