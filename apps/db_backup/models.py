"""
Models for the database backup app.
"""

from django.db import models


class DumpRecord(models.Model):
    """
    Record of a finished database dump.

    Written at most once per run, when the run was started with
    --save-dump-name, after the dump reached its final (compressed and/or
    encrypted) form and before any remote upload.
    """

    file = models.CharField(
        max_length=500,
        help_text="Local path of the dump file",
    )

    file_name = models.CharField(
        max_length=255,
        help_text="Name of the dump file, used as the remote object name",
    )

    prefix = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Remote folder the dump is uploaded under (null when not uploaded)",
    )

    encrypted = models.BooleanField(
        default=False,
        help_text="Whether the dump file is encrypted",
    )

    created_at = models.BigIntegerField(
        help_text="Unix timestamp (seconds) when the dump was recorded",
    )

    class Meta:
        db_table = "db_backup_dump"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["file_name"], name="dump_file_name_idx"),
            models.Index(fields=["created_at"], name="dump_created_idx"),
        ]
        verbose_name = "Dump"
        verbose_name_plural = "Dumps"

    def __str__(self):
        return self.file_name
