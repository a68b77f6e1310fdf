"""
Metadata recorders for finished dumps.

The pipeline accepts any object with a record(BackupRecord) method. Recording
is best-effort: a RecordError becomes a warning on the report and never blocks
uploads.
"""

import logging

from django.db import DatabaseError

from .artifacts import BackupRecord
from .exceptions import RecordError
from .models import DumpRecord

logger = logging.getLogger(__name__)


class ModelRecorder:
    """Persist dump metadata as DumpRecord rows."""

    def __init__(self, using: str = "default"):
        self.using = using

    def record(self, record: BackupRecord) -> DumpRecord:
        """
        Create a DumpRecord for a finished dump.

        Raises:
            RecordError: If the row cannot be written
        """
        try:
            dump = DumpRecord.objects.using(self.using).create(
                file=record.file,
                file_name=record.file_name,
                prefix=record.prefix,
                encrypted=record.encrypted,
                created_at=record.created_at,
            )
        except DatabaseError as e:
            raise RecordError(f"Failed to save dump record for {record.file_name}: {e}") from e

        logger.info(f"Recorded dump {dump.file_name} (id={dump.pk})")
        return dump
