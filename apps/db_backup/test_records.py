"""
Tests for persisting dump metadata.
"""

from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.db_backup.artifacts import BackupRecord
from apps.db_backup.exceptions import RecordError
from apps.db_backup.models import DumpRecord
from apps.db_backup.records import ModelRecorder


def make_record(**overrides):
    values = {
        "file": "/var/dumps/default_20240101_000000.sql.gz",
        "file_name": "default_20240101_000000.sql.gz",
        "prefix": "dumps",
        "encrypted": True,
        "created_at": 1704067200,
    }
    values.update(overrides)
    return BackupRecord(**values)


@pytest.mark.django_db
class TestModelRecorder:
    def test_record_creates_row(self):
        dump = ModelRecorder().record(make_record())

        assert DumpRecord.objects.count() == 1
        stored = DumpRecord.objects.get(pk=dump.pk)
        assert stored.file == "/var/dumps/default_20240101_000000.sql.gz"
        assert stored.file_name == "default_20240101_000000.sql.gz"
        assert stored.prefix == "dumps"
        assert stored.encrypted is True
        assert stored.created_at == 1704067200
        assert str(stored) == "default_20240101_000000.sql.gz"

    def test_prefix_may_be_null(self):
        dump = ModelRecorder().record(make_record(prefix=None, encrypted=False))

        assert DumpRecord.objects.get(pk=dump.pk).prefix is None

    def test_newest_first(self):
        recorder = ModelRecorder()
        recorder.record(make_record(file_name="old.sql", created_at=100))
        recorder.record(make_record(file_name="new.sql", created_at=200))

        assert [dump.file_name for dump in DumpRecord.objects.all()] == ["new.sql", "old.sql"]

    def test_database_error_becomes_record_error(self):
        with patch.object(DumpRecord.objects, "using", side_effect=DatabaseError("database is locked")):
            with pytest.raises(RecordError) as excinfo:
                ModelRecorder().record(make_record())

        assert "database is locked" in str(excinfo.value)
