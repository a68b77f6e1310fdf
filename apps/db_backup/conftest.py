"""
Pytest configuration and fixtures for database backup tests.
"""

from pathlib import Path

import pytest
from cryptography.fernet import Fernet

from apps.db_backup.artifacts import DestinationResult, StageOutcome
from apps.db_backup.config import BackupSettings

DUMP_CONTENT = b"-- SQL dump\nCREATE TABLE items (id integer);\n" * 200


class FakeDumper:
    """Dumper writing fixed content, or failing with a detail."""

    file_extension = "sql"

    def __init__(self, error=None, content=DUMP_CONTENT):
        self.error = error
        self.content = content
        self.calls = []

    def dump(self, output_path):
        self.calls.append(output_path)
        if self.error:
            return StageOutcome.failure(self.error)
        Path(output_path).write_bytes(self.content)
        return StageOutcome.ok()


class FakeDestination:
    """Destination recording what it stored."""

    def __init__(self, name, label=None, fail=None, raises=None, prefix="dumps"):
        self.name = name
        self.label = label or name
        self.fail = fail
        self.raises = raises
        self.prefix = prefix
        self.stored = []

    def store(self, artifact):
        if self.raises:
            raise self.raises
        self.stored.append((artifact.path, artifact.name, Path(artifact.path).read_bytes()))
        key = f"{self.prefix}/{artifact.name}"
        if self.fail:
            return DestinationResult(self.label, key, success=False, detail=self.fail)
        return DestinationResult(self.label, key, success=True)


class FakeRecorder:
    def __init__(self, error=None):
        self.error = error
        self.records = []

    def record(self, record):
        if self.error:
            raise self.error
        self.records.append(record)


class DestinationFactory:
    """destination_factory stand-in handing out prepared destinations."""

    def __init__(self, **destinations):
        self.destinations = destinations
        self.calls = []

    def __call__(self, destination_type, backup_settings, bucket=None):
        self.calls.append((destination_type, bucket))
        return self.destinations[destination_type]


@pytest.fixture
def dumps_dir(tmp_path):
    return tmp_path / "dumps"


@pytest.fixture
def encryption_key():
    return Fernet.generate_key().decode("utf-8")


@pytest.fixture
def backup_settings(dumps_dir, encryption_key):
    return BackupSettings.from_dict(
        {
            "PATH": str(dumps_dir),
            "COMPRESS": False,
            "ENCRYPTION_KEY": encryption_key,
            "S3": {"PATH": "dumps"},
            "DROPBOX": {"ACCESS_TOKEN": "token", "PREFIX": "backups"},
        }
    )


@pytest.fixture
def dumper():
    return FakeDumper()


@pytest.fixture
def recorder():
    return FakeRecorder()
