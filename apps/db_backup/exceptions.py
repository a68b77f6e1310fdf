"""
Exceptions raised by the database backup pipeline.

Fatal errors (configuration, dump, compression, encryption) abort a run before
anything leaves the machine. Upload, record and cleanup errors are collected as
warnings on the report and never stop sibling operations.
"""

from typing import Optional


class BackupError(Exception):
    """Base class for all backup pipeline failures."""

    stage: Optional[str] = None

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage


class ConfigurationError(BackupError):
    """Raised when a required option or setting is missing or invalid."""

    stage = "VALIDATING"


class DumpError(BackupError):
    """Raised when the external dump tool fails."""

    stage = "DUMPING"


class TransformError(BackupError):
    """Raised when the dump cannot be compressed or encrypted."""

    pass


class CompressionError(TransformError):
    """Raised when compression operations fail."""

    stage = "COMPRESSING"


class EncryptionError(TransformError):
    """Raised when encryption operations fail."""

    stage = "ENCRYPTING"


class UploadError(BackupError):
    """Raised when a single destination cannot store the dump."""

    stage = "UPLOADING"

    def __init__(self, message: str, destination: str):
        super().__init__(message)
        self.destination = destination


class RecordError(BackupError):
    """Raised when dump metadata cannot be persisted."""

    stage = "RECORDING"


class CleanupError(BackupError):
    """Raised when the local dump cannot be removed after upload."""

    stage = "CLEANING"
