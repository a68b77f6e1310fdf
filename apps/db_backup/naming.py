"""
File naming for database dumps.

A dump is addressed in one of three ways:
1. Explicit bare filename - stored as <dumps_path>/<filename>[.<extension>]
2. Explicit path (contains a separator) - stored verbatim, named by its last segment
3. Nothing - named <database>_<YYYYmmdd_HHMMSS>.<extension> inside <dumps_path>
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from .artifacts import NAMING, Artifact, BackupRequest
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def generate_dump_filename(database: str, extension: str, now: Optional[datetime] = None) -> str:
    """
    Generate a timestamped dump filename.

    Args:
        database: Database alias the dump is taken from
        extension: File extension without the leading dot
        now: Timestamp to use (defaults to the current time)

    Returns:
        Filename such as "default_20240101_020000.sql"
    """
    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    safe_database = database.replace(os.sep, "_").replace("/", "_")
    return f"{safe_database}_{timestamp}.{extension}"


class NamingScheme:
    """Resolves a BackupRequest to the local path and logical name of its dump."""

    def __init__(self, dumps_path: str, extension: str):
        self.dumps_path = Path(dumps_path)
        self.extension = extension.lstrip(".")

    def resolve(self, request: BackupRequest, now: Optional[datetime] = None) -> Artifact:
        """
        Resolve the artifact for a request.

        Resolution is deterministic for explicit names: the same request always
        yields the same path and name.

        Raises:
            ConfigurationError: If an explicit path has no file name component
        """
        filename = request.filename

        if filename and request.has_explicit_path:
            name = os.path.basename(filename.rstrip("/").rstrip(os.sep))
            if not name or filename.endswith(("/", os.sep)):
                raise ConfigurationError(f"Dump path has no file name: {filename}", stage=NAMING)
            return Artifact(path=filename, name=name)

        if filename:
            name = filename
            if not os.path.splitext(name)[1]:
                name = f"{name}.{self.extension}"
        else:
            name = generate_dump_filename(request.database, self.extension, now)

        return Artifact(path=str(self.dumps_path / name), name=name)

    def ensure_directory(self, artifact: Artifact) -> None:
        """
        Create the directory the artifact will be written to.

        Raises:
            ConfigurationError: If the directory cannot be created
        """
        directory = Path(artifact.path).parent
        if directory.is_dir():
            return

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Could not create dumps directory {directory}: {e}", stage=NAMING
            ) from e

        logger.info(f"Created dumps directory: {directory}")
