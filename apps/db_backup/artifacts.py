"""
Value objects shared by the backup pipeline stages.

A BackupRequest drives one run. The Artifact is the only mutable state that
flows through the stages: compression rewrites its path and name together,
encryption leaves both untouched.
"""

import os
from dataclasses import asdict, dataclass, field
from typing import List, Optional

# Pipeline stages, in execution order.
VALIDATING = "VALIDATING"
NAMING = "NAMING"
DUMPING = "DUMPING"
COMPRESSING = "COMPRESSING"
ENCRYPTING = "ENCRYPTING"
RECORDING = "RECORDING"
UPLOADING = "UPLOADING"
CLEANING = "CLEANING"
DONE = "DONE"
ABORTED = "ABORTED"

STAGE_ORDER = [
    VALIDATING,
    NAMING,
    DUMPING,
    COMPRESSING,
    ENCRYPTING,
    RECORDING,
    UPLOADING,
    CLEANING,
    DONE,
]

FATAL_STAGES = {VALIDATING, NAMING, DUMPING, COMPRESSING, ENCRYPTING}


@dataclass(frozen=True)
class BackupRequest:
    """
    Options for a single backup run.

    Attributes:
        filename: Bare file name or full path for the dump (None for a timestamped name)
        database: Django database alias to dump
        encrypt: Encrypt the dump before it is recorded or uploaded
        dropbox: Upload the dump to Dropbox
        save_dump_name: Record the dump in the DumpRecord table
        upload_s3: Bucket to upload the dump to (None to skip S3)
        keep_only_s3: Delete the local dump once the S3 upload succeeded
        compress: Override the COMPRESS setting for this run (None to use the setting)
    """

    filename: Optional[str] = None
    database: str = "default"
    encrypt: bool = False
    dropbox: bool = False
    save_dump_name: bool = False
    upload_s3: Optional[str] = None
    keep_only_s3: bool = False
    compress: Optional[bool] = None

    @property
    def has_explicit_path(self) -> bool:
        """True when filename carries directory components."""
        return bool(self.filename) and (os.sep in self.filename or "/" in self.filename)


@dataclass
class Artifact:
    """The dump file as it currently exists on local storage."""

    path: str
    name: str

    def append_suffix(self, suffix: str) -> None:
        """Rename path and name together, e.g. after compression."""
        self.path = f"{self.path}{suffix}"
        self.name = f"{self.name}{suffix}"

    def exists(self) -> bool:
        return os.path.isfile(self.path)


@dataclass
class StageOutcome:
    """Result of an external capability call: success, or failure with a detail."""

    success: bool
    detail: Optional[str] = None

    @classmethod
    def ok(cls) -> "StageOutcome":
        return cls(success=True)

    @classmethod
    def failure(cls, detail: str) -> "StageOutcome":
        return cls(success=False, detail=detail)

    def __bool__(self) -> bool:
        return self.success


@dataclass
class DestinationResult:
    """Outcome of storing the artifact in one destination."""

    destination: str
    key: str
    success: bool
    detail: Optional[str] = None


@dataclass
class BackupRecord:
    """Metadata persisted about a finished dump."""

    file: str
    file_name: str
    prefix: Optional[str]
    encrypted: bool
    created_at: int


@dataclass
class BackupReport:
    """
    Final outcome of a pipeline run.

    A report is either DONE, possibly with warnings for non-fatal failures, or
    ABORTED with the failing stage and its error detail.
    """

    request: BackupRequest
    state: str = VALIDATING
    stages: List[str] = field(default_factory=list)
    artifact: Optional[Artifact] = None
    failed_stage: Optional[str] = None
    error: Optional[str] = None
    encrypted: bool = False
    untrusted: bool = False
    recorded: bool = False
    destinations: List[DestinationResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    local_removed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state == DONE

    @property
    def failed_destinations(self) -> List[DestinationResult]:
        return [result for result in self.destinations if not result.success]

    def enter(self, stage: str) -> None:
        self.state = stage
        self.stages.append(stage)

    def abort(self, stage: str, error: str) -> "BackupReport":
        self.state = ABORTED
        self.failed_stage = stage
        self.error = error
        return self

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> dict:
        return asdict(self)
