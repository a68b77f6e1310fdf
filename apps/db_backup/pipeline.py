"""
Database backup pipeline.

A run moves through these stages, in order:

    VALIDATING -> NAMING -> DUMPING -> [COMPRESSING] -> [ENCRYPTING]
        -> [RECORDING] -> [UPLOADING] -> [CLEANING] -> DONE

Any failure up to and including ENCRYPTING aborts the run: nothing is recorded
and nothing is uploaded. Failures while recording, uploading or cleaning are
collected as warnings and the run still reaches DONE.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

from .artifacts import (
    CLEANING,
    COMPRESSING,
    DONE,
    DUMPING,
    ENCRYPTING,
    NAMING,
    RECORDING,
    UPLOADING,
    VALIDATING,
    Artifact,
    BackupRecord,
    BackupReport,
    BackupRequest,
    DestinationResult,
)
from .config import BackupSettings
from .dumpers import get_dumper
from .encryption import Encryptor, compress_file, get_fernet
from .exceptions import (
    BackupError,
    CleanupError,
    CompressionError,
    ConfigurationError,
    DumpError,
    EncryptionError,
    RecordError,
)
from .naming import NamingScheme
from .storage import DROPBOX, S3, LocalDestination, get_destination

logger = logging.getLogger(__name__)


class BackupPipeline:
    """
    Runs database backups according to a BackupSettings configuration.

    Collaborators can be swapped for testing or for other environments:
    dumper_factory(alias, settings) returns the dumper for a connection,
    destination_factory(type, settings, bucket=None) returns a destination,
    recorder.record(BackupRecord) persists metadata, encryptor(path) -> bool
    encrypts in place and compressor(path) -> (new_path, ...) gzips a file.
    """

    def __init__(
        self,
        backup_settings: Optional[BackupSettings] = None,
        dumper_factory: Optional[Callable] = None,
        destination_factory: Optional[Callable] = None,
        recorder=None,
        encryptor: Optional[Callable[[str], bool]] = None,
        compressor: Callable = compress_file,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = backup_settings or BackupSettings.from_settings()
        self.dumper_factory = dumper_factory or get_dumper
        self.destination_factory = destination_factory or get_destination
        self.recorder = recorder
        self.encryptor = encryptor
        self.compressor = compressor
        self.clock = clock
        self.local = LocalDestination()

    def compression_enabled(self, request: BackupRequest) -> bool:
        if request.compress is not None:
            return request.compress
        return self.settings.compress

    def record_prefix(self, request: BackupRequest) -> Optional[str]:
        """Remote folder stored with the dump record, if the dump goes anywhere remote."""
        if request.dropbox:
            return self.settings.dropbox.prefix
        if request.upload_s3:
            return self.settings.s3.path
        return None

    def prepare(self, request: BackupRequest) -> Tuple[object, Optional[Callable], List]:
        """
        Validate the request and build its collaborators before anything is dumped.

        Returns:
            Tuple of (dumper, encryptor or None, destinations)

        Raises:
            ConfigurationError: If a requested option cannot be honoured
        """
        dumper = self.dumper_factory(request.database, self.settings)

        encryptor = None
        if request.encrypt:
            encryptor = self.encryptor
            if encryptor is None:
                get_fernet(self.settings.encryption_key)
                encryptor = Encryptor(self.settings.encryption_key)

        destinations = []
        if request.dropbox:
            destinations.append(self.destination_factory(DROPBOX, self.settings))

        if request.upload_s3 is not None:
            if not request.upload_s3.strip():
                raise ConfigurationError("A bucket name is required to upload to S3")
            destinations.append(self.destination_factory(S3, self.settings, bucket=request.upload_s3))

        if request.keep_only_s3 and request.upload_s3 is None:
            logger.warning("keep-only-s3 has no effect without an S3 upload; the local dump is kept")

        return dumper, encryptor, destinations

    def run(self, request: BackupRequest) -> BackupReport:
        """
        Execute one backup run.

        Args:
            request: Options for this run

        Returns:
            BackupReport describing the outcome; fatal failures are reported as
            an ABORTED report rather than raised
        """
        report = BackupReport(request=request)

        logger.info("=" * 80)
        logger.info(f"Starting database backup of '{request.database}'")
        logger.info("=" * 80)

        try:
            report.enter(VALIDATING)
            dumper, encryptor, destinations = self.prepare(request)

            report.enter(NAMING)
            naming = NamingScheme(self.settings.dumps_path, dumper.file_extension)
            artifact = naming.resolve(request)
            naming.ensure_directory(artifact)
            report.artifact = artifact
            logger.info(f"Dump will be written to {artifact.path}")

            report.enter(DUMPING)
            self.dump(dumper, artifact)

            if self.compression_enabled(request):
                report.enter(COMPRESSING)
                self.compress(artifact)

            if encryptor is not None:
                report.enter(ENCRYPTING)
                self.encrypt(report, encryptor, artifact)

        except BackupError as e:
            stage = e.stage or report.state
            logger.error(f"Database backup aborted at {stage}: {e.message}")
            return report.abort(stage, e.message)

        if request.save_dump_name:
            report.enter(RECORDING)
            self.record(report, artifact)

        stored_on_s3 = False
        if destinations:
            report.enter(UPLOADING)
            for destination in destinations:
                result = self.store(destination, artifact)
                report.destinations.append(result)
                if result.success:
                    stored_on_s3 = stored_on_s3 or destination.name == S3
                else:
                    report.warn(f"Upload to {result.destination} failed: {result.detail}")

        if request.keep_only_s3 and stored_on_s3:
            report.enter(CLEANING)
            self.clean(report, artifact)
        elif request.keep_only_s3 and request.upload_s3 is not None:
            logger.warning(f"S3 upload did not succeed; keeping local dump {artifact.path}")

        report.enter(DONE)

        logger.info("=" * 80)
        logger.info(
            f"Database backup completed: {artifact.name} "
            f"({len(report.destinations)} destination(s), {len(report.warnings)} warning(s))"
        )
        logger.info("=" * 80)

        return report

    def dump(self, dumper, artifact: Artifact) -> None:
        try:
            outcome = dumper.dump(artifact.path)
        except Exception as e:
            logger.error(f"Unexpected error dumping to {artifact.path}: {e}", exc_info=True)
            raise DumpError(f"Dump to {artifact.path} failed: {e}") from e

        if not outcome:
            raise DumpError(outcome.detail or "Dump failed")

    def compress(self, artifact: Artifact) -> None:
        """Gzip the dump and move the artifact to its compressed name."""
        previous_path = artifact.path
        try:
            output_path = self.compressor(artifact.path)[0]
        except CompressionError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error compressing {artifact.path}: {e}", exc_info=True)
            raise CompressionError(f"Compression failed: {e}") from e

        artifact.append_suffix(output_path[len(previous_path):])

    def encrypt(self, report: BackupReport, encryptor: Callable[[str], bool], artifact: Artifact) -> None:
        """
        Encrypt the dump in place.

        Any failure leaves a plaintext dump behind, so the report is flagged
        untrusted before the run is aborted.
        """
        try:
            encrypted = encryptor(artifact.path)
        except Exception as e:
            logger.error(f"Unexpected error encrypting {artifact.path}: {e}", exc_info=True)
            report.untrusted = True
            raise EncryptionError(f"Encryption of {artifact.path} failed: {e}") from e

        if not encrypted:
            report.untrusted = True
            raise EncryptionError(f"Encryption of {artifact.path} failed")
        report.encrypted = True

    def record(self, report: BackupReport, artifact: Artifact) -> None:
        recorder = self.recorder
        if recorder is None:
            from .records import ModelRecorder

            recorder = ModelRecorder()

        record = BackupRecord(
            file=artifact.path,
            file_name=artifact.name,
            prefix=self.record_prefix(report.request),
            encrypted=report.encrypted,
            created_at=int(self.clock()),
        )

        try:
            recorder.record(record)
            report.recorded = True
        except RecordError as e:
            logger.warning(e.message)
            report.warn(f"Saving dump record failed: {e.message}")
        except Exception as e:
            logger.warning(f"Unexpected error saving dump record: {e}", exc_info=True)
            report.warn(f"Saving dump record failed: {e}")

    def store(self, destination, artifact: Artifact) -> DestinationResult:
        label = getattr(destination, "label", destination.name)
        logger.info(f"Uploading {artifact.name} to {label}")

        try:
            return destination.store(artifact)
        except Exception as e:
            logger.error(f"Error uploading to {label}: {e}", exc_info=True)
            return DestinationResult(label, artifact.name, success=False, detail=str(e))

    def clean(self, report: BackupReport, artifact: Artifact) -> None:
        try:
            report.local_removed = self.local.remove(artifact)
        except CleanupError as e:
            logger.warning(e.message)
            report.warn(f"Removing local dump failed: {e.message}")


def run_backup(request: BackupRequest, backup_settings: Optional[BackupSettings] = None) -> BackupReport:
    """Run a backup with the default collaborators."""
    return BackupPipeline(backup_settings).run(request)
