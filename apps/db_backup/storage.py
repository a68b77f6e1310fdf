"""
Destinations for finished database dumps.

This module provides three destinations:
1. LocalDestination - the dump already lives on local disk; also removes it on request
2. S3Destination - Amazon S3 (or any S3-compatible) bucket, chosen per run
3. DropboxDestination - Dropbox app folder, authenticated by process-level credentials

All destinations implement store(artifact) -> DestinationResult. A failure is
reported in the result and never raised, so one destination cannot stop the
others.
"""

import logging
from pathlib import Path
from typing import Optional

import boto3
import dropbox
from botocore.exceptions import BotoCoreError, ClientError
from dropbox.exceptions import DropboxException
from dropbox.files import WriteMode

from .artifacts import Artifact, DestinationResult
from .config import BackupSettings
from .exceptions import CleanupError, ConfigurationError, UploadError

logger = logging.getLogger(__name__)

LOCAL = "local"
S3 = "s3"
DROPBOX = "dropbox"


def join_key(prefix: str, name: str) -> str:
    """Build a remote key as <prefix>/<name>."""
    prefix = prefix.strip("/")
    return f"{prefix}/{name}" if prefix else name


class LocalDestination:
    """
    Local filesystem destination.

    Storing is a no-op because the dump is written locally to begin with;
    remove() deletes it once a remote copy is known to be safe.
    """

    name = LOCAL

    def store(self, artifact: Artifact) -> DestinationResult:
        if not artifact.exists():
            detail = f"Local dump not found: {artifact.path}"
            logger.error(f"LocalDestination: {detail}")
            return DestinationResult(self.name, artifact.path, success=False, detail=detail)

        return DestinationResult(self.name, artifact.path, success=True)

    def remove(self, artifact: Artifact) -> bool:
        """
        Delete the local dump.

        Returns:
            True if a file was deleted, False if it was already gone

        Raises:
            CleanupError: If the file cannot be deleted
        """
        path = Path(artifact.path)

        if not path.exists():
            logger.warning(f"LocalDestination: File not found for deletion: {path}")
            return False

        try:
            path.unlink()
        except OSError as e:
            raise CleanupError(f"Failed to remove local dump {path}: {e}") from e

        logger.info(f"LocalDestination: Deleted {path}")
        return True


class S3Destination:
    """
    Amazon S3 destination.

    The bucket is supplied per run; the key prefix, credentials, region and
    endpoint come from DB_BACKUP['S3']. Objects are stored as
    <bucket>/<prefix>/<dump name>.
    """

    name = S3

    def __init__(
        self,
        bucket: str,
        prefix: str = "dumps",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        if not bucket:
            raise ConfigurationError("A bucket name is required to upload to S3")

        self.bucket = bucket
        self.prefix = prefix

        # Credentials fall back to the standard AWS chain when not configured
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )

        logger.info(f"S3Destination initialized with bucket: {self.bucket}, prefix: {self.prefix}")

    @property
    def label(self) -> str:
        return f"{self.name}:{self.bucket}"

    def key_for(self, artifact: Artifact) -> str:
        return join_key(self.prefix, artifact.name)

    def upload(self, artifact: Artifact) -> str:
        """
        Upload the dump to the bucket.

        Returns:
            The object key

        Raises:
            UploadError: If the upload fails
        """
        key = self.key_for(artifact)

        try:
            with open(artifact.path, "rb") as file:
                self.client.upload_fileobj(file, self.bucket, key)
        except (ClientError, BotoCoreError, OSError) as e:
            raise UploadError(
                f"Failed to upload {artifact.path} to s3://{self.bucket}/{key}: {e}", self.label
            ) from e

        logger.info(f"S3Destination: Uploaded {artifact.path} to s3://{self.bucket}/{key}")
        return key

    def store(self, artifact: Artifact) -> DestinationResult:
        try:
            key = self.upload(artifact)
        except UploadError as e:
            logger.error(f"S3Destination: {e.message}")
            return DestinationResult(self.label, self.key_for(artifact), success=False, detail=e.message)

        return DestinationResult(self.label, key, success=True)


class DropboxDestination:
    """
    Dropbox destination.

    Reads the whole dump into memory and uploads it as /<prefix>/<dump name>,
    overwriting any previous file with the same name.
    """

    name = DROPBOX

    def __init__(
        self,
        access_token: Optional[str],
        app_secret: Optional[str] = None,
        prefix: str = "",
        client=None,
    ):
        if not access_token and client is None:
            raise ConfigurationError("DB_BACKUP['DROPBOX']['ACCESS_TOKEN'] is not configured")

        self.prefix = prefix
        self.client = client or dropbox.Dropbox(oauth2_access_token=access_token, app_secret=app_secret)

    @property
    def label(self) -> str:
        return self.name

    def key_for(self, artifact: Artifact) -> str:
        return join_key(self.prefix, artifact.name)

    def upload(self, artifact: Artifact) -> str:
        """
        Upload the dump to Dropbox.

        Returns:
            The file key (without the leading slash)

        Raises:
            UploadError: If the upload fails
        """
        key = self.key_for(artifact)

        try:
            content = Path(artifact.path).read_bytes()
            self.client.files_upload(content, f"/{key}", mode=WriteMode.overwrite)
        except (DropboxException, OSError) as e:
            raise UploadError(f"Failed to upload {artifact.path} to Dropbox /{key}: {e}", self.label) from e

        logger.info(f"DropboxDestination: Uploaded {artifact.path} to /{key}")
        return key

    def store(self, artifact: Artifact) -> DestinationResult:
        try:
            key = self.upload(artifact)
        except UploadError as e:
            logger.error(f"DropboxDestination: {e.message}")
            return DestinationResult(self.label, self.key_for(artifact), success=False, detail=e.message)

        return DestinationResult(self.label, key, success=True)


def get_destination(destination_type: str, backup_settings: BackupSettings, bucket: Optional[str] = None):
    """
    Factory function to get a destination instance.

    Args:
        destination_type: Type of destination ('local', 's3', or 'dropbox')
        backup_settings: Pipeline configuration holding credentials and prefixes
        bucket: Bucket name, required for 's3'

    Returns:
        Instance of the requested destination

    Raises:
        ConfigurationError: If the destination is unknown or misconfigured
    """
    destination_type = destination_type.lower()

    if destination_type == LOCAL:
        return LocalDestination()
    elif destination_type == S3:
        s3 = backup_settings.s3
        return S3Destination(
            bucket=bucket,
            prefix=s3.path,
            access_key_id=s3.access_key_id,
            secret_access_key=s3.secret_access_key,
            region=s3.region,
            endpoint_url=s3.endpoint_url,
        )
    elif destination_type == DROPBOX:
        dbx = backup_settings.dropbox
        return DropboxDestination(
            access_token=dbx.access_token,
            app_secret=dbx.app_secret,
            prefix=dbx.prefix,
        )
    else:
        raise ConfigurationError(f"Unknown destination type: {destination_type}")
