"""
Configuration for the database backup pipeline.

All knobs live in the DB_BACKUP Django setting. They are read once into a
BackupSettings value which is handed to the pipeline, so no stage looks up
settings on its own.

Example:

    DB_BACKUP = {
        "PATH": BASE_DIR / "storage" / "dumps",
        "COMPRESS": True,
        "ENCRYPTION_KEY": os.getenv("DB_BACKUP_ENCRYPTION_KEY", ""),
        "S3": {"PATH": "dumps", "REGION": "eu-west-1"},
        "DROPBOX": {"ACCESS_TOKEN": "...", "APP_SECRET": "...", "PREFIX": "backups"},
    }
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from django.conf import settings

DEFAULT_S3_PATH = "dumps"

DEFAULT_DUMP_COMMANDS = {
    "postgresql": "pg_dump",
    "mysql": "mysqldump",
}


@dataclass(frozen=True)
class S3Settings:
    path: str = DEFAULT_S3_PATH
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: Optional[str] = None
    endpoint_url: Optional[str] = None


@dataclass(frozen=True)
class DropboxSettings:
    access_token: Optional[str] = None
    app_secret: Optional[str] = None
    prefix: str = ""


@dataclass(frozen=True)
class BackupSettings:
    """Immutable snapshot of the DB_BACKUP setting."""

    dumps_path: str
    compress: bool = True
    encryption_key: Optional[str] = None
    s3: S3Settings = field(default_factory=S3Settings)
    dropbox: DropboxSettings = field(default_factory=DropboxSettings)
    dump_commands: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DUMP_COMMANDS))
    dump_timeout: Optional[int] = None

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "BackupSettings":
        s3 = options.get("S3") or {}
        dropbox = options.get("DROPBOX") or {}

        dump_commands = dict(DEFAULT_DUMP_COMMANDS)
        dump_commands.update(options.get("DUMP_COMMANDS") or {})

        return cls(
            dumps_path=str(options.get("PATH") or default_dumps_path()),
            compress=bool(options.get("COMPRESS", True)),
            encryption_key=options.get("ENCRYPTION_KEY") or None,
            s3=S3Settings(
                path=(s3.get("PATH") or DEFAULT_S3_PATH).strip("/"),
                access_key_id=s3.get("ACCESS_KEY_ID") or None,
                secret_access_key=s3.get("SECRET_ACCESS_KEY") or None,
                region=s3.get("REGION") or None,
                endpoint_url=s3.get("ENDPOINT_URL") or None,
            ),
            dropbox=DropboxSettings(
                access_token=dropbox.get("ACCESS_TOKEN") or None,
                app_secret=dropbox.get("APP_SECRET") or None,
                prefix=(dropbox.get("PREFIX") or "").strip("/"),
            ),
            dump_commands=dump_commands,
            dump_timeout=options.get("DUMP_TIMEOUT"),
        )

    @classmethod
    def from_settings(cls) -> "BackupSettings":
        """Build BackupSettings from django.conf.settings.DB_BACKUP."""
        return cls.from_dict(getattr(settings, "DB_BACKUP", {}) or {})


def default_dumps_path() -> str:
    base_dir = getattr(settings, "BASE_DIR", Path.cwd())
    return str(Path(base_dir) / "storage" / "dumps")
