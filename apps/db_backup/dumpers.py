"""
Database dump producers.

Each dumper wraps the native dump tool for one database engine:
1. PostgresDumper - pg_dump in plain SQL format
2. MySQLDumper - mysqldump with a consistent snapshot
3. SQLiteDumper - sqlite3 online backup API

All dumpers implement dump(output_path) -> StageOutcome and never retry: a
failed dump (bad credentials, full disk, missing schema) is reported as-is.
"""

import logging
import os
import sqlite3
import subprocess
from pathlib import Path
from typing import Dict, Optional

from django.conf import settings

from .artifacts import StageOutcome
from .config import BackupSettings
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def get_database_config(alias: str = "default") -> dict:
    """
    Get connection parameters for a database alias from Django settings.

    Args:
        alias: Key in settings.DATABASES

    Returns:
        Dictionary with engine, name, user, password, host and port

    Raises:
        ConfigurationError: If the alias is not configured
    """
    databases = settings.DATABASES
    if alias not in databases:
        raise ConfigurationError(f"Database connection '{alias}' is not configured")

    db_config = databases[alias]
    return {
        "engine": db_config.get("ENGINE", ""),
        "name": str(db_config.get("NAME") or ""),
        "user": db_config.get("USER") or "",
        "password": db_config.get("PASSWORD") or "",
        "host": db_config.get("HOST") or "",
        "port": str(db_config.get("PORT") or ""),
    }


def run_dump_command(cmd: list, output_path: str, env: dict, timeout: Optional[int]) -> StageOutcome:
    """Run a dump tool and check that it produced output_path."""
    tool = Path(cmd[0]).name

    try:
        logger.info(f"Starting {tool} -> {output_path}")
        result = subprocess.run(cmd, env=env, capture_output=True, text=True, timeout=timeout)
    except FileNotFoundError:
        error_msg = f"{tool} executable not found: {cmd[0]}"
        logger.error(error_msg)
        return StageOutcome.failure(error_msg)
    except subprocess.TimeoutExpired:
        error_msg = f"{tool} timed out after {timeout} seconds"
        logger.error(error_msg)
        return StageOutcome.failure(error_msg)
    except OSError as e:
        error_msg = f"{tool} could not be started: {e}"
        logger.error(error_msg)
        return StageOutcome.failure(error_msg)

    if result.returncode != 0:
        error_msg = f"{tool} failed with return code {result.returncode}: {result.stderr.strip()}"
        logger.error(error_msg)
        return StageOutcome.failure(error_msg)

    if not Path(output_path).is_file():
        error_msg = f"{tool} reported success but did not create {output_path}"
        logger.error(error_msg)
        return StageOutcome.failure(error_msg)

    logger.info(f"{tool} completed successfully: {output_path}")
    return StageOutcome.ok()


class PostgresDumper:
    """Dump a PostgreSQL database with pg_dump."""

    file_extension = "sql"

    def __init__(self, db_config: dict, command: str = "pg_dump", timeout: Optional[int] = None):
        self.db_config = db_config
        self.command = command
        self.timeout = timeout

    def build_command(self, output_path: str) -> list:
        # -Fp: plain SQL so gzip compresses it effectively
        cmd = [self.command, "-Fp", "--no-owner", "--no-acl"]
        if self.db_config["host"]:
            cmd += ["-h", self.db_config["host"]]
        if self.db_config["port"]:
            cmd += ["-p", self.db_config["port"]]
        if self.db_config["user"]:
            cmd += ["-U", self.db_config["user"]]
        cmd += ["-d", self.db_config["name"], "-f", output_path]
        return cmd

    def dump(self, output_path: str) -> StageOutcome:
        env = os.environ.copy()
        if self.db_config["password"]:
            env["PGPASSWORD"] = self.db_config["password"]

        return run_dump_command(self.build_command(output_path), output_path, env, self.timeout)


class MySQLDumper:
    """Dump a MySQL or MariaDB database with mysqldump."""

    file_extension = "sql"

    def __init__(self, db_config: dict, command: str = "mysqldump", timeout: Optional[int] = None):
        self.db_config = db_config
        self.command = command
        self.timeout = timeout

    def build_command(self, output_path: str) -> list:
        cmd = [self.command, "--single-transaction", "--routines"]
        if self.db_config["host"]:
            cmd.append(f"--host={self.db_config['host']}")
        if self.db_config["port"]:
            cmd.append(f"--port={self.db_config['port']}")
        if self.db_config["user"]:
            cmd.append(f"--user={self.db_config['user']}")
        cmd += [f"--result-file={output_path}", self.db_config["name"]]
        return cmd

    def dump(self, output_path: str) -> StageOutcome:
        env = os.environ.copy()
        if self.db_config["password"]:
            env["MYSQL_PWD"] = self.db_config["password"]

        return run_dump_command(self.build_command(output_path), output_path, env, self.timeout)


class SQLiteDumper:
    """Copy a SQLite database file using the online backup API."""

    file_extension = "sqlite"

    def __init__(self, db_config: dict):
        self.db_config = db_config

    def dump(self, output_path: str) -> StageOutcome:
        source_path = self.db_config["name"]

        if not source_path or source_path == ":memory:" or not Path(source_path).is_file():
            error_msg = f"SQLite database file not found: {source_path or '<unset>'}"
            logger.error(error_msg)
            return StageOutcome.failure(error_msg)

        source = destination = None
        try:
            source = sqlite3.connect(source_path)
            destination = sqlite3.connect(output_path)
            source.backup(destination)
        except sqlite3.Error as e:
            error_msg = f"SQLite backup failed: {e}"
            logger.error(error_msg)
            return StageOutcome.failure(error_msg)
        finally:
            if destination is not None:
                destination.close()
            if source is not None:
                source.close()

        logger.info(f"SQLite backup completed successfully: {output_path}")
        return StageOutcome.ok()


def get_engine_name(engine: str) -> str:
    """
    Normalise a Django ENGINE path to a dumper key.

    "django.db.backends.postgresql" and wrappers such as
    "django_prometheus.db.backends.postgresql" both map to "postgresql".
    """
    vendor = engine.rsplit(".", 1)[-1].lower()
    if vendor in ("postgresql", "postgresql_psycopg2", "postgis"):
        return "postgresql"
    if vendor == "mysql":
        return "mysql"
    if vendor in ("sqlite3", "spatialite"):
        return "sqlite3"
    return vendor


def get_dumper(alias: str, backup_settings: BackupSettings):
    """
    Factory function to get the dumper for a database alias.

    Args:
        alias: Key in settings.DATABASES
        backup_settings: Pipeline configuration (dump command paths, timeout)

    Returns:
        Dumper instance for the alias' engine

    Raises:
        ConfigurationError: If the alias is unknown or its engine is unsupported
    """
    db_config = get_database_config(alias)
    engine = get_engine_name(db_config["engine"])
    commands: Dict[str, str] = backup_settings.dump_commands

    if engine == "postgresql":
        return PostgresDumper(db_config, commands["postgresql"], backup_settings.dump_timeout)
    elif engine == "mysql":
        return MySQLDumper(db_config, commands["mysql"], backup_settings.dump_timeout)
    elif engine == "sqlite3":
        return SQLiteDumper(db_config)
    else:
        raise ConfigurationError(
            f"Unsupported database engine for '{alias}': {db_config['engine']}"
        )
