"""
Celery tasks for the database backup app.

Lets a backup run on a worker instead of in the calling process, e.g. when the
management command is invoked with --async.
"""

import logging

from celery import shared_task

from .artifacts import BackupRequest
from .pipeline import run_backup

logger = logging.getLogger(__name__)


@shared_task(name="apps.db_backup.tasks.perform_database_backup")
def perform_database_backup(**options) -> dict:
    """
    Run a database backup.

    Args:
        **options: BackupRequest fields (filename, database, encrypt, dropbox,
            save_dump_name, upload_s3, keep_only_s3, compress)

    Returns:
        The BackupReport as a dictionary
    """
    request = BackupRequest(**options)
    report = run_backup(request)

    if report.succeeded:
        logger.info(f"Queued database backup finished with {len(report.warnings)} warning(s)")
    else:
        logger.error(f"Queued database backup failed at {report.failed_stage}: {report.error}")

    return report.to_dict()
