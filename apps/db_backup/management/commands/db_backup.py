"""
Management command to back up a database.

Dumps the selected connection into the dumps folder, then optionally
compresses, encrypts, records and uploads the dump:

    python manage.py db_backup
    python manage.py db_backup nightly --encrypt --upload-s3 my-bucket --keep-only-s3
    python manage.py db_backup /mnt/backups/app.sql --database replica --dropbox
"""

from dataclasses import asdict

from django.core.management.base import BaseCommand, CommandError

from apps.db_backup.artifacts import BackupRequest
from apps.db_backup.pipeline import run_backup


class Command(BaseCommand):
    help = "Back up the default database to the dumps folder"

    def add_arguments(self, parser):
        parser.add_argument(
            "filename",
            nargs="?",
            default=None,
            help="Filename or path for the dump",
        )
        parser.add_argument(
            "--database",
            default="default",
            help="The database connection to back up",
        )
        parser.add_argument(
            "-u",
            "--upload-s3",
            metavar="BUCKET",
            default=None,
            help="Upload the dump to the given S3 bucket",
        )
        parser.add_argument(
            "--keep-only-s3",
            action="store_true",
            help="Delete the local dump after a successful upload to S3",
        )
        parser.add_argument(
            "--dropbox",
            action="store_true",
            help="Upload the dump to Dropbox",
        )
        parser.add_argument(
            "--encrypt",
            action="store_true",
            help="Encrypt the dump",
        )
        parser.add_argument(
            "--save-dump-name",
            action="store_true",
            help="Save the dump name to the database",
        )
        parser.add_argument(
            "--no-compress",
            dest="compress",
            action="store_false",
            default=None,
            help="Skip gzip compression regardless of DB_BACKUP['COMPRESS']",
        )
        parser.add_argument(
            "--async",
            dest="run_async",
            action="store_true",
            help="Run the backup asynchronously using Celery",
        )

    def handle(self, *args, **options):
        request = BackupRequest(
            filename=options["filename"],
            database=options["database"],
            encrypt=options["encrypt"],
            dropbox=options["dropbox"],
            save_dump_name=options["save_dump_name"],
            upload_s3=options["upload_s3"],
            keep_only_s3=options["keep_only_s3"],
            compress=options["compress"],
        )

        if options["run_async"]:
            from apps.db_backup.tasks import perform_database_backup

            task = perform_database_backup.delay(**asdict(request))
            self.stdout.write(self.style.SUCCESS(f"Database backup task queued: {task.id}"))
            return

        report = run_backup(request)

        if not report.succeeded:
            if report.untrusted:
                self.stderr.write(
                    self.style.WARNING(
                        f"The dump at {report.artifact.path} is NOT encrypted and must not be distributed."
                    )
                )
            raise CommandError(f"Database backup failed at {report.failed_stage}: {report.error}")

        artifact = report.artifact
        if request.has_explicit_path:
            self.stdout.write(self.style.SUCCESS(f"Database backup was successful. Saved to {artifact.path}"))
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f"Database backup was successful. {artifact.name} was saved in the dumps folder."
                )
            )

        if report.encrypted:
            self.stdout.write("Dump encrypted.")
        if report.recorded:
            self.stdout.write("Dump name saved to the database.")

        for result in report.destinations:
            if result.success:
                self.stdout.write(self.style.SUCCESS(f"Upload to {result.destination} complete: {result.key}"))
            else:
                self.stdout.write(self.style.ERROR(f"Upload to {result.destination} failed: {result.detail}"))

        if report.local_removed:
            self.stdout.write(self.style.SUCCESS("Removed local dump as it is now stored remotely."))

        for warning in report.warnings:
            self.stdout.write(self.style.WARNING(f"Warning: {warning}"))
