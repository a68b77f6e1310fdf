from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DumpRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file", models.CharField(help_text="Local path of the dump file", max_length=500)),
                (
                    "file_name",
                    models.CharField(help_text="Name of the dump file, used as the remote object name", max_length=255),
                ),
                (
                    "prefix",
                    models.CharField(
                        blank=True,
                        help_text="Remote folder the dump is uploaded under (null when not uploaded)",
                        max_length=255,
                        null=True,
                    ),
                ),
                ("encrypted", models.BooleanField(default=False, help_text="Whether the dump file is encrypted")),
                (
                    "created_at",
                    models.BigIntegerField(help_text="Unix timestamp (seconds) when the dump was recorded"),
                ),
            ],
            options={
                "verbose_name": "Dump",
                "verbose_name_plural": "Dumps",
                "db_table": "db_backup_dump",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["file_name"], name="dump_file_name_idx"),
                    models.Index(fields=["created_at"], name="dump_created_idx"),
                ],
            },
        ),
    ]
