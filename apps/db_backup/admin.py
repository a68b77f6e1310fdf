"""
Admin interface for database backup models.
"""

from datetime import datetime, timezone

from django.contrib import admin

from .models import DumpRecord


@admin.register(DumpRecord)
class DumpRecordAdmin(admin.ModelAdmin):
    """Admin interface for DumpRecord model."""

    list_display = [
        "file_name",
        "prefix",
        "encrypted",
        "created_display",
    ]
    list_filter = [
        "encrypted",
        "prefix",
    ]
    search_fields = [
        "file_name",
        "file",
    ]
    readonly_fields = [
        "file",
        "file_name",
        "prefix",
        "encrypted",
        "created_at",
    ]

    @admin.display(description="Created", ordering="created_at")
    def created_display(self, obj):
        return datetime.fromtimestamp(obj.created_at, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def has_add_permission(self, request):
        return False
