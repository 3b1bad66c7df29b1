"""
Admin configuration for HOS compliance models.
"""

from django.contrib import admin
from .models import HOSLog, HOSEntry, HOSViolationRecord


class HOSEntryInline(admin.TabularInline):
    model = HOSEntry
    extra = 0


@admin.register(HOSLog)
class HOSLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'driver_id', 'log_date', 'status', 'certified_by', 'created_at']
    list_filter = ['status', 'log_date']
    search_fields = ['driver_id', 'notes']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [HOSEntryInline]


@admin.register(HOSEntry)
class HOSEntryAdmin(admin.ModelAdmin):
    list_display = ['log', 'status', 'start_time', 'end_time', 'location', 'source']
    list_filter = ['status', 'source']


@admin.register(HOSViolationRecord)
class HOSViolationRecordAdmin(admin.ModelAdmin):
    list_display = ['driver_id', 'violation_type', 'severity', 'detected_at', 'resolved']
    list_filter = ['violation_type', 'severity', 'resolved']
    search_fields = ['driver_id']
