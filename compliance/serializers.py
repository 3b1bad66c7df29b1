"""
Serializers for the HOS Compliance API.

Validates incoming HOS logs and serializes logs, entries and violations.
"""

from rest_framework import serializers
from .models import (
    HOSLog,
    HOSEntry,
    HOSViolationRecord,
    DUTY_STATUS_CHOICES,
    ENTRY_SOURCE_CHOICES,
)


class HOSEntryInputSerializer(serializers.Serializer):
    """
    Input serializer for a single duty-status entry.
    """
    start_time = serializers.DateTimeField(help_text="Start of the interval (ISO 8601)")
    end_time = serializers.DateTimeField(help_text="End of the interval (ISO 8601)")
    status = serializers.ChoiceField(choices=DUTY_STATUS_CHOICES)
    location = serializers.CharField(max_length=500)
    odometer = serializers.FloatField(min_value=0, required=False, allow_null=True)
    engine_hours = serializers.FloatField(min_value=0, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    automatic_entry = serializers.BooleanField(required=False, default=False)
    source = serializers.ChoiceField(choices=ENTRY_SOURCE_CHOICES, required=False, default='manual')


class ELDDataSerializer(serializers.Serializer):
    """
    Details of the ELD device a log was transferred from.
    """
    device_id = serializers.CharField()
    device_manufacturer = serializers.CharField()
    device_model = serializers.CharField()
    firmware_version = serializers.CharField()
    data_transfer_method = serializers.ChoiceField(choices=['web', 'email', 'usb', 'bluetooth'])
    raw_data = serializers.DictField(required=False)


class HOSLogInputSerializer(serializers.Serializer):
    """
    Input serializer for creating an HOS log.
    """
    driver_id = serializers.CharField(max_length=100)
    date = serializers.DateField(help_text="Day the log covers")
    logs = HOSEntryInputSerializer(many=True, help_text="Duty-status entries")
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    eld_data = ELDDataSerializer(required=False, allow_null=True)

    def validate_logs(self, value):
        if not value:
            raise serializers.ValidationError('At least one HOS entry is required.')
        return value


class HOSLogUpdateSerializer(serializers.Serializer):
    """
    Fields that may change on an existing log.
    """
    status = serializers.ChoiceField(choices=HOSLog.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    certified_by = serializers.CharField(max_length=100, required=False, allow_blank=True)
    certified_at = serializers.DateTimeField(required=False, allow_null=True)


class HOSLogFilterSerializer(serializers.Serializer):
    """
    Query parameters for listing logs.
    """
    driver_id = serializers.CharField(required=False)
    status = serializers.ChoiceField(choices=HOSLog.STATUS_CHOICES, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=50)


class HOSViolationFilterSerializer(serializers.Serializer):
    """
    Query parameters for listing violations.
    """
    driver_id = serializers.CharField(required=False)
    severity = serializers.MultipleChoiceField(
        choices=HOSViolationRecord.SEVERITY_CHOICES, required=False
    )
    resolved = serializers.BooleanField(required=False, default=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=50)


class HOSViolationResolveSerializer(serializers.Serializer):
    resolution_notes = serializers.CharField(required=False, allow_blank=True, default='')


class HOSEntryModelSerializer(serializers.ModelSerializer):
    """
    Model serializer for stored entries.
    """
    duration_minutes = serializers.ReadOnlyField()

    class Meta:
        model = HOSEntry
        exclude = ['log']
        read_only_fields = ['id']


class HOSLogModelSerializer(serializers.ModelSerializer):
    """
    Model serializer for stored logs, including their entries.
    """
    entries = HOSEntryModelSerializer(many=True, read_only=True)

    class Meta:
        model = HOSLog
        fields = '__all__'
        read_only_fields = ['id', 'created_at', 'updated_at']


class HOSViolationRecordSerializer(serializers.ModelSerializer):
    """
    Model serializer for recorded violations.
    """
    status = serializers.ReadOnlyField()

    class Meta:
        model = HOSViolationRecord
        fields = '__all__'
        read_only_fields = ['id', 'created_at']


class HealthCheckSerializer(serializers.Serializer):
    """
    Serializer for health check response.
    """
    status = serializers.CharField()
    message = serializers.CharField()
    version = serializers.CharField()
    timestamp = serializers.DateTimeField()
