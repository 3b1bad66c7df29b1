"""
HOS Compliance Models.

Stores drivers' HOS logs, their duty-status entries, and violations recorded
from status calculations.
"""

from django.db import models
from django.core.validators import MinValueValidator
import uuid


DUTY_STATUS_CHOICES = [
    ('driving', 'Driving'),
    ('on_duty', 'On Duty (Not Driving)'),
    ('off_duty', 'Off Duty'),
    ('sleeper_berth', 'Sleeper Berth'),
    ('personal_conveyance', 'Personal Conveyance'),
    ('yard_moves', 'Yard Moves'),
]

ENTRY_SOURCE_CHOICES = [
    ('manual', 'Manual'),
    ('eld', 'ELD'),
    ('driver_app', 'Driver App'),
    ('gps', 'GPS'),
]


class HOSLog(models.Model):
    """
    A driver's HOS log for one day.
    """
    STATUS_CHOICES = [
        ('compliant', 'Compliant'),
        ('violation', 'Violation'),
        ('pending_review', 'Pending Review'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    driver_id = models.CharField(max_length=100, db_index=True, help_text="Driver identifier")
    log_date = models.DateField(help_text="Day this log covers")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending_review')

    # Certification
    certified_by = models.CharField(max_length=100, blank=True)
    certified_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    # ELD device details, when the log was transferred from a device
    eld_data = models.JSONField(null=True, blank=True)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-log_date', '-created_at']
        verbose_name = 'HOS Log'
        verbose_name_plural = 'HOS Logs'

    def __str__(self):
        return f"HOS log {self.log_date} for driver {self.driver_id}"


class HOSEntry(models.Model):
    """
    A single duty-status interval within an HOS log.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    log = models.ForeignKey(HOSLog, on_delete=models.CASCADE, related_name='entries')

    status = models.CharField(max_length=25, choices=DUTY_STATUS_CHOICES)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()

    location = models.CharField(max_length=500)
    odometer = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0)])
    engine_hours = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0)])
    notes = models.TextField(blank=True)

    automatic_entry = models.BooleanField(default=False)
    source = models.CharField(max_length=20, choices=ENTRY_SOURCE_CHOICES, default='manual')

    class Meta:
        ordering = ['log', 'start_time']
        verbose_name = 'HOS Entry'
        verbose_name_plural = 'HOS Entries'

    def __str__(self):
        return f"{self.get_status_display()} {self.start_time:%Y-%m-%d %H:%M}-{self.end_time:%H:%M}"

    @property
    def duration_minutes(self):
        """Duration in minutes, zero for reversed intervals."""
        return max(0.0, (self.end_time - self.start_time).total_seconds() / 60)


class HOSViolationRecord(models.Model):
    """
    A violation detected by an HOS status calculation and kept for review.
    """
    VIOLATION_TYPE_CHOICES = [
        ('11_hour', '11-Hour Driving Limit'),
        ('14_hour', '14-Hour On-Duty Limit'),
        ('70_hour', '70-Hour Cycle Limit'),
    ]

    SEVERITY_CHOICES = [
        ('minor', 'Minor'),
        ('major', 'Major'),
        ('critical', 'Critical'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    driver_id = models.CharField(max_length=100, db_index=True)
    violation_type = models.CharField(max_length=20, choices=VIOLATION_TYPE_CHOICES)
    description = models.CharField(max_length=200)
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='major')
    detected_at = models.DateTimeField(help_text="Calculation time the violation was detected at")

    # Resolution tracking
    resolved = models.BooleanField(default=False)
    resolution_notes = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-detected_at']
        verbose_name = 'HOS Violation'
        verbose_name_plural = 'HOS Violations'

    def __str__(self):
        return f"{self.get_violation_type_display()} - driver {self.driver_id}"

    @property
    def status(self):
        return 'resolved' if self.resolved else 'open'
