import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="HOSLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("driver_id", models.CharField(db_index=True, help_text="Driver identifier", max_length=100)),
                ("log_date", models.DateField(help_text="Day this log covers")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("compliant", "Compliant"),
                            ("violation", "Violation"),
                            ("pending_review", "Pending Review"),
                        ],
                        default="pending_review",
                        max_length=20,
                    ),
                ),
                ("certified_by", models.CharField(blank=True, max_length=100)),
                ("certified_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("eld_data", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "HOS Log",
                "verbose_name_plural": "HOS Logs",
                "ordering": ["-log_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="HOSViolationRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("driver_id", models.CharField(db_index=True, max_length=100)),
                (
                    "violation_type",
                    models.CharField(
                        choices=[
                            ("11_hour", "11-Hour Driving Limit"),
                            ("14_hour", "14-Hour On-Duty Limit"),
                            ("70_hour", "70-Hour Cycle Limit"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.CharField(max_length=200)),
                (
                    "severity",
                    models.CharField(
                        choices=[("minor", "Minor"), ("major", "Major"), ("critical", "Critical")],
                        default="major",
                        max_length=10,
                    ),
                ),
                ("detected_at", models.DateTimeField(help_text="Calculation time the violation was detected at")),
                ("resolved", models.BooleanField(default=False)),
                ("resolution_notes", models.TextField(blank=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "HOS Violation",
                "verbose_name_plural": "HOS Violations",
                "ordering": ["-detected_at"],
            },
        ),
        migrations.CreateModel(
            name="HOSEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("driving", "Driving"),
                            ("on_duty", "On Duty (Not Driving)"),
                            ("off_duty", "Off Duty"),
                            ("sleeper_berth", "Sleeper Berth"),
                            ("personal_conveyance", "Personal Conveyance"),
                            ("yard_moves", "Yard Moves"),
                        ],
                        max_length=25,
                    ),
                ),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("location", models.CharField(max_length=500)),
                (
                    "odometer",
                    models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(0)]),
                ),
                (
                    "engine_hours",
                    models.FloatField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(0)]),
                ),
                ("notes", models.TextField(blank=True)),
                ("automatic_entry", models.BooleanField(default=False)),
                (
                    "source",
                    models.CharField(
                        choices=[("manual", "Manual"), ("eld", "ELD"), ("driver_app", "Driver App"), ("gps", "GPS")],
                        default="manual",
                        max_length=20,
                    ),
                ),
                (
                    "log",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="entries",
                        to="compliance.hoslog",
                    ),
                ),
            ],
            options={
                "verbose_name": "HOS Entry",
                "verbose_name_plural": "HOS Entries",
                "ordering": ["log", "start_time"],
            },
        ),
    ]
