"""
HOS Log Service.

Bridges stored HOS logs and the status calculator:
- Converts stored logs into calculator input
- Summarizes per-log duty totals
- Fetches (and caches) a driver's current HOS status
- Records detected violations for review
"""

import logging
import math
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Dict, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone

from ..models import HOSLog, HOSEntry, HOSViolationRecord
from .hos_service import (
    DriverHOSStatus,
    DutyLog,
    DutyStatus,
    DutyStatusEntry,
    HOSConfig,
    HOSService,
)

logger = logging.getLogger(__name__)


class HOSServiceError(Exception):
    """Raised when stored HOS data cannot be used for a calculation."""
    pass


def status_cache_key(driver_id: str) -> str:
    return f"hos:status:{driver_id}"


def paginate(queryset, page: int = 1, limit: int = 50):
    """Slice a queryset and build the pagination block returned by list endpoints."""
    total_count = queryset.count()
    total_pages = math.ceil(total_count / limit) if limit else 0
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])
    return items, {
        'page': page,
        'limit': limit,
        'total_count': total_count,
        'total_pages': total_pages,
        'has_next': page < total_pages,
        'has_prev': page > 1,
    }


class HOSLogService:
    """
    Service for storing HOS logs and deriving driver status from them.
    """

    # Status lookups only consider this much recent history
    STATUS_LOOKBACK_DAYS = 8
    STATUS_MAX_LOGS = 10

    def __init__(self, config: Optional[HOSConfig] = None):
        self.config = config or HOSConfig()
        self.hos_service = HOSService(self.config)
        self.cache_ttl = getattr(settings, 'HOS_STATUS_CACHE_TTL', 60)

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_duty_log(self, log: HOSLog) -> DutyLog:
        """Convert a stored log into calculator input."""
        entries = []
        for entry in log.entries.all():
            try:
                entries.append(DutyStatusEntry(
                    status=entry.status,
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                    location=entry.location,
                    odometer=entry.odometer,
                    engine_hours=entry.engine_hours,
                    notes=entry.notes,
                    automatic_entry=entry.automatic_entry,
                    source=entry.source,
                ))
            except (TypeError, ValueError) as e:
                raise HOSServiceError(f"Log {log.id} has an unusable entry {entry.id}: {e}")

        return DutyLog(
            driver_id=log.driver_id,
            entries=entries,
            id=str(log.id),
            log_date=log.log_date,
        )

    def summarize_log(self, log: HOSLog) -> Dict:
        """
        Total minutes per duty status for one log, with a quick check of
        the log against the daily driving and on-duty limits.
        """
        totals = {status: 0.0 for status in DutyStatus}
        for entry in log.entries.all():
            try:
                duty_status = DutyStatus(entry.status)
            except ValueError as e:
                raise HOSServiceError(f"Log {log.id} has an unusable entry {entry.id}: {e}")
            totals[duty_status] += entry.duration_minutes

        total_drive = totals[DutyStatus.DRIVING]
        total_on_duty = totals[DutyStatus.DRIVING] + totals[DutyStatus.ON_DUTY]

        violations = []
        if total_drive > self.config.max_driving_minutes:
            violations.append({
                'type': '11_hour',
                'description': 'Exceeded 11-hour driving limit',
            })
        if total_on_duty > self.config.max_on_duty_minutes:
            violations.append({
                'type': '14_hour',
                'description': 'Exceeded 14-hour on-duty limit',
            })

        return {
            'total_drive_time': total_drive,
            'total_on_duty_time': total_on_duty,
            'total_off_duty_time': totals[DutyStatus.OFF_DUTY],
            'sleeper_berth_time': totals[DutyStatus.SLEEPER_BERTH],
            'personal_conveyance_time': totals[DutyStatus.PERSONAL_CONVEYANCE],
            'yard_moves_time': totals[DutyStatus.YARD_MOVES],
            'violations': violations,
        }

    # ------------------------------------------------------------------
    # Log storage
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_log(self, data: Dict) -> HOSLog:
        """
        Create a log and its entries from validated input.
        """
        entries = data.get('logs', [])
        log = HOSLog.objects.create(
            driver_id=data['driver_id'],
            log_date=data['date'],
            notes=data.get('notes', ''),
            eld_data=data.get('eld_data'),
        )
        HOSEntry.objects.bulk_create([
            HOSEntry(
                log=log,
                status=entry['status'],
                start_time=entry['start_time'],
                end_time=entry['end_time'],
                location=entry['location'],
                odometer=entry.get('odometer'),
                engine_hours=entry.get('engine_hours'),
                notes=entry.get('notes', ''),
                automatic_entry=entry.get('automatic_entry', False),
                source=entry.get('source', 'manual'),
            )
            for entry in entries
        ])

        self.invalidate_status(log.driver_id)
        logger.info(f"HOS log {log.id} created for driver {log.driver_id} with {len(entries)} entries")
        return log

    def update_log(self, log: HOSLog, data: Dict) -> HOSLog:
        """Apply status, notes or certification changes to a log."""
        for field_name in ('status', 'notes', 'certified_by', 'certified_at'):
            if field_name in data:
                setattr(log, field_name, data[field_name])

        if data.get('certified_by') and not log.certified_at:
            log.certified_at = timezone.now()

        log.save()
        self.invalidate_status(log.driver_id)
        return log

    def delete_log(self, log: HOSLog) -> None:
        driver_id = log.driver_id
        log.delete()
        self.invalidate_status(driver_id)
        logger.info(f"HOS log deleted for driver {driver_id}")

    # ------------------------------------------------------------------
    # Driver status
    # ------------------------------------------------------------------

    def recent_logs(self, driver_id: str, now: Optional[datetime] = None) -> List[HOSLog]:
        """The driver's newest logs within the status lookback window."""
        now = now or timezone.now()
        since = (now - timedelta(days=self.STATUS_LOOKBACK_DAYS)).date()
        queryset = (
            HOSLog.objects.filter(driver_id=driver_id, log_date__gte=since)
            .prefetch_related('entries')
            .order_by('-log_date', '-created_at')
        )
        return list(queryset[:self.STATUS_MAX_LOGS])

    def calculate_driver_status(self, driver_id: str, now: Optional[datetime] = None) -> DriverHOSStatus:
        """Calculate a driver's status from stored logs, bypassing the cache."""
        now = now or timezone.now()
        logs = [self.to_duty_log(log) for log in self.recent_logs(driver_id, now)]
        return self.hos_service.calculate_hos_status(driver_id, logs, now=now)

    def get_driver_status(self, driver_id: str, now: Optional[datetime] = None) -> Dict:
        """
        Serialized driver status, served from the cache when fresh.

        `now` only applies on a cache miss; a cached status is returned as
        it was calculated. Use calculate_driver_status for a fixed clock.
        """
        key = status_cache_key(driver_id)
        cached = cache.get(key)
        if cached is not None:
            return cached

        data = self.calculate_driver_status(driver_id, now).to_dict()
        cache.set(key, data, self.cache_ttl)
        return data

    def invalidate_status(self, driver_id: str) -> None:
        cache.delete(status_cache_key(driver_id))

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    def record_violations(self, status: DriverHOSStatus) -> List[HOSViolationRecord]:
        """
        Persist each violation found in a status calculation.

        An open record with the same type and description detected on the
        same UTC day is reused, so recalculating does not add copies.
        """
        records = []
        created_count = 0
        for violation in status.violations:
            day_start = violation.timestamp.astimezone(dt_timezone.utc).replace(
                hour=0, minute=0, second=0, microsecond=0
            )
            record, created = HOSViolationRecord.objects.get_or_create(
                driver_id=status.driver_id,
                violation_type=violation.type,
                description=violation.description,
                resolved=False,
                detected_at__gte=day_start,
                detected_at__lt=day_start + timedelta(days=1),
                defaults={
                    'severity': violation.severity,
                    'detected_at': violation.timestamp,
                },
            )
            records.append(record)
            created_count += int(created)

        if created_count:
            logger.info(f"Recorded {created_count} HOS violation(s) for driver {status.driver_id}")
        return records

    def resolve_violation(self, record: HOSViolationRecord, notes: str = "") -> HOSViolationRecord:
        record.resolved = True
        record.resolution_notes = notes
        record.resolved_at = timezone.now()
        record.save(update_fields=['resolved', 'resolution_notes', 'resolved_at'])
        return record
