"""
FMCSA Hours of Service (HOS) Status Calculation Service.

Derives a driver's current HOS compliance snapshot from the duty-status
entries recorded in their logs.

HOS Rules Checked:
==================
1. 11-Hour Driving Limit: Max 11 hours driving in the current UTC day
2. 14-Hour On-Duty Limit: Max 14 hours on-duty in the current UTC day
3. 70-Hour Cycle: Max 70 hours on-duty within the trailing 7 days
4. 34-Hour Restart: Eligible once 34 hours have passed since the last
   on-duty activity

All accumulation is done in minutes.

References:
- https://www.fmcsa.dot.gov/regulations/hours-of-service
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class DutyStatus(Enum):
    """Driver duty status as recorded on an HOS log."""
    DRIVING = "driving"
    ON_DUTY = "on_duty"
    OFF_DUTY = "off_duty"
    SLEEPER_BERTH = "sleeper_berth"
    PERSONAL_CONVEYANCE = "personal_conveyance"
    YARD_MOVES = "yard_moves"


class EntrySource(Enum):
    """Where a duty-status entry came from."""
    MANUAL = "manual"
    ELD = "eld"
    DRIVER_APP = "driver_app"
    GPS = "gps"


class ComplianceStatus(Enum):
    COMPLIANT = "compliant"
    VIOLATION = "violation"
    PENDING = "pending"


# Statuses that count toward drive/on-duty accumulators
ON_DUTY_STATUSES = (DutyStatus.DRIVING, DutyStatus.ON_DUTY)

# Statuses that count as rest for the 34-hour restart
REST_STATUSES = (DutyStatus.OFF_DUTY, DutyStatus.SLEEPER_BERTH)


@dataclass
class HOSConfig:
    """
    Limits used by the status calculation.
    Values are in minutes unless the name says otherwise.
    """
    max_driving_minutes: int = 11 * 60
    max_on_duty_minutes: int = 14 * 60
    cycle_minutes: int = 70 * 60
    cycle_days: int = 7
    restart_hours: int = 34


DateLike = Union[datetime, str]


def to_utc_datetime(value: DateLike) -> datetime:
    """
    Normalize a timestamp to an aware UTC datetime.

    Accepts datetimes (naive values are taken to be UTC) and ISO 8601
    strings, including a trailing 'Z'.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        value = datetime.fromisoformat(text)
    if not isinstance(value, datetime):
        raise TypeError(f"Expected a datetime or ISO 8601 string, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> float:
    """Minutes from start to end, never negative."""
    return max(0.0, (end - start).total_seconds() / 60)


@dataclass
class DutyStatusEntry:
    """A single interval of one duty status."""
    status: DutyStatus
    start_time: datetime
    end_time: datetime
    location: str = ""
    odometer: Optional[float] = None
    engine_hours: Optional[float] = None
    notes: str = ""
    automatic_entry: bool = False
    source: EntrySource = EntrySource.MANUAL

    def __post_init__(self):
        self.status = DutyStatus(self.status)
        self.source = EntrySource(self.source)
        self.start_time = to_utc_datetime(self.start_time)
        self.end_time = to_utc_datetime(self.end_time)

    @property
    def duration_minutes(self) -> float:
        return minutes_between(self.start_time, self.end_time)

    @classmethod
    def from_dict(cls, data: Dict) -> 'DutyStatusEntry':
        """Build an entry from a camelCase or snake_case payload."""
        def pick(snake, camel, default=None):
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        return cls(
            status=data['status'],
            start_time=pick('start_time', 'startTime'),
            end_time=pick('end_time', 'endTime'),
            location=data.get('location') or "",
            odometer=data.get('odometer'),
            engine_hours=pick('engine_hours', 'engineHours'),
            notes=data.get('notes') or "",
            automatic_entry=bool(pick('automatic_entry', 'automaticEntry', False)),
            source=data.get('source') or EntrySource.MANUAL.value,
        )


@dataclass
class DutyLog:
    """A driver's log: an ordered list of duty-status entries."""
    driver_id: str
    entries: List[DutyStatusEntry] = field(default_factory=list)
    id: Optional[str] = None
    log_date: Optional[date] = None

    @classmethod
    def from_dict(cls, data: Dict, driver_id: Optional[str] = None) -> 'DutyLog':
        """
        Build a log from a payload whose entries sit under 'logs' or 'entries'.

        A missing or non-list entries field yields an empty log.
        """
        raw_entries = data.get('logs', data.get('entries'))
        if not isinstance(raw_entries, list):
            raw_entries = []
        return cls(
            driver_id=driver_id or data.get('driver_id') or data.get('driverId') or "",
            entries=[DutyStatusEntry.from_dict(entry) for entry in raw_entries],
            id=data.get('id'),
            log_date=data.get('date') or data.get('log_date'),
        )


@dataclass
class HOSViolation:
    """A detected breach of an HOS limit."""
    id: str
    type: str
    description: str
    severity: str
    timestamp: datetime
    resolved: bool = False
    status: str = "open"

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'type': self.type,
            'description': self.description,
            'severity': self.severity,
            'timestamp': self.timestamp.isoformat(),
            'resolved': self.resolved,
            'status': self.status,
        }


@dataclass
class DriverHOSStatus:
    """Compliance snapshot for one driver, computed fresh on every call."""
    driver_id: str
    current_status: DutyStatus
    available_drive_time: float
    available_on_duty_time: float
    used_drive_time: float
    used_on_duty_time: float
    cycle_hours: float
    used_cycle_hours: float
    restart_available: bool
    violations: List[HOSViolation]
    last_logged_at: Optional[datetime]
    compliance_status: ComplianceStatus

    def to_dict(self) -> Dict:
        return {
            'driver_id': self.driver_id,
            'current_status': self.current_status.value,
            'available_drive_time': self.available_drive_time,
            'available_on_duty_time': self.available_on_duty_time,
            'used_drive_time': self.used_drive_time,
            'used_on_duty_time': self.used_on_duty_time,
            'cycle_hours': self.cycle_hours,
            'used_cycle_hours': self.used_cycle_hours,
            'restart_available': self.restart_available,
            'violations': [v.to_dict() for v in self.violations],
            'last_logged_at': self.last_logged_at.isoformat() if self.last_logged_at else None,
            'compliance_status': self.compliance_status.value,
        }


class HOSService:
    """
    Service for deriving a driver's HOS status from recorded duty logs.

    The calculation is pure: it reads only its arguments and the clock
    value passed in as `now`.
    """

    def __init__(self, config: Optional[HOSConfig] = None):
        self.config = config or HOSConfig()

    def calculate_hos_status(
        self,
        driver_id: str,
        hos_logs: Iterable[Union[DutyLog, Dict]],
        now: Optional[datetime] = None
    ) -> DriverHOSStatus:
        """
        Calculate the HOS compliance snapshot for a driver.

        Args:
            driver_id: Driver the logs belong to
            hos_logs: Duty logs (or dict payloads) in any order
            now: Reference time (defaults to current UTC time)

        Returns:
            DriverHOSStatus for the driver at `now`
        """
        now = to_utc_datetime(now) if now is not None else datetime.now(timezone.utc)

        entries: List[DutyStatusEntry] = []
        for log in hos_logs:
            if isinstance(log, dict):
                log = DutyLog.from_dict(log, driver_id=driver_id)
            entries.extend(log.entries)

        if not entries:
            return self._pending_status(driver_id)

        # Stable sort keeps input order for equal start times
        entries.sort(key=lambda e: e.start_time)

        start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_today = start_of_today + timedelta(days=1)
        cycle_start = now - timedelta(days=self.config.cycle_days)

        used_drive = 0.0
        used_on_duty = 0.0
        cycle_used = 0.0
        driving_today = 0.0

        for entry in entries:
            minutes = entry.duration_minutes

            if entry.start_time >= start_of_today:
                if entry.status == DutyStatus.DRIVING:
                    used_drive += minutes
                if entry.status in ON_DUTY_STATUSES:
                    used_on_duty += minutes

            if entry.start_time >= cycle_start and entry.status in ON_DUTY_STATUSES:
                cycle_used += minutes

            # Driving clipped to today's window, for the same-day 11-hour check
            if entry.status == DutyStatus.DRIVING:
                overlap_start = max(entry.start_time, start_of_today)
                overlap_end = min(entry.end_time, end_of_today)
                if overlap_end > overlap_start:
                    driving_today += minutes_between(overlap_start, overlap_end)

        last_entry = entries[-1]
        restart_available = self._restart_available(entries, now)

        violations = self._detect_violations(
            used_drive, used_on_duty, cycle_used, driving_today, now
        )

        status = DriverHOSStatus(
            driver_id=driver_id,
            current_status=last_entry.status,
            available_drive_time=max(self.config.max_driving_minutes - used_drive, 0),
            available_on_duty_time=max(self.config.max_on_duty_minutes - used_on_duty, 0),
            used_drive_time=used_drive,
            used_on_duty_time=used_on_duty,
            cycle_hours=self.config.cycle_minutes,
            used_cycle_hours=cycle_used,
            restart_available=restart_available,
            violations=violations,
            last_logged_at=last_entry.end_time,
            compliance_status=(
                ComplianceStatus.VIOLATION if violations else ComplianceStatus.COMPLIANT
            ),
        )

        logger.debug(
            f"HOS status for driver {driver_id}: drive={used_drive:.0f}m, "
            f"on_duty={used_on_duty:.0f}m, cycle={cycle_used:.0f}m, "
            f"violations={len(violations)}"
        )
        return status

    def _pending_status(self, driver_id: str) -> DriverHOSStatus:
        return DriverHOSStatus(
            driver_id=driver_id,
            current_status=DutyStatus.OFF_DUTY,
            available_drive_time=self.config.max_driving_minutes,
            available_on_duty_time=self.config.max_on_duty_minutes,
            used_drive_time=0,
            used_on_duty_time=0,
            cycle_hours=self.config.cycle_minutes,
            used_cycle_hours=0,
            restart_available=False,
            violations=[],
            last_logged_at=None,
            compliance_status=ComplianceStatus.PENDING,
        )

    def _restart_available(self, entries: List[DutyStatusEntry], now: datetime) -> bool:
        """True once 34 hours have passed since the last non-rest entry ended."""
        last_on_duty_end: Optional[datetime] = None
        for entry in entries:
            if entry.status in REST_STATUSES:
                continue
            if last_on_duty_end is None or entry.end_time > last_on_duty_end:
                last_on_duty_end = entry.end_time

        if last_on_duty_end is None:
            return True
        return now - last_on_duty_end >= timedelta(hours=self.config.restart_hours)

    def _detect_violations(
        self,
        used_drive: float,
        used_on_duty: float,
        cycle_used: float,
        driving_today: float,
        now: datetime
    ) -> List[HOSViolation]:
        violations = []

        if used_drive > self.config.max_driving_minutes:
            violations.append(self._violation("11", "11_hour", "Exceeded 11-hour driving limit", now))

        if used_on_duty > self.config.max_on_duty_minutes:
            violations.append(self._violation("14", "14_hour", "Exceeded 14-hour on-duty limit", now))

        if cycle_used > self.config.cycle_minutes:
            violations.append(self._violation("70", "70_hour", "Exceeded 70-hour 8-day limit", now))

        # Raised independently of the start-gated check above, so a day can
        # carry two 11_hour entries.
        if driving_today > self.config.max_driving_minutes:
            violations.append(
                self._violation("11", "11_hour", "Exceeded 11 hours driving in a day", now)
            )

        return violations

    @staticmethod
    def _violation(violation_id: str, violation_type: str, description: str, now: datetime) -> HOSViolation:
        return HOSViolation(
            id=violation_id,
            type=violation_type,
            description=description,
            severity="major",
            timestamp=now,
        )


def calculate_hos_status(
    driver_id: str,
    hos_logs: Iterable[Union[DutyLog, Dict]],
    now: Optional[datetime] = None
) -> DriverHOSStatus:
    """Module-level shortcut using the default HOS limits."""
    return HOSService().calculate_hos_status(driver_id, hos_logs, now=now)
