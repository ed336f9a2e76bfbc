"""Check-in verification pipeline.

Decides whether a submitted check-in is accepted and, if so, whether the
student is present or late. Nothing here touches the database or the clock;
callers pass in the resolved session, the server time and the policy.

Checks run in a fixed order and the first failure wins:

1. the session exists
2. the session is inside its active window
3. the client clock agrees with the server within the skew tolerance
4. the submitted position is inside the geofence
5. no attendance record exists yet for the pair
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from campus_checkin.models.attendance import AttendanceStatus
from campus_checkin.services.gps_service import GPSService
from campus_checkin.utils.errors import CheckInRejected, RejectionCode
from campus_checkin.utils.validators import CheckInRequest

@dataclass(frozen=True)
class CheckInPolicy:
    """Tunable thresholds for check-in verification."""
    clock_skew_tolerance: timedelta = timedelta(seconds=60)
    grace_period: timedelta = timedelta(minutes=5)
    accuracy_threshold_meters: float = 100.0
    radius_override_meters: Optional[float] = None

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'CheckInPolicy':
        """Build the policy from Flask config values."""
        override = config.get('GEOFENCE_RADIUS_OVERRIDE_METERS')
        return cls(
            clock_skew_tolerance=timedelta(seconds=config['CLOCK_SKEW_TOLERANCE_SECONDS']),
            grace_period=timedelta(minutes=config['ATTENDANCE_GRACE_PERIOD_MINUTES']),
            accuracy_threshold_meters=float(config['GPS_ACCURACY_THRESHOLD_METERS']),
            radius_override_meters=float(override) if override is not None else None
        )

    def radius_for(self, session) -> float:
        if self.radius_override_meters is not None:
            return self.radius_override_meters
        return session.radius_meters

@dataclass(frozen=True)
class CheckInDecision:
    """An accepted check-in, ready to be recorded."""
    session_id: str
    status: AttendanceStatus
    location_verified: bool
    distance_meters: float
    checked_in_at: datetime
    client_timestamp: datetime
    latitude: float
    longitude: float
    accuracy: float

def check_activity_window(session, now: datetime) -> None:
    """Reject sessions that are closed, not started, or past their window."""
    if now > session.end_time:
        raise CheckInRejected(RejectionCode.SESSION_EXPIRED)
    if not session.is_active:
        raise CheckInRejected(RejectionCode.SESSION_INACTIVE)
    if now < session.start_time:
        raise CheckInRejected(RejectionCode.SESSION_INACTIVE, 'Session has not started yet')

def check_clock_skew(client_timestamp: datetime, now: datetime, tolerance: timedelta) -> timedelta:
    """Reject client clocks further from the server than the tolerance."""
    skew = abs(now - client_timestamp)
    if skew > tolerance:
        raise CheckInRejected(
            RejectionCode.CLOCK_SKEW,
            skew_seconds=round(skew.total_seconds(), 3),
            tolerance_seconds=tolerance.total_seconds()
        )
    return skew

def classify_status(session, now: datetime, grace_period: timedelta) -> AttendanceStatus:
    """On time up to and including start + grace, late afterwards."""
    if now <= session.start_time + grace_period:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.LATE

def validate_check_in(session, check_in: CheckInRequest, now: datetime,
                      policy: CheckInPolicy = None,
                      already_recorded: bool = False) -> CheckInDecision:
    """Run the verification pipeline for one submission.

    ``session`` is anything exposing ``id``, ``is_active``, ``start_time``,
    ``end_time``, ``latitude``, ``longitude`` and ``radius_meters``, or None
    when the lookup found nothing. Raises CheckInRejected on the first failed
    check.
    """
    policy = policy or CheckInPolicy()

    if session is None:
        raise CheckInRejected(RejectionCode.SESSION_NOT_FOUND)

    check_activity_window(session, now)
    check_clock_skew(check_in.client_timestamp, now, policy.clock_skew_tolerance)

    radius = policy.radius_for(session)
    location = GPSService.verify_location(
        check_in.latitude, check_in.longitude,
        session.latitude, session.longitude, radius
    )
    if not location['is_inside']:
        raise CheckInRejected(
            RejectionCode.OUT_OF_RANGE,
            distance=round(location['distance']),
            allowed_radius=radius
        )

    if already_recorded:
        raise CheckInRejected(RejectionCode.ALREADY_PRESENT)

    return CheckInDecision(
        session_id=session.id,
        status=classify_status(session, now, policy.grace_period),
        location_verified=GPSService.is_accuracy_acceptable(
            check_in.accuracy, policy.accuracy_threshold_meters
        ),
        distance_meters=location['distance'],
        checked_in_at=now,
        client_timestamp=check_in.client_timestamp,
        latitude=check_in.latitude,
        longitude=check_in.longitude,
        accuracy=check_in.accuracy
    )
