"""Persists accepted check-ins exactly once per (session, student)."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from campus_checkin import db
from campus_checkin.models.attendance import AttendanceRecord, AttendanceStatus
from campus_checkin.models.course import CourseEnrollment
from campus_checkin.utils.errors import CheckInRejected, RejectionCode

class AttendanceRecorder:
    """Writes attendance records.

    Uniqueness is enforced where the data lives: the database unique
    constraint for persistent sessions, an atomic claim for demo sessions.
    Losing a race surfaces as ``already_present``, the same code the
    validator uses.
    """

    def __init__(self, registry, logger: logging.Logger = None):
        self.registry = registry
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def has_record(self, session_id: str, student_id: int) -> bool:
        """Check for an existing record (advisory; the insert decides)."""
        if session_id in self.registry.demo_cache:
            return self.registry.demo_cache.has_attendee(session_id, student_id)

        return self._find_record(session_id, student_id) is not None

    def _find_record(self, session_id, student_id):
        return AttendanceRecord.query.filter_by(
            session_id=session_id,
            student_id=student_id
        ).first()

    def record(self, session_id: str, student_id: int, status: AttendanceStatus,
               location_verified: bool, timestamp: datetime,
               latitude: float = None, longitude: float = None,
               accuracy: float = None, distance_meters: float = None,
               course_id: Optional[int] = None):
        """Insert one record, or raise CheckInRejected(already_present)."""
        if session_id in self.registry.demo_cache:
            return self._record_demo(session_id, student_id, status, location_verified, timestamp)

        if course_id is not None:
            CourseEnrollment.ensure(course_id, student_id)

        record = AttendanceRecord(
            session_id=session_id,
            student_id=student_id,
            status=status,
            check_in_time=timestamp,
            location_verified=location_verified,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            distance_meters=distance_meters
        )
        db.session.add(record)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            existing = self._find_record(session_id, student_id)
            if existing is None:
                # not the (session, student) constraint
                raise

            if existing.status == AttendanceStatus.ABSENT:
                self.logger.warning(
                    'Check-in arrived after absentees were marked: session=%s student=%s',
                    session_id, student_id
                )
            else:
                self.logger.info(
                    'Duplicate check-in lost the race: session=%s student=%s', session_id, student_id
                )
            raise CheckInRejected(RejectionCode.ALREADY_PRESENT)

        return record

    def record_decision(self, decision, student_id: int, course_id: Optional[int] = None):
        """Record a validator decision."""
        return self.record(
            decision.session_id,
            student_id,
            decision.status,
            decision.location_verified,
            decision.checked_in_at,
            latitude=decision.latitude,
            longitude=decision.longitude,
            accuracy=decision.accuracy,
            distance_meters=decision.distance_meters,
            course_id=course_id
        )

    def _record_demo(self, session_id, student_id, status, location_verified, timestamp):
        entry = {
            'session_id': session_id,
            'student_id': student_id,
            'status': status.value,
            'location_verified': location_verified,
            'check_in_time': timestamp.isoformat()
        }
        try:
            claimed = self.registry.demo_cache.claim(session_id, student_id, entry, timestamp)
        except KeyError:
            raise CheckInRejected(RejectionCode.SESSION_NOT_FOUND)

        if not claimed:
            raise CheckInRejected(RejectionCode.ALREADY_PRESENT)
        return entry
