"""Class session lifecycle: creation, closing and attendance statistics."""
from datetime import timedelta
from typing import Dict, List, Tuple

from sqlalchemy.exc import IntegrityError

from campus_checkin import db
from campus_checkin.models.attendance import AttendanceRecord, AttendanceStatus
from campus_checkin.models.class_session import ClassSession
from campus_checkin.models.course import Course, CourseEnrollment
from campus_checkin.utils.helpers import utcnow

class SessionService:
    """Service for professor-side session operations."""

    @staticmethod
    def create_session(course: Course, duration_minutes: int, latitude: float = None,
                       longitude: float = None, radius_meters: float = None,
                       default_radius: float = 50, start_time=None) -> Tuple[ClassSession, str]:
        """Open a session for a course.

        The geofence comes from the request, falling back to the course's
        classroom location. Returns (session, error).
        """
        if latitude is None or longitude is None:
            if not course.has_classroom_location():
                return None, "Session location is required when the course has no classroom location"
            latitude = course.classroom_latitude
            longitude = course.classroom_longitude
            if radius_meters is None:
                radius_meters = course.classroom_radius

        if radius_meters is None:
            radius_meters = default_radius

        start_time = start_time or utcnow()
        session = ClassSession(
            course_id=course.id,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=duration_minutes),
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
            is_active=True
        )
        db.session.add(session)
        db.session.commit()
        return session, None

    @staticmethod
    def calculate_statistics(records: List[AttendanceRecord]) -> Dict:
        """Count records per status; attendance rate counts present and late."""
        stats = {
            'total': len(records),
            'present': len([r for r in records if r.status == AttendanceStatus.PRESENT]),
            'late': len([r for r in records if r.status == AttendanceStatus.LATE]),
            'absent': len([r for r in records if r.status == AttendanceStatus.ABSENT]),
            'attendance_rate': 0
        }

        if stats['total'] > 0:
            stats['attendance_rate'] = round((stats['present'] + stats['late']) / stats['total'] * 100)

        return stats

    @staticmethod
    def session_records(session: ClassSession) -> List[AttendanceRecord]:
        return session.records.order_by(AttendanceRecord.check_in_time.asc()).all()

    @staticmethod
    def mark_absentees(session: ClassSession) -> int:
        """Insert ``absent`` records for enrolled students who never checked in."""
        recorded = {r.student_id for r in session.records}
        enrolled = CourseEnrollment.query.filter_by(course_id=session.course_id).all()

        created = 0
        for enrollment in enrolled:
            if enrollment.student_id in recorded:
                continue

            db.session.add(AttendanceRecord(
                session_id=session.id,
                student_id=enrollment.student_id,
                status=AttendanceStatus.ABSENT,
                check_in_time=None,
                location_verified=False
            ))
            try:
                db.session.commit()
                created += 1
            except IntegrityError:
                # checked in concurrently
                db.session.rollback()

        return created

    @staticmethod
    def end_session(session: ClassSession) -> Tuple[Dict, bool]:
        """Close a session and finalize attendance.

        Returns (statistics, already_ended). Ending twice is harmless.
        """
        already_ended = session.ended_at is not None and not session.is_active

        if not already_ended:
            now = utcnow()
            session.is_active = False
            session.ended_at = min(now, session.end_time)
            db.session.commit()
            SessionService.mark_absentees(session)

        stats = SessionService.calculate_statistics(SessionService.session_records(session))
        return stats, already_ended
