"""Student-facing course endpoints."""
from flask import Blueprint
from campus_checkin.models.attendance import AttendanceRecord, AttendanceStatus
from campus_checkin.models.class_session import ClassSession
from campus_checkin.models.course import CourseEnrollment
from campus_checkin.utils.decorators import student_required, current_user_id
from campus_checkin.utils.helpers import success_response, utcnow

student_bp = Blueprint('student', __name__)

@student_bp.route('/courses', methods=['GET'])
@student_required
def get_enrolled_courses():
    """Courses the student is enrolled in, with their attendance summary."""
    student_id = current_user_id()
    now = utcnow()

    enrollments = CourseEnrollment.query.filter_by(student_id=student_id).all()

    courses = []
    for enrollment in enrollments:
        course = enrollment.course
        records = AttendanceRecord.query.join(ClassSession).filter(
            ClassSession.course_id == course.id,
            AttendanceRecord.student_id == student_id
        ).all()

        present = len([r for r in records if r.status == AttendanceStatus.PRESENT])
        late = len([r for r in records if r.status == AttendanceStatus.LATE])
        total = len(records)

        open_sessions = [
            {'id': s.id, 'start_time': s.start_time.isoformat(), 'end_time': s.end_time.isoformat()}
            for s in course.sessions.filter_by(is_active=True).all()
            if s.is_open(now)
        ]

        courses.append({
            'id': course.id,
            'name': course.name,
            'course_code': course.course_code,
            'professor': {'id': course.professor.id, 'name': course.professor.name},
            'enrolled_at': enrollment.created_at.isoformat(),
            'attendance': {
                'total_sessions': total,
                'attended_sessions': present,
                'late_sessions': late,
                'missed_sessions': total - present - late,
                'attendance_rate': round((present + late) / total * 100) if total else 0
            },
            'active_sessions': open_sessions
        })

    courses.sort(key=lambda c: c['name'])
    return success_response(data={'courses': courses})
