"""Courses API endpoints."""
from flask import Blueprint, request, current_app
from flask_jwt_extended import get_jwt
from sqlalchemy.exc import SQLAlchemyError
from campus_checkin import db
from campus_checkin.models.attendance import AttendanceRecord, AttendanceStatus
from campus_checkin.models.class_session import ClassSession
from campus_checkin.models.course import Course, CourseEnrollment
from campus_checkin.models.user import UserRole
from campus_checkin.utils.decorators import professor_required, current_user_id
from campus_checkin.utils.helpers import success_response, error_response, utcnow
from campus_checkin.utils.validators import Validator

courses_bp = Blueprint('courses', __name__)

def _parse_course_body(data):
    """Return (fields, error) for a create or update body."""
    check = Validator.validate_required_fields(data, ['name', 'course_code'])
    if not check['is_valid']:
        return None, '; '.join(check['errors'])

    if not isinstance(data['name'], str) or not isinstance(data['course_code'], str):
        return None, "name and course_code must be strings"

    latitude = data.get('classroom_latitude')
    longitude = data.get('classroom_longitude')
    radius = data.get('classroom_radius')

    if latitude is not None or longitude is not None:
        errors = Validator.validate_coordinates(latitude, longitude)
        if errors:
            return None, '; '.join(errors)

    if radius is not None and (not Validator.is_number(radius) or radius <= 0):
        return None, "classroom_radius must be a positive number"

    return {
        'name': data['name'].strip(),
        'course_code': data['course_code'].strip().upper(),
        'classroom_latitude': latitude,
        'classroom_longitude': longitude,
        'classroom_radius': radius
    }, None

def _find_owned_course(course_id):
    """Returns (course, error_response)."""
    course = Course.get_by_id(course_id)
    if not course:
        return None, error_response("Course not found", 404)

    if get_jwt().get('role') != UserRole.ADMIN.value and course.professor_id != current_user_id():
        return None, error_response("You can only manage your own courses", 403)

    return course, None

@courses_bp.route('/', methods=['GET'])
@professor_required
def get_courses():
    """List the professor's courses."""
    courses = Course.query.filter_by(professor_id=current_user_id()).order_by(Course.name).all()
    return success_response(data=[c.to_dict() for c in courses])

@courses_bp.route('/', methods=['POST'])
@professor_required
def create_course():
    """Create a course owned by the current professor."""
    try:
        data = request.get_json(silent=True)
        if not data:
            return error_response("Request body must be JSON", 400)

        fields, error = _parse_course_body(data)
        if error:
            return error_response(error, 400)

        if Course.query.filter_by(course_code=fields['course_code']).first():
            return error_response("Course code already exists", 409)

        course = Course(professor_id=current_user_id(), **fields)
        course.save()

        return success_response(data=course.to_dict(), message="Course created", status_code=201)

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Course creation failed")
        return error_response("Internal server error", 500)

@courses_bp.route('/<int:course_id>', methods=['GET'])
@professor_required
def get_course(course_id):
    """Course details with a summary of each session."""
    course, error = _find_owned_course(course_id)
    if error:
        return error

    now = utcnow()
    sessions = []
    for session in course.sessions.order_by(ClassSession.start_time.desc()).all():
        records = session.records.all()
        sessions.append({
            'id': session.id,
            'start_time': session.start_time.isoformat(),
            'end_time': session.end_time.isoformat(),
            'is_active': session.is_open(now),
            'attendance_count': len([r for r in records if r.status != AttendanceStatus.ABSENT]),
            'present_count': len([r for r in records if r.status == AttendanceStatus.PRESENT])
        })

    data = course.to_dict()
    data['sessions'] = sessions
    data['enrolled_count'] = course.enrollments.count()
    return success_response(data=data)

@courses_bp.route('/<int:course_id>', methods=['PUT'])
@professor_required
def update_course(course_id):
    """Replace a course's name, code and classroom location."""
    try:
        course, error = _find_owned_course(course_id)
        if error:
            return error

        data = request.get_json(silent=True)
        if not data:
            return error_response("Request body must be JSON", 400)

        fields, error = _parse_course_body(data)
        if error:
            return error_response(error, 400)

        conflict = Course.query.filter(
            Course.course_code == fields['course_code'],
            Course.id != course.id
        ).first()
        if conflict:
            return error_response("Course code already exists", 409)

        course.update(**fields)
        current_app.logger.info('Course %s updated', course.course_code)

        return success_response(data=course.to_dict(), message="Course updated")

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Updating course %s failed", course_id)
        return error_response("Internal server error", 500)

@courses_bp.route('/<int:course_id>', methods=['DELETE'])
@professor_required
def delete_course(course_id):
    """Delete a course with its sessions, records and enrollments."""
    try:
        course, error = _find_owned_course(course_id)
        if error:
            return error

        name = course.name
        session_ids = [s.id for s in course.sessions]
        if session_ids:
            AttendanceRecord.query.filter(
                AttendanceRecord.session_id.in_(session_ids)
            ).delete(synchronize_session=False)
        ClassSession.query.filter_by(course_id=course.id).delete(synchronize_session=False)
        CourseEnrollment.query.filter_by(course_id=course.id).delete(synchronize_session=False)
        course.delete()

        current_app.logger.info('Course %s deleted', course_id)
        return success_response(message=f'Course "{name}" has been deleted successfully')

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Deleting course %s failed", course_id)
        return error_response("Internal server error", 500)
