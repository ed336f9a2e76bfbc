"""Class session API endpoints."""
from datetime import timedelta
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt
from sqlalchemy.exc import SQLAlchemyError
from campus_checkin import db
from campus_checkin.models.course import Course
from campus_checkin.models.user import UserRole
from campus_checkin.services import get_session_registry
from campus_checkin.services.session_service import SessionService
from campus_checkin.utils.decorators import professor_required, current_user_id
from campus_checkin.utils.helpers import success_response, error_response, utcnow
from campus_checkin.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

def _parse_duration(data):
    """Return (minutes, error) using the configured default and cap."""
    duration = data.get('duration_minutes', current_app.config['DEFAULT_SESSION_DURATION_MINUTES'])
    limit = current_app.config['MAX_SESSION_DURATION_MINUTES']

    if not isinstance(duration, int) or isinstance(duration, bool) or not 1 <= duration <= limit:
        return None, f"duration_minutes must be an integer between 1 and {limit}"
    return duration, None

def _parse_geofence(data, required: bool):
    """Return (latitude, longitude, radius, error) from a request body."""
    latitude = data.get('latitude')
    longitude = data.get('longitude')
    radius = data.get('radius_meters')

    if required or latitude is not None or longitude is not None:
        errors = Validator.validate_coordinates(latitude, longitude)
        if errors:
            return None, None, None, '; '.join(errors)

    if radius is not None and (not Validator.is_number(radius) or radius <= 0):
        return None, None, None, "radius_meters must be a positive number"

    return latitude, longitude, radius, None

def _find_owned_session(session_id):
    """Look up a session the current professor may manage.

    Returns (session, error_response).
    """
    registry = get_session_registry()
    session = registry.expire_if_past(registry.lookup(session_id))

    if session is None:
        return None, error_response("Session not found", 404, code='session_not_found')

    user_id = current_user_id()
    if get_jwt().get('role') == UserRole.ADMIN.value:
        return session, None

    if registry.is_ephemeral(session):
        owner_id = session.created_by
    else:
        owner_id = session.course.professor_id

    if owner_id != user_id:
        return None, error_response("You can only manage sessions of your own courses", 403)

    return session, None

@sessions_bp.route('/', methods=['POST'])
@professor_required
def create_session():
    """Open a class session for one of the professor's courses."""
    try:
        data = request.get_json(silent=True)
        if not data:
            return error_response("Request body must be JSON", 400)

        course_id = data.get('course_id')
        if not isinstance(course_id, int) or isinstance(course_id, bool):
            return error_response("course_id is required", 400)

        course = Course.get_by_id(course_id)
        if not course:
            return error_response("Course not found", 404)

        if course.professor_id != current_user_id():
            return error_response("You can only open sessions for your own courses", 403)

        duration, error = _parse_duration(data)
        if error:
            return error_response(error, 400)

        latitude, longitude, radius, error = _parse_geofence(data, required=False)
        if error:
            return error_response(error, 400)

        session, error = SessionService.create_session(
            course,
            duration_minutes=duration,
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius,
            default_radius=current_app.config['DEFAULT_GEOFENCE_RADIUS_METERS']
        )
        if error:
            return error_response(error, 400)

        current_app.logger.info('Session %s opened for course %s', session.id, course.course_code)
        return success_response(data=session.to_dict(utcnow()), message="Session created", status_code=201)

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Session creation failed")
        return error_response("Internal server error", 500)

@sessions_bp.route('/demo', methods=['POST'])
@professor_required
def create_demo_session():
    """Open an in-memory session that is never persisted."""
    data = request.get_json(silent=True)
    if not data:
        return error_response("Request body must be JSON", 400)

    duration, error = _parse_duration(data)
    if error:
        return error_response(error, 400)

    latitude, longitude, radius, error = _parse_geofence(data, required=True)
    if error:
        return error_response(error, 400)

    session = get_session_registry().create_demo_session(
        course_name=(data.get('course_name') or 'Demo session').strip(),
        latitude=latitude,
        longitude=longitude,
        radius_meters=radius or current_app.config['DEFAULT_GEOFENCE_RADIUS_METERS'],
        duration=timedelta(minutes=duration),
        created_by=current_user_id()
    )
    return success_response(data=session.to_dict(utcnow()), message="Demo session created", status_code=201)

@sessions_bp.route('/<session_id>', methods=['GET'])
@jwt_required()
def get_session(session_id):
    """Get session details."""
    registry = get_session_registry()
    session = registry.expire_if_past(registry.lookup(session_id))

    if session is None:
        return error_response("Session not found", 404, code='session_not_found')

    return success_response(data=session.to_dict(utcnow()))

@sessions_bp.route('/<session_id>/end', methods=['POST'])
@professor_required
def end_session(session_id):
    """Close a session and mark absentees."""
    try:
        session, error = _find_owned_session(session_id)
        if error:
            return error

        registry = get_session_registry()
        if registry.is_ephemeral(session):
            already_ended = not registry.demo_cache.close(session.id)
            attendees = registry.demo_cache.attendees_snapshot(session.id)
            return success_response(
                data={'session_id': session.id, 'attendee_count': len(attendees)},
                message="Session already ended" if already_ended else "Session ended",
                alreadyEnded=already_ended
            )

        stats, already_ended = SessionService.end_session(session)
        if not already_ended:
            current_app.logger.info('Session %s ended: %s', session.id, stats)

        return success_response(
            data={'session_id': session.id, 'statistics': stats},
            message="Session already ended" if already_ended else "Session ended",
            alreadyEnded=already_ended
        )

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Ending session %s failed", session_id)
        return error_response("Internal server error", 500)

@sessions_bp.route('/<session_id>/attendance', methods=['GET'])
@professor_required
def get_session_attendance(session_id):
    """Attendance list and statistics for one session."""
    session, error = _find_owned_session(session_id)
    if error:
        return error

    registry = get_session_registry()
    if registry.is_ephemeral(session):
        return success_response(data={'records': registry.demo_cache.attendees_snapshot(session.id)})

    records = SessionService.session_records(session)
    attendance_data = []
    for record in records:
        entry = record.to_dict()
        entry['student'] = {
            'id': record.student.id,
            'name': record.student.name,
            'student_number': record.student.student_number
        }
        attendance_data.append(entry)

    return success_response(data={
        'session': session.to_dict(utcnow()),
        'records': attendance_data,
        'statistics': SessionService.calculate_statistics(records)
    })
