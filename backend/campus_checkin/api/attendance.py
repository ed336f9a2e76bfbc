"""Attendance API endpoints."""
from datetime import datetime
from flask import Blueprint, request, current_app
from sqlalchemy.exc import SQLAlchemyError
from campus_checkin import db, limiter
from campus_checkin.models.attendance import AttendanceRecord
from campus_checkin.services import get_session_registry, get_attendance_recorder
from campus_checkin.services.checkin_validator import CheckInPolicy, validate_check_in
from campus_checkin.services.session_service import SessionService
from campus_checkin.utils.decorators import student_required, current_user_id
from campus_checkin.utils.errors import CheckInRejected
from campus_checkin.utils.helpers import success_response, error_response, utcnow
from campus_checkin.utils.validators import Validator, ValidationError

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/checkin', methods=['POST'])
@student_required
@limiter.limit("30 per minute")
def check_in():
    """Verify and record a student's check-in."""
    student_id = current_user_id()
    session_id = None

    try:
        check_in_request = Validator.parse_check_in(request.get_json(silent=True))
        session_id = check_in_request.session_id

        registry = get_session_registry()
        recorder = get_attendance_recorder()
        now = utcnow()

        session = registry.expire_if_past(registry.lookup(session_id, now), now)
        already_recorded = session is not None and recorder.has_record(session.id, student_id)

        decision = validate_check_in(
            session,
            check_in_request,
            now,
            policy=CheckInPolicy.from_config(current_app.config),
            already_recorded=already_recorded
        )

        course_id = None if registry.is_ephemeral(session) else session.course_id
        recorder.record_decision(decision, student_id, course_id=course_id)

        current_app.logger.info(
            'Check-in accepted: session=%s student=%s status=%s distance=%.1fm verified=%s',
            session_id, student_id, decision.status.value,
            decision.distance_meters, decision.location_verified
        )

        return success_response(
            sessionId=decision.session_id,
            status=decision.status.value,
            locationVerified=decision.location_verified
        )

    except ValidationError as e:
        return error_response(str(e), 400, code='invalid_request')

    except CheckInRejected as e:
        current_app.logger.info(
            'Check-in rejected: session=%s student=%s code=%s', session_id, student_id, e.code.value
        )
        return error_response(e.message, e.status_code, code=e.code.value, **e.details)

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(
            'Check-in failed: session=%s student=%s', session_id, student_id
        )
        return error_response("Internal server error", 500, code='internal_error')

@attendance_bp.route('/status/<session_id>', methods=['GET'])
@student_required
def get_check_in_status(session_id):
    """The session's state and the student's record for it, if any."""
    student_id = current_user_id()
    registry = get_session_registry()
    now = utcnow()

    session = registry.lookup(session_id, now)
    if session is None:
        return error_response("Session not found", 404, code='session_not_found')

    if registry.is_ephemeral(session):
        attendance = registry.demo_cache.attendee(session.id, student_id)
    else:
        record = AttendanceRecord.query.filter_by(session_id=session.id, student_id=student_id).first()
        attendance = {
            'status': record.status.value,
            'check_in_time': record.check_in_time.isoformat() if record.check_in_time else None,
            'location_verified': record.location_verified
        } if record else None

    return success_response(data={
        'session': {
            'id': session.id,
            'is_active': session.is_open(now),
            'is_expired': session.is_expired(now)
        },
        'attendance': attendance
    })

@attendance_bp.route('/my-records', methods=['GET'])
@student_required
def get_my_attendance():
    """Get student's attendance records."""
    student_id = current_user_id()

    query = AttendanceRecord.query.filter_by(student_id=student_id)

    from_date = request.args.get('from_date')
    to_date = request.args.get('to_date')
    try:
        if from_date:
            query = query.filter(AttendanceRecord.check_in_time >= datetime.fromisoformat(from_date))
        if to_date:
            query = query.filter(AttendanceRecord.check_in_time <= datetime.fromisoformat(to_date))
    except ValueError:
        return error_response("from_date and to_date must be ISO-8601 dates", 400)

    records = query.order_by(AttendanceRecord.created_at.desc()).all()

    attendance_data = []
    for record in records:
        course = record.session.course
        attendance_data.append({
            'id': record.id,
            'session_id': record.session_id,
            'course': course.name,
            'course_code': course.course_code,
            'session_start': record.session.start_time.isoformat(),
            'check_in_time': record.check_in_time.isoformat() if record.check_in_time else None,
            'status': record.status.value,
            'location_verified': record.location_verified
        })

    stats = SessionService.calculate_statistics(records)
    stats['late_rate'] = round(stats['late'] / stats['total'] * 100) if stats['total'] else 0

    return success_response(
        data={
            'records': attendance_data,
            'statistics': stats
        }
    )
