"""QR Code API endpoints."""
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required
from campus_checkin import limiter
from campus_checkin.services import get_session_registry
from campus_checkin.services.qr_service import QRService
from campus_checkin.utils.decorators import professor_required, current_user_id
from campus_checkin.utils.errors import DEFAULT_MESSAGES, HTTP_STATUS, RejectionCode
from campus_checkin.utils.helpers import success_response, error_response, utcnow

qr_bp = Blueprint('qr', __name__)

@qr_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='QR service is running')

@qr_bp.route('/generate/<session_id>', methods=['POST'])
@professor_required
@limiter.limit("30 per hour")
def generate_qr(session_id):
    """Generate QR code for a session the professor owns."""
    registry = get_session_registry()
    now = utcnow()
    session = registry.expire_if_past(registry.lookup(session_id, now), now)

    if session is None:
        return error_response("Session not found", 404, code='session_not_found')

    owner_id = session.created_by if registry.is_ephemeral(session) else session.course.professor_id
    if owner_id != current_user_id():
        return error_response("You can only generate QR codes for your own sessions", 403)

    if not session.is_open(now):
        code = RejectionCode.SESSION_EXPIRED if session.is_expired(now) else RejectionCode.SESSION_INACTIVE
        return error_response(DEFAULT_MESSAGES[code], HTTP_STATUS[code], code=code.value)

    qr_token, qr_image, expires_at = QRService.generate_qr_code(
        session, current_app.config['QR_SIGNING_KEY']
    )

    return success_response(
        data={
            'session_id': session.id,
            'qr_data': qr_token,
            'qr_image': qr_image,
            'expires_at': expires_at,
            'expires_in': int((session.end_time - now).total_seconds())
        },
        message="QR code generated successfully"
    )

@qr_bp.route('/resolve', methods=['POST'])
@jwt_required()
def resolve_qr():
    """Turn scanned QR data into the session id to check in to."""
    data = request.get_json(silent=True) or {}
    qr_data = data.get('qr_data')

    if not isinstance(qr_data, str) or not qr_data:
        return error_response("qr_data is required", 400)

    session_id, error = QRService.resolve_qr_code(qr_data, current_app.config['QR_SIGNING_KEY'])
    if error:
        return error_response(DEFAULT_MESSAGES[error], HTTP_STATUS[error], code=error.value)

    session = get_session_registry().lookup(session_id)
    if session is None:
        return error_response("Session not found", 404, code='session_not_found')

    return success_response(data={'sessionId': session.id, 'session': session.to_dict(utcnow())})
