"""Check-in rejection codes.

The string values are the wire contract read by client UIs. They must keep
their meaning across releases.
"""
from enum import Enum

class RejectionCode(Enum):
    """Machine-readable reasons a check-in is refused."""
    INVALID_REQUEST = 'invalid_request'
    SESSION_NOT_FOUND = 'session_not_found'
    SESSION_INACTIVE = 'session_inactive'
    SESSION_EXPIRED = 'session_expired'
    CLOCK_SKEW = 'clock_skew'
    OUT_OF_RANGE = 'out_of_range'
    ALREADY_PRESENT = 'already_present'
    INVALID_QR = 'invalid_qr'
    QR_EXPIRED = 'qr_expired'
    INTERNAL_ERROR = 'internal_error'

HTTP_STATUS = {
    RejectionCode.INVALID_REQUEST: 400,
    RejectionCode.SESSION_NOT_FOUND: 404,
    RejectionCode.SESSION_INACTIVE: 400,
    RejectionCode.SESSION_EXPIRED: 400,
    RejectionCode.CLOCK_SKEW: 400,
    RejectionCode.OUT_OF_RANGE: 400,
    RejectionCode.ALREADY_PRESENT: 409,
    RejectionCode.INVALID_QR: 400,
    RejectionCode.QR_EXPIRED: 400,
    RejectionCode.INTERNAL_ERROR: 500
}

DEFAULT_MESSAGES = {
    RejectionCode.INVALID_REQUEST: 'Invalid request',
    RejectionCode.SESSION_NOT_FOUND: 'Session not found',
    RejectionCode.SESSION_INACTIVE: 'Session is not active',
    RejectionCode.SESSION_EXPIRED: 'Session has already ended',
    RejectionCode.CLOCK_SKEW: 'Device clock is out of sync with the server',
    RejectionCode.OUT_OF_RANGE: 'You are outside the classroom area',
    RejectionCode.ALREADY_PRESENT: 'Attendance already recorded for this session',
    RejectionCode.INVALID_QR: 'Invalid QR code',
    RejectionCode.QR_EXPIRED: 'QR code has expired',
    RejectionCode.INTERNAL_ERROR: 'Internal server error'
}

class CheckInRejected(Exception):
    """A check-in refused for a business reason."""

    def __init__(self, code: RejectionCode, message: str = None, **details):
        self.code = code
        self.message = message or DEFAULT_MESSAGES[code]
        self.details = details
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]

    def __repr__(self) -> str:
        return f'<CheckInRejected {self.code.value}>'
