"""QR Code generation and validation service."""
import qrcode
import io
import base64
import secrets
import jwt
from datetime import datetime, timezone
from typing import Tuple, Optional

from campus_checkin.utils.errors import RejectionCode

class QRService:
    """Service for QR code operations."""

    ALGORITHM = 'HS256'

    @staticmethod
    def create_qr_token(session_id: str, expires_at: datetime, signing_key: str) -> str:
        """Sign the QR payload; it expires with the session window."""
        payload = {
            'sid': session_id,
            'exp': expires_at.replace(tzinfo=timezone.utc),
            'nonce': secrets.token_hex(8)
        }
        return jwt.encode(payload, signing_key, algorithm=QRService.ALGORITHM)

    @staticmethod
    def generate_qr_code(session, signing_key: str) -> Tuple[str, str, str]:
        """
        Generate QR code for a session.
        Returns: (qr_token, qr_image_base64, expires_at)
        """
        qr_token = QRService.create_qr_token(session.id, session.end_time, signing_key)

        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(qr_token)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return qr_token, f"data:image/png;base64,{img_str}", session.end_time.isoformat()

    @staticmethod
    def resolve_qr_code(qr_data: str, signing_key: str) -> Tuple[Optional[str], Optional[RejectionCode]]:
        """
        Verify scanned QR data.
        Returns: (session_id, error_code)
        """
        try:
            payload = jwt.decode(qr_data, signing_key, algorithms=[QRService.ALGORITHM])
        except jwt.ExpiredSignatureError:
            return None, RejectionCode.QR_EXPIRED
        except jwt.InvalidTokenError:
            return None, RejectionCode.INVALID_QR

        session_id = payload.get('sid')
        if not isinstance(session_id, str):
            return None, RejectionCode.INVALID_QR

        return session_id, None
