"""Validation utilities for the application."""
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Any, Optional

class ValidationError(Exception):
    """Request body failed shape validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__('; '.join(errors))

@dataclass(frozen=True)
class CheckInRequest:
    """A parsed check-in submission."""
    session_id: str
    latitude: float
    longitude: float
    accuracy: float
    client_timestamp: datetime

class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        """Validate password strength."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > 128:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_name(name: str) -> Dict[str, Any]:
        """Validate user name."""
        errors = []

        if not name or not name.strip():
            errors.append("Name is required")
        elif len(name.strip()) < 2:
            errors.append("Name must be at least 2 characters long")
        elif len(name.strip()) > 100:
            errors.append("Name is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        """Validate required fields in data."""
        errors = []

        for field in required_fields:
            if field not in data or data[field] is None or data[field] == '':
                errors.append(f"{field} is required")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def is_uuid(value: Any) -> bool:
        """Check for a canonical UUID string."""
        if not isinstance(value, str):
            return False
        try:
            return str(uuid.UUID(value)) == value.lower()
        except ValueError:
            return False

    @staticmethod
    def is_number(value: Any) -> bool:
        """Check for a real JSON number (booleans excluded)."""
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value

    @staticmethod
    def validate_coordinates(latitude: Any, longitude: Any) -> List[str]:
        """Validate a latitude/longitude pair."""
        errors = []

        if not Validator.is_number(latitude):
            errors.append("latitude must be a number")
        elif not -90 <= latitude <= 90:
            errors.append("latitude must be between -90 and 90")

        if not Validator.is_number(longitude):
            errors.append("longitude must be a number")
        elif not -180 <= longitude <= 180:
            errors.append("longitude must be between -180 and 180")

        return errors

    @staticmethod
    def parse_timestamp(value: Any) -> Optional[datetime]:
        """Parse an ISO-8601 string into a naive UTC datetime.

        Offsets are converted to UTC; strings without an offset are taken as
        UTC already. Returns None when the value is not a valid timestamp.
        """
        if not isinstance(value, str) or not value:
            return None

        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'

        try:
            parsed = datetime.fromisoformat(text)
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except (ValueError, OverflowError):
            return None

        return parsed

    @staticmethod
    def parse_check_in(data: Any) -> CheckInRequest:
        """Validate a check-in body and return the parsed request.

        Raises ValidationError listing every problem found.
        """
        if not isinstance(data, dict):
            raise ValidationError(["Request body must be a JSON object"])

        errors = []

        session_id = data.get('sessionId')
        if session_id is None:
            errors.append("sessionId is required")
        elif not Validator.is_uuid(session_id):
            errors.append("sessionId must be a UUID")

        latitude = data.get('latitude')
        longitude = data.get('longitude')
        if latitude is None:
            errors.append("latitude is required")
        if longitude is None:
            errors.append("longitude is required")
        if latitude is not None and longitude is not None:
            errors.extend(Validator.validate_coordinates(latitude, longitude))

        accuracy = data.get('accuracy', 0)
        if accuracy is None:
            accuracy = 0
        if not Validator.is_number(accuracy):
            errors.append("accuracy must be a number")
        elif accuracy < 0:
            errors.append("accuracy cannot be negative")
        else:
            try:
                accuracy = float(accuracy)
            except OverflowError:
                errors.append("accuracy must be a number")

        raw_timestamp = data.get('clientTimestamp')
        client_timestamp = Validator.parse_timestamp(raw_timestamp)
        if raw_timestamp is None:
            errors.append("clientTimestamp is required")
        elif client_timestamp is None:
            errors.append("clientTimestamp must be an ISO-8601 timestamp")

        if errors:
            raise ValidationError(errors)

        return CheckInRequest(
            session_id=session_id.lower(),
            latitude=float(latitude),
            longitude=float(longitude),
            accuracy=float(accuracy),
            client_timestamp=client_timestamp
        )
