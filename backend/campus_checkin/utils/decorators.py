"""Authorization decorators.

Every protected endpoint goes through ``role_required``: the JWT is verified
once and the role is read from its ``role`` claim.
"""
from functools import wraps
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from campus_checkin.models.user import UserRole
from campus_checkin.utils.helpers import error_response

def current_user_id() -> int:
    """Numeric id of the authenticated user."""
    return int(get_jwt_identity())

def role_required(*roles: UserRole):
    """Require a valid access token whose role claim is one of ``roles``."""
    allowed = {role.value for role in roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()

            if allowed and get_jwt().get('role') not in allowed:
                return error_response("You do not have access to this resource", 403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator

def student_required(f):
    """Decorator to require student role."""
    return role_required(UserRole.STUDENT)(f)

def professor_required(f):
    """Decorator to require professor role or higher."""
    return role_required(UserRole.PROFESSOR, UserRole.ADMIN)(f)
