"""Authentication API."""
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError
from campus_checkin import db, limiter
from campus_checkin.models.user import User
from campus_checkin.services.auth_service import AuthService
from campus_checkin.utils.decorators import current_user_id
from campus_checkin.utils.helpers import success_response, error_response

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/signup", methods=["POST"])
@limiter.limit("10 per hour")
def signup():
    """Register a student or professor account."""
    try:
        data = request.get_json(silent=True)

        if not data:
            return error_response("Request body must be JSON", 400)

        user, error = AuthService.register(
            email=(data.get("email") or "").strip(),
            password=data.get("password") or "",
            name=data.get("name") or "",
            role=data.get("role") or "student",
            student_number=(data.get("student_number") or "").strip() or None
        )

        if error:
            return error_response(error, 400)

        return success_response(data=user, message="Account created", status_code=201)

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Signup failed")
        return error_response("Internal server error", 500)

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Log in with email and password."""
    try:
        data = request.get_json(silent=True)

        if not data:
            return error_response("Request body must be JSON", 400)

        email = (data.get("email") or "").strip()
        password = data.get("password") or ""

        if not email or not password:
            return error_response("Email and password are required", 400)

        result, error = AuthService.login(email, password)

        if error:
            return error_response(error, 401)

        return success_response(data=result, message="Login successful")

    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Login failed")
        return error_response("Internal server error", 500)

@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def get_current_user():
    """Get current user profile."""
    user = User.get_by_id(current_user_id())

    if not user:
        return error_response("User not found", 404)

    return success_response(data=user.to_dict())

@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh_token():
    """Refresh access token."""
    result, error = AuthService.refresh_token(current_user_id())

    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Token refreshed successfully")
