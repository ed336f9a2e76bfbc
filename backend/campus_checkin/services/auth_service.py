"""Authentication service for user management."""
from flask_jwt_extended import create_access_token, create_refresh_token
from campus_checkin.models.user import User, UserRole
from campus_checkin.utils.helpers import utcnow
from campus_checkin.utils.validators import Validator

class AuthService:
    @staticmethod
    def issue_tokens(user: User) -> dict:
        """Access and refresh tokens carrying the user's role claim."""
        claims = {'role': user.role.value}
        return {
            "access_token": create_access_token(identity=str(user.id), additional_claims=claims),
            "refresh_token": create_refresh_token(identity=str(user.id), additional_claims=claims)
        }

    @staticmethod
    def login(email: str, password: str) -> tuple[dict, str]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = utcnow()
        user.save()

        result = AuthService.issue_tokens(user)
        result["user"] = user.to_dict()
        return result, None

    @staticmethod
    def register(email: str, password: str, name: str, role: str = "student",
                 student_number: str = None) -> tuple[dict, str]:
        """Register new user."""
        if not all([email, password, name]):
            return None, "Email, password and name are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        password_check = Validator.validate_password(password)
        if not password_check["is_valid"]:
            return None, password_check["errors"][0]

        name_check = Validator.validate_name(name)
        if not name_check["is_valid"]:
            return None, name_check["errors"][0]

        try:
            user_role = UserRole((role or "student").lower())
        except ValueError:
            return None, "Role must be student or professor"

        if user_role == UserRole.ADMIN:
            return None, "Role must be student or professor"

        email = email.lower().strip()
        if User.query.filter_by(email=email).first():
            return None, "Email already exists"

        if student_number and User.query.filter_by(student_number=student_number).first():
            return None, "Student number already exists"

        user = User(
            email=email,
            name=name.strip(),
            role=user_role,
            student_number=student_number if user_role == UserRole.STUDENT else None
        )
        user.set_password(password)
        user.save()

        return user.to_dict(), None

    @staticmethod
    def refresh_token(user_id: int) -> tuple[dict, str]:
        """Generate new access token."""
        user = User.get_by_id(user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"

        access_token = create_access_token(
            identity=str(user.id),
            additional_claims={'role': user.role.value}
        )

        return {
            "access_token": access_token,
            "user": user.to_dict()
        }, None
