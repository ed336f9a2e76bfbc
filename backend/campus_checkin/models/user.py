"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from campus_checkin import db
from campus_checkin.models.base import BaseModel

class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'student'
    PROFESSOR = 'professor'
    ADMIN = 'admin'

class User(BaseModel):
    """User model for all system users."""
    
    __tablename__ = 'users'
    
    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    student_number = db.Column(db.String(50), unique=True, nullable=True, index=True)
    
    # Role
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)
    
    # Security and Authentication
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)
    
    # Relationships
    courses = db.relationship('Course', backref='professor', lazy='dynamic')
    attendance_records = db.relationship('AttendanceRecord', backref='student', lazy='dynamic')
    
    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)
    
    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)
    
    def is_professor(self) -> bool:
        """Professors and admins may run sessions."""
        return self.role in [UserRole.PROFESSOR, UserRole.ADMIN]
    
    def is_student(self) -> bool:
        """Check if user is a student."""
        return self.role == UserRole.STUDENT
    
    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash']
        exclude = (exclude or []) + default_exclude
        
        result = super().to_dict(exclude=exclude)
        result['role'] = self.role.value if self.role else None
        
        return result
    
    def __repr__(self) -> str:
        return f'<User {self.email}>'
