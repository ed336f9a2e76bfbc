"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .course import Course, CourseEnrollment
from .class_session import ClassSession
from .attendance import AttendanceRecord, AttendanceStatus

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'Course', 'CourseEnrollment',
    'ClassSession', 'AttendanceRecord', 'AttendanceStatus'
]
