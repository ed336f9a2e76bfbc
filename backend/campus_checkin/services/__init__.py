"""Service layer."""
from flask import current_app

def get_session_registry():
    """The registry built by the application factory."""
    return current_app.extensions['session_registry']

def get_attendance_recorder():
    """The recorder built by the application factory."""
    return current_app.extensions['attendance_recorder']
