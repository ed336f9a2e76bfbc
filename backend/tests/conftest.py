"""Shared fixtures."""
import pytest
from datetime import timedelta
from campus_checkin import create_app, db
from campus_checkin.models.user import User, UserRole
from campus_checkin.models.course import Course
from campus_checkin.models.class_session import ClassSession
from campus_checkin.services.auth_service import AuthService
from campus_checkin.utils.helpers import utcnow

# Lecture hall used throughout the tests
CENTER_LAT = 36.6372
CENTER_LNG = 127.4896

def create_user(email, role, name='Test User', password='password123', student_number=None):
    user = User(email=email, name=name, role=role, student_number=student_number)
    user.set_password(password)
    return user.save()

def create_session(course, started_minutes_ago=1, duration_minutes=10, radius=50, is_active=True):
    start = utcnow() - timedelta(minutes=started_minutes_ago)
    session = ClassSession(
        course_id=course.id,
        start_time=start,
        end_time=start + timedelta(minutes=duration_minutes),
        latitude=CENTER_LAT,
        longitude=CENTER_LNG,
        radius_meters=radius,
        is_active=is_active
    )
    return session.save()

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def professor(app):
    return create_user('prof@university.edu', UserRole.PROFESSOR, name='Prof. Kim')

@pytest.fixture
def other_professor(app):
    return create_user('prof2@university.edu', UserRole.PROFESSOR, name='Prof. Lee')

@pytest.fixture
def student(app):
    return create_user('student@university.edu', UserRole.STUDENT, name='Student Park',
                       student_number='20240001')

@pytest.fixture
def other_student(app):
    return create_user('student2@university.edu', UserRole.STUDENT, name='Student Choi',
                       student_number='20240002')

@pytest.fixture
def course(professor):
    course = Course(
        name='Operating Systems',
        course_code='CS301',
        professor_id=professor.id,
        classroom_latitude=CENTER_LAT,
        classroom_longitude=CENTER_LNG,
        classroom_radius=50
    )
    return course.save()

@pytest.fixture
def live_session(course):
    """Session S: active from T to T+10min, started one minute ago."""
    return create_session(course)

@pytest.fixture
def auth_headers(app):
    """Build an Authorization header for a user."""
    def _headers(user):
        token = AuthService.issue_tokens(user)['access_token']
        return {'Authorization': f'Bearer {token}'}
    return _headers
