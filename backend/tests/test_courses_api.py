"""Test course detail, update and delete endpoints."""
import json
from campus_checkin import db
from campus_checkin.models.attendance import AttendanceRecord, AttendanceStatus
from campus_checkin.models.class_session import ClassSession
from campus_checkin.models.course import Course, CourseEnrollment
from campus_checkin.utils.helpers import utcnow
from conftest import CENTER_LAT, CENTER_LNG

def test_get_course_details(client, course, live_session, professor, student, auth_headers):
    CourseEnrollment(course_id=course.id, student_id=student.id).save()
    AttendanceRecord(
        session_id=live_session.id,
        student_id=student.id,
        status=AttendanceStatus.PRESENT,
        check_in_time=utcnow(),
        location_verified=True
    ).save()

    response = client.get(f'/api/courses/{course.id}', headers=auth_headers(professor))
    assert response.status_code == 200
    data = json.loads(response.data)['data']

    assert data['course_code'] == 'CS301'
    assert data['classroom_location'] == {'latitude': CENTER_LAT, 'longitude': CENTER_LNG, 'radius': 50}
    assert data['enrolled_count'] == 1
    assert len(data['sessions']) == 1
    assert data['sessions'][0]['id'] == live_session.id
    assert data['sessions'][0]['is_active'] == True
    assert data['sessions'][0]['attendance_count'] == 1
    assert data['sessions'][0]['present_count'] == 1

def test_course_details_require_owner(client, course, other_professor, student, auth_headers):
    response = client.get(f'/api/courses/{course.id}', headers=auth_headers(other_professor))
    assert response.status_code == 403

    response = client.get(f'/api/courses/{course.id}', headers=auth_headers(student))
    assert response.status_code == 403

    response = client.get('/api/courses/9999', headers=auth_headers(other_professor))
    assert response.status_code == 404

def test_update_course(client, course, professor, auth_headers):
    response = client.put(f'/api/courses/{course.id}',
        json={
            'name': 'Advanced Operating Systems',
            'course_code': 'cs401',
            'classroom_latitude': 37.5,
            'classroom_longitude': 127.0,
            'classroom_radius': 75
        },
        headers=auth_headers(professor))

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['name'] == 'Advanced Operating Systems'
    assert data['course_code'] == 'CS401'
    assert data['classroom_location']['radius'] == 75

    db.session.expire_all()
    assert db.session.get(Course, course.id).course_code == 'CS401'

def test_update_course_keeps_own_code(client, course, professor, auth_headers):
    response = client.put(f'/api/courses/{course.id}',
        json={'name': 'Renamed', 'course_code': 'CS301'},
        headers=auth_headers(professor))

    assert response.status_code == 200
    assert json.loads(response.data)['data']['classroom_location'] is None

def test_update_course_duplicate_code(client, course, professor, auth_headers):
    Course(name='Networks', course_code='CS303', professor_id=professor.id).save()

    response = client.put(f'/api/courses/{course.id}',
        json={'name': 'Operating Systems', 'course_code': 'cs303'},
        headers=auth_headers(professor))

    assert response.status_code == 409
    assert json.loads(response.data)['code'] == 'conflict'

def test_update_course_validation(client, course, professor, other_professor, auth_headers):
    response = client.put(f'/api/courses/{course.id}', json={'name': 'No code'},
        headers=auth_headers(professor))
    assert response.status_code == 400

    response = client.put(f'/api/courses/{course.id}',
        json={'name': 'Bad', 'course_code': 'CS301', 'classroom_latitude': 120, 'classroom_longitude': 0},
        headers=auth_headers(professor))
    assert response.status_code == 400

    response = client.put(f'/api/courses/{course.id}',
        json={'name': 42, 'course_code': 'CS301'},
        headers=auth_headers(professor))
    assert response.status_code == 400

    response = client.put(f'/api/courses/{course.id}',
        json={'name': 'Taken over', 'course_code': 'CS301'},
        headers=auth_headers(other_professor))
    assert response.status_code == 403

def test_delete_course(client, course, live_session, professor, student, auth_headers):
    course_id = course.id
    session_id = live_session.id
    CourseEnrollment(course_id=course_id, student_id=student.id).save()
    AttendanceRecord(
        session_id=session_id,
        student_id=student.id,
        status=AttendanceStatus.LATE,
        check_in_time=utcnow(),
        location_verified=True
    ).save()

    response = client.delete(f'/api/courses/{course_id}', headers=auth_headers(professor))
    assert response.status_code == 200
    assert 'Operating Systems' in json.loads(response.data)['message']

    assert db.session.get(Course, course_id) is None
    assert ClassSession.query.filter_by(id=session_id).count() == 0
    assert AttendanceRecord.query.count() == 0
    assert CourseEnrollment.query.count() == 0

def test_delete_course_requires_owner(client, course, other_professor, auth_headers):
    response = client.delete(f'/api/courses/{course.id}', headers=auth_headers(other_professor))
    assert response.status_code == 403
    assert Course.query.count() == 1
