"""Test the check-in endpoint."""
import json
import math
import uuid
from datetime import timedelta
from campus_checkin import db
from campus_checkin.models.attendance import AttendanceRecord
from campus_checkin.models.class_session import ClassSession
from campus_checkin.models.course import CourseEnrollment
from campus_checkin.services.gps_service import EARTH_RADIUS_METERS
from campus_checkin.utils.helpers import utcnow
from conftest import CENTER_LAT, CENTER_LNG, create_session

def checkin_body(session_id, latitude=CENTER_LAT, longitude=CENTER_LNG, accuracy=8.0, offset=None):
    client_time = utcnow() + (offset or timedelta(0))
    return {
        'sessionId': session_id,
        'latitude': latitude,
        'longitude': longitude,
        'accuracy': accuracy,
        'clientTimestamp': client_time.isoformat() + 'Z'
    }

def post_checkin(client, headers, body):
    response = client.post('/api/attendance/checkin', json=body, headers=headers)
    return response, json.loads(response.data)

def test_checkin_scenario(client, live_session, student, other_student, auth_headers):
    """On-time, duplicate, skewed and unknown-session requests."""
    response, data = post_checkin(client, auth_headers(student), checkin_body(live_session.id))
    assert response.status_code == 200
    assert data['success'] == True
    assert data['status'] == 'present'
    assert data['sessionId'] == live_session.id
    assert data['locationVerified'] == True

    response, data = post_checkin(client, auth_headers(student), checkin_body(live_session.id))
    assert response.status_code == 409
    assert data['success'] == False
    assert data['code'] == 'already_present'

    response, data = post_checkin(client, auth_headers(other_student),
                                  checkin_body(live_session.id, offset=timedelta(minutes=2)))
    assert response.status_code == 400
    assert data['code'] == 'clock_skew'

    response, data = post_checkin(client, auth_headers(student), checkin_body(str(uuid.uuid4())))
    assert response.status_code == 404
    assert data['code'] == 'session_not_found'

    assert AttendanceRecord.query.filter_by(session_id=live_session.id).count() == 1

def test_checkin_enrolls_student(client, live_session, student, auth_headers):
    post_checkin(client, auth_headers(student), checkin_body(live_session.id))

    enrollment = CourseEnrollment.query.filter_by(course_id=live_session.course_id,
                                                  student_id=student.id).first()
    assert enrollment is not None

def test_checkin_out_of_range(client, live_session, student, auth_headers):
    latitude = CENTER_LAT + math.degrees(200 / EARTH_RADIUS_METERS)
    response, data = post_checkin(client, auth_headers(student),
                                  checkin_body(live_session.id, latitude=latitude))

    assert response.status_code == 400
    assert data['code'] == 'out_of_range'
    assert data['distance'] == 200
    assert data['allowed_radius'] == 50
    assert AttendanceRecord.query.count() == 0

def test_checkin_late(client, course, student, auth_headers):
    session = create_session(course, started_minutes_ago=7, duration_minutes=30)
    response, data = post_checkin(client, auth_headers(student), checkin_body(session.id))

    assert response.status_code == 200
    assert data['status'] == 'late'

def test_checkin_coarse_accuracy_is_unverified(client, live_session, student, auth_headers):
    response, data = post_checkin(client, auth_headers(student),
                                  checkin_body(live_session.id, accuracy=500))

    assert response.status_code == 200
    assert data['locationVerified'] == False

    record = AttendanceRecord.query.filter_by(session_id=live_session.id).first()
    assert record.location_verified is False
    assert record.accuracy == 500

def test_checkin_expired_session(client, course, student, auth_headers):
    session = create_session(course, started_minutes_ago=30, duration_minutes=10)
    response, data = post_checkin(client, auth_headers(student), checkin_body(session.id))

    assert response.status_code == 400
    assert data['code'] == 'session_expired'

    db.session.expire_all()
    assert db.session.get(ClassSession, session.id).is_active is False

def test_checkin_inactive_session(client, course, student, auth_headers):
    session = create_session(course, is_active=False)
    response, data = post_checkin(client, auth_headers(student), checkin_body(session.id))

    assert response.status_code == 400
    assert data['code'] == 'session_inactive'

def test_checkin_invalid_request(client, live_session, student, auth_headers):
    headers = auth_headers(student)

    response, data = post_checkin(client, headers, {})
    assert response.status_code == 400
    assert data['code'] == 'invalid_request'

    body = checkin_body('not-a-uuid')
    response, data = post_checkin(client, headers, body)
    assert response.status_code == 400
    assert data['code'] == 'invalid_request'

    body = checkin_body(live_session.id, latitude=91)
    response, data = post_checkin(client, headers, body)
    assert response.status_code == 400

    body = checkin_body(live_session.id)
    body['clientTimestamp'] = 'yesterday'
    response, data = post_checkin(client, headers, body)
    assert response.status_code == 400
    assert data['code'] == 'invalid_request'

    body = checkin_body(live_session.id)
    body['latitude'] = '36.6372'
    response, data = post_checkin(client, headers, body)
    assert response.status_code == 400

    # offsets pushing the instant past the representable range
    for timestamp in ('0001-01-01T00:00:00+01:00', '9999-12-31T23:59:59-01:00'):
        body = checkin_body(live_session.id)
        body['clientTimestamp'] = timestamp
        response, data = post_checkin(client, headers, body)
        assert response.status_code == 400
        assert data['code'] == 'invalid_request'

    body = checkin_body(live_session.id, accuracy=10 ** 400)
    response, data = post_checkin(client, headers, body)
    assert response.status_code == 400
    assert data['code'] == 'invalid_request'
    assert 'accuracy must be a number' in data['message']

    assert AttendanceRecord.query.count() == 0

def test_checkin_requires_student(client, live_session, professor, auth_headers):
    response, data = post_checkin(client, auth_headers(professor), checkin_body(live_session.id))
    assert response.status_code == 403
    assert data['code'] == 'forbidden'

    response = client.post('/api/attendance/checkin', json=checkin_body(live_session.id))
    assert response.status_code == 401

def test_checkin_demo_session(client, professor, student, other_student, auth_headers):
    response = client.post('/api/sessions/demo',
        json={
            'course_name': 'Orientation',
            'latitude': CENTER_LAT,
            'longitude': CENTER_LNG,
            'duration_minutes': 15
        },
        headers=auth_headers(professor))
    assert response.status_code == 201
    demo = json.loads(response.data)['data']
    assert demo['ephemeral'] == True

    response, data = post_checkin(client, auth_headers(student), checkin_body(demo['id']))
    assert response.status_code == 200
    assert data['status'] == 'present'

    response, data = post_checkin(client, auth_headers(student), checkin_body(demo['id']))
    assert response.status_code == 409
    assert data['code'] == 'already_present'

    response, data = post_checkin(client, auth_headers(other_student), checkin_body(demo['id']))
    assert response.status_code == 200

    assert AttendanceRecord.query.count() == 0

def test_my_records(client, live_session, student, auth_headers):
    post_checkin(client, auth_headers(student), checkin_body(live_session.id))

    response = client.get('/api/attendance/my-records', headers=auth_headers(student))
    assert response.status_code == 200
    data = json.loads(response.data)['data']

    assert len(data['records']) == 1
    assert data['records'][0]['course_code'] == 'CS301'
    assert data['records'][0]['status'] == 'present'
    assert data['statistics']['attendance_rate'] == 100
    assert data['statistics']['late_rate'] == 0
