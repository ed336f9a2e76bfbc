"""Test authentication endpoints."""
import json
import pytest
from campus_checkin.models.user import UserRole
from conftest import create_user

@pytest.fixture
def sample_user(app):
    """Create sample user for testing."""
    return create_user('test@example.com', UserRole.STUDENT)

def test_health_check(client):
    """Test auth health endpoint."""
    response = client.get('/api/auth/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['message'] == 'Auth service is running'

def test_app_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'healthy'

def test_signup_success(client):
    """Test successful user registration."""
    response = client.post('/api/auth/signup',
        json={
            'email': 'newuser@example.com',
            'password': 'password123',
            'name': 'New User',
            'student_number': '20249999'
        })

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['success'] == True
    assert data['data']['email'] == 'newuser@example.com'
    assert data['data']['role'] == 'student'
    assert 'password_hash' not in data['data']

def test_signup_professor(client):
    response = client.post('/api/auth/signup',
        json={
            'email': 'prof@example.com',
            'password': 'password123',
            'name': 'New Professor',
            'role': 'professor'
        })

    assert response.status_code == 201
    assert json.loads(response.data)['data']['role'] == 'professor'

def test_signup_validation(client, sample_user):
    """Test registration validation."""
    # Missing fields
    response = client.post('/api/auth/signup', json={})
    assert response.status_code == 400
    assert json.loads(response.data)['code'] == 'invalid_request'

    # Invalid email
    response = client.post('/api/auth/signup',
        json={
            'email': 'invalid-email',
            'password': 'password123',
            'name': 'Test User'
        })
    assert response.status_code == 400

    # Admin accounts cannot be self-registered
    response = client.post('/api/auth/signup',
        json={
            'email': 'admin@example.com',
            'password': 'password123',
            'name': 'Admin',
            'role': 'admin'
        })
    assert response.status_code == 400

    # Duplicate email
    response = client.post('/api/auth/signup',
        json={
            'email': 'test@example.com',
            'password': 'password123',
            'name': 'Test User'
        })
    assert response.status_code == 400

def test_login_success(client, sample_user):
    """Test successful login."""
    response = client.post('/api/auth/login',
        json={
            'email': 'test@example.com',
            'password': 'password123'
        })

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['success'] == True
    assert 'access_token' in data['data']
    assert 'refresh_token' in data['data']
    assert data['data']['user']['email'] == 'test@example.com'

def test_login_invalid_credentials(client, sample_user):
    """Test login with invalid credentials."""
    response = client.post('/api/auth/login',
        json={
            'email': 'test@example.com',
            'password': 'wrongpassword'
        })

    assert response.status_code == 401
    assert json.loads(response.data)['code'] == 'unauthorized'

def test_get_current_user(client, sample_user):
    """Test get current user profile."""
    login_response = client.post('/api/auth/login',
        json={
            'email': 'test@example.com',
            'password': 'password123'
        })

    token = json.loads(login_response.data)['data']['access_token']

    response = client.get('/api/auth/me',
        headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['success'] == True
    assert data['data']['email'] == 'test@example.com'

def test_refresh_token(client, sample_user):
    login_response = client.post('/api/auth/login',
        json={
            'email': 'test@example.com',
            'password': 'password123'
        })
    refresh = json.loads(login_response.data)['data']['refresh_token']

    response = client.post('/api/auth/refresh',
        headers={'Authorization': f'Bearer {refresh}'})

    assert response.status_code == 200
    assert 'access_token' in json.loads(response.data)['data']

def test_missing_token(client):
    response = client.get('/api/auth/me')
    assert response.status_code == 401
    data = json.loads(response.data)
    assert data['success'] == False
    assert data['code'] == 'unauthorized'

def test_invalid_token(client):
    response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-token'})
    assert response.status_code == 401
