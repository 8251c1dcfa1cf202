"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import os
import tempfile
from datetime import timedelta

import pytest

# Set test database path BEFORE importing app
# This ensures config defaults never point at a real database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'resourcehub_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH

STUDENT_EMAIL = 'aluno@universidade.edu'
STUDENT_PASSWORD = 'aluno123'
FACULTY_EMAIL = 'docente@universidade.edu'
FACULTY_PASSWORD = 'docente123'
ADMIN_EMAIL = 'admin@universidade.edu'
ADMIN_PASSWORD = 'admin123'


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database per test."""
    from app import create_app
    from database import init_db
    from models.user import create_user

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'resourcehub_test.db')

    with app.app_context():
        init_db()
        create_user(STUDENT_EMAIL, STUDENT_PASSWORD, 'Aluno Teste', role='student')
        create_user(FACULTY_EMAIL, FACULTY_PASSWORD, 'Professor Teste', role='faculty')

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def login(client, email, password):
    """Log a test client in through the JSON login endpoint."""
    response = client.post('/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def student_client(app):
    """Test client logged in as a student."""
    return login(app.test_client(), STUDENT_EMAIL, STUDENT_PASSWORD)


@pytest.fixture
def faculty_client(app):
    """Test client logged in as faculty."""
    return login(app.test_client(), FACULTY_EMAIL, FACULTY_PASSWORD)


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded admin."""
    return login(app.test_client(), ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def users(app):
    """IDs of the test users by role."""
    from models.user import get_user_by_email

    with app.app_context():
        return {
            'student': get_user_by_email(STUDENT_EMAIL)['id'],
            'faculty': get_user_by_email(FACULTY_EMAIL)['id'],
            'admin': get_user_by_email(ADMIN_EMAIL)['id'],
        }


@pytest.fixture
def make_resource(app):
    """Factory creating a resource and returning its ID."""
    from models.resource import create_resource

    def _make(name='Lab 101', quantity=1, category='rooms', status='available', **kwargs):
        with app.app_context():
            return create_resource(name=name, category=category, quantity=quantity,
                                   status=status, **kwargs)

    return _make


@pytest.fixture
def window():
    """
    Factory for reservation windows a few days ahead (within booking limits).

    window(day=2, start_hour=10, hours=2) -> (start_iso, end_iso)
    """
    from utils.datetime_helpers import utc_now, STORAGE_FORMAT

    base = utc_now().replace(hour=0, minute=0, second=0) + timedelta(days=1)

    def _window(day=2, start_hour=10, hours=2):
        start = base + timedelta(days=day, hours=start_hour)
        end = start + timedelta(hours=hours)
        return start.strftime(STORAGE_FORMAT), end.strftime(STORAGE_FORMAT)

    return _window
