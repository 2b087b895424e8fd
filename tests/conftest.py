"""
Test configuration and fixtures.

Every test gets a fresh in-memory SQLite database: the client fixture runs
the real app lifespan, which builds and tears down the Database.
"""
import os
import tempfile
from typing import Callable, Dict, Any, Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['UPLOAD_DIR'] = tempfile.mkdtemp(prefix='school-portal-uploads-')
os.environ['LOG_LEVEL'] = 'WARNING'

from main import app
from security import create_access_token
from seed import seed_admin

fake = Faker()

ADMIN_EMAIL = 'admin@school.test'
ADMIN_PASSWORD = 'admin-pass-123'


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(client):
    """Session on the same database the running app uses"""
    session = app.state.database.session()
    yield session
    session.close()


@pytest.fixture
def admin(db_session):
    return seed_admin(db_session, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    token = create_access_token({'email': admin.email, 'role': admin.role})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def result_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for POST /results bodies"""
    def make(roll, marks, class_name='8', exam_type='final', year=2025, name=None):
        return {
            'roll': roll,
            'name': name or fake.name(),
            'class': class_name,
            'examType': exam_type,
            'year': year,
            'marks': marks,
        }
    return make


@pytest.fixture
def student_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for POST /students bodies"""
    def make(**overrides):
        data = {
            'name': fake.name(),
            'birthReg': fake.numerify('################'),
            'class': '6',
            'year': '2025',
            'roll': str(fake.random_int(1, 60)),
            'section': 'A',
            'gender': fake.random_element(['Male', 'Female']),
            'fatherName': fake.name_male(),
            'motherName': fake.name_female(),
        }
        data.update(overrides)
        return data
    return make
