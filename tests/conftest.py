import pytest

from app import create_app
from config import Config
from models import Candidate, Department, Institution, db


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    TIMEZONE = "UTC"
    SECRET_KEY = "test-secret"


def make_descriptor(index, value=1.0):
    """128-float descriptor that is zero except at ``index``."""
    vec = [0.0] * 128
    vec[index] = value
    return vec


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _candidate(department, name, index):
    return Candidate(
        department_id=department.id,
        name=name,
        enrollment_id=f"ENR-{name.upper()}",
        candidate_username=name.lower(),
        candidate_password_hash="not-a-real-hash",
        descriptor=make_descriptor(index),
    )


@pytest.fixture
def tenants(app):
    """Two institutions: A with departments A1 and A2, B with department B1."""
    inst_a = Institution(name="Institute A", auth_username="auth-a", auth_password_hash="h")
    inst_b = Institution(name="Institute B", auth_username="auth-b", auth_password_hash="h")
    db.session.add_all([inst_a, inst_b])
    db.session.flush()

    a1 = Department(institution_id=inst_a.id, name="A1", manager_username="mgr-a1", manager_password_hash="h")
    a2 = Department(institution_id=inst_a.id, name="A2", manager_username="mgr-a2", manager_password_hash="h")
    b1 = Department(institution_id=inst_b.id, name="B1", manager_username="mgr-b1", manager_password_hash="h")
    db.session.add_all([a1, a2, b1])
    db.session.flush()

    people = {
        "xavier": _candidate(a1, "Xavier", 0),
        "yara": _candidate(a1, "Yara", 1),
        "zane": _candidate(a2, "Zane", 2),
        "wendy": _candidate(b1, "Wendy", 3),
    }
    db.session.add_all(people.values())
    db.session.commit()

    return {
        "institutions": {"A": inst_a, "B": inst_b},
        "departments": {"A1": a1, "A2": a2, "B1": b1},
        "candidates": people,
    }
