from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from bovann import create_app
from bovann.config import TestConfig
from bovann.extensions import db
from bovann.models import User, Role, Student, StudyLevelEnum, DomainEnum, InfoChannelEnum


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        AUDIT_LOG_FILE = str(tmp_path / "audit.log")

    flask_app = create_app(_Config)
    ctx = flask_app.app_context()
    ctx.push()
    yield flask_app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(role, email=None, password="password123"):
        counter["n"] += 1
        user = User(
            email=email or f"{role.lower()}{counter['n']}@bovann.test",
            role=Role.query.filter_by(name=role).first(),
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role.name})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def accountant(make_user):
    return make_user("ACCOUNTANT")


@pytest.fixture
def guard(make_user):
    return make_user("GUARD")


@pytest.fixture
def admin(make_user):
    return make_user("ADMIN")


@pytest.fixture
def make_student(app):
    counter = {"n": 0}

    def _make_student(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            last_name="Mbarga",
            first_name=f"Aline{n}",
            institution="SHEKINA",
            study_level=StudyLevelEnum.LICENCE,
            profession="Etudiant",
            phone=f"+23760000{n:04d}",
            email=f"aline{n}@example.com",
            domain=DomainEnum.GENIE_INFORMATIQUE,
            info_channel=InfoChannelEnum.FACEBOOK,
        )
        fields.update(overrides)
        student = Student(**fields)
        db.session.add(student)
        db.session.commit()
        return student

    return _make_student


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def pay(client, accountant, auth_headers):
    """POST /payments for a student and return the response."""
    def _pay(student_id, amount=5000, valid_from=None, valid_until=None, **extra):
        today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        body = {
            "studentId": student_id,
            "amount": amount,
            "validFrom": (valid_from or today).isoformat(),
            "validUntil": (valid_until or today + timedelta(days=365)).isoformat(),
        }
        body.update(extra)
        return client.post("/payments", json=body, headers=auth_headers(accountant))

    return _pay
