import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db, enable_sqlite_foreign_keys
from main import app


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user and return the response object (includes ``token``)."""

    def _register(username, role="job_seeker", email=None, password="secret123", **extra):
        body = {
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
            "role": role,
            **extra,
        }
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()["object"]

    return _register


def auth(user_or_token):
    token = user_or_token["token"] if isinstance(user_or_token, dict) else user_or_token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def recruiter(register):
    return register("rita", role="recruiter", company_details={"company_name": "Acme"})


@pytest.fixture
def seeker(register):
    return register("sam", profile={"name": "Sam Seeker", "resume_url": "http://x/r.pdf"})


@pytest.fixture
def post_job(client):
    def _post_job(owner, **overrides):
        body = {
            "title": "Backend Engineer",
            "description": "Build and run the APIs",
            "company_name": "Acme",
            "location": "Remote",
            **overrides,
        }
        resp = client.post("/api/jobs", json=body, headers=auth(owner))
        assert resp.status_code == 201, resp.text
        return resp.json()["object"]

    return _post_job
