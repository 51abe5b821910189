import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from quiz_api.core.database import SessionLocal, engine
from quiz_api.core.security import hash_password
from quiz_api.main import app
from quiz_api.models.orm import Base, Question, QuestionLevel, QuestionType, Subject, User

@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def make_user(db):
    def _make(email="ana@quiz.dev", password="right", name="Ana"):
        user = User(name=name, email=email, hash_password=hash_password(password))
        db.add(user); db.commit()
        return user
    return _make

@pytest.fixture
def question(db):
    subject = Subject(name="Algorithms")
    db.add(subject); db.flush()
    q = Question(subject_id=subject.id, statement="Which sort is stable?", type=QuestionType.MULTIPLE_CHOICE, level=QuestionLevel.EASY)
    db.add(q); db.commit()
    return q

def _register_and_login(client, email="ana@quiz.dev", password="right", name="Ana"):
    r = client.post("/v1/users", json={"name": name, "email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post("/v1/sessions", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    # keep requests explicit about which token they carry
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['session_id']}"}

@pytest.fixture
def auth(client):
    return _register_and_login(client)

@pytest.fixture
def login():
    return _register_and_login
