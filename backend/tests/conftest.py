import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models.user import User
from app.services.auth_service import hash_password
from app.services.token_service import TokenService, get_token_service

TEST_DB_URL = "sqlite:///./test_tic.db"
TEST_SECRET = "test-current-secret"
TEST_LEGACY_SECRET = "test-legacy-secret"
DEFAULT_PASSWORD = "secret1"

# bcrypt 최소 cost로 테스트 속도 확보
settings.BCRYPT_ROUNDS = 4

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


def override_get_token_service():
    return TokenService([TEST_SECRET, TEST_LEGACY_SECRET])


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_token_service] = override_get_token_service


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def token_service():
    return override_get_token_service()


@pytest.fixture
def seed_users(db):
    users = {
        "alice": User(username="alice", email="a@x.com", full_name="Alice Benali", password=hash_password(DEFAULT_PASSWORD)),
        "bob": User(username="bob", email="b@x.com", full_name="Bob Martin", password=hash_password(DEFAULT_PASSWORD)),
        "carol": User(username="carol", email="c@x.com", password=hash_password(DEFAULT_PASSWORD)),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


def get_token(client, login_id: str, password: str = DEFAULT_PASSWORD) -> str:
    resp = client.post("/auth/login", json={"email": login_id, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def auth_headers(client, login_id: str, password: str = DEFAULT_PASSWORD) -> dict:
    return {"Authorization": f"Bearer {get_token(client, login_id, password)}"}


def create_project(client, headers: dict, **overrides) -> dict:
    payload = {
        "title": "My App",
        "description": "A longer description text",
        "drive_link": "https://drive.example/doc",
    }
    payload.update(overrides)
    resp = client.post("/projects", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["project"]
