import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from cms.database import Base, get_db
from cms.main import app
from cms.models.user import User
from cms.services import content_adapters, version_events, version_service

TEST_DB_URL = "sqlite:///./test_agency_cms.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_version_listeners():
    yield
    version_events._listeners.clear()


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
def seed_users(db):
    users = {
        "admin": User(email="admin@agency.test", name="Admin", role="admin"),
        "editor": User(email="editor@agency.test", name="Editor", role="editor"),
        "author": User(email="author@agency.test", name="Author", role="author"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def article(db, seed_users):
    """An insight with one saved version (title="Draft")."""
    adapter = content_adapters.ARTICLE
    entity = adapter.model()
    adapter.apply(entity, {"title": "Draft", "slug": "hello-world", "tags": ["x"], "content": {"body": "v1"}})
    version_service.create_initial_version(
        db,
        adapter=adapter,
        entity=entity,
        author_id=seed_users["editor"].user_id,
    )
    return entity


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
