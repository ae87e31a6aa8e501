import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from todolist.config import settings
from todolist.database import Base, get_db
from todolist.main import app
from todolist.models.lookup import Department, Role, TaskStatus
from todolist.models.task import Task
from todolist.models.user import User
from todolist.services.attachment_store import AttachmentStore
from todolist.services.auth_service import get_password_hash

TEST_DB_URL = "sqlite:///./test_todolist.db"
PASSWORD = "Secret!123"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Hashing is the slow part of seeding; every seeded user shares one hash.
PASSWORD_HASH = get_password_hash(PASSWORD)


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
def storage_dirs(tmp_path, monkeypatch):
    attachment_root = tmp_path / "attachments"
    staging = tmp_path / "staging"
    monkeypatch.setattr(settings, "ATTACHMENT_ROOT", str(attachment_root))
    monkeypatch.setattr(settings, "TEMP_UPLOAD_DIR", str(staging))
    return {"attachment_root": attachment_root, "staging": staging}


@pytest.fixture
def store():
    return AttachmentStore()


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
def seed_lookups(db):
    lookups = {
        "admin_role": Role(name="Admin"),
        "user_role": Role(name="User"),
        "it": Department(name="IT"),
        "hr": Department(name="HR"),
        "open": TaskStatus(name="Open"),
        "done": TaskStatus(name="Completed"),
    }
    db.add_all(lookups.values())
    db.commit()
    for item in lookups.values():
        db.refresh(item)
    return lookups


@pytest.fixture
def seed_users(db, seed_lookups):
    admin_role = seed_lookups["admin_role"].role_id
    user_role = seed_lookups["user_role"].role_id
    it = seed_lookups["it"].department_id
    hr = seed_lookups["hr"].department_id
    users = {
        "admin": User(username="admin", first_name="Ada", last_name="Admin", department_id=it, role_id=admin_role),
        "it_user": User(username="ivan", first_name="Ivan", last_name="Tech", department_id=it, role_id=user_role),
        "hr_user": User(username="hanna", department_id=hr, role_id=user_role),
        "newcomer": User(username="newbie", department_id=hr, role_id=user_role, must_change_password=True),
    }
    for u in users.values():
        u.hashed_password = PASSWORD_HASH
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_task(db, seed_lookups):
    task = Task(
        subject="Quarterly report",
        action="Collect figures",
        due_date=date(2026, 3, 31),
        department_id=seed_lookups["it"].department_id,
        task_status_id=seed_lookups["open"].task_status_id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def get_token(client, username: str, password: str = PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    # Keep requests header-driven; cookie sessions are tested explicitly.
    client.cookies.clear()
    return resp.json()["access_token"]


def auth_headers(client, username: str, password: str = PASSWORD) -> dict:
    return {"Authorization": f"Bearer {get_token(client, username, password)}"}


def stage_pdf(store: AttachmentStore, name: str = "report.pdf", content: bytes = PDF_BYTES):
    return store.stage_upload(content, "application/pdf", name)


def upload_pdf(client, headers: dict, name: str = "report.pdf", content: bytes = PDF_BYTES) -> dict:
    resp = client.post(
        "/api/files/upload-temp",
        headers=headers,
        files={"file": (name, content, "application/pdf")},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()
