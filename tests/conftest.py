import os
import tempfile
from datetime import datetime, timedelta, timezone

TEST_DB_FILE = "test_classroom.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before the app (and its settings) is imported
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="classroom-uploads-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.config import ROLE_HEADTEACHER, ROLE_STUDENT, ROLE_TEACHER, STATUS_ACTIVE  # noqa: E402
from app.core.deps import get_db, get_file_storage  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.init_db import seed_lookup_tables  # noqa: E402
from app.main import app  # noqa: E402
from app.models.class_session import Assessment, ClassSession, Presence  # noqa: E402
from app.models.course import Course  # noqa: E402
from app.models.file import File  # noqa: E402
from app.models.user import User, UserCourseRole  # noqa: E402
from app.services.files import FileStorage  # noqa: E402
from app.services.lookups import role_id, status_id  # noqa: E402

PASSWORD = "password123"
COURSE_PASSWORD = "enroll-me"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def seed_data():
    """Seed a clean minimal dataset for each test; returns the seeded ids."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()

        seed_lookup_tables(db)

        def user(username, first, last, superuser=False):
            u = User(
                username=username,
                first_name=first,
                last_name=last,
                email=f"{username}@example.com",
                hashed_password=hash_password(PASSWORD),
                superuser=superuser,
            )
            db.add(u)
            return u

        head = user("head", "Hanna", "Head")
        teacher = user("teacher", "Tom", "Teacher")
        alice = user("alice", "Alice", "Archer")
        bob = user("bob", "Bob", "Baker")
        carol = user("carol", "Carol", "Cook")
        outsider = user("outsider", "Olga", "Outside")
        admin = user("admin", "Ada", "Admin", superuser=True)
        db.flush()

        course = Course(
            title="Physics",
            description="Mechanics and waves",
            hashed_password=hash_password(COURSE_PASSWORD),
            status_id=status_id(db, STATUS_ACTIVE),
        )
        db.add(course)
        db.flush()

        for member, role in (
            (head, ROLE_HEADTEACHER),
            (teacher, ROLE_TEACHER),
            (alice, ROLE_STUDENT),
            (bob, ROLE_STUDENT),
            (carol, ROLE_STUDENT),
        ):
            db.add(UserCourseRole(user_id=member.id, course_id=course.id, role_id=role_id(db, role)))
        db.commit()

        yield {
            "course": course.id,
            "head": head.id,
            "teacher": teacher.id,
            "alice": alice.id,
            "bob": bob.id,
            "carol": carol.id,
            "outsider": outsider.id,
            "admin": admin.id,
        }
    finally:
        db.close()


@pytest.fixture()
def ids(seed_data):
    return seed_data


@pytest.fixture()
def storage(tmp_path):
    return FileStorage(tmp_path / "uploads")


@pytest.fixture()
def client(storage):
    """Test client that uses the test DB session and a per-test upload directory."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def class_session(ids):
    """A visible class session with the per-student rows a real creation would add."""
    db = TestingSessionLocal()
    try:
        start = datetime.now(timezone.utc)
        cs = ClassSession(
            course_id=ids["course"],
            topic="Pendulums",
            starting_date_time=start,
            ending_date_time=start + timedelta(hours=2),
            visible=True,
        )
        db.add(cs)
        db.flush()
        for student in ("alice", "bob", "carol"):
            db.add(Assessment(user_id=ids[student], class_session_id=cs.id))
            db.add(Presence(user_id=ids[student], class_session_id=cs.id, present=False))
        db.commit()
        return cs.id
    finally:
        db.close()


def make_file(storage: FileStorage, name: str = "notes.txt", body: bytes = b"hello") -> int:
    """Store ``body`` and create its file record directly; returns the file id."""
    stored_name = f"seed-{name}"
    (storage.root / stored_name).write_bytes(body)
    db = TestingSessionLocal()
    try:
        record = File(name=name, url=f"/uploads/{stored_name}", type="text/plain")
        db.add(record)
        db.commit()
        return record.id
    finally:
        db.close()


def login(client, username: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def headers_for(client, username: str) -> dict:
    return auth_header(login(client, username))
