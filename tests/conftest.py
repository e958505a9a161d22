import os
import shutil
import tempfile
from pathlib import Path

# cấu hình test phải có trước khi import sitecms
# /uploads được mount lúc import app -> thư mục upload phải cố định từ đầu
os.environ["UPLOAD_ROOT"] = tempfile.mkdtemp(prefix="sitecms-uploads-")
os.environ["DB_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from sitecms.core.config import settings
from sitecms.core.security import hash_password
from sitecms.db import session as db_session
from sitecms.db.base import Base
from sitecms.main import app
from sitecms.models import User

PASSWORD = "secret123"


@pytest.fixture
def test_engine():
    """SQLite in-memory, 1 connection dùng chung cho mọi thread của TestClient."""
    import sitecms.models  # noqa: F401

    engine = db_session.build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    original = db_session.engine
    db_session.bind_engine(engine)
    yield engine
    db_session.bind_engine(original)
    engine.dispose()


@pytest.fixture
def db(test_engine):
    with Session(bind=test_engine) as s:
        yield s


@pytest.fixture(autouse=True)
def upload_root():
    """Thư mục upload dùng chung, dọn sạch sau mỗi test."""
    root = Path(settings.UPLOAD_ROOT)
    root.mkdir(parents=True, exist_ok=True)
    yield root
    shutil.rmtree(root, ignore_errors=True)


# ---------- factories ----------
@pytest.fixture
def make_user(test_engine):
    def _make(username, role="editor", password=PASSWORD, is_active=True, password_hash=None):
        with Session(bind=test_engine) as s:
            u = User(
                username=username,
                email=f"{username}@blessed.ac.ug",
                full_name=username.title(),
                role=role,
                is_active=is_active,
                password_hash=password_hash or hash_password(password),
            )
            s.add(u)
            s.commit()
            s.refresh(u)
            return u.id
    return _make


def login(client, username, password=PASSWORD):
    resp = client.post("/auth?action=login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


# ---------- clients ----------
@pytest.fixture
def client(test_engine):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(test_engine, make_user):
    make_user("admin", role="admin")
    with TestClient(app) as c:
        login(c, "admin")
        yield c


@pytest.fixture
def editor_client(test_engine, make_user):
    make_user("editor", role="editor")
    with TestClient(app) as c:
        login(c, "editor")
        yield c


def rows(engine, model, *where):
    with Session(bind=engine) as s:
        stmt = select(model)
        if where:
            stmt = stmt.where(*where)
        return list(s.execute(stmt).scalars().all())
