import dataclasses
import os
import tempfile

import pytest

_workdir = tempfile.mkdtemp(prefix="contacts-api-tests-")
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["PUBLIC_DIR"] = os.path.join(_workdir, "public")
os.environ["TMP_DIR"] = os.path.join(_workdir, "tmp")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_workdir, "unused.sqlite")
for _name in ("SMTP_HOST", "CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
    os.environ.pop(_name, None)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from contacts_api.avatars import LocalAvatarStorage, get_avatar_storage  # noqa: E402
from contacts_api.config import get_settings  # noqa: E402
from contacts_api.db import Base, get_db  # noqa: E402
from contacts_api.mail import get_mailer  # noqa: E402
from contacts_api.main import app  # noqa: E402
from tests.helpers import login, signup  # noqa: E402


class FakeMailer:
    """Records messages instead of talking to SMTP."""

    def __init__(self):
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session = SessionLocal()
    yield db_session
    db_session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def avatar_storage(tmp_path):
    settings = dataclasses.replace(
        get_settings(),
        public_dir=str(tmp_path / "public"),
        tmp_dir=str(tmp_path / "tmp"),
    )
    return LocalAvatarStorage(settings)


@pytest.fixture
def client(db, mailer, avatar_storage):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_avatar_storage] = lambda: avatar_storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def token(client):
    assert signup(client).status_code == 201
    return login(client)
