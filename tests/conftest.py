import os
import tempfile
from types import SimpleNamespace

_tmpdir = tempfile.mkdtemp(prefix="health-heatmap-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ["OPENAI_API_KEY"] = "sk-test"
os.environ.pop("SENTRY_DSN", None)

import pytest
from fastapi.testclient import TestClient

import llm
import storage
from database import SessionLocal
from main import app
from models import Base


class FakeCompletions:
    def __init__(self):
        self.reply = '{"items": []}'
        self.error = None
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeS3:
    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_deletes = False

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?op={operation}&expires={ExpiresIn}"

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = (Body, ContentType)

    def get_object(self, Bucket, Key):
        from botocore.exceptions import ClientError
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        body = self.objects[Key][0]
        return {"Body": SimpleNamespace(read=lambda: body)}

    def delete_object(self, Bucket, Key):
        from botocore.exceptions import ClientError
        if self.fail_deletes:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "nope"}}, "DeleteObject")
        self.deleted.append(Key)
        self.objects.pop(Key, None)


@pytest.fixture(autouse=True)
def fake_openai(monkeypatch):
    completions = FakeCompletions()
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(llm, "get_client", lambda: client)
    return completions


@pytest.fixture(autouse=True)
def fake_s3(monkeypatch):
    s3 = FakeS3()
    monkeypatch.setattr(storage, "get_s3", lambda: s3)
    return s3


@pytest.fixture(autouse=True)
def clean_db():
    yield
    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def register(client, email="alice@example.com", password="correct-horse", display_name="Alice"):
    r = client.post("/api/auth/register", json={"email": email, "password": password, "display_name": display_name})
    assert r.status_code == 200, r.text
    return r.json()["user"]


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user_client(client):
    client.user = register(client)
    return client


@pytest.fixture
def other_client():
    with TestClient(app) as c:
        c.user = register(c, email="bob@example.com", display_name="Bob")
        yield c
