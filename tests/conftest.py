# tests/conftest.py
import io
import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["SEED_ADMIN"] = "false"
os.environ["OBJECT_STORAGE_BUCKET"] = "test-bucket"

import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from itsm_portal.backend.app import models  # noqa: F401
from itsm_portal.backend.app.auth import Identity, create_access_token
from itsm_portal.backend.app.db import Base, build_engine, get_db
from itsm_portal.backend.app.main import app
from itsm_portal.backend.app.services import users as user_service
from itsm_portal.backend.app.services.object_storage import (
    ObjectStorageService,
    get_object_storage,
)


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client calls the gateway makes."""

    def __init__(self):
        self.objects = {}

    def put(self, key, data, content_type="application/octet-stream"):
        self.objects[key] = (data, content_type)

    def _missing(self, operation):
        return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, operation)

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600, HttpMethod=None):
        return (
            f"https://storage.test/{Params['Bucket']}/{Params['Key']}"
            f"?X-Amz-Expires={ExpiresIn}&method={ClientMethod}"
        )

    def head_object(self, Bucket, Key):
        if Key not in self.objects:
            raise self._missing("HeadObject")
        data, content_type = self.objects[Key]
        return {"ContentLength": len(data), "ContentType": content_type}

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        data, content_type = self.objects[Key]
        return {
            "Body": StreamingBody(io.BytesIO(data), len(data)),
            "ContentLength": len(data),
            "ContentType": content_type,
        }

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        return {}


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def storage(s3_client):
    return ObjectStorageService(bucket="test-bucket", prefix="uploads", client=s3_client)


@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db_session):
    return user_service.create_user(
        db_session,
        username="admin",
        employee_id="ADMIN001",
        is_admin=True,
        password="AdminPass123!",
    )


@pytest.fixture
def alice(db_session):
    return user_service.create_user(db_session, username="alice", employee_id="EMP001")


@pytest.fixture
def bob(db_session):
    return user_service.create_user(db_session, username="bob", employee_id="EMP002")


def auth_headers(user):
    token = create_access_token(
        Identity(user_id=user.id, username=user.username, is_admin=bool(user.is_admin))
    )
    return {"Authorization": f"Bearer {token}"}
