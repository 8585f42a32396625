import pendulum
import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ofertas.api import deps
from ofertas.api.main import app
from ofertas.db.tables import categories, commerces, metadata, products, users
from ofertas.logic.models import Identity
from ofertas.logic.posts import PostService
from ofertas.storage import IMAGE_PREFIX, ImageStorage
from ofertas.utils.tokens import generate_session_token

ALICE = "alice"
BOB = "bob"
CATEGORY_ID = "6f1c2a0e-31e4-4a8e-9a51-0c3f5d1b7a10"
YERBA_ID = "0b7c7d3e-7f0a-4d7b-8f4e-2a6f3c9d1e21"
LECHE_ID = "1d2e3f40-5a6b-4c7d-8e9f-a0b1c2d3e4f5"
CENTRO_ID = "a1b2c3d4-e5f6-4a7b-8c9d-0e1f2a3b4c5d"
ESQUINA_ID = "f0e1d2c3-b4a5-4968-8776-5a4b3c2d1e0f"
BUCKET = "test-bucket"
PUBLIC_URL = "https://cdn.test"
UTC_MINUS_3 = pendulum.timezone(-3 * 3600)


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.confirm_copies = True
        self.failing_copies = False
        self.failing_deletes = 0

    def upload(self, key, body=b"jpeg-bytes"):
        self.objects[IMAGE_PREFIX + key] = body

    def head_object(self, Bucket, Key):
        self.calls.append(("head_object", Key))
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")
        return {"ContentLength": len(self.objects[Key])}

    def copy_object(self, CopySource, Bucket, Key):
        self.calls.append(("copy_object", Key))
        if self.failing_copies:
            raise ClientError({"Error": {"Code": "SlowDown", "Message": "Please reduce your request rate."}}, "CopyObject")
        if not self.confirm_copies:
            return {}
        source_key = CopySource.split("/", 1)[1]
        self.objects[Key] = self.objects[source_key]
        return {"CopyObjectResult": {"ETag": '"d41d8cd98f00b204e9800998ecf8427e"'}}

    def delete_object(self, Bucket, Key):
        self.calls.append(("delete_object", Key))
        if self.failing_deletes:
            self.failing_deletes -= 1
            raise ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "DeleteObject")
        self.objects.pop(Key, None)
        return {}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        self.calls.append(("generate_presigned_url", Params["Key"]))
        self.last_presign = {"method": ClientMethod, "params": Params, "expires": ExpiresIn}
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def call_names(self):
        return [name for name, _ in self.calls]


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def set(self, *args):
        self.now = pendulum.datetime(*args, tz=UTC_MINUS_3)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def seeded_engine(engine):
    with engine.begin() as conn:
        conn.execute(users.insert(), [
            {"id": ALICE, "name": "Alice", "email": "alice@example.com"},
            {"id": BOB, "name": "Bob", "email": "bob@example.com"},
        ])
        conn.execute(categories.insert(), [{"id": CATEGORY_ID, "name": "Almacén"}])
        conn.execute(products.insert(), [
            {"id": YERBA_ID, "name": "Yerba mate 1kg", "category_id": CATEGORY_ID},
            {"id": LECHE_ID, "name": "Leche entera 1L", "category_id": CATEGORY_ID},
        ])
        conn.execute(commerces.insert(), [
            {"id": CENTRO_ID, "name": "Supermercado Centro", "address": "Av. Rivadavia 1200"},
            {"id": ESQUINA_ID, "name": "Autoservicio La Esquina", "address": "Belgrano 455"},
        ])
    return engine


@pytest.fixture()
def s3():
    return FakeS3Client()


@pytest.fixture()
def images(s3):
    return ImageStorage(s3, BUCKET, PUBLIC_URL, cleanup_delay=0)


@pytest.fixture()
def clock():
    return FrozenClock(pendulum.datetime(2024, 5, 10, 12, 0, tz=UTC_MINUS_3))


@pytest.fixture()
def service(seeded_engine, images, clock):
    return PostService(seeded_engine, images, clock=clock)


@pytest.fixture()
def alice():
    return Identity(user_id=ALICE)


@pytest.fixture()
def bob():
    return Identity(user_id=BOB)


@pytest.fixture()
def client(seeded_engine, images, clock):
    app.dependency_overrides[deps.get_engine] = lambda: seeded_engine
    app.dependency_overrides[deps.get_image_storage] = lambda: images
    app.dependency_overrides[deps.get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id):
    return {"Authorization": f"Bearer {generate_session_token(user_id)}"}
