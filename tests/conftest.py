# tests/conftest.py
import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from storefront.core.cache import SessionCache
from storefront.core.config import Settings
from storefront.database import create_db_engine
from storefront.main import create_app
from storefront.models.user import User

PASSWORD = "password1"


class InMemoryImageStore:
    """Stands in for the Supabase bucket; remembers what was stored."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self._n = 0

    def upload(self, filename, content_type, data):
        self._n += 1
        ext = filename.rsplit(".", 1)[-1] if filename and "." in filename else "bin"
        name = f"img-{self._n}.{ext}"
        self.objects[name] = data
        return name

    def get_url(self, name):
        return f"https://images.test/{name}"

    def delete(self, name):
        self.deleted.append(name)
        self.objects.pop(name, None)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        AUTH_SECRET="test-secret",
        AUTH_TOKEN_TTL=3600,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings.DATABASE_URL)
    yield engine
    engine.dispose()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def session_cache(redis_client, settings):
    return SessionCache(redis_client, settings.AUTH_TOKEN_TTL)


@pytest.fixture
def image_store():
    return InMemoryImageStore()


@pytest.fixture
def client(settings, engine, redis_client, image_store):
    app = create_app(
        settings,
        engine=engine,
        redis_client=redis_client,
        image_store=image_store,
    )
    with TestClient(app) as c:
        yield c


def register(client, email, username, password=PASSWORD):
    res = client.post(
        "/register",
        json={"email": email, "username": username, "password": password},
    )
    assert res.status_code == 201, res.json()
    return res.json()["id"]


def login(client, email, password=PASSWORD):
    res = client.post("/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.json()
    return res.headers["Authorization"]


def promote(engine, email, access_level=2):
    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == email)).one()
        user.access_level = access_level
        session.add(user)
        session.commit()


@pytest.fixture
def customer(client):
    """A registered, logged-in regular user: (user_id, auth headers)."""
    user_id = register(client, "customer@storefront.io", "customer1")
    token = login(client, "customer@storefront.io")
    return user_id, {"Authorization": token}


@pytest.fixture
def other_customer(client):
    user_id = register(client, "other@storefront.io", "othercustomer")
    token = login(client, "other@storefront.io")
    return user_id, {"Authorization": token}


@pytest.fixture
def admin(client, engine):
    """A registered administrator (access_level=2), logged in after promotion."""
    user_id = register(client, "admin@storefront.io", "adminuser")
    promote(engine, "admin@storefront.io")
    token = login(client, "admin@storefront.io")
    return user_id, {"Authorization": token}


@pytest.fixture
def make_product(client, admin):
    _, headers = admin

    def _make(name="Chocolate cake", price=12.5, stock=10, description="Rich and dark"):
        res = client.post(
            "/products",
            data={
                "name": name,
                "description": description,
                "price": str(price),
                "stock": str(stock),
            },
            headers=headers,
        )
        assert res.status_code == 201, res.json()
        return res.json()

    return _make
