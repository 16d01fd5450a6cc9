# tests/test_auth_service.py
import uuid

import pytest
from sqlmodel import Session

from storefront.core.errors import (
    Conflict,
    Forbidden,
    NotFound,
    Unauthenticated,
    Unauthorized,
)
from storefront.database import create_db_and_tables
from storefront.models import product as _product_models  # noqa: F401
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import LoginRequest, RegisterRequest
from storefront.services.auth_service import AuthService

EMAIL = "jane@storefront.io"
PASSWORD = "password1"


@pytest.fixture
def db(engine):
    create_db_and_tables(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def service(session_cache, settings):
    return AuthService(UserRepository(), session_cache, settings)


@pytest.fixture
def user(service, db):
    return service.register(
        db, RegisterRequest(email=EMAIL, username="janedoe", password=PASSWORD)
    )


def credentials(password=PASSWORD):
    return LoginRequest(email=EMAIL, password=password)


def test_register_defaults(user):
    assert user.access_level == 1
    assert user.cart == []
    assert user.password_hash != PASSWORD


def test_register_conflicts(service, db, user):
    with pytest.raises(Conflict):
        service.register(
            db, RegisterRequest(email=EMAIL, username="someoneelse", password=PASSWORD)
        )
    with pytest.raises(Conflict):
        service.register(
            db, RegisterRequest(email="x@storefront.io", username="janedoe", password=PASSWORD)
        )
    assert UserRepository().count(db) == 1


def test_login_unknown_user(service, db):
    with pytest.raises(NotFound):
        service.login(db, credentials())


def test_login_wrong_password(service, db, user, redis_client):
    with pytest.raises(Unauthorized):
        service.login(db, credentials("not-the-password"))
    assert not service.exists(user.id)


def test_login_resolve_logout_lifecycle(service, db, user):
    token, snapshot = service.login(db, credentials())

    assert snapshot.id == user.id
    assert service.resolve(token).id == user.id
    assert service.exists(token)
    assert service.exists(user.id)

    service.logout(token, user.id)

    assert not service.exists(token)
    assert not service.exists(user.id)
    with pytest.raises(Unauthorized):
        service.resolve(token)

    # second logout is a no-op
    service.logout(token, user.id)


def test_repeated_login_reuses_session(service, db, user, redis_client):
    first, _ = service.login(db, credentials())
    second, _ = service.login(db, credentials())

    assert first == second
    assert len(redis_client.keys("session:token:*")) == 1


def test_reused_login_refreshes_snapshot(service, db, user):
    token, _ = service.login(db, credentials())

    user.access_level = 2
    UserRepository().update(db, user)
    service.login(db, credentials())

    assert service.resolve(token).access_level == 2


def test_login_mints_new_token_when_token_entry_is_gone(service, db, user, redis_client):
    first, _ = service.login(db, credentials())
    redis_client.delete(f"session:token:{first}")

    second, _ = service.login(db, credentials())

    assert second != first
    assert service.resolve(second).id == user.id


def test_resolve_without_token(service):
    with pytest.raises(Unauthenticated):
        service.resolve(None)
    with pytest.raises(Unauthenticated):
        service.resolve("")


def test_resolve_rejects_forged_token(service):
    with pytest.raises(Unauthorized):
        service.resolve("not-a-token")


def test_requires_admin(user):
    with pytest.raises(Forbidden):
        AuthService.requires_admin(user)

    user.access_level = 2
    AuthService.requires_admin(user)


def test_can_manage(user):
    assert AuthService.can_manage(user, user.id)
    assert not AuthService.can_manage(user, uuid.uuid4())

    user.access_level = 3
    assert AuthService.can_manage(user, uuid.uuid4())
