from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.domain.code_vault import CodeVault
from app.domain.entities import User
from app.infrastructure.code_store.memory import InMemoryCodeStore
from app.main import create_app
from app.presentation.dependencies import (
    get_code_ttl_minutes,
    get_code_vault,
    get_hash_password,
    get_needs_rehash,
    get_sessions,
    get_uow,
    get_verify_password,
)
from tests.fakes import FakeClock, FakeSessions, FakeUoW


@pytest.fixture()
def app_and_deps():
    app = create_app()
    uow = FakeUoW()
    clock = FakeClock()
    vault = CodeVault(InMemoryCodeStore(), ttl=timedelta(minutes=10), clock=clock)
    sessions = FakeSessions()

    app.dependency_overrides[get_uow] = lambda: uow
    app.dependency_overrides[get_code_vault] = lambda: vault
    app.dependency_overrides[get_sessions] = lambda: sessions
    app.dependency_overrides[get_hash_password] = lambda: (
        lambda plain: "hashed-" + plain
    )
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed == "hashed-" + plain
    )
    app.dependency_overrides[get_needs_rehash] = lambda: (lambda _hash: False)
    app.dependency_overrides[get_code_ttl_minutes] = lambda: 10

    try:
        yield app, uow, vault, clock, sessions
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app = app_and_deps[0]
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def alice(app_and_deps) -> User:
    uow = app_and_deps[1]
    return uow.db_users.seed(
        User(id="u1", email="alice@example.com", full_name="Alice"), "hashed-s3cret"
    )


@pytest.fixture()
def auth_headers(app_and_deps) -> dict[str, str]:
    sessions = app_and_deps[4]
    token = sessions.seed("tok-rider", "00000000-0000-0000-0000-0000000000a1")
    return {"Authorization": f"Bearer {token}"}
