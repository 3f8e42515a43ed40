from datetime import timedelta

import pytest

from app.domain.code_vault import CodeVault
from app.infrastructure.code_store.memory import InMemoryCodeStore
from tests.fakes import FakeClock, FakeSessions, FakeUoW


@pytest.fixture()
def uow():
    return FakeUoW()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store():
    return InMemoryCodeStore()


@pytest.fixture()
def vault(store, clock):
    return CodeVault(store, ttl=timedelta(minutes=10), lock_stripes=8, clock=clock)


@pytest.fixture()
def sessions():
    return FakeSessions()


@pytest.fixture()
def hash_password_stub():
    return lambda p: "hashed-" + p


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the generated code deterministic in all tests.
    Override in a specific test by re-monkeypatching.
    """
    from app.domain import services as domain_services

    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda length=6: "482913"
    )
    yield
