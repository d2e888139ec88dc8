import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from main import create_app
from services.alert_service import AlertService
from services.alert_store import AlertStore

ALLOWED_ORIGIN = "http://localhost:5173"


def make_store(create_schema: bool = True) -> AlertStore:
    """In-memory SQLite store, one shared connection for all sessions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = AlertStore(engine)
    if create_schema:
        store.create_schema()
    return store


@pytest.fixture
def store():
    s = make_store()
    yield s
    s.close()


@pytest.fixture
def service(store):
    return AlertService(store)


@pytest.fixture
def client(store):
    app = create_app(store=store, allowed_origins=[ALLOWED_ORIGIN])
    with TestClient(app) as c:
        yield c
