import os

# Settings are read at import time; keep tests off real services and files
os.environ["DATABASE_URL"] = "sqlite://"
for _name in ("RESEND_API_KEY", "SENDER_EMAIL", "STRIPE_SECRET_KEY", "STRIPE_PRICE_ID", "STRIPE_WEBHOOK_SECRET"):
    os.environ[_name] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
from app.dependencies.services import get_payments, get_results_mailer, get_search_client
from app.main import app
from app.models import Account  # noqa: F401
from app.services.credential_store import AccountStore
from tests.fakes import FakeMailer, FakePayments, FakeSearchClient, sample_projects


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(db_session):
    return AccountStore(db_session)


@pytest.fixture
def search_client():
    return FakeSearchClient(projects=sample_projects(2))


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def payments():
    return FakePayments()


@pytest.fixture
def client(session_factory, search_client, mailer, payments):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_search_client] = lambda: search_client
    app.dependency_overrides[get_results_mailer] = lambda: mailer
    app.dependency_overrides[get_payments] = lambda: payments
    yield TestClient(app)
    app.dependency_overrides.clear()
