"""
ConcernDesk - test configuration and fixtures
"""
import base64
import os
from datetime import timedelta
from typing import Callable, Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are read once; these must be set before the app is imported.
os.environ["CONCERNDESK_DATABASE_URL"] = "sqlite://"
os.environ["CONCERNDESK_SCHEDULER_ENABLED"] = "false"
os.environ["CONCERNDESK_BCRYPT_ROUNDS"] = "4"
os.environ["CONCERNDESK_UNLIMITED_TIER_EMAILS"] = '["demo@concerndesk.test"]'

from concerndesk.core.database import Base, build_engine, get_db  # noqa: E402
from concerndesk.main import app  # noqa: E402
from concerndesk.models import TeacherAccount  # noqa: E402
from concerndesk.utils.datetime import utcnow  # noqa: E402

fake = Faker()

UNLIMITED_EMAIL = "demo@concerndesk.test"


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client sharing the test session with the app."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_teacher(db_session: Session) -> Callable[..., TeacherAccount]:
    """Factory for persisted teacher accounts with an active subscription."""

    def _make(**overrides) -> TeacherAccount:
        now = utcnow()
        values = {
            "email": fake.unique.email().lower(),
            "name": fake.name(),
            "teacher_type": "classroom",
            "support_requests_used_this_month": 0,
            "support_requests_limit": 20,
            "additional_packages": 0,
            "subscription_start_date": now - timedelta(days=30),
            "subscription_end_date": now + timedelta(days=30),
            "usage_reset_at": now,
        }
        values.update(overrides)
        teacher = TeacherAccount(**values)
        db_session.add(teacher)
        db_session.commit()
        db_session.refresh(teacher)
        return teacher

    return _make


def teacher_headers(email: str) -> dict:
    return {"X-Auth-Email": email, "X-Auth-Admin": "false"}


def admin_headers(email: str = "principal@example.edu") -> dict:
    return {"X-Auth-Email": email, "X-Auth-Admin": "true"}


def encode_csv(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
