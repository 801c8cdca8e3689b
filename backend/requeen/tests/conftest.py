import os
os.environ["TESTING"] = "1"
os.environ.setdefault("SECRET_KEY", "test-secret")
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import sys
from pathlib import Path

import uuid

sys.path.append(str(Path(__file__).resolve().parents[2]))

from requeen.main import app
from requeen import models
from requeen.auth import create_access_token
from requeen.database import Base, enable_sqlite_foreign_keys, get_db

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def seed_operator(email: str | None = None) -> tuple[dict[str, str], uuid.UUID]:
    """
    requeen: purpose: create an operator row and a bearer token for it
    requeen: outputs: tuple(headers dict, operator id)
    """

    email = email or f"beekeeper-{uuid.uuid4()}@example.com"
    session = TestingSessionLocal()
    try:
        user = models.User(email=email, full_name="Test Beekeeper")
        session.add(user)
        session.commit()
        session.refresh(user)
        token = create_access_token({"sub": email})
        return {"Authorization": f"Bearer {token}"}, user.id
    finally:
        session.close()


def seed_site(owner_id: uuid.UUID, name: str = "Home Apiary") -> uuid.UUID:
    session = TestingSessionLocal()
    try:
        site = models.Site(name=name, owner_id=owner_id)
        session.add(site)
        session.commit()
        return site.id
    finally:
        session.close()


def seed_hive(site_id: uuid.UUID, code: str = "N-01", public_key: str | None = None) -> uuid.UUID:
    session = TestingSessionLocal()
    try:
        hive = models.Hive(
            site_id=site_id,
            code=code,
            public_key=public_key or uuid.uuid4().hex,
            purpose="nucleus",
        )
        session.add(hive)
        session.commit()
        return hive.id
    finally:
        session.close()


@pytest.fixture
def apiary():
    """An operator with one site holding two hives."""

    headers, owner_id = seed_operator()
    site_id = seed_site(owner_id, name=f"Apiary {uuid.uuid4().hex[:6]}")
    hive_ids = [seed_hive(site_id, code=f"N-{i:02d}") for i in (1, 2)]
    return {
        "headers": headers,
        "owner_id": owner_id,
        "site_id": site_id,
        "hive_ids": hive_ids,
    }
