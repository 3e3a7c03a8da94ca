"""
Shared fixtures: in-memory Mongo collections and an in-process API client
"""
from types import SimpleNamespace
from typing import Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

TEST_USER = {"user_id": "user_test01", "email": "ada@example.com"}


def _matches(doc: Dict, query: Dict) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCollection:
    """The subset of the motor collection API the services use"""

    def __init__(self, docs: List[Dict] = None):
        self.docs: List[Dict] = [dict(d) for d in docs or []]

    async def find_one(self, query: Dict, projection: Dict = None):
        for doc in self.docs:
            if _matches(doc, query):
                return {k: v for k, v in doc.items() if k != "_id"}
        return None

    async def insert_one(self, doc: Dict):
        self.docs.append(dict(doc))
        return SimpleNamespace(inserted_id=len(self.docs))

    async def update_one(self, query: Dict, update: Dict):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def update_many(self, query: Dict, update: Dict):
        count = 0
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                count += 1
        return SimpleNamespace(matched_count=count, modified_count=count)

    async def create_index(self, *args, **kwargs):
        return "index"


def active_subscription(**overrides) -> Dict:
    doc = {
        "subscription_id": "sub_abc123",
        "user_id": TEST_USER["user_id"],
        "subscription_tier": "monthly",
        "plan_name": "Monthly Plan",
        "status": "active",
        "stripe_subscription_id": None,
        "created_at": "2026-01-01T00:00:00+00:00",
        "updated_at": "2026-01-01T00:00:00+00:00",
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def fake_db(monkeypatch):
    db = SimpleNamespace(
        subscriptions=FakeCollection(),
        users=FakeCollection(),
        user_sessions=FakeCollection(),
    )
    monkeypatch.setattr("services.subscription_service.db", db)
    monkeypatch.setattr("utils.auth.db", db)
    return db


@pytest.fixture
def no_stripe(monkeypatch):
    monkeypatch.setattr("services.subscription_service.get_stripe", lambda: None)
    monkeypatch.setattr("services.checkout_service.get_stripe", lambda: None)


@pytest_asyncio.fixture(autouse=True)
async def reset_rate_limits():
    from utils.rate_limiter import rate_limiter

    await rate_limiter.reset()
    yield
    await rate_limiter.reset()


@pytest.fixture
def app():
    from server import create_app

    return create_app()


@pytest.fixture
def authed_app(app):
    from utils.auth import get_current_user

    app.dependency_overrides[get_current_user] = lambda: dict(TEST_USER)
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def authed_client(authed_app):
    async with AsyncClient(transport=ASGITransport(app=authed_app), base_url="http://test") as client:
        yield client
