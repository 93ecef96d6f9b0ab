import fnmatch
import os

os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["ADMIN_EMAILS"] = "admin@spontis.ch, Ops@Spontis.ch"
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_BACKEND", "cache+memory://")

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from spontis.main import app
from spontis.db.session import get_db
from spontis.models.base import Base
from spontis.core.security import create_access_token
from spontis.services.distance import DistanceLookupError, DistanceResult, get_distance_client


TEST_DATABASE_URL = os.environ["DATABASE_URL"]

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    future=True,
    poolclass=StaticPool,
)

AsyncSessionTest = sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    future=True
)


async def override_get_db():
    async with AsyncSessionTest() as session:
        yield session


class StubDistanceClient:
    """Stands in for the Google Maps client; records every call."""

    def __init__(self, result=None, error=None):
        self.result = result or DistanceResult(distance_km=50.0, duration_min=42)
        self.error = error
        self.calls = []

    async def distance(self, origins, destinations):
        self.calls.append((origins, destinations))
        if self.error:
            raise self.error
        return self.result

    async def autocomplete(self, text):
        self.calls.append(("autocomplete", text))
        if self.error:
            raise self.error
        return {"status": "OK", "predictions": [{"description": f"{text}, Lausanne, Suisse", "place_id": "p-1"}]}

    async def place_details(self, place_id):
        self.calls.append(("details", place_id))
        if self.error:
            raise self.error
        return {"status": "OK", "result": {"formatted_address": "Rue du Lac 1, 1003 Lausanne"}}


class InMemoryRedis:
    """Just enough of redis.asyncio.Redis for the cache, rate limit and idempotency paths."""

    def __init__(self):
        self.store = {}
        self.expiry = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value if isinstance(value, bytes) else str(value).encode()
        self.expiry[key] = ex
        return True

    async def incr(self, key):
        value = int(self.store.get(key, b"0")) + 1
        self.store[key] = str(value).encode()
        return value

    async def delete(self, *keys):
        return sum(1 for k in keys if self.store.pop(k, None) is not None)

    async def scan_iter(self, match=None):
        for key in list(self.store):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key


@pytest.fixture
def fake_redis(monkeypatch):
    from spontis.core import redis as redis_module

    client = InMemoryRedis()
    monkeypatch.setattr(redis_module, "redis", client)
    return client


@pytest.fixture
async def setup_db():
    app.dependency_overrides[get_db] = override_get_db

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def db_session(setup_db):
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
def distance_client():
    client = StubDistanceClient()
    app.dependency_overrides[get_distance_client] = lambda: client
    yield client
    app.dependency_overrides.pop(get_distance_client, None)


@pytest.fixture
def failing_distance_client():
    client = StubDistanceClient(error=DistanceLookupError("ZERO_RESULTS"))
    app.dependency_overrides[get_distance_client] = lambda: client
    yield client
    app.dependency_overrides.pop(get_distance_client, None)


@pytest.fixture
async def test_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_token():
    return create_access_token("admin-1", "admin@spontis.ch")


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def user_token():
    return create_access_token("user-1", "expediteur@example.ch")


@pytest.fixture
def user_headers(user_token):
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def other_user_headers():
    return {"Authorization": f"Bearer {create_access_token('user-2', 'autre@example.ch')}"}


@pytest.fixture
def pricing_payload():
    return {
        "name": "Grille 2025",
        "variables": {
            "tarif_km_base_chf": 3,
            "maj_carburant_pct": 5,
            "maj_embouteillage_pct": 2,
            "tva_rate_pct": 8.1,
        },
        "supplements": [
            {"nom": "Péage", "type": "fix", "montant": 20},
        ],
    }


@pytest.fixture
def create_pricing_set_factory(test_client, admin_headers, pricing_payload):
    async def _create(activate=True, **overrides):
        data = {**pricing_payload, **overrides}
        response = await test_client.post("/admin/pricing/", json=data, headers=admin_headers)
        assert response.status_code == 200, response.text
        pricing_set = response.json()
        if activate:
            response = await test_client.patch(
                f"/admin/pricing/{pricing_set['id']}/activate",
                headers=admin_headers
            )
            assert response.status_code == 200, response.text
            pricing_set = response.json()
        return pricing_set

    return _create


@pytest.fixture
def mandat_payload():
    debut = datetime.now(timezone.utc) + timedelta(days=2)
    return {
        "nom": "Palettes Lausanne-Genève",
        "description": "Deux palettes de matériel",
        "images": [],
        "depart_adresse": {"adresse": "Rue du Lac 1, 1003 Lausanne", "lat": 46.5197, "lng": 6.6323},
        "arrivee_adresse": {"adresse": "Rue du Rhône 10, 1204 Genève", "lat": 46.2044, "lng": 6.1432},
        "enlevement_souhaite_debut_at": debut.isoformat(),
        "enlevement_souhaite_fin_at": (debut + timedelta(hours=3)).isoformat(),
        "surface_m2": 2,
        "poids_total_kg": 800,
    }


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
