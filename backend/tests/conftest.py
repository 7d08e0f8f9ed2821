import json
from collections.abc import Callable

import httpx
import pytest

from staylink.config import settings
from staylink.services.cache_service import CacheService
from staylink.services.postgrest_client import PostgrestClient


class MemoryCache(CacheService):
    """CacheService backed by a dict instead of Redis."""

    def __init__(self):
        super().__init__(url="redis://unused")
        self.store: dict[str, str] = {}

    async def get(self, key):
        raw = self.store.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key, value, ttl=None):
        self.store[key] = json.dumps(value, default=str)
        return True

    async def delete(self, key):
        self.store.pop(key, None)
        return True


def make_postgrest(handler: Callable[[httpx.Request], httpx.Response], key: str = "service") -> PostgrestClient:
    return PostgrestClient(
        "http://db.test/rest/v1",
        key,
        transport=httpx.MockTransport(handler),
    )


def db_row(number: int, room_type: str, amenities="{}", **extra) -> dict:
    row = {
        "id": number * 10,
        "created_at": "2024-01-01T00:00:00+00:00",
        "room-number": number,
        "room-type": room_type,
        "floor": number // 100,
        "capacity": 2,
        "status": "available",
        "amenities": amenities,
    }
    row.update(extra)
    return row


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def anon_key(monkeypatch):
    monkeypatch.setattr(settings, "supabase_anon_key", "anon")
    return "anon"


@pytest.fixture
def no_anon_key(monkeypatch):
    monkeypatch.setattr(settings, "supabase_anon_key", "")
