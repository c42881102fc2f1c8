"""End-to-end tests for the character endpoints on SQLite and the in-memory cache."""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog.api.app import create_app
from catalog.api.errors import invalid_character_handler
from catalog.api.routers.characters import clamp_paging
from catalog.cache import InMemoryByteCache
from catalog.config import Settings
from catalog.core.model import InvalidCharacterError

RICK = {"name": "Rick Sanchez", "species": "Human", "gender": "Male", "location": "Earth"}
BIRDPERSON = {
    "name": "Birdperson",
    "species": "Bird-Person",
    "gender": "Male",
    "location": "Bird World",
}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path}/catalog.db",
        cache_backend="memory",
        log_json=False,
    )


@pytest.fixture
def memory_cache() -> InMemoryByteCache:
    return InMemoryByteCache()


@pytest.fixture
def client(settings: Settings, memory_cache: InMemoryByteCache) -> Iterator[TestClient]:
    app = create_app(settings, byte_cache=memory_cache)
    with TestClient(app) as client:
        yield client


def _drain(client: TestClient) -> None:
    """Wait until published events have patched the cache."""
    client.portal.call(client.app.state.bus.drain)


class TestClampPaging:
    @pytest.mark.parametrize(
        ("given", "expected"),
        [
            ((1, 20), (1, 20)),
            ((0, 20), (1, 20)),
            ((-3, 0), (1, 1)),
            ((2, 500), (2, 100)),
        ],
    )
    def test_bounds(self, given: tuple[int, int], expected: tuple[int, int]) -> None:
        assert clamp_paging(*given) == expected


class TestListCharacters:
    """GET /characters."""

    def test_empty_catalog(self, client: TestClient) -> None:
        response = client.get("/characters")
        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert body["totalCount"] == 0
        assert body["fromCache"] is False

    def test_second_request_from_cache(self, client: TestClient) -> None:
        client.post("/characters", json=RICK)

        first = client.get("/characters").json()
        second = client.get("/characters").json()

        assert first["fromCache"] is False
        assert second["fromCache"] is True
        assert second["items"] == first["items"]

    def test_paging_metadata(self, client: TestClient) -> None:
        for i in range(5):
            client.post("/characters", json=RICK | {"name": f"Rick {i}"})

        body = client.get("/characters", params={"pageNumber": 2, "pageSize": 2}).json()

        assert [c["name"] for c in body["items"]] == ["Rick 2", "Rick 3"]
        assert body["pageNumber"] == 2
        assert body["pageSize"] == 2
        assert body["totalCount"] == 5
        assert body["totalPages"] == 3

    def test_paging_clamped(self, client: TestClient) -> None:
        body = client.get("/characters", params={"pageNumber": 0, "pageSize": 1000}).json()
        assert body["pageNumber"] == 1
        assert body["pageSize"] == 100

    def test_location_filter(self, client: TestClient) -> None:
        client.post("/characters", json=RICK)
        client.post("/characters", json=BIRDPERSON)

        body = client.get("/characters", params={"location": "bird world"}).json()

        assert [c["name"] for c in body["items"]] == ["Birdperson"]
        assert body["totalCount"] == 1


class TestCreateCharacter:
    """POST /characters."""

    def test_created(self, client: TestClient) -> None:
        response = client.post("/characters", json=RICK)
        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 1
        assert body["name"] == "Rick Sanchez"
        assert body["type"] is None

    def test_invalid_body(self, client: TestClient) -> None:
        response = client.post("/characters", json=RICK | {"name": "   "})
        assert response.status_code == 422

    def test_creation_patches_cached_listing(self, client: TestClient) -> None:
        """A cached listing picks up new characters without a reload."""
        client.post("/characters", json=RICK)
        assert client.get("/characters").json()["fromCache"] is False
        assert client.get("/characters", params={"location": "Earth"}).json()["totalCount"] == 1

        client.post("/characters", json=RICK | {"name": "Morty Smith"})
        _drain(client)

        body = client.get("/characters").json()
        assert body["fromCache"] is True
        assert [c["name"] for c in body["items"]] == ["Rick Sanchez", "Morty Smith"]

        by_location = client.get("/characters", params={"location": "EARTH"}).json()
        assert by_location["fromCache"] is True
        assert by_location["totalCount"] == 2

    def test_listing_fills_injected_cache(
        self, client: TestClient, memory_cache: InMemoryByteCache
    ) -> None:
        """The backend passed to create_app is the one the handlers use."""
        assert client.app.state.cache.store.backend is memory_cache
        client.get("/characters")
        client.get("/characters", params={"location": "Earth"})
        assert len(memory_cache) == 2

    def test_creation_does_not_populate_cold_cache(
        self, client: TestClient, memory_cache: InMemoryByteCache
    ) -> None:
        client.post("/characters", json=RICK)
        _drain(client)
        assert len(memory_cache) == 0

        client.get("/characters")
        assert len(memory_cache) == 1


class TestErrorsAndHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "components": {"database": True, "cache": True},
        }

    def test_correlation_headers(self, client: TestClient) -> None:
        response = client.get("/health", headers={"x-request-id": "req-1"})
        assert response.headers["x-request-id"] == "req-1"
        assert response.headers["x-correlation-id"] == "req-1"

    def test_corrupt_cache_entry_returns_500(
        self, settings: Settings, memory_cache: InMemoryByteCache
    ) -> None:
        """Cache failures surface as server errors."""
        from catalog.cache import CacheEntryOptions

        memory_cache.set_sync("characters", b"\x04not gzip", CacheEntryOptions())
        app = create_app(settings, byte_cache=memory_cache)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/characters")

        assert response.status_code == 500
        assert response.json()["messages"][0]["code"] == "InternalServerError"

    def test_expired_default_instant_returns_500(self, settings: Settings) -> None:
        """A misconfigured cache expiry is a server error, not a bad request."""
        expired = settings.model_copy(
            update={"cache_default_absolute_expiration": datetime.now(UTC) - timedelta(seconds=1)}
        )
        app = create_app(expired, byte_cache=InMemoryByteCache())
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/characters")

        assert response.status_code == 500
        assert response.json()["messages"][0]["code"] == "InternalServerError"

    async def test_invalid_character_maps_to_400(self) -> None:
        response = await invalid_character_handler(
            MagicMock(), InvalidCharacterError("name must not be blank")
        )

        assert response.status_code == 400
        message = json.loads(response.body)["messages"][0]
        assert message["code"] == "BadRequest"
        assert message["text"] == "name must not be blank"
