"""Tests for the inventory API endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from grocerybag.cache import InventoryCache
from grocerybag.ingest.inventory import scrape_inventory
from grocerybag.ingest.scrapers import RunMode, WalmartScraper
from grocerybag.main import app
from grocerybag.routers.inventory import get_inventory_cache, get_inventory_scraper


@pytest.fixture
def scrape_calls():
    return []


@pytest.fixture
def client(scrape_calls, test_settings):
    """Client whose scrapes always use fallback data, with a fresh cache."""
    cache = InventoryCache(ttl=300)

    async def fallback_scrape(store: str, query: str, zip_code: str):
        scrape_calls.append((store, query, zip_code))
        return await scrape_inventory(
            store, query, zip_code, run_mode=RunMode.FALLBACK, settings=test_settings
        )

    app.dependency_overrides[get_inventory_cache] = lambda: cache
    app.dependency_overrides[get_inventory_scraper] = lambda: fallback_scrape
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestGetInventory:
    """Tests for GET /api/inventory."""

    def test_defaults(self, client, scrape_calls):
        """Missing parameters default to milk near 95616 at Walmart."""
        response = client.get("/api/inventory")

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "milk"
        assert data["zip"] == "95616"
        assert data["store"]["name"] == "Walmart"
        assert data["totalResults"] == len(data["products"])
        assert "imageUrl" in data["products"][0]
        assert scrape_calls == [("walmart", "milk", "95616")]

    def test_blank_parameters_use_defaults(self, client, scrape_calls):
        """Empty parameters are treated as missing."""
        client.get("/api/inventory", params={"query": "", "zip": "", "store": ""})
        assert scrape_calls == [("walmart", "milk", "95616")]

    def test_query_parameters(self, client, scrape_calls):
        """The zip parameter maps to the shopper ZIP code."""
        response = client.get(
            "/api/inventory", params={"query": "bread", "zip": "94110", "store": "safeway"}
        )

        assert response.status_code == 200
        assert response.json()["store"]["id"] == "safeway-94110"
        assert scrape_calls == [("safeway", "bread", "94110")]

    def test_cached_within_ttl(self, client, scrape_calls):
        """A repeated request is served from cache with the same timestamp."""
        first = client.get("/api/inventory", params={"query": "milk", "store": "walmart"})
        second = client.get("/api/inventory", params={"query": "milk", "store": "walmart"})

        assert first.json()["timestamp"] == second.json()["timestamp"]
        assert len(scrape_calls) == 1

    def test_different_key_not_cached(self, client, scrape_calls):
        """Each (store, query, zip) is cached separately."""
        client.get("/api/inventory", params={"query": "milk"})
        client.get("/api/inventory", params={"query": "eggs"})
        assert len(scrape_calls) == 2

    def test_unsupported_store(self, client):
        """Failures return 500 with the request echoed back."""
        response = client.get("/api/inventory", params={"store": "kroger"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to scrape kroger inventory",
            "message": "No scraper available for store: kroger",
            "query": "milk",
            "zip": "95616",
            "store": "kroger",
        }

    def test_failures_are_not_cached(self, client, scrape_calls):
        """A failed scrape is retried on the next request."""
        client.get("/api/inventory", params={"store": "kroger"})
        client.get("/api/inventory", params={"store": "kroger"})
        assert len(scrape_calls) == 2


class TestInventoryMetaEndpoints:
    """Tests for preflight, store list and health endpoints."""

    def test_options_preflight(self, client):
        """Browser preflights from any origin are allowed."""
        response = client.options(
            "/api/inventory",
            headers={
                "Origin": "https://shop.example.com",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
        assert "access-control-allow-credentials" not in response.headers

    def test_plain_options(self, client):
        """OPTIONS without CORS headers answers with the same policy."""
        response = client.options("/api/inventory")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type"

    def test_cross_origin_get(self, client):
        """Inventory responses are readable from any origin."""
        response = client.get("/api/inventory", headers={"Origin": "https://shop.example.com"})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_supported_stores(self, client):
        """Supported retailers are listed by display name."""
        response = client.get("/api/inventory/stores")

        assert response.status_code == 200
        assert response.json() == {
            "stores": ["Walmart", "Safeway", "Trader Joe's", "Save Mart"],
            "total": 4,
        }

    def test_store_health(self, client):
        """Health reports whether the retailer site answered."""
        with patch.object(WalmartScraper, "health_check", AsyncMock(return_value=True)):
            response = client.get("/api/inventory/health/walmart")

        assert response.status_code == 200
        assert response.json() == {"store": "Walmart", "healthy": True}

    def test_store_health_unknown(self, client):
        """Unknown retailers are a 404."""
        response = client.get("/api/inventory/health/kroger")
        assert response.status_code == 404
