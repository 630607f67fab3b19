"""API routes for retailer inventory lookups.

Wraps the inventory orchestrator with a five-minute in-memory cache and
permissive CORS for browser clients.
"""

import uuid
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from grocerybag.cache import InventoryCache
from grocerybag.config import get_settings
from grocerybag.ingest.inventory import scrape_inventory
from grocerybag.ingest.schemas import InventoryResponse
from grocerybag.ingest.scrapers import get_available_scrapers, get_scraper_for_store
from grocerybag.logging_config import LoggingContext, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

DEFAULT_QUERY = "milk"
DEFAULT_ZIP = "95616"
DEFAULT_STORE = "walmart"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

InventoryScraper = Callable[[str, str, str], Awaitable[InventoryResponse]]


# Response schemas
class SupportedStoresResponse(BaseModel):
    """Retailers the inventory endpoint can scrape."""

    stores: list[str]
    total: int


class StoreHealthResponse(BaseModel):
    """Reachability of a retailer website."""

    store: str
    healthy: bool


# Dependencies (overridable in tests)
@lru_cache
def get_inventory_cache() -> InventoryCache:
    """Process-wide inventory cache."""
    return InventoryCache(ttl=get_settings().inventory_cache_ttl)


def get_inventory_scraper() -> InventoryScraper:
    """Coroutine used to scrape one store's inventory."""
    return scrape_inventory


@router.get("")
async def get_inventory(
    cache: Annotated[InventoryCache, Depends(get_inventory_cache)],
    scraper: Annotated[InventoryScraper, Depends(get_inventory_scraper)],
    query: Annotated[str, Query(description="Product search term")] = DEFAULT_QUERY,
    zip_code: Annotated[str, Query(alias="zip", description="Shopper ZIP code")] = DEFAULT_ZIP,
    store: Annotated[str, Query(description="Retailer name")] = DEFAULT_STORE,
) -> JSONResponse:
    """
    Get current inventory for a retailer near a ZIP code.

    Responses are cached per (store, query, zip) for five minutes. Any
    failure, including an unsupported store, returns a 500 with the
    request echoed back.
    """
    query = query.strip() or DEFAULT_QUERY
    zip_code = zip_code.strip() or DEFAULT_ZIP
    store = store.strip() or DEFAULT_STORE

    cached = cache.get(store, query, zip_code)
    if cached is not None:
        logger.debug(f"Cache hit for {store}/{query}/{zip_code}")
        return JSONResponse(content=cached.to_dict())

    with LoggingContext(request_id=str(uuid.uuid4()), zip_code=zip_code):
        try:
            logger.info(f"Scraping {store} for query: '{query}' in zip: {zip_code}")
            result = await scraper(store, query, zip_code)
        except Exception as e:
            logger.error(f"Error scraping {store}: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": f"Failed to scrape {store} inventory",
                    "message": str(e) or "Unknown error",
                    "query": query,
                    "zip": zip_code,
                    "store": store,
                },
            )

    cache.set(store, query, zip_code, result)
    return JSONResponse(content=result.to_dict())


@router.options("")
async def inventory_options() -> Response:
    """Answer CORS preflight requests from any origin."""
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.get("/stores", response_model=SupportedStoresResponse)
async def list_supported_stores() -> SupportedStoresResponse:
    """List retailers that have a scraper."""
    stores = get_available_scrapers()
    return SupportedStoresResponse(stores=stores, total=len(stores))


@router.get("/health/{store}", response_model=StoreHealthResponse)
async def check_store_health(store: str) -> StoreHealthResponse:
    """
    Check whether a retailer's website is reachable.

    Raises:
        HTTPException: 404 if no scraper handles the store.
    """
    scraper = get_scraper_for_store(store)
    if scraper is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No scraper available for store: {store}",
        )

    healthy = await scraper.health_check()
    return StoreHealthResponse(store=scraper.name, healthy=healthy)
