"""Base scraper interface for grocery retailer websites."""

import random
from abc import ABC
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Any, ClassVar

import httpx
from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from grocerybag.config import Settings, get_settings
from grocerybag.ingest.schemas import InventoryResponse, Product, Store
from grocerybag.ingest.scrapers.browser import USER_AGENTS, BrowserSession
from grocerybag.ingest.scrapers.fallback import fallback_inventory, fallback_store
from grocerybag.ingest.scrapers.selectors import PageTextAddressStrategy, SelectorCascade
from grocerybag.logging_config import LoggingContext, get_logger
from grocerybag.normalize import (
    detect_availability,
    filter_by_query,
    generate_product_id,
    infer_category,
    normalize_original_price,
    normalize_price,
    resolve_image_url,
    resolve_product_url,
)

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[Page]]

# Generic grocery images used when a listing has no usable picture
DEFAULT_FALLBACK_IMAGES = (
    "https://images.unsplash.com/photo-1550583724-b2692b85b150?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1571771894821-ce9b6c11b08e?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1509440159596-0249088772ff?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1488477181946-6428a0291777?w=400&h=400&fit=crop&crop=center",
    "https://images.unsplash.com/photo-1604503468506-a8da13d82791?w=400&h=400&fit=crop&crop=center",
)


class ScraperError(Exception):
    """Base exception for scraper errors."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class RunMode(str, Enum):
    """Whether a scraper may drive a real browser."""

    LIVE = "live"
    FALLBACK = "fallback"


def resolve_run_mode(settings: Settings | None = None) -> RunMode:
    """Decide the run mode from configuration.

    An explicit ``scrape_run_mode`` wins; in ``auto`` mode hosted
    deployments (Vercel, Netlify, production) get fallback data.
    """
    settings = settings or get_settings()
    if settings.scrape_run_mode == "live":
        return RunMode.LIVE
    if settings.scrape_run_mode == "fallback":
        return RunMode.FALLBACK
    return RunMode.FALLBACK if settings.is_deployment else RunMode.LIVE


class BaseScraper(ABC):
    """Abstract base class for retailer scrapers.

    Subclasses describe one retailer: its URLs, its selector cascades and
    any site-specific navigation. The base runs the shared pipeline:
    open a browser session, find stores, search products, normalize, and
    fall back to curated data on any failure.

    Instances are single-use. A scraper holds its page only for the
    duration of one ``scrape_inventory`` call.
    """

    # Override in subclasses
    STORE_NAME: ClassVar[str] = "Unknown"
    STORE_SLUG: ClassVar[str] = "unknown"
    BASE_URL: ClassVar[str] = ""
    STORE_LOCATOR_URL: ClassVar[str] = ""

    STORE_CASCADE: ClassVar[SelectorCascade]
    PRODUCT_CASCADE: ClassVar[SelectorCascade]

    # Retailer names that mark a store address in free page text
    STORE_KEYWORDS: ClassVar[Sequence[str]] = ()

    # Store locator search box, tried in order
    STORE_SEARCH_INPUT_SELECTORS: ClassVar[Sequence[str]] = ()
    # Location picker on the product page (button, then ZIP box)
    LOCATION_TRIGGER_SELECTORS: ClassVar[Sequence[str]] = ()
    LOCATION_INPUT_SELECTORS: ClassVar[Sequence[str]] = ()

    MAX_STORES: ClassVar[int] = 3
    MAX_PRODUCTS: ClassVar[int] = 20
    FILTERS_LOCALLY: ClassVar[bool] = False
    WIDEN_LIMIT: ClassVar[int] = 10
    FALLBACK_IMAGES: ClassVar[Sequence[str]] = DEFAULT_FALLBACK_IMAGES

    def __init__(
        self,
        run_mode: RunMode | None = None,
        settings: Settings | None = None,
        session_factory: SessionFactory | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the scraper.

        Args:
            run_mode: LIVE or FALLBACK. Resolved from settings if omitted.
            settings: Application settings (timeouts, delays, retries).
            session_factory: Callable returning an async context manager
                that yields a Playwright page. Defaults to BrowserSession.
            rng: Random source for fallback image picks.
        """
        self.settings = settings or get_settings()
        self.run_mode = RunMode(run_mode) if run_mode else resolve_run_mode(self.settings)
        self.rng = rng or random.Random()
        self._session_factory = session_factory or self._default_session
        self.navigation_timeout_ms = self.settings.navigation_timeout * 1000
        self.max_retries = max(1, self.settings.scraping_max_retries)
        self._page: Page | None = None

    @property
    def name(self) -> str:
        """Return retailer display name."""
        return self.STORE_NAME

    @property
    def slug(self) -> str:
        """Return retailer identifier used in synthetic ids."""
        return self.STORE_SLUG

    def _default_session(self) -> BrowserSession:
        return BrowserSession(
            headless=self.settings.headless,
            rng=self.rng,
            timeout=self.settings.action_timeout,
        )

    def _require_page(self) -> Page:
        if self._page is None:
            raise ScraperError(f"{self.STORE_NAME} scraper has no open browser session")
        return self._page

    # -------------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------------

    def store_locator_url(self, zip_code: str) -> str:
        """URL of the retailer's store locator for a ZIP code."""
        return self.STORE_LOCATOR_URL

    def search_url(self, query: str, zip_code: str) -> str:
        """URL of the page listing products for a query."""
        return self.BASE_URL

    # -------------------------------------------------------------------------
    # Page helpers
    # -------------------------------------------------------------------------

    async def _goto(self, page: Page, url: str) -> None:
        """Navigate with a timeout, retrying on Playwright errors.

        Raises:
            ScraperError: If navigation still fails after retries.
        """

        @retry(
            retry=retry_if_exception_type(PlaywrightError),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, max=10),
            reraise=True,
        )
        async def _do_goto() -> None:
            await page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)

        logger.debug(f"Loading {url}")
        try:
            await _do_goto()
        except PlaywrightError as e:
            raise ScraperError(f"Navigation failed: {e}", url=url) from e

    async def _settle(self, page: Page, seconds: float | None = None) -> None:
        """Wait for dynamic content to render."""
        delay = self.settings.settle_delay if seconds is None else seconds
        if delay > 0:
            await page.wait_for_timeout(delay * 1000)

    async def _first_element(self, page: Page, selectors: Sequence[str]) -> ElementHandle | None:
        """Return the first element matched by the selector list."""
        for selector in selectors:
            element = await page.query_selector(selector)
            if element:
                return element
        return None

    async def _enter_zip(self, page: Page, selectors: Sequence[str], zip_code: str) -> bool:
        """Type a ZIP code into the first matching input and submit it."""
        zip_input = await self._first_element(page, selectors)
        if not zip_input:
            return False
        await zip_input.fill(zip_code)
        await page.keyboard.press("Enter")
        return True

    async def _open_store_locator(self, page: Page, zip_code: str) -> None:
        """Load the store locator and search for the ZIP when it has a search box."""
        await self._goto(page, self.store_locator_url(zip_code))
        await self._settle(page, min(self.settings.settle_delay, 2.0))
        if self.STORE_SEARCH_INPUT_SELECTORS:
            await self._enter_zip(page, self.STORE_SEARCH_INPUT_SELECTORS, zip_code)
        await self._settle(page)

    async def _set_location(self, page: Page, zip_code: str) -> None:
        """Point the product page at the shopper's ZIP, if the site allows it.

        Failure is not an error: the page keeps its default location.
        """
        if not self.LOCATION_TRIGGER_SELECTORS:
            return
        try:
            trigger = await self._first_element(page, self.LOCATION_TRIGGER_SELECTORS)
            if not trigger:
                return
            await trigger.click()
            await self._settle(page, 1.0)
            if await self._enter_zip(page, self.LOCATION_INPUT_SELECTORS, zip_code):
                await self._settle(page, 2.0)
        except PlaywrightError as e:
            logger.info(f"Could not set location, continuing with default location: {e}")

    # -------------------------------------------------------------------------
    # Normalization
    # -------------------------------------------------------------------------

    def synthetic_store(self, zip_code: str) -> Store:
        """Placeholder store used when no real location is found."""
        return fallback_store(self.STORE_SLUG, self.STORE_NAME, zip_code)

    def _build_store(self, raw: dict[str, Any], index: int, zip_code: str) -> Store | None:
        """Convert a raw store record; None if it has neither name nor address."""
        name = (raw.get("name") or "").strip()
        address = (raw.get("address") or "").strip()
        if not name and not address:
            return None
        return Store(
            id=raw.get("id") or f"{self.STORE_SLUG}-store-{index}",
            name=name or self.STORE_NAME,
            address=address or f"Near {zip_code}",
            distance=(raw.get("distance") or "").strip() or None,
        )

    def _raw_price(self, raw: dict[str, Any]) -> str | None:
        """Pick the price text from a raw listing."""
        return raw.get("price")

    def _normalize_product(self, raw: dict[str, Any], store: Store) -> Product | None:
        """Convert a raw listing into a Product.

        Returns:
            The product, or None if the listing lacks a usable name and price.
        """
        name = (raw.get("name") or "").strip()
        price = normalize_price(self._raw_price(raw))
        if not name or price is None:
            return None

        return Product(
            id=generate_product_id(name, store.id),
            name=name,
            price=price,
            original_price=normalize_original_price(raw.get("original_price"), price),
            image_url=resolve_image_url(raw.get("image"), self.FALLBACK_IMAGES, self.rng),
            availability=detect_availability(
                out_of_stock=bool(raw.get("out_of_stock")),
                limited=bool(raw.get("limited")),
                text=raw.get("text") or "",
            ),
            url=resolve_product_url(raw.get("link"), self.BASE_URL),
            category=infer_category(name),
        )

    def _normalize_products(self, records: list[dict[str, Any]], store: Store) -> list[Product]:
        """Normalize listings in discovery order, dropping unusable and duplicate ones."""
        products: list[Product] = []
        seen: set[str] = set()
        for raw in records[: self.MAX_PRODUCTS]:
            product = self._normalize_product(raw, store)
            if product is None or product.id in seen:
                continue
            seen.add(product.id)
            products.append(product)

        dropped = min(len(records), self.MAX_PRODUCTS) - len(products)
        if dropped:
            logger.debug(f"Dropped {dropped} unusable or duplicate listings")
        return products

    # -------------------------------------------------------------------------
    # Scraper contract
    # -------------------------------------------------------------------------

    async def find_stores(self, zip_code: str) -> list[Store]:
        """
        Find retailer locations near a ZIP code.

        Never raises: when nothing can be extracted a synthetic store
        near the ZIP is returned.

        Args:
            zip_code: Shopper ZIP code.

        Returns:
            At least one Store, nearest first.
        """
        stores: list[Store] = []
        try:
            page = self._require_page()
            logger.info(f"Finding {self.STORE_NAME} stores near {zip_code}")
            await self._open_store_locator(page, zip_code)

            records = await self.STORE_CASCADE.run(page)
            if not records and self.STORE_KEYWORDS:
                records = await PageTextAddressStrategy(
                    keywords=self.STORE_KEYWORDS, store_name=self.STORE_NAME
                ).extract(page)
            for index, raw in enumerate(records):
                if store := self._build_store(raw, index, zip_code):
                    stores.append(store)
                if len(stores) >= self.MAX_STORES:
                    break
        except Exception as e:
            logger.warning(f"Error finding {self.STORE_NAME} stores: {e}")

        if not stores:
            logger.info(f"No {self.STORE_NAME} stores found, using placeholder near {zip_code}")
            return [self.synthetic_store(zip_code)]

        logger.info(f"Found {len(stores)} {self.STORE_NAME} stores")
        return stores

    async def search_products(self, query: str, zip_code: str, store: Store) -> list[Product]:
        """
        Search the retailer site for products.

        Args:
            query: Free-text search term.
            zip_code: Shopper ZIP code.
            store: Store the products are attributed to.

        Returns:
            Normalized products in discovery order.

        Raises:
            ScraperError: If the page cannot be loaded.
        """
        page = self._require_page()
        url = self.search_url(query, zip_code)
        logger.info(f"Searching {self.STORE_NAME} for '{query}' near {zip_code}")

        await self._goto(page, url)
        await self._settle(page)
        await self._set_location(page, zip_code)

        records = await self.PRODUCT_CASCADE.run(page)
        products = self._normalize_products(records, store)

        if self.FILTERS_LOCALLY:
            products = filter_by_query(
                products, query, self.WIDEN_LIMIT, self.settings.default_query
            )

        logger.info(f"Found {len(products)} {self.STORE_NAME} products")
        return products

    def fallback_inventory(self, query: str, zip_code: str) -> InventoryResponse:
        """Inventory built from this retailer's curated fallback catalog."""
        return fallback_inventory(
            self.STORE_SLUG,
            self.STORE_NAME,
            query,
            zip_code,
            homepage=self.BASE_URL,
        )

    async def scrape_inventory(self, query: str, zip_code: str) -> InventoryResponse:
        """
        Scrape one store's inventory end to end.

        Runs find_stores then search_products against the first store in a
        single browser session. Live failures and empty results are replaced
        with fallback data; this method does not raise for scrape problems.

        Args:
            query: Free-text search term.
            zip_code: Shopper ZIP code.

        Returns:
            Inventory for the first store found.
        """
        with LoggingContext(retailer=self.STORE_SLUG, zip_code=zip_code):
            if self.run_mode is RunMode.FALLBACK:
                logger.info("Using fallback data for deployment environment")
                return self.fallback_inventory(query, zip_code)

            try:
                async with self._session_factory() as page:
                    self._page = page
                    try:
                        stores = await self.find_stores(zip_code)
                        store = stores[0]
                        products = await self.search_products(query, zip_code, store)
                    finally:
                        self._page = None
            except Exception as e:
                logger.warning(f"Browser automation failed, using fallback data: {e}")
                return self.fallback_inventory(query, zip_code)

            if not products:
                logger.warning("No products extracted, using fallback data")
                return self.fallback_inventory(query, zip_code)

            return InventoryResponse(query=query, zip=zip_code, store=store, products=products)

    async def health_check(self) -> bool:
        """
        Check if the retailer homepage is reachable over plain HTTP.

        Returns:
            True if healthy, False otherwise.
        """

        @retry(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, max=10),
            reraise=True,
        )
        async def _fetch(client: httpx.AsyncClient) -> httpx.Response:
            return await client.get(self.BASE_URL)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.health_check_timeout),
                headers={"User-Agent": self.rng.choice(USER_AGENTS)},
                follow_redirects=True,
            ) as client:
                response = await _fetch(client)
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"Health check failed for {self.STORE_NAME}: {e}")
            return False
