"""Pytest configuration and shared fixtures."""

import random
from typing import Any

import pytest
from playwright.async_api import Error as PlaywrightError

from grocerybag.config import Settings

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (require Chromium or live retailer sites)",
    )
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Fake Playwright Objects
# =============================================================================


class FakeKeyboard:
    """Records key presses."""

    def __init__(self):
        self.pressed: list[str] = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)


class FakeElement:
    """An input or button found by query_selector."""

    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def fill(self, value: str) -> None:
        self.page.filled.append((self.selector, value))

    async def click(self) -> None:
        self.page.clicked.append(self.selector)


class FakePage:
    """Stand-in for a Playwright page.

    Card extraction is answered from ``cards``, keyed by the container
    selector the in-page script is asked to query.
    """

    def __init__(
        self,
        cards: dict[str, list[dict[str, Any]]] | None = None,
        body_text: str = "",
        elements: tuple[str, ...] = (),
        fail_goto: bool = False,
        failing_containers: tuple[str, ...] = (),
    ):
        self.cards = cards or {}
        self.body_text = body_text
        self.elements = set(elements)
        self.fail_goto = fail_goto
        self.failing_containers = set(failing_containers)
        self.keyboard = FakeKeyboard()
        self.visited: list[str] = []
        self.filled: list[tuple[str, str]] = []
        self.clicked: list[str] = []
        self.evaluated: list[str] = []
        self.waits: list[float] = []

    async def goto(self, url: str, wait_until: str | None = None, timeout: float | None = None):
        self.visited.append(url)
        if self.fail_goto:
            raise PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

    async def evaluate(self, script: str, arg: dict[str, Any]) -> list[dict[str, Any]]:
        container = arg["container"]
        self.evaluated.append(container)
        if container in self.failing_containers:
            raise PlaywrightError("Execution context was destroyed")
        return [dict(record) for record in self.cards.get(container, [])]

    async def inner_text(self, selector: str) -> str:
        return self.body_text

    async def query_selector(self, selector: str) -> FakeElement | None:
        return FakeElement(self, selector) if selector in self.elements else None

    async def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)


class FakeSession:
    """Session factory and async context manager yielding a FakePage.

    Pass the instance itself as ``session_factory``.
    """

    def __init__(self, page: FakePage | None = None, fail_on_open: bool = False):
        self.page = page or FakePage()
        self.fail_on_open = fail_on_open
        self.opened = 0
        self.closed = 0

    def __call__(self) -> "FakeSession":
        return self

    async def __aenter__(self) -> FakePage:
        self.opened += 1
        if self.fail_on_open:
            raise PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")
        return self.page

    async def __aexit__(self, *args: Any) -> None:
        self.closed += 1


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no waits, a single navigation attempt and live mode."""
    return Settings(
        _env_file=None,
        scrape_run_mode="live",
        vercel="",
        netlify="",
        environment="development",
        settle_delay=0,
        store_settle_delay=0,
        navigation_timeout=1,
        scraping_max_retries=1,
        health_check_timeout=1,
    )


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for repeatable fallback image picks."""
    return random.Random(42)


@pytest.fixture
def fake_page() -> FakePage:
    """Page where nothing matches."""
    return FakePage()


@pytest.fixture
def walmart_page() -> FakePage:
    """Walmart store finder and search results for milk near 95616."""
    return FakePage(
        cards={
            '[data-automation-id="store-details"]': [
                {
                    "id": "2613",
                    "name": "Davis Supercenter",
                    "address": "1900 Cowell Blvd, Davis, CA 95618",
                    "distance": "1.4 mi",
                },
            ],
            '[data-testid="item-stack"] [data-item-id]': [
                {
                    "name": "Great Value Whole Milk, 1 gal",
                    "price": "current price $3.64",
                    "original_price": "$4.12",
                    "image": "https://i5.walmartimages.com/seo/milk.jpeg",
                    "link": "https://www.walmart.com/ip/Great-Value-Whole-Milk/10450114",
                    "out_of_stock": False,
                    "limited": False,
                    "text": "Great Value Whole Milk, 1 gal current price $3.64",
                },
                {
                    "name": "   ",
                    "price": "$1.00",
                    "text": "",
                },
                {
                    "name": "Horizon Organic Whole Milk",
                    "price": None,
                    "text": "Horizon Organic Whole Milk",
                },
                {
                    "name": "Fairlife 2% Ultra-Filtered Milk",
                    "price": "$4.48",
                    "original_price": "$4.48",
                    "image": "data:image/gif;base64,R0lGODlhAQABAAAAACw=",
                    "link": "/ip/fairlife-2-milk/123",
                    "out_of_stock": True,
                    "limited": False,
                    "text": "Fairlife 2% Ultra-Filtered Milk Out of stock",
                },
            ],
        },
    )
