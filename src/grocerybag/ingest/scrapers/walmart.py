"""Walmart scraper.

Uses the public store finder and search pages on https://www.walmart.com/.
Walmart's search takes the query directly, so results are not filtered
locally.
"""

from urllib.parse import quote_plus

from playwright.async_api import Page

from grocerybag.ingest.scrapers.base import BaseScraper
from grocerybag.ingest.scrapers.selectors import card_cascade


class WalmartScraper(BaseScraper):
    """Scraper for Walmart store finder and product search."""

    STORE_NAME = "Walmart"
    STORE_SLUG = "walmart"
    BASE_URL = "https://www.walmart.com"
    STORE_LOCATOR_URL = "https://www.walmart.com/store/finder"

    STORE_KEYWORDS = ("walmart supercenter", "neighborhood market", "walmart")

    MAX_STORES = 3
    MAX_PRODUCTS = 20
    FILTERS_LOCALLY = False

    STORE_CASCADE = card_cascade(
        "walmart stores",
        [
            '[data-automation-id="store-details"]',
            ".store-card",
            ".store-item",
            '[data-testid="store-card"]',
            ".StoreCard",
        ],
        text={
            "name": [
                '[data-automation-id="store-name"]',
                ".store-name",
                "h3",
                "h2",
                '[data-testid="store-name"]',
            ],
            "address": [
                '[data-automation-id="store-address"]',
                ".store-address",
                ".address",
                '[data-testid="store-address"]',
            ],
            "distance": [
                '[data-automation-id="store-distance"]',
                ".store-distance",
                ".distance",
                '[data-testid="store-distance"]',
            ],
        },
        id_attributes=["data-store-id"],
        limit=3,
    )

    PRODUCT_CASCADE = card_cascade(
        "walmart products",
        [
            '[data-testid="item-stack"] [data-item-id]',
            '[data-testid="item-stack"]',
            '[data-automation-id="product-tile"]',
            ".search-result-gridview-item",
            '[data-testid="list-view"]',
        ],
        text={
            "name": [
                '[data-automation-id="product-title"]',
                'span[data-automation-id="product-title"]',
                "h3 a",
                ".product-title-link",
                'a[data-testid="product-title"]',
                ".w_DJ",
            ],
            "price": [
                '[data-automation-id="product-price"] .w_iUH7',
                '[data-automation-id="product-price"]',
                ".price-current",
                '[data-testid="price-current"]',
                ".price",
                ".price-main",
                'span[itemprop="price"]',
                ".w_iUH7",
            ],
            "original_price": [
                '[data-automation-id="strikethrough-price"]',
                ".strike-through",
                ".was-price",
            ],
        },
        images={"image": ["img[data-testid='productTileImage']", ".product-image img", "img"]},
        links={"link": ['a[href*="/ip/"]', 'a[data-testid="product-title"]', "h3 a", "a"]},
        flags={
            "out_of_stock": ['[data-automation-id="out-of-stock"]', ".out-of-stock"],
            "limited": ['[data-automation-id="limited-stock"]'],
        },
        id_attributes=["data-item-id"],
        limit=20,
    )

    def store_locator_url(self, zip_code: str) -> str:
        return f"{self.STORE_LOCATOR_URL}?location={quote_plus(zip_code)}"

    def search_url(self, query: str, zip_code: str) -> str:
        return f"{self.BASE_URL}/search?q={quote_plus(query)}&location={quote_plus(zip_code)}"

    async def _open_store_locator(self, page: Page, zip_code: str) -> None:
        # ZIP goes in the URL; results render slowly.
        await self._goto(page, self.store_locator_url(zip_code))
        await self._settle(page, self.settings.store_settle_delay)
