"""Trader Joe's scraper.

The product catalog at https://www.traderjoes.com/home/products is a
client-rendered SPA that is frequently protected against automation.
"""

from grocerybag.ingest.scrapers.base import BaseScraper
from grocerybag.ingest.scrapers.selectors import card_cascade


class TraderJoesScraper(BaseScraper):
    """Scraper for Trader Joe's locations and product catalog."""

    STORE_NAME = "Trader Joe's"
    STORE_SLUG = "traderjoes"
    BASE_URL = "https://www.traderjoes.com"
    STORE_LOCATOR_URL = "https://locations.traderjoes.com/"
    PRODUCTS_URL = "https://www.traderjoes.com/home/products"

    STORE_SEARCH_INPUT_SELECTORS = (
        'input[placeholder*="ZIP"]',
        'input[placeholder*="zip"]',
        'input[type="search"]',
    )
    STORE_KEYWORDS = ("trader joe's", "trader joes")

    MAX_STORES = 3
    MAX_PRODUCTS = 15
    FILTERS_LOCALLY = True
    WIDEN_LIMIT = 4

    FALLBACK_IMAGES = (
        "https://images.unsplash.com/photo-1563636619-e9143da7973b?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1606491956689-2ea866880c84?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1506084868230-bb9d95c24759?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1481391319762-47dff72954d9?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1510812431401-41d2bd2722f3?w=400&h=400&fit=crop&crop=center",
    )

    STORE_CASCADE = card_cascade(
        "trader joe's stores",
        [".store-card", ".location-card", ".store-item", '[data-testid="store"]'],
        text={
            "name": [".store-name", ".location-name", "h3", "h2"],
            "address": [".address", ".store-address", ".location-address", "address"],
            "distance": [".distance", ".store-distance"],
        },
        id_attributes=["data-store-id", "data-id"],
        limit=3,
    )

    PRODUCT_CASCADE = card_cascade(
        "trader joe's products",
        [".product-card", ".product-item", ".product-tile", '[data-testid="product"]'],
        text={
            "name": ["h3", "h4", ".product-title", ".product-name"],
            "price": [".price", ".product-price"],
        },
        images={"image": ["img"]},
        links={"link": ["a"]},
        limit=30,
    )

    def search_url(self, query: str, zip_code: str) -> str:
        return self.PRODUCTS_URL
