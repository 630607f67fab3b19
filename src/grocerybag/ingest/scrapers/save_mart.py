"""Save Mart scraper.

Save Mart publishes deals as digital coupons at https://savemart.com/coupons/.
Coupon cards often carry the offer price in their description instead of a
dedicated price element.
"""

import re
from typing import Any

from grocerybag.ingest.scrapers.base import BaseScraper
from grocerybag.ingest.scrapers.selectors import card_cascade

# "Save $1.00", "$2 off" describe a discount, not a price
_DISCOUNT_WORDING = re.compile(r"\bsave\s+(?:up\s+to\s+)?\$|\boff\b|\brebate\b", re.IGNORECASE)


class SaveMartScraper(BaseScraper):
    """Scraper for Save Mart store locator and coupon deals."""

    STORE_NAME = "Save Mart"
    STORE_SLUG = "savemart"
    BASE_URL = "https://savemart.com"
    STORE_LOCATOR_URL = "https://savemart.com/stores/"
    COUPONS_URL = "https://savemart.com/coupons/"

    STORE_KEYWORDS = ("save mart", "savemart")
    STORE_SEARCH_INPUT_SELECTORS = ('input[placeholder*="ZIP"]', 'input[placeholder*="zip"]')
    LOCATION_TRIGGER_SELECTORS = (".store-selector", '[data-testid="store-selector"]')
    LOCATION_INPUT_SELECTORS = ('input[placeholder*="ZIP"]', 'input[placeholder*="zip"]')

    MAX_STORES = 3
    MAX_PRODUCTS = 15
    FILTERS_LOCALLY = True
    WIDEN_LIMIT = 8

    FALLBACK_IMAGES = (
        "https://images.unsplash.com/photo-1603048297172-c92544798d5a?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1592924357228-91a4daadcfea?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1549931319-a545dcf3bc73?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1486297678162-eb2a19b0a32d?w=400&h=400&fit=crop&crop=center",
        "https://images.unsplash.com/photo-1498654896293-37aacf113fd9?w=400&h=400&fit=crop&crop=center",
    )

    STORE_CASCADE = card_cascade(
        "save mart stores",
        [".store-card", ".store-item", ".location-card", '[data-testid="store"]'],
        text={
            "name": [".store-name", ".location-name", "h3", "h4"],
            "address": [".address", ".store-address", ".location-address"],
            "distance": [".distance", ".store-distance"],
        },
        id_attributes=["data-store-id"],
        limit=3,
    )

    PRODUCT_CASCADE = card_cascade(
        "save mart deals",
        [".coupon-item", ".deal-item", ".product-card", ".offer-card", ".promotion-card"],
        text={
            "name": [
                "h3",
                "h4",
                ".product-title",
                ".coupon-title",
                ".deal-title",
                ".offer-title",
            ],
            "price": [".price", ".sale-price", ".discount-price", ".offer-price"],
            "original_price": [".original-price", ".regular-price", ".was-price"],
            "description": [".description", ".coupon-description", ".deal-description"],
        },
        images={"image": ["img"]},
        links={"link": ["a"]},
        limit=30,
    )

    def search_url(self, query: str, zip_code: str) -> str:
        return self.COUPONS_URL

    def _raw_price(self, raw: dict[str, Any]) -> str | None:
        """Use the price element, else a price stated in the coupon description."""
        if raw.get("price"):
            return raw["price"]
        description = raw.get("description") or ""
        if "$" in description and not _DISCOUNT_WORDING.search(description):
            return description
        return None
