"""Curated fallback inventory used when live scraping is unavailable.

Hosted platforms usually cannot launch a headless browser, and retailer
sites regularly block automation. In both cases scrapers answer from the
small catalogs below. A fallback response has exactly the same shape as a
live one; only the content differs.
"""

from dataclasses import dataclass

from grocerybag.ingest.schemas import Availability, InventoryResponse, Product, Store
from grocerybag.normalize import generate_product_id


@dataclass(frozen=True)
class FallbackItem:
    """A representative product in a retailer's fallback catalog."""

    name: str
    price: str
    original_price: str
    image_url: str
    category: str
    url: str | None = None


def _unsplash(photo_id: str) -> str:
    return f"https://images.unsplash.com/{photo_id}?w=400&h=400&fit=crop&crop=center"


MILK_IMAGE = _unsplash("photo-1550583724-b2692b85b150")
BANANA_IMAGE = _unsplash("photo-1571771894821-ce9b6c11b08e")
BREAD_IMAGE = _unsplash("photo-1509440159596-0249088772ff")

FALLBACK_CATALOG: dict[str, tuple[FallbackItem, ...]] = {
    "walmart": (
        FallbackItem(
            name="Great Value 2% Reduced Fat Milk, 128 fl oz",
            price="$3.98",
            original_price="$4.98",
            image_url=MILK_IMAGE,
            category="dairy",
        ),
        FallbackItem(
            name="Bananas, each",
            price="$0.58",
            original_price="$0.78",
            image_url=BANANA_IMAGE,
            category="produce",
        ),
        FallbackItem(
            name="Wonder Bread Classic White, 20 oz",
            price="$1.28",
            original_price="$1.98",
            image_url=BREAD_IMAGE,
            category="bakery",
        ),
    ),
    "safeway": (
        FallbackItem(
            name="Safeway Organic Whole Milk, 64 fl oz",
            price="$4.99",
            original_price="$6.49",
            image_url=MILK_IMAGE,
            category="dairy",
        ),
        FallbackItem(
            name="Fresh Bananas, per lb",
            price="$0.68",
            original_price="$0.98",
            image_url=BANANA_IMAGE,
            category="produce",
        ),
        FallbackItem(
            name="Safeway Whole Wheat Bread, 20 oz",
            price="$2.49",
            original_price="$3.29",
            image_url=BREAD_IMAGE,
            category="bakery",
        ),
    ),
    "traderjoes": (
        FallbackItem(
            name="Trader Joe's Organic Whole Milk, 64 fl oz",
            price="$3.99",
            original_price="$5.49",
            image_url=_unsplash("photo-1563636619-e9143da7973b"),
            category="dairy",
            url="https://www.traderjoes.com/home/products/pdp/organic-whole-milk-064321",
        ),
        FallbackItem(
            name="Trader Joe's Mandarin Orange Chicken",
            price="$4.99",
            original_price="$6.99",
            image_url=_unsplash("photo-1606491956689-2ea866880c84"),
            category="frozen",
            url="https://www.traderjoes.com/home/products/pdp/mandarin-orange-chicken-064322",
        ),
        FallbackItem(
            name="Trader Joe's Everything But The Bagel Sesame Seasoning Blend",
            price="$1.99",
            original_price="$2.99",
            image_url=_unsplash("photo-1506084868230-bb9d95c24759"),
            category="condiments",
            url="https://www.traderjoes.com/home/products/pdp/everything-bagel-seasoning-064323",
        ),
        FallbackItem(
            name="Trader Joe's Speculoos Cookie Butter",
            price="$3.69",
            original_price="$4.99",
            image_url=_unsplash("photo-1481391319762-47dff72954d9"),
            category="condiments",
            url="https://www.traderjoes.com/home/products/pdp/cookie-butter-064324",
        ),
        FallbackItem(
            name="Trader Joe's Charles Shaw Cabernet Sauvignon",
            price="$2.99",
            original_price="$4.99",
            image_url=_unsplash("photo-1510812431401-41d2bd2722f3"),
            category="wine",
            url="https://www.traderjoes.com/home/products/pdp/charles-shaw-wine-064325",
        ),
        FallbackItem(
            name="Trader Joe's Cauliflower Gnocchi",
            price="$2.69",
            original_price="$3.99",
            image_url=_unsplash("photo-1621996346565-e3dbc353d2e5"),
            category="frozen",
            url="https://www.traderjoes.com/home/products/pdp/cauliflower-gnocchi-064326",
        ),
    ),
    "savemart": (
        FallbackItem(
            name="Save Mart Fresh Ground Beef 80/20, per lb",
            price="$4.99",
            original_price="$6.99",
            image_url=_unsplash("photo-1603048297172-c92544798d5a"),
            category="meat",
        ),
        FallbackItem(
            name="Fresh Roma Tomatoes, per lb",
            price="$1.49",
            original_price="$2.29",
            image_url=_unsplash("photo-1592924357228-91a4daadcfea"),
            category="produce",
        ),
        FallbackItem(
            name="Save Mart Sourdough Bread, 24 oz",
            price="$2.99",
            original_price="$3.99",
            image_url=_unsplash("photo-1549931319-a545dcf3bc73"),
            category="bakery",
        ),
    ),
}

DEFAULT_CATALOG = "walmart"


def catalog_for(slug: str) -> tuple[FallbackItem, ...]:
    """Get a retailer's fallback catalog, defaulting to Walmart's."""
    return FALLBACK_CATALOG.get(slug, FALLBACK_CATALOG[DEFAULT_CATALOG])


def fallback_store(slug: str, name: str, zip_code: str) -> Store:
    """Synthetic store used when no real location could be found."""
    return Store(id=f"{slug}-{zip_code}", name=name, address=f"Near {zip_code}")


def fallback_availability(index: int) -> Availability:
    """Every third catalog item is shown as limited, the rest in stock."""
    return Availability.LIMITED if index % 3 == 0 else Availability.IN_STOCK


def fallback_products(slug: str, store: Store, homepage: str) -> list[Product]:
    """Build products from a retailer's fallback catalog.

    The whole catalog is always returned regardless of the query, so the
    client gets a mix of in-stock and limited items to render.
    """
    return [
        Product(
            id=generate_product_id(item.name, store.id),
            name=item.name,
            price=item.price,
            original_price=item.original_price,
            image_url=item.image_url,
            availability=fallback_availability(index),
            url=item.url or homepage,
            category=item.category,
        )
        for index, item in enumerate(catalog_for(slug))
    ]


def fallback_inventory(
    slug: str,
    name: str,
    query: str,
    zip_code: str,
    homepage: str,
) -> InventoryResponse:
    """Full inventory response built entirely from fallback data."""
    store = fallback_store(slug, name, zip_code)
    products = fallback_products(slug, store, homepage)
    return InventoryResponse(query=query, zip=zip_code, store=store, products=products)
