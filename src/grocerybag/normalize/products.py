"""Normalization helpers shared by all retailer scrapers.

Everything here is a pure function: turning raw page text into canonical
prices, categories, ids and URLs does not depend on which retailer the
text came from.
"""

import random
import re
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TypeVar
from urllib.parse import urljoin, urlparse

from grocerybag.ingest.schemas import Availability, Product
from grocerybag.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=Product)

DEFAULT_CATEGORY = "grocery"
DEFAULT_QUERY_TERM = "food"
PRODUCT_ID_SLUG_LENGTH = 50


# =============================================================================
# Keyword Tables
# =============================================================================

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("dairy", ("milk", "cheese", "yogurt")),
    ("bakery", ("bread", "bagel", "muffin")),
    ("meat", ("chicken", "beef", "pork", "meat")),
    ("produce", ("banana", "apple", "tomato", "produce")),
    ("frozen", ("frozen", "ice cream", "gnocchi")),
    ("seafood", ("fish", "salmon", "seafood")),
    ("wine", ("wine", "beer", "alcohol")),
    ("condiments", ("seasoning", "sauce", "butter")),
)

OUT_OF_STOCK_PHRASES = ("out of stock", "sold out", "unavailable")
LIMITED_PHRASES = ("limited stock", "low stock", "only a few left")

ADDRESS_PATTERN = re.compile(
    r"\b\d{1,6}\s+(?:[A-Za-z0-9.'-]+\s+){0,5}?"
    r"(?:St|Street|Ave|Avenue|Rd|Road|Blvd|Boulevard|Dr|Drive|Way|Ln|Lane"
    r"|Pkwy|Parkway|Hwy|Highway|Ct|Court|Pl|Place)\b\.?",
    re.IGNORECASE,
)

_DOLLAR_AMOUNT = re.compile(r"\$\s*(\d[\d,]*(?:\.\d+)?)")
_CENT_AMOUNT = re.compile(r"(\d+)\s*¢")
_PLAIN_AMOUNT = re.compile(r"\d[\d,]*(?:\.\d+)?")
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]")


# =============================================================================
# Identity
# =============================================================================


def generate_product_id(name: str, store_id: str) -> str:
    """Build a stable product id from its name and store.

    The same name at the same store always yields the same id.
    """
    slug = _NON_SLUG_CHARS.sub("-", name.lower())[:PRODUCT_ID_SLUG_LENGTH]
    return f"{store_id}-{slug}"


# =============================================================================
# Prices
# =============================================================================


def parse_price(text: str | None) -> Decimal | None:
    """Extract a dollar amount from free-form price text.

    Prefers an explicit ``$`` amount ("2 for $5" -> 5), then cents
    ("99¢" -> 0.99), then the first bare number.

    Returns:
        The amount, or None if the text holds no number.
    """
    if not text:
        return None

    if match := _DOLLAR_AMOUNT.search(text):
        raw = match.group(1)
    elif match := _CENT_AMOUNT.search(text):
        return Decimal(match.group(1)) / 100
    elif match := _PLAIN_AMOUNT.search(text):
        raw = match.group(0)
    else:
        return None

    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation:
        logger.debug(f"Unparseable price text: {text!r}")
        return None


def format_price(amount: Decimal) -> str:
    """Render an amount in the canonical ``$X.XX`` form."""
    return f"${amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}"


def normalize_price(text: str | None) -> str | None:
    """Normalize raw price text to ``$X.XX``, or None if unusable."""
    amount = parse_price(text)
    return format_price(amount) if amount is not None else None


def normalize_original_price(text: str | None, price: str) -> str | None:
    """Normalize a "was" price, keeping it only when it marks a real discount."""
    original = parse_price(text)
    current = parse_price(price)
    if original is None or current is None or original <= current:
        return None
    return format_price(original)


# =============================================================================
# Categories & Availability
# =============================================================================


def infer_category(name: str) -> str:
    """Infer a coarse category from keywords in the product name."""
    lower_name = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lower_name for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def detect_availability(
    out_of_stock: bool = False,
    limited: bool = False,
    text: str = "",
) -> Availability:
    """Derive availability from page markers and listing text.

    Defaults to in-stock when there is no signal.
    """
    lower_text = text.lower()
    if out_of_stock or any(phrase in lower_text for phrase in OUT_OF_STOCK_PHRASES):
        return Availability.OUT_OF_STOCK
    if limited or any(phrase in lower_text for phrase in LIMITED_PHRASES):
        return Availability.LIMITED
    return Availability.IN_STOCK


# =============================================================================
# URLs
# =============================================================================


def is_absolute_url(url: str | None) -> bool:
    """Check for an absolute http(s) URL."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def resolve_image_url(
    image_url: str | None,
    fallback_images: Sequence[str],
    rng: random.Random | None = None,
) -> str:
    """Return a usable absolute image URL.

    Protocol-relative URLs are upgraded to https. Missing, relative and
    ``data:`` URLs are replaced with a random pick from ``fallback_images``.

    Args:
        image_url: Image URL as found on the page.
        fallback_images: Absolute replacement images to choose from.
        rng: Random source; pass a seeded instance for repeatable picks.
    """
    if image_url:
        image_url = image_url.strip()
        if image_url.startswith("//"):
            image_url = f"https:{image_url}"
        if is_absolute_url(image_url):
            return image_url

    chooser = rng or random
    return chooser.choice(list(fallback_images))


def resolve_product_url(product_url: str | None, base_url: str) -> str:
    """Make a product link absolute against the retailer homepage."""
    if not product_url:
        return base_url
    if is_absolute_url(product_url):
        return product_url
    if product_url.startswith(("javascript:", "#")):
        return base_url
    return urljoin(base_url + "/", product_url)


# =============================================================================
# Query Filtering
# =============================================================================


def is_generic_query(query: str | None, default_term: str = DEFAULT_QUERY_TERM) -> bool:
    """A blank query or the default browse term does not filter anything."""
    return not query or not query.strip() or query.strip().lower() == default_term.lower()


def filter_by_query(
    products: Sequence[T],
    query: str | None,
    widen_limit: int,
    default_term: str = DEFAULT_QUERY_TERM,
) -> list[T]:
    """Keep products whose name or category contains the query.

    If nothing matches, fall back to the first ``widen_limit`` unfiltered
    products so a valid result set is never filtered down to zero.
    """
    if is_generic_query(query, default_term):
        return list(products)

    needle = query.strip().lower()
    matching = [
        p
        for p in products
        if needle in p.name.lower() or (p.category and needle in p.category.lower())
    ]
    if matching:
        return matching

    logger.debug(f"No products matched '{query}', widening to {widen_limit} unfiltered")
    return list(products[:widen_limit])


# =============================================================================
# Store Heuristics
# =============================================================================


def find_address_in_text(text: str, keywords: Iterable[str], window: int = 3) -> str | None:
    """Find a street address near a retailer keyword in free page text.

    Used as a last resort when no store card selector matches. Each line
    mentioning a keyword is searched together with the next ``window``
    lines for an address-like substring.

    Returns:
        The first address found, or None.
    """
    lowered_keywords = [k.lower() for k in keywords]
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    for i, line in enumerate(lines):
        if not any(keyword in line.lower() for keyword in lowered_keywords):
            continue
        block = " ".join(lines[i : i + window + 1])
        if match := ADDRESS_PATTERN.search(block):
            return match.group(0).strip()

    return None
