"""Tests for product normalization helpers."""

import random
from decimal import Decimal

import pytest

from grocerybag.ingest.schemas import Availability, Product
from grocerybag.normalize import (
    detect_availability,
    filter_by_query,
    find_address_in_text,
    format_price,
    generate_product_id,
    infer_category,
    is_generic_query,
    normalize_original_price,
    normalize_price,
    parse_price,
    resolve_image_url,
    resolve_product_url,
)

FALLBACK_IMAGES = (
    "https://images.example.com/a.jpg",
    "https://images.example.com/b.jpg",
    "https://images.example.com/c.jpg",
)


def make_product(name: str, category: str | None = None) -> Product:
    return Product(
        id=generate_product_id(name, "store-1"),
        name=name,
        price="$1.00",
        image_url="https://images.example.com/p.jpg",
        url="https://example.com",
        category=category if category is not None else infer_category(name),
    )


class TestGenerateProductId:
    """Tests for deterministic product ids."""

    def test_slug_replaces_non_alphanumerics(self):
        """Every character outside [a-z0-9] becomes a dash."""
        assert generate_product_id("Great Value Milk, 1 gal", "walmart-2613") == (
            "walmart-2613-great-value-milk--1-gal"
        )

    def test_slug_is_lowercased(self):
        """Casing does not produce different ids."""
        assert generate_product_id("MILK", "s") == generate_product_id("milk", "s")

    def test_slug_truncated_to_50_chars(self):
        """Long names are cut to a 50 character slug."""
        product_id = generate_product_id("x" * 80, "store")
        assert product_id == "store-" + "x" * 50

    def test_same_name_same_store_is_stable(self):
        """Ids are deterministic."""
        first = generate_product_id("Trader Joe's Cookie Butter", "traderjoes-95616")
        second = generate_product_id("Trader Joe's Cookie Butter", "traderjoes-95616")
        assert first == second

    def test_different_store_different_id(self):
        """The store id is part of the product id."""
        assert generate_product_id("Milk", "a") != generate_product_id("Milk", "b")


class TestPrices:
    """Tests for price parsing and formatting."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("$3.64", Decimal("3.64")),
            ("current price $3.64", Decimal("3.64")),
            ("$ 12", Decimal("12")),
            ("$1,299.00", Decimal("1299.00")),
            ("2 for $5", Decimal("5")),
            ("99¢", Decimal("0.99")),
            ("4.5", Decimal("4.5")),
        ],
    )
    def test_parse_price(self, text, expected):
        """Dollar amounts are preferred, then cents, then bare numbers."""
        assert parse_price(text) == expected

    @pytest.mark.parametrize("text", [None, "", "See coupon", "Price unavailable"])
    def test_parse_price_without_number(self, text):
        """Text without an amount is unusable."""
        assert parse_price(text) is None

    def test_format_price_two_decimals(self):
        """Canonical form always has two decimals."""
        assert format_price(Decimal("5")) == "$5.00"
        assert format_price(Decimal("0.99")) == "$0.99"

    def test_format_price_rounds_half_up(self):
        """Sub-cent amounts round half up."""
        assert format_price(Decimal("2.345")) == "$2.35"

    def test_normalize_price(self):
        """Raw page text normalizes to $X.XX."""
        assert normalize_price("Now $2.5") == "$2.50"
        assert normalize_price("See coupon") is None

    def test_original_price_kept_for_real_discount(self):
        """Original price survives only when it is higher than the price."""
        assert normalize_original_price("Was $4.12", "$3.64") == "$4.12"

    @pytest.mark.parametrize("original", ["$3.64", "$2.00", None, "n/a"])
    def test_original_price_dropped_without_discount(self, original):
        """Equal, lower or unparseable original prices are dropped."""
        assert normalize_original_price(original, "$3.64") is None


class TestInferCategory:
    """Tests for keyword category inference."""

    @pytest.mark.parametrize(
        "name,category",
        [
            ("Great Value Whole Milk", "dairy"),
            ("Tillamook Cheddar Cheese", "dairy"),
            ("Sourdough Bread", "bakery"),
            ("Boneless Chicken Breast", "meat"),
            ("Organic Bananas", "produce"),
            ("Cauliflower Gnocchi", "frozen"),
            ("Atlantic Salmon Fillet", "seafood"),
            ("Cabernet Sauvignon Wine", "wine"),
            ("Everything Bagel Seasoning", "bakery"),
            ("Speculoos Cookie Butter", "condiments"),
            ("Paper Towels", "grocery"),
        ],
    )
    def test_infer_category(self, name, category):
        """First matching category in table order wins."""
        assert infer_category(name) == category

    def test_case_insensitive(self):
        """Keyword matching ignores case."""
        assert infer_category("FROZEN PIZZA") == "frozen"


class TestDetectAvailability:
    """Tests for availability detection."""

    def test_defaults_to_in_stock(self):
        """No signal means in stock."""
        assert detect_availability() == Availability.IN_STOCK

    def test_out_of_stock_marker(self):
        """An out-of-stock marker element wins."""
        assert detect_availability(out_of_stock=True, limited=True) == Availability.OUT_OF_STOCK

    def test_limited_marker(self):
        """A limited-stock marker element."""
        assert detect_availability(limited=True) == Availability.LIMITED

    def test_text_phrases(self):
        """Listing text is scanned for stock phrases."""
        assert detect_availability(text="Sold Out online") == Availability.OUT_OF_STOCK
        assert detect_availability(text="Only a few left!") == Availability.LIMITED


class TestUrls:
    """Tests for image and product URL resolution."""

    def test_absolute_image_kept(self):
        """Absolute http(s) images pass through."""
        url = "https://i5.walmartimages.com/milk.jpg"
        assert resolve_image_url(url, FALLBACK_IMAGES) == url

    def test_protocol_relative_image_upgraded(self):
        """Protocol-relative images become https."""
        assert resolve_image_url("//cdn.example.com/x.png", FALLBACK_IMAGES) == (
            "https://cdn.example.com/x.png"
        )

    @pytest.mark.parametrize(
        "image", [None, "", "/images/milk.jpg", "data:image/png;base64,iVBORw0KGgo="]
    )
    def test_unusable_image_replaced(self, image):
        """Missing, relative and data: images get a fallback image."""
        assert resolve_image_url(image, FALLBACK_IMAGES) in FALLBACK_IMAGES

    def test_seeded_rng_is_repeatable(self):
        """The same seed picks the same fallback images."""
        rng_a, rng_b = random.Random(7), random.Random(7)
        picks_a = [resolve_image_url(None, FALLBACK_IMAGES, rng_a) for _ in range(5)]
        picks_b = [resolve_image_url(None, FALLBACK_IMAGES, rng_b) for _ in range(5)]
        assert picks_a == picks_b

    def test_relative_product_url_joined(self):
        """Relative links are made absolute against the homepage."""
        assert resolve_product_url("/ip/milk/123", "https://www.walmart.com") == (
            "https://www.walmart.com/ip/milk/123"
        )

    @pytest.mark.parametrize("link", [None, "", "#", "javascript:void(0)"])
    def test_missing_product_url_uses_homepage(self, link):
        """Unusable links fall back to the retailer homepage."""
        assert resolve_product_url(link, "https://www.safeway.com") == "https://www.safeway.com"


class TestFilterByQuery:
    """Tests for local query filtering with widening."""

    @pytest.fixture
    def products(self):
        return [
            make_product("Organic Whole Milk"),
            make_product("Sourdough Bread"),
            make_product("Cheddar Cheese"),
            make_product("Bananas"),
            make_product("Paper Towels"),
        ]

    @pytest.mark.parametrize("query", [None, "", "   ", "food", "FOOD"])
    def test_generic_query(self, query):
        """Blank queries and the default term do not filter."""
        assert is_generic_query(query)

    def test_generic_query_returns_everything(self, products):
        """The default browse term keeps every product."""
        assert filter_by_query(products, "food", widen_limit=2) == products

    def test_filters_on_name(self, products):
        """Substring match on the product name, case-insensitive."""
        result = filter_by_query(products, "MILK", widen_limit=2)
        assert [p.name for p in result] == ["Organic Whole Milk"]

    def test_filters_on_category(self, products):
        """Substring match on the inferred category."""
        result = filter_by_query(products, "dairy", widen_limit=2)
        assert [p.name for p in result] == ["Organic Whole Milk", "Cheddar Cheese"]

    def test_widens_when_nothing_matches(self, products):
        """Over-filtering returns the first widen_limit unfiltered products."""
        result = filter_by_query(products, "salmon", widen_limit=2)
        assert result == products[:2]

    def test_never_empty_when_products_exist(self, products):
        """A non-empty input never filters down to zero."""
        assert filter_by_query(products, "zzz", widen_limit=10) == products


class TestFindAddressInText:
    """Tests for the page text address heuristic."""

    def test_address_after_keyword(self):
        """An address on the lines after a store name is found."""
        text = "Find a store\nWalmart Supercenter\n1900 Cowell Blvd\nDavis, CA 95618\n"
        assert find_address_in_text(text, ["walmart supercenter"]) == "1900 Cowell Blvd"

    def test_no_keyword(self):
        """Addresses away from any retailer keyword are ignored."""
        text = "Corporate office\n702 SW 8th St\nBentonville"
        assert find_address_in_text(text, ["safeway"]) is None

    def test_no_address(self):
        """A keyword without an address finds nothing."""
        assert find_address_in_text("Safeway\nOpen 24 hours", ["safeway"]) is None
