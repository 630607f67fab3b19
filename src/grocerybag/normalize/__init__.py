"""Normalize raw page text into the common inventory schemas."""

from grocerybag.normalize.products import (
    DEFAULT_CATEGORY,
    DEFAULT_QUERY_TERM,
    detect_availability,
    filter_by_query,
    find_address_in_text,
    format_price,
    generate_product_id,
    infer_category,
    is_absolute_url,
    is_generic_query,
    normalize_original_price,
    normalize_price,
    parse_price,
    resolve_image_url,
    resolve_product_url,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_QUERY_TERM",
    "detect_availability",
    "filter_by_query",
    "find_address_in_text",
    "format_price",
    "generate_product_id",
    "infer_category",
    "is_absolute_url",
    "is_generic_query",
    "normalize_original_price",
    "normalize_price",
    "parse_price",
    "resolve_image_url",
    "resolve_product_url",
]
