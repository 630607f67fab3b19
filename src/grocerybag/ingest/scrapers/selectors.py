"""Selector cascades for extracting listings from unstable retailer markup.

Retailer sites change their markup between redesigns and A/B tests, so
every extraction point is expressed as an ordered chain of strategies.
The chain is evaluated in priority order and the first strategy that
yields at least one record wins.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from grocerybag.logging_config import get_logger
from grocerybag.normalize import find_address_in_text

logger = get_logger(__name__)

# Runs inside the page. For every container element (up to `limit`) it
# resolves each field from its own selector list, first non-empty wins.
# Containers where no text field resolved are skipped.
# fmt: off
EXTRACT_CARDS_JS = """
    ({container, text, images, links, flags, idAttributes, limit}) => {
        const records = [];
        const elements = document.querySelectorAll(container);

        const firstText = (root, selectors) => {
            for (const sel of selectors) {
                const el = root.querySelector(sel);
                const value = el && el.textContent ? el.textContent.trim() : '';
                if (value) return value;
            }
            return null;
        };

        const firstImage = (root, selectors) => {
            for (const sel of selectors) {
                const img = root.querySelector(sel);
                if (!img) continue;
                const src = img.src || '';
                const lazy = img.getAttribute('data-src');
                if (lazy && (!src || src.startsWith('data:'))) {
                    return new URL(lazy, document.baseURI).href;
                }
                if (src) return src;
            }
            return null;
        };

        const firstLink = (root, selectors) => {
            for (const sel of selectors) {
                const a = root.querySelector(sel);
                if (a && a.href) return a.href;
            }
            return null;
        };

        for (let index = 0; index < elements.length && index < limit; index++) {
            const el = elements[index];
            try {
                const record = {index};
                let hasText = false;

                for (const [key, selectors] of Object.entries(text)) {
                    record[key] = firstText(el, selectors);
                    if (record[key]) hasText = true;
                }
                if (!hasText) continue;

                for (const [key, selectors] of Object.entries(images)) {
                    record[key] = firstImage(el, selectors);
                }
                for (const [key, selectors] of Object.entries(links)) {
                    record[key] = firstLink(el, selectors);
                }
                for (const [key, selectors] of Object.entries(flags)) {
                    record[key] = selectors.some(sel => el.querySelector(sel) !== null);
                }

                record.id = null;
                for (const attr of idAttributes) {
                    const value = el.getAttribute(attr);
                    if (value) {
                        record.id = value;
                        break;
                    }
                }

                record.text = (el.innerText || el.textContent || '').trim().slice(0, 500);
                records.push(record);
            } catch (e) {
                console.error('Error extracting listing:', e);
            }
        }

        return records;
    }
"""
# fmt: on


class ExtractionStrategy(ABC):
    """One way of pulling structured records out of a loaded page."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Short description for logging."""

    @abstractmethod
    async def extract(self, page: Page) -> list[dict[str, Any]]:
        """Return the records found, or an empty list."""


@dataclass(frozen=True)
class CardSelectorStrategy(ExtractionStrategy):
    """Extract one record per element matching a container selector.

    Each field maps to its own ordered list of candidate sub-selectors.
    """

    container: str
    text: Mapping[str, Sequence[str]]
    images: Mapping[str, Sequence[str]] = field(default_factory=dict)
    links: Mapping[str, Sequence[str]] = field(default_factory=dict)
    flags: Mapping[str, Sequence[str]] = field(default_factory=dict)
    id_attributes: Sequence[str] = ()
    limit: int = 20

    @property
    def label(self) -> str:
        return self.container

    def script_args(self) -> dict[str, Any]:
        """Arguments passed to the in-page extraction script."""
        return {
            "container": self.container,
            "text": {k: list(v) for k, v in self.text.items()},
            "images": {k: list(v) for k, v in self.images.items()},
            "links": {k: list(v) for k, v in self.links.items()},
            "flags": {k: list(v) for k, v in self.flags.items()},
            "idAttributes": list(self.id_attributes),
            "limit": self.limit,
        }

    async def extract(self, page: Page) -> list[dict[str, Any]]:
        records = await page.evaluate(EXTRACT_CARDS_JS, self.script_args())
        return list(records or [])


@dataclass(frozen=True)
class PageTextAddressStrategy(ExtractionStrategy):
    """Last resort: find a store address near a retailer keyword in page text."""

    keywords: Sequence[str]
    store_name: str

    @property
    def label(self) -> str:
        return "page text address scan"

    async def extract(self, page: Page) -> list[dict[str, Any]]:
        body_text = await page.inner_text("body")
        address = find_address_in_text(body_text or "", self.keywords)
        if not address:
            return []
        return [{"id": None, "name": self.store_name, "address": address}]


class SelectorCascade:
    """Ordered chain of extraction strategies; the first non-empty result wins."""

    def __init__(self, label: str, strategies: Sequence[ExtractionStrategy]):
        self.label = label
        self.strategies = tuple(strategies)

    def __len__(self) -> int:
        return len(self.strategies)

    async def run(self, page: Page) -> list[dict[str, Any]]:
        """Evaluate strategies in order against the page.

        A strategy that errors inside the browser is logged and skipped.

        Returns:
            Records from the first strategy that found any, else [].
        """
        for strategy in self.strategies:
            try:
                records = await strategy.extract(page)
            except PlaywrightError as e:
                logger.warning(f"{self.label}: strategy '{strategy.label}' failed: {e}")
                continue

            if records:
                logger.debug(f"{self.label}: found {len(records)} using '{strategy.label}'")
                return records

        logger.info(f"{self.label}: no strategy matched")
        return []


def card_cascade(label: str, containers: Sequence[str], **card_fields: Any) -> SelectorCascade:
    """Build a cascade with one card strategy per container selector.

    Args:
        label: Name used in log messages.
        containers: Container selectors in priority order.
        **card_fields: Field selector lists shared by all containers.
    """
    strategies = [
        CardSelectorStrategy(container=container, **card_fields) for container in containers
    ]
    return SelectorCascade(label, strategies)
