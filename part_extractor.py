#!/usr/bin/env python3
"""
Part Extractor for the industrial parts search service

Turns catalog search-result markup into PartRecord objects. Extraction runs
through ordered locator cascades: the most specific marker for a catalog is
tried first and generic class-name patterns last.
"""

from __future__ import annotations

import re
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TYPE_CHECKING, Union

from bs4 import BeautifulSoup, Tag

if TYPE_CHECKING:
    from catalogs import CatalogLayout

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 200
DEFAULT_AVAILABILITY = 'Available'

PRICE_PATTERN = re.compile(r'\$?(\d+(?:,\d{3})*(?:\.\d{2})?)')
PART_NUMBER_STRIP = re.compile(r'[^A-Za-z0-9_\-]')
CURRENCY_MARKERS = ('$', 'USD', '€', '£')
OUT_OF_STOCK_MARKERS = ('out of stock', 'discontinued')


def utc_timestamp() -> str:
    """ISO-8601 capture timestamp in UTC with a Z suffix"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_price(text: Optional[str]) -> Optional[float]:
    """Parse a free-text price like '$1,234.56' into a float, or None"""
    if not text:
        return None
    match = PRICE_PATTERN.search(text)
    if not match:
        return None
    try:
        return float(match.group(1).replace(',', ''))
    except ValueError:
        return None


def parse_availability(text: Optional[str]) -> bool:
    """True unless the text says the part is out of stock or discontinued"""
    if not text:
        return True
    lowered = text.lower()
    return not any(marker in lowered for marker in OUT_OF_STOCK_MARKERS)


def has_currency_marker(text: str) -> bool:
    return any(marker in text for marker in CURRENCY_MARKERS)


def clean_text(text: Optional[str]) -> str:
    if not text:
        return ''
    return re.sub(r'\s+', ' ', text).strip()


@dataclass(frozen=True)
class PartRecord:
    """A single part offer from one supplier catalog"""
    part_number: str
    name: str
    supplier: str
    source: str
    price: Optional[float] = None
    price_text: str = ''
    availability: str = DEFAULT_AVAILABILITY
    in_stock: bool = field(init=False)
    product_url: Optional[str] = None
    last_updated: str = field(default_factory=utc_timestamp)
    note: Optional[str] = None

    def __post_init__(self):
        # in_stock always follows the availability text
        object.__setattr__(self, 'in_stock', parse_availability(self.availability))

    @property
    def dedupe_key(self) -> str:
        return f"{self.supplier}{self.part_number}{self.name}".lower()

    @property
    def is_synthetic(self) -> bool:
        return self.note is not None

    def to_dict(self) -> Dict:
        data = {
            'partNumber': self.part_number,
            'name': self.name,
            'price': self.price,
            'priceText': self.price_text,
            'availability': self.availability,
            'inStock': self.in_stock,
            'supplier': self.supplier,
            'productUrl': self.product_url,
            'lastUpdated': self.last_updated,
            'source': self.source,
        }
        if self.note is not None:
            data['note'] = self.note
        return data

    def with_changes(self, **changes) -> 'PartRecord':
        return replace(self, **changes)


# ---------------------------------------------------------------------------
# Locators
# ---------------------------------------------------------------------------

class Locator:
    """A way of finding nodes, or a text value, inside a markup node"""

    def select(self, node) -> List[Tag]:
        raise NotImplementedError

    def text(self, node) -> str:
        raise NotImplementedError


class CssLocator(Locator):
    """Matches with a CSS selector; text is taken from the first non-empty match"""

    def __init__(self, selector: str):
        self.selector = selector

    def select(self, node) -> List[Tag]:
        return node.select(self.selector)

    def text(self, node) -> str:
        for element in self.select(node):
            text = clean_text(element.get_text(separator=' ', strip=True))
            if text:
                return text
        return ''

    def __repr__(self):
        return f"CssLocator({self.selector!r})"


class AttributeLocator(CssLocator):
    """Reads an attribute value (data-sku, data-price, ...) of matched elements"""

    def __init__(self, selector: str, attribute: str):
        super().__init__(selector)
        self.attribute = attribute

    def text(self, node) -> str:
        for element in self.select(node):
            value = element.get(self.attribute)
            if isinstance(value, list):
                value = ' '.join(value)
            value = clean_text(value)
            if value:
                return value
        return ''

    def __repr__(self):
        return f"AttributeLocator({self.selector!r}, {self.attribute!r})"


class PatternLocator(Locator):
    """Regex over the node's visible text; never matches container nodes"""

    def __init__(self, pattern: Union[str, 're.Pattern'], flags: int = 0):
        self.pattern = re.compile(pattern, flags) if isinstance(pattern, str) else pattern

    def select(self, node) -> List[Tag]:
        return []

    def text(self, node) -> str:
        match = self.pattern.search(node.get_text(separator=' ', strip=True))
        return clean_text(match.group(0)) if match else ''

    def __repr__(self):
        return f"PatternLocator({self.pattern.pattern!r})"


def as_locators(candidates: Iterable[Union[str, Locator]]) -> List[Locator]:
    """Plain strings are treated as CSS selectors"""
    return [c if isinstance(c, Locator) else CssLocator(c) for c in candidates]


def extract_text(node, locators: Sequence[Locator]) -> str:
    """Return the first non-empty text produced by the locators, in order"""
    for locator in locators:
        text = locator.text(node)
        if text:
            return text
    return ''


def extract_text_preferring(node, locators: Sequence[Locator],
                            predicate: Callable[[str], bool]) -> str:
    """Like extract_text, but a candidate satisfying predicate beats an earlier one that doesn't"""
    first_found = ''
    for locator in locators:
        text = locator.text(node)
        if not text:
            continue
        if predicate(text):
            return text
        if not first_found:
            first_found = text
    return first_found


# ---------------------------------------------------------------------------
# Record assembly and document parsing
# ---------------------------------------------------------------------------

class RecordAssembler:
    """Builds a PartRecord out of one product-like node of a catalog page"""

    def __init__(self, layout: 'CatalogLayout', source: str, search_url: Optional[str] = None):
        self.layout = layout
        self.source = source
        self.search_url = search_url

    def assemble(self, node) -> Optional[PartRecord]:
        raw_part_number = extract_text(node, self.layout.part_number_locators)
        part_number = PART_NUMBER_STRIP.sub('', raw_part_number)
        name = clean_text(extract_text(node, self.layout.name_locators))[:NAME_MAX_LENGTH]

        if len(part_number) < self.layout.min_part_number_length or len(name) < self.layout.min_name_length:
            logger.debug(f"Skipping node without usable part number/name ({raw_part_number!r}, {name!r})")
            return None

        price_text = extract_text_preferring(node, self.layout.price_locators, has_currency_marker)
        availability = extract_text(node, self.layout.availability_locators) or DEFAULT_AVAILABILITY

        return PartRecord(
            part_number=part_number,
            name=name,
            supplier=self.layout.supplier,
            source=self.source,
            price=parse_price(price_text),
            price_text=price_text,
            availability=availability,
            product_url=self._product_url(node),
        )

    def _product_url(self, node) -> Optional[str]:
        anchor = node if getattr(node, 'name', None) == 'a' and node.get('href') else node.find('a', href=True)
        if anchor is not None:
            href = anchor.get('href', '').strip()
            if href and not href.startswith(('#', 'javascript:')):
                return self.layout.resolve_url(href)
        return self.search_url or self.layout.origin


class DocumentParser:
    """
    Finds product containers in a fetched page and assembles records from them.

    Container locators are tried in order. The first one that matches any
    node is used; when its nodes produce no records the parser moves on to
    the next locator unless commit_to_first_match is set.
    """

    def __init__(self, container_locators: Sequence[Locator], assembler: RecordAssembler,
                 commit_to_first_match: bool = False):
        self.container_locators = list(container_locators)
        self.assembler = assembler
        self.commit_to_first_match = commit_to_first_match

    def parse(self, document, max_results: int) -> List[PartRecord]:
        if max_results <= 0:
            return []

        soup = document if isinstance(document, (BeautifulSoup, Tag)) else BeautifulSoup(document or '', 'html.parser')

        for locator in self.container_locators:
            nodes = locator.select(soup)
            if not nodes:
                continue

            logger.info(f"📋 Found {len(nodes)} products with selector: {locator}")
            records = []
            for node in nodes[:max_results]:
                record = self.assembler.assemble(node)
                if record is not None:
                    records.append(record)

            if records or self.commit_to_first_match:
                return records

        return []
