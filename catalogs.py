#!/usr/bin/env python3
"""
Catalog layouts: search endpoints and locator tables for each supplier.

Locator lists are ordered by confidence. Structured automation attributes
come first, generic class-name patterns and bare heading tags last.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import quote, urljoin, urlparse

from part_extractor import AttributeLocator, Locator, PatternLocator, as_locators


@dataclass(frozen=True)
class CatalogLayout:
    """Where a supplier's search lives and how its result markup looks"""
    supplier: str
    origin: str
    search_path: str
    container_locators: List[Locator]
    part_number_locators: List[Locator]
    name_locators: List[Locator]
    price_locators: List[Locator]
    availability_locators: List[Locator] = field(default_factory=list)
    min_part_number_length: int = 1
    min_name_length: int = 1

    def search_url(self, query: str) -> str:
        return f"{self.origin}{self.search_path}{quote(query, safe='')}"

    def resolve_url(self, href: Optional[str]) -> Optional[str]:
        """Absolute URLs pass through; anything else is joined onto the origin"""
        if not href:
            return None
        if href.startswith('//'):
            return 'https:' + href
        if urlparse(href).scheme in ('http', 'https'):
            return href
        return urljoin(self.origin + '/', href)


GRAINGER = CatalogLayout(
    supplier='Grainger',
    origin='https://www.grainger.com',
    search_path='/search?searchQuery=',
    container_locators=as_locators([
        '[data-automation-id="product-tile"]',
        '.search-result',
        '.product-item',
        '.product-card',
        '.ProductTileContainer',
        '.product-listing-item',
    ]),
    part_number_locators=as_locators([
        '[data-automation-id="product-item-number"]',
        AttributeLocator('[data-item-number]', 'data-item-number'),
        '.product-number',
        '.item-number',
        '.part-number',
        '[class*="item-number"]',
    ]),
    name_locators=as_locators([
        '[data-automation-id="product-title"]',
        '.product-title',
        '.product-name',
        'h3',
        'h4',
        '[class*="title"]',
    ]),
    price_locators=as_locators([
        '[data-automation-id="product-price"]',
        AttributeLocator('[data-price]', 'data-price'),
        '.price',
        '.product-price',
        '[class*="price"]',
        PatternLocator(r'\$\s?\d[\d,]*(?:\.\d{2})?'),
    ]),
    availability_locators=as_locators([
        '[data-automation-id="product-availability"]',
        '.availability',
        '.stock-status',
    ]),
    min_part_number_length=3,
    min_name_length=6,
)

MCMASTER = CatalogLayout(
    supplier='McMaster-Carr',
    origin='https://www.mcmaster.com',
    search_path='/search?query=',
    container_locators=as_locators([
        '.ProductTableRow',
        '.product-item',
        '.search-result',
    ]),
    part_number_locators=as_locators([
        '.PartNumber',
        '.part-number',
    ]),
    name_locators=as_locators([
        '.ProductDescription',
        '.product-description',
    ]),
    price_locators=as_locators([
        '.Price',
        '.price',
    ]),
    availability_locators=as_locators([
        '.Availability',
        '.availability',
    ]),
)

FASTENAL = CatalogLayout(
    supplier='Fastenal',
    origin='https://www.fastenal.com',
    search_path='/search?query=',
    container_locators=as_locators([
        '.product-item',
        '.search-result',
        '.product',
    ]),
    part_number_locators=as_locators([
        AttributeLocator('[data-sku]', 'data-sku'),
        '.part-number',
        '.product-number',
    ]),
    name_locators=as_locators([
        '.product-name',
        '.description',
    ]),
    price_locators=as_locators([
        '.price',
    ]),
    availability_locators=as_locators([
        '.availability',
        '.stock-status',
    ]),
)

LAYOUTS: Dict[str, CatalogLayout] = {
    layout.supplier: layout for layout in (GRAINGER, MCMASTER, FASTENAL)
}


def origin_for(supplier: str) -> Optional[str]:
    layout = LAYOUTS.get(supplier)
    return layout.origin if layout else None
