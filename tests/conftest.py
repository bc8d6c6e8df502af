"""
Shared fixtures for the parts search tests.

Nothing here touches the network: strategies are fakes and fetchers get
stub sessions or mocked browsers.
"""

import random

import pytest

from catalog_strategies import CatalogStrategy
from catalogs import GRAINGER
from part_extractor import PartRecord


GRAINGER_SEARCH_PAGE = """
<html><body>
<div class="results">
  <div data-automation-id="product-tile">
    <a href="/product/SKF-Deep-Groove-Ball-Bearing-1ZGH5">
      <h3 data-automation-id="product-title">SKF Deep Groove Ball Bearing 6203-2Z</h3>
    </a>
    <span data-automation-id="product-item-number">1ZGH5</span>
    <span data-automation-id="product-price">$12.45</span>
    <span data-automation-id="product-availability">In Stock</span>
  </div>
  <div data-automation-id="product-tile">
    <a href="https://www.grainger.com/product/Timken-Bearing-2ABC7">
      <h3 data-automation-id="product-title">Timken Radial Ball Bearing 6203</h3>
    </a>
    <span data-automation-id="product-item-number">2ABC7</span>
    <span data-automation-id="product-price">$1,234.56</span>
    <span data-automation-id="product-availability">Out of Stock</span>
  </div>
  <div data-automation-id="product-tile">
    <h3 data-automation-id="product-title">Tile without an item number</h3>
    <span data-automation-id="product-price">$5.00</span>
  </div>
  <div data-automation-id="product-tile">
    <span data-automation-id="product-item-number">3DEF9</span>
    <span data-automation-id="product-title">NSK Sealed Ball Bearing 6203DDU</span>
    <span class="price">Call for price</span>
  </div>
</div>
</body></html>
"""

MCMASTER_SEARCH_PAGE = """
<html><body>
<table>
  <tr class="ProductTableRow">
    <td class="PartNumber">6661K13</td>
    <td class="ProductDescription">Ball Bearing, Sealed, Trade Number 6203-2RS</td>
    <td class="Price">$9.87 Each</td>
  </tr>
  <tr class="ProductTableRow">
    <td class="PartNumber">6661K14</td>
    <td class="ProductDescription">Ball Bearing, Shielded, Trade Number 6203-ZZ</td>
    <td class="Price">$8.12 Each</td>
  </tr>
</table>
</body></html>
"""

FASTENAL_SEARCH_PAGE = """
<html><body>
<div class="product" data-family="bolts">
  <span data-sku="0123456"></span>
  <a class="product-name" href="product/details/0123456">Hex Cap Screw M8 x 25mm</a>
  <span class="price">$0.42</span>
  <span class="availability">Discontinued</span>
</div>
</body></html>
"""


class FakeStrategy(CatalogStrategy):
    """Strategy returning canned records (or raising) and recording its calls"""

    def __init__(self, name, results=None, error=None, layout=GRAINGER):
        super().__init__(name, layout)
        self.results = results if results is not None else []
        self.error = error
        self.calls = []

    def _search(self, query, max_results):
        self.calls.append((query, max_results))
        if self.error is not None:
            raise self.error
        if callable(self.results):
            return self.results(query)
        return list(self.results)


@pytest.fixture
def grainger_page():
    return GRAINGER_SEARCH_PAGE


@pytest.fixture
def mcmaster_page():
    return MCMASTER_SEARCH_PAGE


@pytest.fixture
def fastenal_page():
    return FASTENAL_SEARCH_PAGE


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def fake_strategy():
    return FakeStrategy


@pytest.fixture
def make_record():
    """Build a live PartRecord with sensible defaults"""
    def _make(**overrides):
        fields = {
            'part_number': '6203-2Z',
            'name': 'Deep Groove Ball Bearing',
            'supplier': 'Grainger',
            'source': 'Grainger-Advanced',
            'price': 12.45,
            'price_text': '$12.45',
            'availability': 'In Stock',
            'product_url': 'https://www.grainger.com/product/6203-2Z',
            'last_updated': '2024-01-01T00:00:00.000Z',
        }
        fields.update(overrides)
        return PartRecord(**fields)
    return _make
