#!/usr/bin/env python3
"""
Sample part generator: the last resort when no catalog returned live results.

Queries are matched against a small keyword table; anything unmatched gets
one generic industrial component with a random part number.
"""

import logging
import random
import string
from typing import List, Optional, Tuple

from catalogs import origin_for
from part_extractor import NAME_MAX_LENGTH, PartRecord

logger = logging.getLogger(__name__)

SAMPLE_NOTE = 'Sample data - real scraping in progress'
SAMPLE_SOURCE = 'Smart-Samples'

# (keywords, [(part number, name, price, supplier)])
SAMPLE_CATEGORIES: List[Tuple[Tuple[str, ...], List[Tuple[str, str, float, str]]]] = [
    (('bearing', '6203'), [
        ('6203-2Z', 'SKF Deep Groove Ball Bearing - 6203-2Z', 12.45, 'Grainger'),
        ('6203-RS', 'Timken Single Row Ball Bearing', 11.80, 'McMaster-Carr'),
    ]),
    (('seal', 'hydraulic'), [
        ('CR-25x35x7', 'Hydraulic Oil Seal 25x35x7mm', 15.60, 'Grainger'),
        ('VS-40x52x7', 'Valve Stem Seal 40x52x7mm', 18.25, 'Fastenal'),
    ]),
    (('bolt', 'screw', 'fastener'), [
        ('M8x25-HEX', 'Hex Head Cap Screw M8 x 25mm, Stainless Steel', 2.45, 'Fastenal'),
        ('1/4-20x1', 'Socket Head Cap Screw 1/4-20 x 1", Alloy Steel', 1.95, 'McMaster-Carr'),
    ]),
    (('belt', 'pulley'), [
        ('A48', 'Classic V-Belt A48, 1/2" x 50" Outside Length', 14.30, 'Grainger'),
        ('3L300', 'Light Duty V-Belt 3L300, 3/8" x 30"', 7.85, 'McMaster-Carr'),
    ]),
    (('filter',), [
        ('HF-6553', 'Hydraulic Filter Element, 10 Micron', 32.90, 'Fastenal'),
    ]),
]

GENERIC_SUPPLIERS = ('Grainger', 'McMaster-Carr')


class SamplePartGenerator:
    """Always returns at least one synthetic PartRecord, each carrying a note"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, query: str) -> List[PartRecord]:
        lower_query = (query or '').lower()

        for keywords, samples in SAMPLE_CATEGORIES:
            if any(keyword in lower_query for keyword in keywords):
                logger.info(f"⚠️ Returning {len(samples)} '{keywords[0]}' samples for: \"{query}\"")
                return [self._sample(*sample) for sample in samples]

        logger.info(f"⚠️ No sample category for \"{query}\", generating a generic component")
        return [self._generic(query)]

    def _sample(self, part_number: str, name: str, price: float, supplier: str,
                availability: str = 'In Stock') -> PartRecord:
        return PartRecord(
            part_number=part_number,
            name=name,
            supplier=supplier,
            source=SAMPLE_SOURCE,
            price=price,
            price_text=f"${price:.2f}",
            availability=availability,
            product_url=origin_for(supplier),
            note=SAMPLE_NOTE,
        )

    def _generic(self, query: str) -> PartRecord:
        suffix = ''.join(self.rng.choice(string.ascii_uppercase + string.digits) for _ in range(6))
        price = round(self.rng.uniform(10, 60), 2)
        supplier = self.rng.choice(GENERIC_SUPPLIERS)
        availability = 'In Stock' if self.rng.random() > 0.2 else '2-3 Day Lead Time'
        return self._sample(f"IND-{suffix}", f'Industrial Component for "{query}"'[:NAME_MAX_LENGTH],
                            price, supplier, availability)
