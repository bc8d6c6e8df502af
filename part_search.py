#!/usr/bin/env python3
"""
Part search orchestration

Runs the retrieval strategies one after another in priority order. The
first strategy whose normalized output is non-empty wins; when all of them
come back empty the sample generator supplies placeholder parts.
"""

import logging
import re
from dataclasses import dataclass
from numbers import Number
from typing import Iterable, List, Optional, Sequence

from catalogs import LAYOUTS
from part_extractor import PartRecord, parse_price
from sample_parts import SAMPLE_SOURCE, SamplePartGenerator

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    """Final result set of one orchestration run"""
    records: List[PartRecord]
    strategy: str
    synthetic: bool

    @property
    def is_live(self) -> bool:
        return not self.synthetic


def normalize_records(records: Iterable[PartRecord]) -> List[PartRecord]:
    """Coerce price and product_url into final shape and drop duplicates, keeping first-seen order"""
    seen = set()
    normalized = []

    for record in records:
        if not record.part_number or not record.name:
            continue

        changes = {}
        if not isinstance(record.price, Number) or isinstance(record.price, bool):
            changes['price'] = parse_price(record.price_text)
        layout = LAYOUTS.get(record.supplier)
        if layout and record.product_url:
            resolved = layout.resolve_url(record.product_url)
            if resolved != record.product_url:
                changes['product_url'] = resolved
        if changes:
            record = record.with_changes(**changes)

        key = record.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        normalized.append(record)

    return normalized


def clean_query(query: str) -> str:
    """Punctuation to spaces, whitespace collapsed, leading zeros dropped from numbers"""
    cleaned = re.sub(r'[^\w\s]', ' ', query or '')
    cleaned = re.sub(r'\b0+(\d)', r'\1', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()


class PartSearchOrchestrator:
    """Strategy cascade with a guaranteed non-empty terminal fallback"""

    def __init__(self, strategies: Sequence, fallback: Optional[SamplePartGenerator] = None):
        self.strategies = list(strategies)
        self.fallback = fallback or SamplePartGenerator()

    def search(self, query: str, max_results: int = 5) -> SearchOutcome:
        logger.info(f"🔍 Starting search for: \"{query}\"")

        for index, strategy in enumerate(self.strategies, start=1):
            records = normalize_records(strategy.search(query, max_results))[:max_results]
            if records:
                logger.info(f"✅ Method {index} ({strategy.name}) succeeded: {len(records)} results")
                return SearchOutcome(records=records, strategy=strategy.name, synthetic=False)

        logger.info(f"⚠️ All scraping failed, returning sample data for: \"{query}\"")
        records = normalize_records(self.fallback.generate(query))
        return SearchOutcome(records=records, strategy=SAMPLE_SOURCE, synthetic=True)

    @property
    def method_names(self) -> List[str]:
        return [strategy.name for strategy in self.strategies] + [SAMPLE_SOURCE]
