#!/usr/bin/env python3
"""
Retrieval strategies: one technique/supplier combination each.

A strategy fetches a catalog's search page for a query and hands it to a
DocumentParser configured with that catalog's locator table. Strategies
never raise; any failure is logged and reported as "no results".
"""

import logging
import random
import time
from typing import Callable, List, Optional

from catalogs import CatalogLayout, FASTENAL, GRAINGER, MCMASTER
from part_extractor import CssLocator, DocumentParser, PartRecord, RecordAssembler
from web_content_fetcher import (
    BASIC_DESKTOP,
    FileDiagnosticCapture,
    FingerprintRotation,
    RenderedPageFetcher,
    StaticPageFetcher,
)

logger = logging.getLogger(__name__)


class CatalogStrategy:
    """Base class; subclasses implement _search"""

    def __init__(self, name: str, layout: CatalogLayout, commit_to_first_match: bool = False):
        self.name = name
        self.layout = layout
        self.commit_to_first_match = commit_to_first_match

    def search(self, query: str, max_results: int) -> List[PartRecord]:
        try:
            return self._search(query, max_results)
        except Exception as e:
            logger.error(f"❌ {self.name} failed for '{query}': {e}")
            return []

    def _search(self, query: str, max_results: int) -> List[PartRecord]:
        raise NotImplementedError

    def parse(self, html: str, query: str, max_results: int) -> List[PartRecord]:
        assembler = RecordAssembler(self.layout, self.name, search_url=self.layout.search_url(query))
        parser = DocumentParser(self.layout.container_locators, assembler,
                                commit_to_first_match=self.commit_to_first_match)
        return parser.parse(html, max_results)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class StaticCatalogStrategy(CatalogStrategy):
    """
    Plain HTTP fetch of the catalog search page.

    With attempts > 1 every attempt uses a different fingerprint from the
    rotation, and a pause separates consecutive attempts.
    """

    def __init__(self, name: str, layout: CatalogLayout, fetcher: StaticPageFetcher,
                 rotation: FingerprintRotation, attempts: int = 1, pause_between_attempts: float = 0,
                 sleep: Callable[[float], None] = time.sleep, commit_to_first_match: bool = False):
        super().__init__(name, layout, commit_to_first_match)
        self.fetcher = fetcher
        self.rotation = rotation
        self.attempts = attempts
        self.pause_between_attempts = pause_between_attempts
        self.sleep = sleep

    def _search(self, query: str, max_results: int) -> List[PartRecord]:
        url = self.layout.search_url(query)
        logger.info(f"🔍 Trying {self.name} for: \"{query}\"")

        for attempt, fingerprint in enumerate(self.rotation.sequence(self.attempts), start=1):
            if self.attempts > 1:
                logger.info(f"🔄 {self.name} attempt {attempt}/{self.attempts} ({fingerprint.name})")

            html = self.fetcher.fetch(url, fingerprint)
            if html:
                records = self.parse(html, query, max_results)
                if records:
                    return records
                logger.info(f"{self.name}: no parts in page from {fingerprint.name}")

            if attempt < self.attempts and self.pause_between_attempts:
                self.sleep(self.pause_between_attempts)

        return []


class RenderedCatalogStrategy(CatalogStrategy):
    """Search page rendered by headless Chromium, for catalogs that build results client-side"""

    def __init__(self, name: str, layout: CatalogLayout, fetcher: Optional[RenderedPageFetcher] = None,
                 commit_to_first_match: bool = False):
        super().__init__(name, layout, commit_to_first_match)
        self.fetcher = fetcher or RenderedPageFetcher(container_selectors_for(layout))

    def _search(self, query: str, max_results: int) -> List[PartRecord]:
        url = self.layout.search_url(query)
        logger.info(f"🌐 Trying {self.name} for: \"{query}\"")
        html = self.fetcher.fetch(url)
        if not html:
            return []
        return self.parse(html, query, max_results)


def container_selectors_for(layout: CatalogLayout) -> List[str]:
    return [locator.selector for locator in layout.container_locators if isinstance(locator, CssLocator)]


def default_strategies(config=None, rng: Optional[random.Random] = None) -> List[CatalogStrategy]:
    """The cascade in priority order: Grainger static, Grainger rendered, McMaster-Carr, Fastenal"""
    rng = rng or random.Random()
    human_delay = getattr(config, 'HUMAN_DELAY', True)
    rendered_enabled = getattr(config, 'ENABLE_RENDERED_FETCH', True)
    diagnostics_dir = getattr(config, 'DIAGNOSTICS_DIR', None)

    strategies: List[CatalogStrategy] = [
        StaticCatalogStrategy(
            'Grainger-Advanced',
            GRAINGER,
            StaticPageFetcher(timeout=20, delay_range=(1.0, 5.0) if human_delay else None, rng=rng),
            FingerprintRotation(rng=rng),
            attempts=3,
            pause_between_attempts=2.0 if human_delay else 0,
        ),
    ]

    if rendered_enabled:
        strategies.append(RenderedCatalogStrategy(
            'Grainger-Rendered',
            GRAINGER,
            RenderedPageFetcher(
                container_selectors_for(GRAINGER),
                rotation=FingerprintRotation(rng=rng),
                diagnostics=FileDiagnosticCapture(diagnostics_dir) if diagnostics_dir else None,
            ),
        ))

    for name, layout in (('McMaster', MCMASTER), ('Fastenal', FASTENAL)):
        strategies.append(StaticCatalogStrategy(
            name,
            layout,
            StaticPageFetcher(timeout=15, rng=rng),
            FingerprintRotation([BASIC_DESKTOP], rng=rng),
        ))

    return strategies
