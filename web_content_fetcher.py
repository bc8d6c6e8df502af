#!/usr/bin/env python3
"""
Web Content Fetcher for the industrial parts search service

Static fetches go through requests with a rotated browser fingerprint.
Rendered fetches drive headless Chromium through Playwright, retried with
exponential backoff.
"""

import logging
import random
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

logger = logging.getLogger(__name__)

BLOCKED_RESOURCE_TYPES = ('image', 'stylesheet', 'font', 'media')


@dataclass(frozen=True)
class Fingerprint:
    """User agent plus the header set a real browser of that kind sends"""
    name: str
    user_agent: str
    headers: Dict[str, str] = field(default_factory=dict)
    viewport: Tuple[int, int] = (1366, 768)

    def request_headers(self) -> Dict[str, str]:
        merged = {'User-Agent': self.user_agent}
        merged.update(self.headers)
        return merged


MOBILE_SAFARI = Fingerprint(
    name='mobile-safari',
    user_agent='Mozilla/5.0 (iPhone; CPU iPhone OS 15_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/15.0 Mobile/15E148 Safari/604.1',
    headers={
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
        'Accept-Encoding': 'gzip, deflate, br',
        'DNT': '1',
        'Connection': 'keep-alive',
        'Upgrade-Insecure-Requests': '1',
    },
    viewport=(390, 844),
)

DESKTOP_CHROME = Fingerprint(
    name='desktop-chrome',
    user_agent='Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    headers={
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
        'Accept-Encoding': 'gzip, deflate, br',
        'Cache-Control': 'no-cache',
        'Pragma': 'no-cache',
        'Sec-Ch-Ua': '"Not_A Brand";v="8", "Chromium";v="120"',
        'Sec-Ch-Ua-Mobile': '?0',
        'Sec-Ch-Ua-Platform': '"Windows"',
        'Sec-Fetch-Dest': 'document',
        'Sec-Fetch-Mode': 'navigate',
        'Sec-Fetch-Site': 'none',
        'Sec-Fetch-User': '?1',
        'Upgrade-Insecure-Requests': '1',
        'DNT': '1',
    },
)

DESKTOP_FIREFOX = Fingerprint(
    name='desktop-firefox',
    user_agent='Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
    headers={
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
        'Accept-Encoding': 'gzip, deflate, br',
        'DNT': '1',
        'Connection': 'keep-alive',
        'Upgrade-Insecure-Requests': '1',
        'Sec-Fetch-Dest': 'document',
        'Sec-Fetch-Mode': 'navigate',
        'Sec-Fetch-Site': 'none',
        'Sec-Fetch-User': '?1',
    },
)

BASIC_DESKTOP = Fingerprint(
    name='basic-desktop',
    user_agent='Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
    headers={
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    },
)

DEFAULT_FINGERPRINTS = (MOBILE_SAFARI, DESKTOP_CHROME, DESKTOP_FIREFOX)


class FingerprintRotation:
    """Picks fingerprints from a fixed set using the given random source"""

    def __init__(self, fingerprints: Sequence[Fingerprint] = DEFAULT_FINGERPRINTS,
                 rng: Optional[random.Random] = None):
        if not fingerprints:
            raise ValueError("FingerprintRotation needs at least one fingerprint")
        self.fingerprints = list(fingerprints)
        self.rng = rng or random.Random()

    def choose(self) -> Fingerprint:
        return self.rng.choice(self.fingerprints)

    def sequence(self, count: int) -> List[Fingerprint]:
        """Distinct fingerprints for consecutive attempts; repeats only once the set is exhausted"""
        picked: List[Fingerprint] = []
        while len(picked) < count:
            batch = self.rng.sample(self.fingerprints, len(self.fingerprints))
            picked.extend(batch[:count - len(picked)])
        return picked


class StaticPageFetcher:
    """Single HTTP GET per call, optionally preceded by a human-timing delay"""

    def __init__(self, timeout: float = 15,
                 delay_range: Optional[Tuple[float, float]] = None,
                 session_factory: Optional[Callable[[], requests.Session]] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 rng: Optional[random.Random] = None):
        self.timeout = timeout
        self.delay_range = delay_range
        self.session_factory = session_factory or requests.Session
        self.sleep = sleep
        self.rng = rng or random.Random()

    def fetch(self, url: str, fingerprint: Fingerprint) -> Optional[str]:
        """Fetch HTML content, or None on any failure"""
        if self.delay_range:
            self.sleep(self.rng.uniform(*self.delay_range))

        session = self.session_factory()
        try:
            response = session.get(url, headers=fingerprint.request_headers(), timeout=self.timeout)

            if not 200 <= response.status_code < 300:
                logger.warning(f"⚠️ {url} answered {response.status_code} to {fingerprint.name}")
                return None

            content_type = response.headers.get('content-type', '').lower()
            if content_type and 'html' not in content_type:
                logger.warning(f"URL {url} returned non-HTML content: {content_type}")
                return None

            return response.text

        except requests.exceptions.Timeout:
            logger.error(f"❌ Timed out after {self.timeout}s fetching {url}")
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Error fetching content from {url}: {e}")
            return None
        finally:
            session.close()


class RetryPolicy:
    """Runs an operation up to max_attempts times, sleeping base_delay * 2**attempt in between"""

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.0,
                 retry_on: Tuple[type, ...] = (Exception,),
                 sleep: Callable[[float], None] = time.sleep):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.retry_on = retry_on
        self.sleep = sleep

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    def run(self, operation: Callable[[int], object]):
        last_error = None
        for attempt in range(self.max_attempts):
            try:
                return operation(attempt)
            except self.retry_on as e:
                last_error = e
                logger.warning(f"Attempt {attempt + 1}/{self.max_attempts} failed: {e}")
                if attempt < self.max_attempts - 1:
                    self.sleep(self.delay_for(attempt))
        raise last_error


class RenderedFetchError(Exception):
    pass


class ContainerNotFoundError(RenderedFetchError):
    """None of the expected result containers appeared on the rendered page"""


class FileDiagnosticCapture:
    """Dumps the markup and a screenshot of a page whose rendering attempt failed"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def capture(self, page, url: str, attempt: int, error: Exception):
        stamp = datetime.now().strftime('%Y%m%d-%H%M%S')
        base = self.directory / f"rendered-{stamp}-attempt{attempt + 1}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            base.with_suffix('.html').write_text(page.content(), encoding='utf-8')
            page.screenshot(path=str(base.with_suffix('.png')), full_page=True)
            logger.info(f"📸 Saved diagnostics for {url} to {base}.*")
        except (PlaywrightError, OSError) as e:
            logger.warning(f"Could not save diagnostics for {url}: {e}")


@contextmanager
def launched_browser(headless: bool = True, playwright_factory=sync_playwright):
    """Headless Chromium that is closed on every way out of the block"""
    with playwright_factory() as playwright:
        browser = playwright.chromium.launch(
            headless=headless,
            args=['--disable-blink-features=AutomationControlled', '--no-sandbox'],
        )
        try:
            yield browser
        finally:
            browser.close()
            logger.debug("Browser closed")


def _block_heavy_resources(route):
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


class RenderedPageFetcher:
    """Loads a search page in a real browser and waits for result containers"""

    def __init__(self, container_selectors: Sequence[str],
                 retry_policy: Optional[RetryPolicy] = None,
                 rotation: Optional[FingerprintRotation] = None,
                 selector_timeout_ms: int = 8000,
                 navigation_timeout_ms: int = 30000,
                 diagnostics: Optional[FileDiagnosticCapture] = None,
                 browser_factory=launched_browser):
        self.container_selectors = list(container_selectors)
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=3, base_delay=1.0, retry_on=(PlaywrightError, RenderedFetchError))
        self.rotation = rotation or FingerprintRotation()
        self.selector_timeout_ms = selector_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.diagnostics = diagnostics
        self.browser_factory = browser_factory

    def fetch(self, url: str) -> Optional[str]:
        """Rendered HTML of the page, or None once every attempt has failed"""
        try:
            with self.browser_factory() as browser:
                return self.retry_policy.run(lambda attempt: self._attempt(browser, url, attempt))
        except (PlaywrightError, RenderedFetchError) as e:
            logger.error(f"❌ Rendered fetch of {url} failed: {e}")
            return None

    def _attempt(self, browser, url: str, attempt: int) -> str:
        fingerprint = self.rotation.choose()
        width, height = fingerprint.viewport
        context = browser.new_context(
            viewport={'width': width, 'height': height},
            user_agent=fingerprint.user_agent,
            extra_http_headers={'Accept-Language': fingerprint.headers.get('Accept-Language', 'en-US,en;q=0.9')},
            locale='en-US',
        )
        page = None
        try:
            page = context.new_page()
            page.route('**/*', _block_heavy_resources)
            logger.info(f"🌐 Rendering {url} as {fingerprint.name} (attempt {attempt + 1})")
            page.goto(url, wait_until='domcontentloaded', timeout=self.navigation_timeout_ms)
            selector = self._wait_for_containers(page)
            logger.info(f"✅ Container {selector} appeared on {url}")
            return page.content()
        except (PlaywrightError, RenderedFetchError) as e:
            if self.diagnostics is not None and page is not None:
                self.diagnostics.capture(page, url, attempt, e)
            raise
        finally:
            context.close()

    def _wait_for_containers(self, page) -> str:
        for selector in self.container_selectors:
            try:
                page.wait_for_selector(selector, timeout=self.selector_timeout_ms)
                return selector
            except PlaywrightTimeoutError:
                continue
        raise ContainerNotFoundError(
            f"none of {len(self.container_selectors)} container selectors appeared")
