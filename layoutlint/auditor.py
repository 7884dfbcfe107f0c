# auditor.py
import time
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from playwright.async_api import (
    async_playwright, Page, Browser, BrowserContext,
    Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError,
)

from .constants import (
    TIMEOUT, VIEWPORT_WIDTH, VIEWPORT_HEIGHT, SETTLE_DELAY, BROWSER_ARGS, EXCLUDED_TAGS,
)
from .attribution import SourceAttributor
from .detector import OverflowDetector
from .errors import NavigationError
from .models import AuditResult, OverflowIssue
from .origins import ComponentOriginProvider
from .transforms import apply_locale_transform
from .utils import build_locale_url

logger = logging.getLogger(__name__)


class Auditor:
    """Loads a page once per locale and collects its overflow issues.

    One browser and one context are shared by every locale pass; each pass
    gets its own page, closed when the pass ends. Locales run one after the
    other.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 attributor: Optional[SourceAttributor] = None,
                 providers: Optional[List[ComponentOriginProvider]] = None):
        self.config = config or {}
        self.attributor = attributor
        self.detector = OverflowDetector(self.config.get('excluded_tags', EXCLUDED_TAGS), providers)
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    async def initialize(self):
        if self.browser:
            return
        logger.info("Launching Playwright browser (Chromium)...")
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=not self.config.get('headful', False),
            args=BROWSER_ARGS,
        )
        self.context = await self.browser.new_context(viewport={
            'width': self.config.get('width', VIEWPORT_WIDTH),
            'height': self.config.get('height', VIEWPORT_HEIGHT),
        })

    async def cleanup(self):
        if self.context:
            await self.context.close()
            self.context = None
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None

    async def audit(self, url: str, locale: str = 'en', translated: bool = False) -> AuditResult:
        """Run one locale pass.

        ``translated`` marks a locale the translation provider already
        rendered, which therefore needs no simulated transform. Raises
        ``NavigationError`` when the page never becomes ready.
        """
        started = time.monotonic()
        page, transform = await self.prepare_page(url, locale, translated)
        try:
            logger.info(f"Scanning for overflow issues (locale: {locale})...")
            issues = await self.detector.detect(page, locale)
            issues = self._attribute(issues, transform)

            return AuditResult(
                url=url,
                locale=locale,
                timestamp=datetime.now().isoformat(),
                issues=issues,
                duration=int((time.monotonic() - started) * 1000),
            )
        finally:
            await page.close()

    async def prepare_page(self, url: str, locale: str, translated: bool = False) -> Tuple[Page, Optional[str]]:
        """Open, load and transform a page; returns it with the applied transform name."""
        if not self.context:
            await self.initialize()

        page = await self.context.new_page()
        try:
            await self._navigate(page, url, locale)
            transform = None
            if not translated:
                transform = await apply_locale_transform(page, locale)
            await page.wait_for_timeout(self.config.get('settle_delay', SETTLE_DELAY))
        except BaseException:
            await page.close()
            raise
        return page, transform

    async def audit_locales(self, url: str, locales: Iterable[str],
                            translated_locales: Iterable[str] = ()) -> List[AuditResult]:
        """Audit ``url`` under each locale, reporting unloadable locales as failed."""
        translated = set(translated_locales)
        results = []
        for locale in locales:
            locale_url = build_locale_url(url, locale)
            logger.info(f"Auditing with locale: {locale.upper()} ({locale_url})")
            started = time.monotonic()
            try:
                result = await self.audit(locale_url, locale, translated=locale in translated)
            except NavigationError as e:
                logger.error(str(e))
                result = AuditResult(
                    url=locale_url,
                    locale=locale,
                    timestamp=datetime.now().isoformat(),
                    duration=int((time.monotonic() - started) * 1000),
                    error=e.reason,
                )
            results.append(result)
            if result.failed:
                if self.config.get('stop_on_failure', False):
                    break
            else:
                logger.info(f"{locale}: Found {result.issue_count} issues ({result.duration}ms)")
        return results

    async def _navigate(self, page: Page, url: str, locale: str):
        logger.info(f"Navigating to {url}...")
        try:
            await page.goto(url, wait_until='networkidle', timeout=self.config.get('timeout', TIMEOUT))
        except PlaywrightTimeoutError as e:
            raise NavigationError(url, locale, f"timed out: {e}") from e
        except PlaywrightError as e:
            raise NavigationError(url, locale, str(e)) from e

    def _attribute(self, issues: List[OverflowIssue], transform: Optional[str]) -> List[OverflowIssue]:
        if self.attributor is None:
            return issues
        return [self.attributor.attribute(issue, transform) for issue in issues]
