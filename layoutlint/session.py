# session.py
import asyncio
import logging
from typing import Callable, List, Optional, Set

from playwright.async_api import Page

from .constants import WATCH_INTERVAL
from .detector import OverflowDetector
from .models import OverflowIssue

logger = logging.getLogger(__name__)


class WatchSession:
    """Repeated scans of one live page that report each element only once.

    Elements already reported are remembered by selector in ``seen``, which
    belongs to this session and lives as long as it does. ``rescan`` forgets
    them and reports everything again.
    """

    def __init__(self, page: Page, locale: str, detector: Optional[OverflowDetector] = None):
        self.page = page
        self.locale = locale
        self.detector = detector or OverflowDetector()
        self.seen: Set[str] = set()

    async def scan(self) -> List[OverflowIssue]:
        issues = await self.detector.detect(self.page, self.locale)
        fresh = []
        for issue in issues:
            if issue.selector in self.seen:
                continue
            self.seen.add(issue.selector)
            fresh.append(issue)
        return fresh

    async def rescan(self) -> List[OverflowIssue]:
        self.seen.clear()
        return await self.scan()

    async def watch(self, on_issue: Callable[[OverflowIssue], None],
                    interval: int = WATCH_INTERVAL, iterations: Optional[int] = None) -> int:
        """Scan every ``interval`` ms and hand new issues to ``on_issue``.

        Runs forever unless ``iterations`` is given. Returns the number of new
        issues reported.
        """
        reported = 0
        count = 0
        while iterations is None or count < iterations:
            for issue in await self.scan():
                on_issue(issue)
                reported += 1
            count += 1
            if iterations is None or count < iterations:
                await asyncio.sleep(interval / 1000)
        logger.debug(f"Watch session reported {reported} issue(s) over {count} scan(s)")
        return reported
