"""
Crawl state models.

AppCrawlState holds everything the controller tracks for the app it is
currently crawling. WorkQueue holds the apps still waiting.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from review_collector.models.review import ReviewRecord

FIRST_PAGE = 0


class CrawlPhase(Enum):
    """Phases of the per-app crawl state machine."""
    QUEUED = "queued"
    FETCHING = "fetching"
    DECIDING = "deciding"
    RETRYING = "retrying"
    EXHAUSTED = "exhausted"
    FINISHED = "finished"


@dataclass
class AppCrawlState:
    """
    Mutable crawl state for one app.

    retries counts consecutive failures on the current page and is reset
    once a page is extracted successfully.
    """
    app_id: str
    page_num: int = FIRST_PAGE
    retries: int = 0
    phase: CrawlPhase = CrawlPhase.QUEUED
    reviews: List[ReviewRecord] = field(default_factory=list)
    last_error: Optional[Exception] = None


class WorkQueue:
    """
    Ordered queue of app ids waiting to be crawled.

    Each app id appears at most once; the first occurrence wins.
    """

    def __init__(self, apps: Union[str, Iterable[str]]):
        if isinstance(apps, str):
            apps = [apps]
        elif not isinstance(apps, (list, tuple)):
            raise TypeError(
                "You must provide either a string or a list for the 'apps' argument"
            )

        self._pending = deque()
        seen = set()
        for app_id in apps:
            if not isinstance(app_id, str):
                raise ValueError("App IDs must be strings")
            if app_id in seen:
                continue
            seen.add(app_id)
            self._pending.append(app_id)

    def pop(self) -> Optional[str]:
        """Remove and return the next app id, or None when empty."""
        if not self._pending:
            return None
        return self._pending.popleft()

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __iter__(self):
        return iter(list(self._pending))
