"""
Event data models.

The four event variants published through the EventBus, plus the
PendingDecision carried by "page complete" events when the collector
waits for an explicit continue/stop after each page.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

import config.settings as settings
from review_collector.models.review import ReviewRecord

logger = logging.getLogger(__name__)


class Decision(Enum):
    """What to do after a completed page."""
    CONTINUE = "continue"
    STOP = "stop"


class PendingDecision:
    """
    One-shot continue/stop choice for a completed page.

    The first call to continue_() or stop() wins; later calls are ignored.
    On a page without reviews continue_() behaves like stop().
    Either method may be called from any thread.
    """

    def __init__(self, app_id: str, page_num: int, review_count: int):
        self.app_id = app_id
        self.page_num = page_num
        self.allow_continue = review_count > 0
        self._choice: Optional[Decision] = None
        self._lock = threading.Lock()
        self._decided = threading.Event()

    def continue_(self) -> bool:
        """Ask for the next page. Returns False if already decided."""
        if not self.allow_continue:
            logger.debug(f"No reviews on page {self.page_num} of {self.app_id}, continue treated as stop")
            return self._decide(Decision.STOP)
        return self._decide(Decision.CONTINUE)

    def stop(self) -> bool:
        """Stop crawling this app. Returns False if already decided."""
        return self._decide(Decision.STOP)

    def _decide(self, choice: Decision) -> bool:
        with self._lock:
            if self._choice is not None:
                logger.debug(
                    f"Ignoring {choice.value} for {self.app_id} page {self.page_num}: "
                    f"already decided to {self._choice.value}"
                )
                return False
            self._choice = choice
        self._decided.set()
        return True

    @property
    def decided(self) -> bool:
        return self._choice is not None

    @property
    def choice(self) -> Optional[Decision]:
        return self._choice

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a decision is made (no timeout by default)."""
        return self._decided.wait(timeout)

    def __repr__(self) -> str:
        return (
            f"PendingDecision(app_id={self.app_id!r}, page_num={self.page_num}, "
            f"choice={self._choice.value if self._choice else None})"
        )


class CollectorEvent:
    """Base class of all events. `name` is the wire name observers subscribe to."""
    name = ""

    @property
    def os(self) -> str:
        return settings.PLATFORM

    def to_dict(self) -> dict:
        return {"os": self.os}


@dataclass
class ReviewEvent(CollectorEvent):
    """Emitted once per review, while the page is still being extracted."""
    name = "review"

    app_id: str
    page_num: int
    review: ReviewRecord

    def to_dict(self) -> dict:
        return {
            "appId": self.app_id,
            "pageNum": self.page_num,
            "review": self.review.to_dict(),
            "os": self.os
        }


@dataclass
class PageCompleteEvent(CollectorEvent):
    """
    Emitted after a page was extracted.

    first_review_time/last_review_time are the dates of the oldest and
    newest review on the page (None on empty pages). `decision` is only
    set when the collector waits for continue/stop.
    """
    name = "page complete"

    app_id: str
    page_num: int
    reviews: List[ReviewRecord] = field(default_factory=list)
    first_review_time: Optional[datetime] = None
    last_review_time: Optional[datetime] = None
    decision: Optional[PendingDecision] = None

    @property
    def continue_(self) -> Optional[Callable[[], bool]]:
        return self.decision.continue_ if self.decision else None

    @property
    def stop(self) -> Optional[Callable[[], bool]]:
        return self.decision.stop if self.decision else None

    def to_dict(self) -> dict:
        data = {
            "appId": self.app_id,
            "pageNum": self.page_num,
            "reviews": [r.to_dict() for r in self.reviews],
            "os": self.os
        }
        if self.reviews:
            data["firstReviewTime"] = (
                self.first_review_time.isoformat() if self.first_review_time else None
            )
            data["lastReviewTime"] = (
                self.last_review_time.isoformat() if self.last_review_time else None
            )
        return data


@dataclass
class DoneCollectingEvent(CollectorEvent):
    """Emitted once per app when its crawl ends, with error set on retry exhaustion."""
    name = "done collecting"

    app_id: str
    page_num: int
    apps_remaining: int
    error: Optional[Exception] = None

    def to_dict(self) -> dict:
        data = {
            "appId": self.app_id,
            "pageNum": self.page_num,
            "appsRemaining": self.apps_remaining,
            "os": self.os
        }
        if self.error is not None:
            data["error"] = str(self.error)
        return data


@dataclass
class DoneWithAppsEvent(CollectorEvent):
    """Emitted once when the work queue is exhausted."""
    name = "done with apps"


EVENT_TYPES = {
    cls.name: cls
    for cls in (ReviewEvent, PageCompleteEvent, DoneCollectingEvent, DoneWithAppsEvent)
}
