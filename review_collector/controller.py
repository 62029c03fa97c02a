"""
Crawl controller.

Drives the per-app crawl state machine across the work queue:
fetch → decode → extract → decide (continue/retry/stop) → next page or next app.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Union

from review_collector.crawl.decoder import DecodeOutcome, ResponseDecoder
from review_collector.crawl.extractor import ReviewExtractor, review_time_range
from review_collector.crawl.fetcher import PageFetcher
from review_collector.errors import (
    CollectorError,
    ParseError,
    RetryLimitExceeded,
    TransportError,
)
from review_collector.models.events import (
    Decision,
    DoneCollectingEvent,
    DoneWithAppsEvent,
    PageCompleteEvent,
    PendingDecision,
    ReviewEvent,
)
from review_collector.models.options import CollectorOptions
from review_collector.models.review import ReviewRecord
from review_collector.models.state import AppCrawlState, CrawlPhase, WorkQueue
from review_collector.utils.events import EventBus, EventKey, Handler
from review_collector.utils.http import RequestGate

logger = logging.getLogger(__name__)


class CrawlController:
    """
    Crawls reviews for a queue of apps, one app and one request at a time.

    Per app: QUEUED → FETCHING → {DECIDING, RETRYING, EXHAUSTED, FINISHED}.
    Failures never end the run; the worst case for an app is that its crawl
    stops early with a RetryLimitExceeded error on "done collecting".

    When options.check_before_continue is set, run() yields a
    PendingDecision after each page that observers did not already decide
    while handling "page complete". The driver resolves it with continue_()
    or stop() before resuming the generator.
    """

    def __init__(
        self,
        apps: Union[str, Iterable[str]],
        options: Optional[CollectorOptions] = None,
        events: Optional[EventBus] = None,
        fetcher: Optional[PageFetcher] = None,
        decoder: Optional[ResponseDecoder] = None,
        extractor: Optional[ReviewExtractor] = None
    ):
        """
        Initialize crawl controller.

        Args:
            apps: One app id or a list of app ids
            options: Crawl options (defaults from config.settings)
            events: Event bus to publish on (a new one if omitted)
            fetcher: Page fetcher (built from options if omitted)
            decoder: Response decoder
            extractor: Review extractor
        """
        self.queue = WorkQueue(apps)
        self.options = options or CollectorOptions()
        self.events = events or EventBus()
        self._gate: Optional[RequestGate] = None
        if fetcher is None:
            # The controller owns, and closes, a transport it built itself
            self._gate = RequestGate()
            fetcher = PageFetcher(
                self._gate,
                user_agent=self.options.user_agent,
                delay_ms=self.options.delay
            )
        self.fetcher = fetcher
        self.decoder = decoder or ResponseDecoder()
        self.extractor = extractor or ReviewExtractor()
        self.state: Optional[AppCrawlState] = None

        logger.info(
            f"Initialized CrawlController for {len(self.queue)} app(s), "
            f"max_pages={self.options.max_pages}, max_retries={self.options.max_retries}, "
            f"check_before_continue={self.options.check_before_continue}"
        )

    def close(self) -> None:
        """Release the HTTP session if this controller created it."""
        if self._gate is not None:
            self._gate.close()
            self._gate = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def on(self, event: EventKey, handler: Handler) -> None:
        """Attach an observer to one of the collector's events."""
        self.events.on(event, handler)

    def run(self) -> Iterator[PendingDecision]:
        """
        Crawl every queued app.

        Yields:
            PendingDecision for each page awaiting continue/stop (only when
            check_before_continue is set and no observer decided already)
        """
        while True:
            app_id = self.queue.pop()
            if app_id is None:
                break
            self.state = AppCrawlState(app_id=app_id)
            yield from self._crawl_app(self.state)
            self.state = None

        logger.info("Done with all apps")
        self.events.emit(DoneWithAppsEvent())

    def collect(self) -> None:
        """
        Crawl every queued app, blocking on each pending decision.

        In gated mode the decision may come from an observer or from any
        other thread; there is no timeout.
        """
        for decision in self.run():
            logger.info(f"Waiting for continue/stop on page {decision.page_num} of {decision.app_id}")
            decision.wait()

    def _crawl_app(self, state: AppCrawlState) -> Iterator[PendingDecision]:
        logger.info(f"Collecting reviews for {state.app_id}")
        state.phase = CrawlPhase.FETCHING

        while state.phase is not CrawlPhase.FINISHED:
            if state.phase is CrawlPhase.FETCHING:
                self._fetch_page(state)
            elif state.phase is CrawlPhase.RETRYING:
                self._retry(state)
            elif state.phase is CrawlPhase.EXHAUSTED:
                self._finish(state, error=RetryLimitExceeded(
                    state.app_id, state.page_num, state.retries, state.last_error
                ))
            elif state.phase is CrawlPhase.DECIDING:
                decision = yield from self._decide(state)
                if decision is Decision.CONTINUE:
                    state.page_num += 1
                    state.phase = CrawlPhase.FETCHING
                else:
                    self._finish(state)

    def _fetch_page(self, state: AppCrawlState) -> None:
        try:
            response = self.fetcher.fetch(state.app_id, state.page_num)
        except TransportError as e:
            logger.error(f"{e} ({state.app_id} page {state.page_num})")
            self._fail(state, e)
            return

        page = self.decoder.decode(response)
        if page.outcome is DecodeOutcome.INVALID:
            self._fail(state, page.error)
            return
        if page.outcome is DecodeOutcome.EMPTY:
            self._finish(state)
            return

        try:
            reviews = self.extractor.extract(
                page.html,
                state.app_id,
                state.page_num,
                on_review=lambda review: self._emit_review(state, review)
            )
        except ParseError as e:
            logger.error(f"Could not turn response into reviews: {e}")
            self._fail(state, e)
            return

        state.retries = 0
        state.reviews = reviews
        state.phase = CrawlPhase.DECIDING
        logger.info(f"Page {state.page_num} of {state.app_id}: {len(reviews)} reviews")

    def _emit_review(self, state: AppCrawlState, review: ReviewRecord) -> None:
        self.events.emit(ReviewEvent(app_id=state.app_id, page_num=state.page_num, review=review))

    def _fail(self, state: AppCrawlState, error: CollectorError) -> None:
        state.last_error = error
        state.phase = CrawlPhase.RETRYING

    def _retry(self, state: AppCrawlState) -> None:
        state.retries += 1
        if state.retries < self.options.max_retries:
            logger.warning(
                f"Retrying page {state.page_num} of {state.app_id} "
                f"(attempt {state.retries + 1} of {self.options.max_retries})"
            )
            state.phase = CrawlPhase.FETCHING
        else:
            logger.error(f"Retry limit reached for {state.app_id} on page {state.page_num}")
            state.phase = CrawlPhase.EXHAUSTED

    def _decide(self, state: AppCrawlState) -> Iterator[PendingDecision]:
        reviews = state.reviews
        first_time, last_time = review_time_range(reviews)
        pending = None
        if self.options.check_before_continue:
            pending = PendingDecision(state.app_id, state.page_num, len(reviews))

        self.events.emit(PageCompleteEvent(
            app_id=state.app_id,
            page_num=state.page_num,
            reviews=list(reviews),
            first_review_time=first_time,
            last_review_time=last_time,
            decision=pending
        ))

        if pending is None:
            return self._auto_decision(state)

        if not pending.decided:
            yield pending
        if not pending.decided:
            logger.warning(
                f"No decision for page {state.page_num} of {state.app_id}, stopping this app"
            )
            pending.stop()
        return pending.choice

    def _auto_decision(self, state: AppCrawlState) -> Decision:
        max_pages = self.options.max_pages
        if state.reviews and (max_pages == 0 or state.page_num + 1 < max_pages):
            return Decision.CONTINUE
        return Decision.STOP

    def _finish(self, state: AppCrawlState, error: Optional[CollectorError] = None) -> None:
        state.phase = CrawlPhase.FINISHED
        if error is None:
            logger.info(f"Done collecting {state.app_id} at page {state.page_num}")
        self.events.emit(DoneCollectingEvent(
            app_id=state.app_id,
            page_num=state.page_num,
            apps_remaining=len(self.queue),
            error=error
        ))


class Collector(CrawlController):
    """
    Public entry point: collect reviews for one or more apps.

    Options may be a CollectorOptions or a dict using either the snake_case
    or camelCase option names.
    """

    def __init__(
        self,
        apps: Union[str, Iterable[str]],
        options: Union[CollectorOptions, dict, None] = None,
        **kwargs
    ):
        if not isinstance(options, CollectorOptions):
            options = CollectorOptions.from_dict(options or {})
        super().__init__(apps, options=options, **kwargs)


def collect_reviews(
    apps: Union[str, Iterable[str]],
    options: Union[CollectorOptions, dict, None] = None,
    on_review: Optional[Callable[[ReviewRecord], None]] = None
) -> List[ReviewRecord]:
    """
    Crawl apps in automatic mode and return every review found.

    Raises:
        ValueError: If check_before_continue is requested
    """
    if not isinstance(options, CollectorOptions):
        options = CollectorOptions.from_dict(options or {})
    if options.check_before_continue:
        raise ValueError("collect_reviews() does not support check_before_continue")

    found = []

    def _record(event: ReviewEvent) -> None:
        found.append(event.review)
        if on_review is not None:
            on_review(event.review)

    with Collector(apps, options) as collector:
        collector.on(ReviewEvent, _record)
        collector.collect()
    return found
