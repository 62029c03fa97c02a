"""
Review collector.

Pages through a storefront's review-listing endpoint for one or more apps
and publishes every review to registered observers.
"""

from review_collector.controller import Collector, CrawlController, collect_reviews
from review_collector.errors import (
    CollectorError,
    DecodeError,
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

__version__ = "1.0.0"
