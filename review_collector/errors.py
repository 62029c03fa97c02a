"""
Error taxonomy for the review collector.

Transport, decode and parse failures are recovered inside the crawl loop
up to the retry budget. Only RetryLimitExceeded is handed to observers,
as the error of a "done collecting" event.
"""


class CollectorError(Exception):
    """Base class for every error raised by the collector."""


class TransportError(CollectorError):
    """The page request could not be completed."""


class DecodeError(CollectorError):
    """The response was not a review-listing JSON envelope."""


class ParseError(CollectorError):
    """The review HTML could not be walked."""


class RetryLimitExceeded(CollectorError):
    """Too many consecutive failures on one page of an app."""

    def __init__(self, app_id: str, page_num: int, retries: int, cause: Exception = None):
        self.app_id = app_id
        self.page_num = page_num
        self.retries = retries
        self.cause = cause
        super().__init__(
            f"Retry limit reached for {app_id} page {page_num} after {retries} attempts"
        )
