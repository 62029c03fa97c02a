"""
Page fetcher.

Issues one review-listing request per call.
"""

import logging
import time
from typing import Callable, Dict
from urllib.parse import quote

import requests

import config.settings as settings
from review_collector.errors import TransportError
from review_collector.utils.http import RequestGate

logger = logging.getLogger(__name__)


def form_to_string(form: Dict[str, str]) -> str:
    """URL-encode a form as 'key=value' pairs joined by '&', in insertion order."""
    return "&".join(
        f"{quote(str(key), safe='')}={quote(str(value), safe='')}"
        for key, value in form.items()
    )


def build_reviews_url(host: str = settings.STOREFRONT_HOST) -> str:
    return settings.REVIEWS_URL.format(host=host)


def build_query(app_id: str, page_num: int) -> Dict[str, object]:
    return {
        "id": app_id,
        "reviewSortOrder": settings.REVIEW_SORT_ORDER,
        "reviewType": settings.REVIEW_TYPE,
        "pageNum": page_num
    }


class PageFetcher:
    """
    Fetches one page of reviews.

    Waits the configured delay before every request, then POSTs the fixed
    form through the shared RequestGate. Retrying is left to the caller.
    """

    def __init__(
        self,
        gate: RequestGate,
        user_agent: str = settings.DEFAULT_USER_AGENT,
        delay_ms: int = settings.DEFAULT_DELAY_MS,
        host: str = settings.STOREFRONT_HOST,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize page fetcher.

        Args:
            gate: Shared HTTP transport
            user_agent: User-Agent header value
            delay_ms: Milliseconds to wait before each request
            host: Storefront host name
            sleep: Sleep function (seconds), replaceable in tests
        """
        self.gate = gate
        self.user_agent = user_agent
        self.delay_ms = delay_ms
        self.url = build_reviews_url(host)
        self.sleep = sleep

    def fetch(self, app_id: str, page_num: int) -> requests.Response:
        """
        Request one page of reviews.

        Raises:
            TransportError: If the request could not complete
        """
        if self.delay_ms > 0:
            self.sleep(self.delay_ms / 1000.0)

        body = form_to_string(settings.FORM_DATA)
        headers = {
            "User-Agent": self.user_agent,
            "Content-Type": settings.FORM_CONTENT_TYPE
        }

        logger.debug(f"Requesting page {page_num} of {app_id}")
        try:
            return self.gate.post(
                self.url,
                params=build_query(app_id, page_num),
                data=body,
                headers=headers
            )
        except requests.RequestException as e:
            raise TransportError(f"Could not complete the request: {e}") from e
