"""
Review extractor.

Walks the review HTML of one page and builds ReviewRecord objects.
"""

import logging
import re
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag
from dateutil import parser as dateparser

from review_collector.errors import ParseError
from review_collector.models.review import ReviewRecord

logger = logging.getLogger(__name__)

REVIEW_SELECTOR = ".single-review"
WIDTH_PATTERN = re.compile(r"width:\s*([0-9]{1,3})%")
RATING_DIVISOR = 20


def parse_date(date_str: str) -> Optional[datetime]:
    """Parse a locale-formatted date such as 'January 5, 2016'; None if it can't be read."""
    if not date_str or not date_str.strip():
        return None
    try:
        return dateparser.parse(date_str.strip())
    except (ValueError, OverflowError):
        logger.debug(f"Could not parse review date: {date_str!r}")
        return None


def parse_rating(style: Optional[str]) -> Optional[float]:
    """Convert a star bar style like 'width: 80%' into a 0-5 rating."""
    if not style:
        return None
    match = WIDTH_PATTERN.search(style)
    if not match:
        logger.debug(f"No width in rating style: {style!r}")
        return None
    return int(match.group(1)) / RATING_DIVISOR


def review_time_range(reviews: List[ReviewRecord]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Return (first_review_time, last_review_time) for a page.

    The storefront lists newest first, so the first review time is the
    date of the last record and the last review time that of the first.
    """
    if not reviews:
        return None, None
    return reviews[-1].date, reviews[0].date


def _child(node: Optional[Tag], class_name: str) -> Optional[Tag]:
    if node is None:
        return None
    return node.find(class_=class_name, recursive=False)


def _descendant(node: Optional[Tag], class_name: str) -> Optional[Tag]:
    if node is None:
        return None
    return node.find(class_=class_name)


def _own_text(node: Optional[Tag]) -> str:
    """Text of a node with every child element removed."""
    if node is None:
        return ""
    # Comments, CDATA and doctypes are NavigableString subclasses
    return "".join(
        s for s in node.find_all(string=True, recursive=False)
        if type(s) is NavigableString
    ).strip()


class ReviewExtractor:
    """
    Extracts reviews from a review-listing HTML fragment.

    Each `.single-review` fragment carries:
    - `.review-header[data-reviewid]` with the review id
    - `.review-info` with a `.review-date` and a `.current-rating` star bar
    - `.review-body` with a `.review-title` and the free review text
    Missing or malformed fields are kept as None/empty strings.
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def extract(
        self,
        html: str,
        app_id: str,
        page_num: int,
        on_review: Optional[Callable[[ReviewRecord], None]] = None
    ) -> List[ReviewRecord]:
        """
        Extract all reviews on a page, in document order.

        Args:
            html: Review HTML taken from the response envelope
            app_id: App the page belongs to
            page_num: Zero-based page number
            on_review: Called with each record as soon as it is built

        Returns:
            List of ReviewRecord (empty when the page holds no reviews)

        Raises:
            ParseError: If the HTML could not be walked
        """
        try:
            soup = BeautifulSoup(html, self.parser)
            nodes = soup.select(REVIEW_SELECTOR)
        except Exception as e:
            raise ParseError(f"Could not parse review HTML: {e}") from e

        reviews = []
        for node in nodes:
            try:
                review = self._to_review(node, app_id, page_num)
            except Exception as e:
                raise ParseError(
                    f"Could not read review {len(reviews)} on page {page_num} of {app_id}: {e}"
                ) from e

            reviews.append(review)
            if on_review is not None:
                on_review(review)

        logger.debug(f"Extracted {len(reviews)} reviews from page {page_num} of {app_id}")
        return reviews

    def _to_review(self, node: Tag, app_id: str, page_num: int) -> ReviewRecord:
        header = _child(node, "review-header")
        info = _descendant(node, "review-info")
        body = _child(node, "review-body")

        date_node = _child(info, "review-date")
        rating_node = _descendant(info, "current-rating")
        title_node = _child(body, "review-title")

        return ReviewRecord(
            id=header.get("data-reviewid") if header is not None else None,
            date=parse_date(date_node.get_text() if date_node is not None else ""),
            rating=parse_rating(rating_node.get("style") if rating_node is not None else None),
            title=title_node.get_text().strip() if title_node is not None else "",
            text=_own_text(body),
            app_id=app_id,
            page_num=page_num
        )
