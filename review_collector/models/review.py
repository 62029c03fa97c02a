"""
Review data model.

Represents one review extracted from a review-listing page.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import config.settings as settings


@dataclass
class ReviewRecord:
    """
    A single review as read from the storefront HTML.

    Field values are kept as found: a review without an id, an
    unparsable date or a missing star bar is still a valid record.
    """
    id: Optional[str]  # Storefront-assigned review id
    date: Optional[datetime]  # None when the date string could not be parsed
    rating: Optional[float]  # width percentage / 20, so 0-5
    title: str
    text: str
    app_id: str
    page_num: int
    os: str = settings.PLATFORM

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "rating": self.rating,
            "title": self.title,
            "text": self.text,
            "appId": self.app_id,
            "pageNum": self.page_num,
            "os": self.os
        }
