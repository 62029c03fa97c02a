"""
Response decoder.

Turns a raw review-listing response into an HTML fragment, an
end-of-reviews signal, or an invalid outcome.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from review_collector.errors import DecodeError

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
ENVELOPE_LENGTH = 4
HTML_INDEX = 2

_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")


class DecodeOutcome(Enum):
    HTML = "html"
    EMPTY = "empty"
    INVALID = "invalid"


@dataclass
class DecodedPage:
    """Result of decoding one response."""
    outcome: DecodeOutcome
    html: Optional[str] = None
    error: Optional[DecodeError] = None

    @classmethod
    def invalid(cls, message: str) -> "DecodedPage":
        return cls(DecodeOutcome.INVALID, error=DecodeError(message))


def decode_unicode(text: str) -> str:
    """Replace \\uXXXX escapes with the characters they name (surrogate pairs joined)."""
    text = _UNICODE_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), text)
    try:
        return text.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        return text


def decode_utf8(text: str) -> str:
    """
    Re-decode text whose UTF-8 bytes were read as single-byte characters.

    Text that is not such a double encoding is returned unchanged.
    """
    try:
        return text.encode("latin-1").decode("utf-8")
    except UnicodeError:
        return text


def remove_leading_chars(text: str) -> str:
    """Drop everything before the first '[' (the anti-scraping preamble)."""
    start = text.find("[")
    if start < 0:
        return text
    return text[start:]


def is_json_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE


class ResponseDecoder:
    """
    Decodes the storefront's JSON/HTML hybrid payload.

    A valid page is a JSON array whose first element is a 4-element array
    holding the review HTML at index 2. An empty array, or a first element
    of another shape, is how the storefront says there are no more pages.
    """

    def decode(self, response) -> DecodedPage:
        """
        Decode a response.

        Args:
            response: Object with `headers` (case-insensitive mapping) and
                `text`, such as requests.Response

        Returns:
            DecodedPage with outcome HTML, EMPTY or INVALID
        """
        content_type = response.headers.get("content-type")
        if not is_json_content_type(content_type):
            logger.error(f"Unexpected response - was not in JSON format ({content_type})")
            return DecodedPage.invalid(f"Unexpected content type: {content_type}")

        text = decode_utf8(decode_unicode(response.text or ""))

        try:
            body = json.loads(remove_leading_chars(text))
        except ValueError as e:
            logger.error(f"Unexpected response - JSON was invalid: {e}")
            return DecodedPage.invalid(f"Invalid JSON: {e}")

        if not isinstance(body, list):
            logger.error("Unexpected response - JSON was not in the format we expected")
            return DecodedPage.invalid(f"Expected a JSON array, got {type(body).__name__}")

        if not body:
            logger.info("No more reviews for this app")
            return DecodedPage(DecodeOutcome.EMPTY)

        envelope = body[0]
        if not isinstance(envelope, list) or len(envelope) != ENVELOPE_LENGTH:
            logger.info("No more reviews for this app")
            return DecodedPage(DecodeOutcome.EMPTY)

        html = envelope[HTML_INDEX]
        if not isinstance(html, str):
            logger.error("Unexpected response - review HTML was not a string")
            return DecodedPage.invalid(f"Expected review HTML string, got {type(html).__name__}")

        return DecodedPage(DecodeOutcome.HTML, html=html)
