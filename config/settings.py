"""
Configuration settings for the review collector.

Centralized defaults for the crawl options, the storefront endpoint
and logging. Most values can be overridden through environment variables.
"""

import logging
import os

logger = logging.getLogger(__name__)


def _env_number(name: str, default, cast):
    """Read a numeric override, falling back to the default on a malformed value."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a valid {cast.__name__}, using {default}")
        return default


# Storefront endpoint
STOREFRONT_HOST = os.getenv("REVIEW_COLLECTOR_HOST", "play.google.com")
REVIEWS_URL = "https://{host}/store/getreviews"
REVIEW_SORT_ORDER = 0
REVIEW_TYPE = 1
FORM_DATA = {"xhr": "1"}
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"

# Every emitted review and event is tagged with this platform
PLATFORM = "Android"

# Crawl defaults
DEFAULT_MAX_PAGES = _env_number("REVIEW_COLLECTOR_MAX_PAGES", 5, int)  # 0 = unlimited
DEFAULT_USER_AGENT = os.getenv(
    "REVIEW_COLLECTOR_USER_AGENT",
    "Mozilla/5.0 (Windows NT 6.1; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/40.0.2214.85 Safari/537.36"
)
DEFAULT_DELAY_MS = _env_number("REVIEW_COLLECTOR_DELAY_MS", 5000, int)
DEFAULT_MAX_RETRIES = _env_number("REVIEW_COLLECTOR_MAX_RETRIES", 3, int)
DEFAULT_CHECK_BEFORE_CONTINUE = False

# HTTP transport
REQUEST_TIMEOUT_SECONDS = _env_number("REVIEW_COLLECTOR_TIMEOUT_SECONDS", 30.0, float)
MAX_CONNECTIONS = 1  # one in-flight request per run

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
