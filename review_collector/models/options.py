"""
Collector options.

One CollectorOptions instance governs every app crawled in a run.
"""

import logging
from dataclasses import dataclass, fields

import config.settings as settings

logger = logging.getLogger(__name__)

# External (camelCase) configuration names
_ALIASES = {
    "maxPages": "max_pages",
    "userAgent": "user_agent",
    "delay": "delay",
    "maxRetries": "max_retries",
    "checkBeforeContinue": "check_before_continue",
}


@dataclass
class CollectorOptions:
    """
    Crawl configuration.

    max_pages: pages per app, 0 for no limit (ignored when
        check_before_continue is set)
    user_agent: User-Agent header sent with every request
    delay: milliseconds to wait before each request
    max_retries: consecutive failures tolerated on one page
    check_before_continue: wait for an explicit continue/stop after each page
    """
    max_pages: int = settings.DEFAULT_MAX_PAGES
    user_agent: str = settings.DEFAULT_USER_AGENT
    delay: int = settings.DEFAULT_DELAY_MS
    max_retries: int = settings.DEFAULT_MAX_RETRIES
    check_before_continue: bool = settings.DEFAULT_CHECK_BEFORE_CONTINUE

    def __post_init__(self):
        for name in ("max_pages", "delay", "max_retries"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Invalid {name}: {value!r}. Must be a non-negative integer")

        if not isinstance(self.user_agent, str) or not self.user_agent:
            raise ValueError("user_agent must be a non-empty string")

        self.check_before_continue = bool(self.check_before_continue)

    @classmethod
    def from_dict(cls, data: dict) -> "CollectorOptions":
        """
        Create options from a dict of overrides.

        Accepts the snake_case field names as well as the camelCase
        names of the external configuration surface.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown collector option: {key}")
            kwargs[name] = value

        if kwargs.get("check_before_continue") and kwargs.get("max_pages"):
            logger.warning(
                "The 'max_pages' option will be ignored when 'check_before_continue' is set"
            )

        return cls(**kwargs)
