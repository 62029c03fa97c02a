"""Data models: options, crawl state, reviews and events."""
