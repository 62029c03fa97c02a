"""
Crawl steps for a single page.

- PageFetcher: issues the request
- ResponseDecoder: unwraps the JSON envelope
- ReviewExtractor: turns review HTML into ReviewRecord objects
"""
