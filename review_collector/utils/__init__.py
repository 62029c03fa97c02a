"""
Utility modules for the review collector.

Cross-cutting concerns:
- Events: synchronous publish/subscribe for collector events
- HTTP: shared transport admitting one request at a time
"""
