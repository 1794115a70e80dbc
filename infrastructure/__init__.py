"""Infrastructure layer — caching and observability for the fretboard harmony service.

Modules:
    cache       Redis-backed analysis cache with TTL.
    metrics     Prometheus metrics registry.
"""
