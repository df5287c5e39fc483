"""
Lookout Observability Package.

Provides:
- Structured logging (structlog)
- Metrics (Prometheus)
- Tracer provider setup (OpenTelemetry)

Used by the observation handlers and the API service.
"""

__all__ = ["tracing", "metrics", "logging"]
