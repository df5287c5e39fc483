"""
Lookout FastAPI Application.

Demo API server providing:
- /user/{user_id}: observed user lookup
- /healthz, /readyz: Health checks
- /metrics: Prometheus metrics
"""

__all__ = ["app"]
