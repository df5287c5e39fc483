"""
FastAPI Routers.

Contains:
- users: GET /user/{user_id}
- health: GET /healthz, /readyz
- metrics: GET /metrics
"""

__all__ = ["users", "health", "metrics"]
