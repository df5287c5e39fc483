"""
FastAPI Dependency Injection.

Provides dependency injection for:
- The process-wide observation registry
- The (observed) user service
"""

from fastapi import Request

from apps.core_api.services.user_service import UserService
from lookout_core.registry import ObservationRegistry


def get_observation_registry(request: Request) -> ObservationRegistry:
    """Dependency: registry built at startup."""
    return request.app.state.observation_registry


def get_user_service(request: Request) -> UserService:
    """Dependency: UserService with @observed methods applied."""
    return request.app.state.user_service
