"""
Application Services.

Contains:
- user_service: user name lookup (observed)
"""

from apps.core_api.services.user_service import UserService

__all__ = ["UserService"]
