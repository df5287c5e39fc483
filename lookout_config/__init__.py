"""
Lookout Configuration Package.

Provides Pydantic Settings loaded from environment variables.
"""

from lookout_config.settings import Settings

__all__ = ["Settings"]
