"""
Lookout Applications Package.

Contains:
- core_api: FastAPI application (observed demo service)
"""

__version__ = "0.1.0"
