# src/memberhub/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import forum_router, network_router, resources_router

__all__ = [
    "network_router",
    "forum_router",
    "resources_router",
]
