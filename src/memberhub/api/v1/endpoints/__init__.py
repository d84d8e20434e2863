# src/memberhub/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .forum import router as forum_router
from .network import router as network_router
from .resources import router as resources_router

__all__ = [
    "network_router",
    "forum_router",
    "resources_router",
]
