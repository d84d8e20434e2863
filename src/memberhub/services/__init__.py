# src/memberhub/services/__init__.py
"""Business logic services for the Member Hub application."""

from .capabilities import Actor
from .connection_graph import ConnectionGraphService
from .forum import ForumService
from .resources import ResourceService

__all__ = [
    "Actor",
    "ConnectionGraphService",
    "ForumService",
    "ResourceService",
]
