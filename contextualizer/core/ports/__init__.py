# contextualizer/core/ports/__init__.py
"""
Core Ports (Interfaces).

Protocols the persistence adapters implement. The engine and use cases only
see these, never file paths or JSON.
"""

from .context_repository import IContextRepository
from .story_repository import IStoryRepository

__all__ = [
    "IContextRepository",
    "IStoryRepository",
]
