# contextualizer/adapters/persistence/__init__.py
from .filesystem_repo import FileSystemContextRepository, FileSystemStoryRepository

__all__ = [
    "FileSystemContextRepository",
    "FileSystemStoryRepository",
]
