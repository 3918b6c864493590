"""Data access repositories."""

from .base import BaseRepository
from .page_repository import PageRepository
from .archive_repository import ArchiveRepository

__all__ = [
    "BaseRepository",
    "PageRepository",
    "ArchiveRepository",
]
