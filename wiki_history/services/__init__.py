"""Business logic services."""

from .diff_engine import DiffEngine, ChangeStats
from .version_window import VersionWindow, VersionWindowService
from .archive_service import ArchiveService
from .reconstructor import Reconstructor
from .page_tree_service import PageTreeService
from .content_service import ContentService

__all__ = [
    "DiffEngine",
    "ChangeStats",
    "VersionWindow",
    "VersionWindowService",
    "ArchiveService",
    "Reconstructor",
    "PageTreeService",
    "ContentService",
]
