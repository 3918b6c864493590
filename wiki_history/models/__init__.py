"""Database models."""

from .page import WikiPage, PageType
from .archived_version import ArchivedVersion
from .version_entry import VersionEntry

__all__ = ["WikiPage", "PageType", "ArchivedVersion", "VersionEntry"]
