"""Pydantic schemas for API validation."""

from .page import (
    PageCreate,
    PageUpdate,
    PageMoveRequest,
    PageCopyRequest,
    SortOrderUpdate,
    PageResponse,
    PageDetailResponse,
    PageTreeNode,
    DeleteResponse,
    WikiStatistics,
    PageSearchResponse,
)
from .version import (
    VersionSummary,
    VersionContentResponse,
    VersionCompareResponse,
)

__all__ = [
    "PageCreate",
    "PageUpdate",
    "PageMoveRequest",
    "PageCopyRequest",
    "SortOrderUpdate",
    "PageResponse",
    "PageDetailResponse",
    "PageTreeNode",
    "DeleteResponse",
    "WikiStatistics",
    "PageSearchResponse",
    "VersionSummary",
    "VersionContentResponse",
    "VersionCompareResponse",
]
