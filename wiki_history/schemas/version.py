"""Version schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .page import PageId


class VersionSummary(BaseModel):
    """One history row, without materialized content."""
    version: int
    change_description: Optional[str] = None
    editor_id: Optional[int] = None
    created_at: Optional[datetime] = None
    added_lines: int = 0
    deleted_lines: int = 0
    changed_chars: int = 0
    content_hash: Optional[str] = None
    is_archived: bool = False


class VersionContentResponse(BaseModel):
    """Full text of a page as of one version."""
    page_id: PageId
    version: int
    content: str


class VersionCompareResponse(BaseModel):
    """Unified diff between two versions of a page."""
    page_id: PageId
    from_version: int
    to_version: int
    diff: str
