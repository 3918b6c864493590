"""Page and tree schemas."""

from datetime import datetime
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, Field, PlainSerializer, field_validator

from ..models.page import PageType

# Snowflake ids exceed 2**53, so JSON responses carry page ids as strings.
# Requests accept either form.
PageId = Annotated[int, PlainSerializer(str, return_type=str, when_used="json")]


def _clean_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title cannot be empty")
    if '/' in v:
        raise ValueError("Title cannot contain '/'")
    return v


class PageCreate(BaseModel):
    """Schema for creating a page. The project comes from the URL."""
    title: str = Field(max_length=255)
    page_type: PageType = PageType.DOCUMENT
    parent_id: Optional[int] = None
    content: Optional[str] = None
    sort_order: Optional[int] = None
    creator_id: Optional[int] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)


class PageUpdate(BaseModel):
    """Schema for updating a page. Omitted fields are left unchanged."""
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    change_description: Optional[str] = Field(default=None, max_length=500)
    editor_id: Optional[int] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_title(v) if v is not None else None


class PageMoveRequest(BaseModel):
    """Move a page under a new parent (None = project root)."""
    new_parent_id: Optional[int] = None
    operator_id: Optional[int] = None


class PageCopyRequest(BaseModel):
    """Copy a page (and its subtree) under a target parent."""
    target_parent_id: Optional[int] = None
    new_title: Optional[str] = Field(default=None, max_length=255)
    operator_id: Optional[int] = None

    @field_validator('new_title')
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _clean_title(v) if v is not None else None


class SortOrderUpdate(BaseModel):
    sort_order: int


class PageResponse(BaseModel):
    """Page metadata without content."""
    id: PageId
    project_id: int
    title: str
    page_type: PageType
    parent_id: Optional[PageId] = None
    path: str
    sort_order: int
    current_version: int
    content_summary: Optional[str] = None
    content_size: Optional[int] = None
    creator_id: Optional[int] = None
    last_editor_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PageDetailResponse(PageResponse):
    """Page metadata with its current content."""
    content: Optional[str] = None
    content_hash: Optional[str] = None


class PageTreeNode(BaseModel):
    """Schema for tree navigation."""
    id: PageId
    title: str
    page_type: PageType
    parent_id: Optional[PageId] = None
    path: str
    sort_order: int
    current_version: int
    content_summary: Optional[str] = None
    children: List['PageTreeNode'] = []

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    class Config:
        from_attributes = True


class DeleteResponse(BaseModel):
    deleted_pages: int
    purged_versions: Optional[int] = None


class WikiStatistics(BaseModel):
    """Per-project wiki statistics."""
    project_id: int
    total_pages: int = 0
    document_count: int = 0
    directory_count: int = 0
    total_content_size: int = 0
    contributor_count: int = 0
    total_versions: int = 0
    archived_versions: int = 0
    contributor_stats: Dict[int, int] = {}


class PageSearchResponse(BaseModel):
    """One page of title search results."""
    items: List[PageResponse]
    total: int
    skip: int
    limit: int
