"""Wiki page model."""

from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.sql import func
from ..database import Base


class PageType(str, Enum):
    """Node kind. Only documents carry content and version history."""
    DIRECTORY = "DIRECTORY"
    DOCUMENT = "DOCUMENT"


class WikiPage(Base):
    """A node in a project's page tree with its current content and recent diffs."""

    __tablename__ = "wiki_pages"
    __table_args__ = (
        Index("ix_wiki_pages_project_id", "project_id"),
        Index("ix_wiki_pages_parent_id", "parent_id"),
        Index("ix_wiki_pages_project_parent", "project_id", "parent_id"),
        Index("ix_wiki_pages_path", "path"),
        Index("ix_wiki_pages_updated_at", "updated_at"),
    )

    # Primary key (snowflake id, assigned by the service layer)
    id = Column(BigInteger, primary_key=True, autoincrement=False)
    project_id = Column(BigInteger, nullable=False)

    title = Column(String(255), nullable=False)
    page_type = Column(
        SAEnum(PageType, name="page_type", native_enum=False, length=20),
        nullable=False,
        default=PageType.DOCUMENT,
    )

    # Hierarchical structure. NULL parent = root page.
    # path is materialized from ancestor titles: "/Root/Child/Page"
    parent_id = Column(BigInteger, nullable=True)
    path = Column(String(1000), nullable=False, default="")
    sort_order = Column(Integer, nullable=False, default=0)

    # Content (documents only)
    content = Column(Text, nullable=True)
    content_hash = Column(String(64), nullable=True)  # SHA256 of content
    content_size = Column(Integer, nullable=True)
    content_summary = Column(String(255), nullable=True)

    # Version tracking. recent_versions holds serialized VersionEntry dicts,
    # oldest first, at most settings.version_window_size of them.
    current_version = Column(Integer, nullable=False, default=1)
    recent_versions = Column(JSON, nullable=False, default=list)

    # Authorship
    creator_id = Column(BigInteger, nullable=True)
    last_editor_id = Column(BigInteger, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_document(self) -> bool:
        return self.page_type == PageType.DOCUMENT
