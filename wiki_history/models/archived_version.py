"""Archived version model."""

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func
from ..database import Base


class ArchivedVersion(Base):
    """Version history that overflowed out of a page's inline window.

    Rows are immutable once written. page_id deliberately has no foreign key:
    archive rows are purged explicitly when their page is deleted.
    """

    __tablename__ = "wiki_version_history"
    __table_args__ = (
        UniqueConstraint("page_id", "version", name="uq_wiki_version_history_page_version"),
        Index("ix_wiki_version_history_page_version", "page_id", "version"),
        Index("ix_wiki_version_history_project_created", "project_id", "created_at"),
    )

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    page_id = Column(BigInteger, nullable=False)
    project_id = Column(BigInteger, nullable=False)

    version = Column(Integer, nullable=False)
    content_diff = Column(Text, nullable=False, default="")
    change_description = Column(String(500), nullable=True)
    editor_id = Column(BigInteger, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    added_lines = Column(Integer, nullable=False, default=0)
    deleted_lines = Column(Integer, nullable=False, default=0)
    changed_chars = Column(Integer, nullable=False, default=0)
    content_hash = Column(String(64), nullable=True)

    archived_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
