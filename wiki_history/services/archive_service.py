"""Archive of version history evicted from page windows."""

import logging
from datetime import datetime, timezone
from typing import List

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..core.id_generator import IdGenerator
from ..exceptions import DatabaseError
from ..models import ArchivedVersion, VersionEntry, WikiPage
from ..repositories import ArchiveRepository

logger = logging.getLogger(__name__)


class ArchiveService:
    """Persists evicted VersionEntry records and answers range queries.

    Failures propagate: a lost archive row would leave a permanent gap in the
    page's diff chain, so the enclosing transaction must roll back instead.
    """

    def __init__(self, db: Session, id_generator: IdGenerator):
        self.db = db
        self.repo = ArchiveRepository(db)
        self.id_generator = id_generator

    def archive(self, page: WikiPage, entry: VersionEntry) -> ArchivedVersion:
        # A failed flush expires the session's instances; read ids up front.
        page_id, project_id = page.id, page.project_id
        row = ArchivedVersion(
            id=self.id_generator.next_id(),
            page_id=page_id,
            project_id=project_id,
            version=entry.version,
            content_diff=entry.content_diff,
            change_description=entry.change_description,
            editor_id=entry.editor_id,
            created_at=entry.created_at,
            added_lines=entry.added_lines,
            deleted_lines=entry.deleted_lines,
            changed_chars=entry.changed_chars,
            content_hash=entry.content_hash,
            archived_at=datetime.now(timezone.utc),
        )
        try:
            self.repo.save(row)
        except sqlalchemy.exc.SQLAlchemyError as e:
            logger.error(
                "Failed to archive page version",
                extra={"page_id": page_id, "project_id": project_id, "version": entry.version},
            )
            raise DatabaseError(
                f"Failed to archive version {entry.version} of page {page_id}",
                original_error=e,
            ) from e

        logger.info(
            "Archived page version",
            extra={"page_id": page_id, "version": entry.version},
        )
        return row

    def versions_for(self, page_id: int) -> List[ArchivedVersion]:
        """Every archived version of a page, oldest first."""
        return self.repo.find_by_page(page_id)

    def versions_between(self, page_id: int, low: int, high: int) -> List[ArchivedVersion]:
        """Archived versions in [low, high], newest first."""
        if low > high:
            return []
        return self.repo.find_between(page_id, low, high)

    def count_by_project(self, project_id: int) -> int:
        return self.repo.count_by_project(project_id)

    def purge(self, page_id: int) -> int:
        """Delete a page's archived history. Returns rows removed."""
        count = self.repo.delete_by_page(page_id)
        if count:
            logger.info("Purged archived versions", extra={"page_id": page_id, "count": count})
        return count

    def purge_by_project(self, project_id: int) -> int:
        count = self.repo.delete_by_project(project_id)
        logger.info("Purged project archive", extra={"project_id": project_id, "count": count})
        return count
