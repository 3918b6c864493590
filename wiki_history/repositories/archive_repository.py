"""Archive repository for overflowed version history."""

from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import ArchivedVersion


class ArchiveRepository:
    """Data access layer for wiki_version_history rows. Rows are insert-only."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, row: ArchivedVersion) -> ArchivedVersion:
        self.db.add(row)
        self.db.flush()
        return row

    def find_by_page(self, page_id: int) -> List[ArchivedVersion]:
        """All archived versions of a page, oldest first."""
        return self.db.query(ArchivedVersion).filter(
            ArchivedVersion.page_id == page_id
        ).order_by(ArchivedVersion.version.asc()).all()

    def find_between(self, page_id: int, low: int, high: int) -> List[ArchivedVersion]:
        """Archived versions with low <= version <= high, newest first."""
        return self.db.query(ArchivedVersion).filter(
            ArchivedVersion.page_id == page_id,
            ArchivedVersion.version >= low,
            ArchivedVersion.version <= high,
        ).order_by(ArchivedVersion.version.desc()).all()

    def count_by_project(self, project_id: int) -> int:
        return self.db.query(func.count(ArchivedVersion.id)).filter(
            ArchivedVersion.project_id == project_id
        ).scalar() or 0

    def delete_by_page(self, page_id: int) -> int:
        count = self.db.query(ArchivedVersion).filter(
            ArchivedVersion.page_id == page_id
        ).delete(synchronize_session=False)
        self.db.flush()
        return count

    def delete_by_project(self, project_id: int) -> int:
        count = self.db.query(ArchivedVersion).filter(
            ArchivedVersion.project_id == project_id
        ).delete(synchronize_session=False)
        self.db.flush()
        return count
