"""Page repository for tree queries."""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query

from ..models import WikiPage
from ..exceptions import PageNotFoundError
from .base import BaseRepository


class PageRepository(BaseRepository[WikiPage]):
    """Repository for wiki page tree operations."""

    model_class = WikiPage
    not_found_error = PageNotFoundError

    def find_children(self, parent_id: int) -> List[WikiPage]:
        """Direct children of a page, in sibling order."""
        return self.db.query(WikiPage).filter(
            WikiPage.parent_id == parent_id
        ).order_by(WikiPage.sort_order, WikiPage.id).all()

    def find_by_project(self, project_id: int) -> List[WikiPage]:
        return self.db.query(WikiPage).filter(
            WikiPage.project_id == project_id
        ).order_by(WikiPage.path, WikiPage.id).all()

    def max_sort_order(self, project_id: int, parent_id: Optional[int]) -> Optional[int]:
        """Highest sort_order among siblings under parent_id (None = roots)."""
        query = self.db.query(func.max(WikiPage.sort_order)).filter(
            WikiPage.project_id == project_id
        )
        if parent_id is None:
            query = query.filter(WikiPage.parent_id.is_(None))
        else:
            query = query.filter(WikiPage.parent_id == parent_id)
        return query.scalar()

    def delete_by_project(self, project_id: int) -> int:
        count = self.db.query(WikiPage).filter(
            WikiPage.project_id == project_id
        ).delete(synchronize_session=False)
        self.db.flush()
        return count

    def _title_filter(self, project_id: int, keyword: str) -> Query:
        # Wildcards in the keyword match literally.
        escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return self.db.query(WikiPage).filter(
            WikiPage.project_id == project_id,
            WikiPage.title.ilike(f"%{escaped}%", escape="\\"),
        )

    def search_by_title(self, project_id: int, keyword: str, skip: int = 0, limit: int = 10) -> List[WikiPage]:
        """Case-insensitive substring match on titles, ordered by path."""
        return self._title_filter(project_id, keyword).order_by(
            WikiPage.path, WikiPage.id
        ).offset(skip).limit(limit).all()

    def count_by_title(self, project_id: int, keyword: str) -> int:
        return self._title_filter(project_id, keyword).count()

    def find_recently_updated(self, project_id: int, limit: int = 10) -> List[WikiPage]:
        """Most recently updated pages of a project, newest first."""
        return self.db.query(WikiPage).filter(
            WikiPage.project_id == project_id
        ).order_by(WikiPage.updated_at.desc(), WikiPage.id.desc()).limit(limit).all()
