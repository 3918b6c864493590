"""Content service: deep module for wiki page lifecycle and history.

Callers (the HTTP layer) interact with one service; coordination of the
diff engine, version window, archive, reconstructor, and page tree happens
here. Each public mutating method commits once, so a page row, its window,
and any newly archived rows land atomically. Pass commit=False to group
several calls into one transaction owned by the caller.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.id_generator import IdGenerator, get_id_generator
from ..exceptions import ValidationError
from ..models import PageType, VersionEntry, WikiPage
from ..repositories import PageRepository
from ..schemas.page import (
    PageCreate,
    PageResponse,
    PageSearchResponse,
    PageTreeNode,
    PageUpdate,
    WikiStatistics,
)
from ..schemas.version import VersionSummary
from .archive_service import ArchiveService
from .diff_engine import DiffEngine
from .page_tree_service import PageTreeService
from .reconstructor import Reconstructor
from .version_window import VersionWindowService

logger = logging.getLogger(__name__)


class ContentService:
    """Orchestrates edits, historical reads, and structural changes."""

    def __init__(
        self,
        db: Session,
        id_generator: Optional[IdGenerator] = None,
        window_size: Optional[int] = None,
    ):
        self.db = db
        id_generator = id_generator or get_id_generator()
        diff_engine = DiffEngine()

        self.page_repo = PageRepository(db)
        self.archive = ArchiveService(db, id_generator)
        self.tree = PageTreeService(db, id_generator, diff_engine)
        self.window = VersionWindowService(
            db, id_generator, diff_engine, window_size or settings.version_window_size
        )
        self.reconstructor = Reconstructor(db, id_generator, diff_engine)

    # -- Pages ------------------------------------------------------------

    def create_page(self, project_id: int, data: PageCreate, commit: bool = True) -> WikiPage:
        if data.page_type == PageType.DIRECTORY and data.content:
            raise ValidationError("Directories cannot have content", field="content")
        page = self.tree.create(
            project_id=project_id,
            parent_id=data.parent_id,
            title=data.title,
            page_type=data.page_type,
            content=data.content,
            sort_order=data.sort_order,
            creator_id=data.creator_id,
        )
        if commit:
            self.db.commit()
        return page

    def get_page(self, page_id: int) -> WikiPage:
        """Get page by ID. Raises PageNotFoundError if missing."""
        return self.page_repo.get_by_id(page_id)

    def update_page(self, page_id: int, update: PageUpdate, commit: bool = True) -> WikiPage:
        """Rename and/or edit a page.

        A content edit identical to the current content is a no-op: no version
        is created and current_version is unchanged.
        """
        page = self.page_repo.get_by_id(page_id)

        if update.title is not None and update.title != page.title:
            self.tree.rename(page_id, update.title)

        if update.content is not None:
            if page.page_type != PageType.DOCUMENT:
                raise ValidationError("Directories have no content to edit", field="content")
            self.window.record(page, update.content, update.change_description, update.editor_id)
        elif update.editor_id is not None:
            page.last_editor_id = update.editor_id

        if commit:
            self.db.commit()
        return page

    def record_edit(
        self,
        page_id: int,
        content: str,
        change_description: Optional[str] = None,
        editor_id: Optional[int] = None,
        commit: bool = True,
    ) -> Optional[VersionEntry]:
        """Record a content edit. Returns the new VersionEntry, or None for a no-op."""
        page = self.page_repo.get_by_id(page_id)
        entry = self.window.record(page, content, change_description, editor_id)
        if commit:
            self.db.commit()
        return entry

    def move_page(
        self,
        page_id: int,
        new_parent_id: Optional[int],
        operator_id: Optional[int] = None,
        commit: bool = True,
    ) -> WikiPage:
        page = self.tree.move(page_id, new_parent_id, operator_id)
        if commit:
            self.db.commit()
        return page

    def copy_page(
        self,
        page_id: int,
        target_parent_id: Optional[int],
        new_title: Optional[str] = None,
        operator_id: Optional[int] = None,
        commit: bool = True,
    ) -> WikiPage:
        page = self.tree.copy(page_id, target_parent_id, new_title, operator_id)
        if commit:
            self.db.commit()
        return page

    def update_sort_order(self, page_id: int, sort_order: int, commit: bool = True) -> WikiPage:
        page = self.tree.update_sort_order(page_id, sort_order)
        if commit:
            self.db.commit()
        return page

    def delete_page(self, page_id: int, commit: bool = True) -> int:
        """Delete one page and its archived history.

        Raises ValidationError if the page still has children. Returns 1.
        """
        self.tree.delete(page_id)
        if commit:
            self.db.commit()
        return 1

    def delete_page_recursive(self, page_id: int, commit: bool = True) -> int:
        """Delete a page, its descendants, and their archived history."""
        removed = self.tree.delete_recursive(page_id)
        if commit:
            self.db.commit()
        return removed

    def delete_project(self, project_id: int, commit: bool = True) -> tuple[int, int]:
        """Remove every page and archived version of a project.

        Returns (pages_removed, versions_purged).
        """
        purged = self.archive.purge_by_project(project_id)
        removed = self.page_repo.delete_by_project(project_id)
        if commit:
            self.db.commit()
        logger.info(
            "Deleted project wiki",
            extra={"project_id": project_id, "pages_removed": removed, "versions_purged": purged},
        )
        return removed, purged

    def get_tree(self, project_id: int) -> List[PageTreeNode]:
        return self.tree.get_tree(project_id)

    def search_pages(self, project_id: int, keyword: str, skip: int = 0, limit: int = 10) -> PageSearchResponse:
        """Case-insensitive title search, one page of results at a time."""
        keyword = keyword.strip()
        if not keyword:
            raise ValidationError("Search keyword cannot be blank", field="keyword")
        items = self.page_repo.search_by_title(project_id, keyword, skip, limit)
        total = self.page_repo.count_by_title(project_id, keyword)
        return PageSearchResponse(
            items=[PageResponse.model_validate(page) for page in items],
            total=total,
            skip=skip,
            limit=limit,
        )

    def get_recently_updated(self, project_id: int, limit: int = 10) -> List[WikiPage]:
        return self.page_repo.find_recently_updated(project_id, limit)

    # -- History ----------------------------------------------------------

    def get_version_content(self, page_id: int, version: int) -> str:
        page = self.page_repo.get_by_id(page_id)
        return self.reconstructor.version_at(page, version)

    def compare_versions(self, page_id: int, version1: int, version2: int) -> str:
        page = self.page_repo.get_by_id(page_id)
        return self.reconstructor.diff_between(page, version1, version2)

    def get_history(self, page_id: int) -> List[VersionSummary]:
        """Full history, oldest first."""
        page = self.page_repo.get_by_id(page_id)
        return self.reconstructor.history(page)

    def get_recent_versions(self, page_id: int) -> List[VersionSummary]:
        page = self.page_repo.get_by_id(page_id)
        return self.reconstructor.recent_versions(page)

    # -- Statistics -------------------------------------------------------

    def get_statistics(self, project_id: int) -> WikiStatistics:
        """Aggregate counts for a project's wiki."""
        pages = self.page_repo.find_by_project(project_id)

        contributors: set = set()
        contributor_stats: dict = {}
        for page in pages:
            if page.creator_id is not None:
                contributors.add(page.creator_id)
                contributor_stats[page.creator_id] = contributor_stats.get(page.creator_id, 0) + 1
            if page.last_editor_id is not None:
                contributors.add(page.last_editor_id)

        documents = [p for p in pages if p.page_type == PageType.DOCUMENT]
        archived = self.archive.count_by_project(project_id)

        return WikiStatistics(
            project_id=project_id,
            total_pages=len(pages),
            document_count=len(documents),
            directory_count=len(pages) - len(documents),
            total_content_size=sum(p.content_size or 0 for p in documents),
            contributor_count=len(contributors),
            total_versions=sum(p.current_version for p in documents),
            archived_versions=archived,
            contributor_stats=contributor_stats,
        )
