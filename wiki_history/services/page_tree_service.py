"""Deep module for the per-project page tree: create, move, copy, delete.

Paths are materialized ("/Root/Child/Page") and recomputed for a whole
subtree whenever a structural change (move, rename) touches its root.
Structural operations never alter version history: move keeps it, copy
starts fresh at version 1, delete purges it.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.id_generator import IdGenerator, get_id_generator
from ..exceptions import InvalidMoveError, ValidationError
from ..models import PageType, WikiPage
from ..repositories import PageRepository
from ..schemas.page import PageTreeNode
from .archive_service import ArchiveService
from .diff_engine import DiffEngine
from .version_window import apply_content

PATH_SEPARATOR = "/"
COPY_TITLE_PREFIX = "Copy of "

logger = logging.getLogger(__name__)


def build_path(parent_path: Optional[str], title: str) -> str:
    """Materialized path for a page titled title under parent_path (None = root)."""
    if parent_path is None:
        return f"{PATH_SEPARATOR}{title}"
    return f"{parent_path}{PATH_SEPARATOR}{title}"


@dataclass
class _SubtreeSnapshot:
    """Source-side copy of a subtree, captured before any clone is written."""
    title: str
    page_type: PageType
    content: Optional[str]
    sort_order: int
    children: List["_SubtreeSnapshot"] = field(default_factory=list)


class PageTreeService:
    """All page tree operations behind a simple interface.

    Public methods:
        create           -- new page under a directory (or at the root)
        move             -- re-parent a page; rejects cycles; re-paths subtree
        copy             -- deep-clone a subtree with fresh history
        delete           -- remove a childless page and its archive
        delete_recursive -- remove a subtree depth-first, purging archives
        rename           -- change title and re-path subtree
        update_sort_order
        get_tree         -- nested PageTreeNode view of a project
    """

    def __init__(
        self,
        db: Session,
        id_generator: Optional[IdGenerator] = None,
        diff_engine: Optional[DiffEngine] = None,
    ):
        self.db = db
        self.id_generator = id_generator or get_id_generator()
        self.diff_engine = diff_engine or DiffEngine()
        self.page_repo = PageRepository(db)
        self.archive = ArchiveService(db, self.id_generator)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(
        self,
        project_id: int,
        parent_id: Optional[int],
        title: str,
        page_type: PageType = PageType.DOCUMENT,
        content: Optional[str] = None,
        sort_order: Optional[int] = None,
        creator_id: Optional[int] = None,
    ) -> WikiPage:
        """Create a page at version 1 with an empty history window."""
        title = self._validate_title(title)
        parent = self._resolve_parent(project_id, parent_id)

        if sort_order is None:
            sort_order = self._next_sort_order(project_id, parent_id)

        page = WikiPage(
            id=self.id_generator.next_id(),
            project_id=project_id,
            title=title,
            page_type=page_type,
            parent_id=parent_id,
            path=build_path(parent.path if parent else None, title),
            sort_order=sort_order,
            current_version=1,
            recent_versions=[],
            creator_id=creator_id,
            last_editor_id=creator_id,
        )
        if page_type == PageType.DOCUMENT:
            body = content or ""
            apply_content(page, body, self.diff_engine.content_hash(body))

        self.page_repo.save(page)
        logger.info(
            "Created page",
            extra={"page_id": page.id, "project_id": project_id, "path": page.path, "page_type": page_type.value},
        )
        return page

    def move(self, page_id: int, new_parent_id: Optional[int], operator_id: Optional[int] = None) -> WikiPage:
        """Re-parent a page. Its history is untouched; paths of the subtree follow."""
        page = self.page_repo.get_by_id(page_id)

        if new_parent_id is not None:
            if new_parent_id == page.id or self._is_ancestor_or_self(page.id, new_parent_id):
                raise InvalidMoveError(page.id, new_parent_id)
        new_parent = self._resolve_parent(page.project_id, new_parent_id)

        if page.parent_id != new_parent_id:
            page.parent_id = new_parent_id
            page.sort_order = self._next_sort_order(page.project_id, new_parent_id)
        if operator_id is not None:
            page.last_editor_id = operator_id

        self._repath_subtree(page, new_parent.path if new_parent else None)
        self.db.flush()
        logger.info(
            "Moved page",
            extra={"page_id": page.id, "new_parent_id": new_parent_id, "path": page.path},
        )
        return page

    def copy(
        self,
        page_id: int,
        target_parent_id: Optional[int],
        new_title: Optional[str] = None,
        operator_id: Optional[int] = None,
    ) -> WikiPage:
        """Deep-clone a page and its descendants under target_parent_id.

        Clones get fresh ids, version 1, an empty window, and the source's
        current content verbatim. The source subtree is snapshotted first, so
        copying a directory into its own subtree terminates.
        """
        source = self.page_repo.get_by_id(page_id)
        snapshot = self._snapshot(source)
        snapshot.title = self._validate_title(new_title) if new_title else f"{COPY_TITLE_PREFIX}{source.title}"

        clone = self._create_from_snapshot(
            snapshot,
            project_id=source.project_id,
            parent_id=target_parent_id,
            sort_order=None,
            creator_id=operator_id,
        )
        logger.info(
            "Copied page",
            extra={"source_id": page_id, "page_id": clone.id, "path": clone.path},
        )
        return clone

    def delete(self, page_id: int) -> None:
        """Delete a single page and its archived history.

        Raises ValidationError while the page still has children; use
        delete_recursive to remove a whole subtree.
        """
        page = self.page_repo.get_by_id(page_id)
        if self.page_repo.find_children(page_id):
            raise ValidationError(
                "Page still has child pages; delete them first or delete recursively",
                field="page_id",
            )
        title = page.title
        self.archive.purge(page_id)
        self.page_repo.delete(page)
        logger.info("Deleted page", extra={"page_id": page_id, "title": title})

    def delete_recursive(self, page_id: int) -> int:
        """Delete a page and all descendants, children first. Returns pages removed."""
        page = self.page_repo.get_by_id(page_id)
        removed = self._delete_subtree(page)
        logger.info(
            "Deleted page subtree",
            extra={"page_id": page_id, "title": page.title, "pages_removed": removed},
        )
        return removed

    def rename(self, page_id: int, title: str) -> WikiPage:
        page = self.page_repo.get_by_id(page_id)
        title = self._validate_title(title)
        if title == page.title:
            return page

        page.title = title
        parent = self.page_repo.get_by_id(page.parent_id) if page.parent_id is not None else None
        self._repath_subtree(page, parent.path if parent else None)
        self.db.flush()
        logger.info("Renamed page", extra={"page_id": page.id, "path": page.path})
        return page

    def update_sort_order(self, page_id: int, sort_order: int) -> WikiPage:
        page = self.page_repo.get_by_id(page_id)
        page.sort_order = sort_order
        self.db.flush()
        return page

    def children(self, page_id: int) -> List[WikiPage]:
        return self.page_repo.find_children(page_id)

    def get_tree(self, project_id: int) -> List[PageTreeNode]:
        """Nested tree of a project's pages, siblings in sort order.

        Loads the project in one query and assembles the tree in memory.
        """
        pages = self.page_repo.find_by_project(project_id)
        children_by_parent: dict = {}
        for page in pages:
            children_by_parent.setdefault(page.parent_id, []).append(page)
        for siblings in children_by_parent.values():
            siblings.sort(key=lambda p: (p.sort_order, p.id))

        def build(parent_id: Optional[int]) -> List[PageTreeNode]:
            return [
                PageTreeNode(
                    id=page.id,
                    title=page.title,
                    page_type=page.page_type,
                    parent_id=page.parent_id,
                    path=page.path,
                    sort_order=page.sort_order,
                    current_version=page.current_version,
                    content_summary=page.content_summary,
                    children=build(page.id),
                )
                for page in children_by_parent.get(parent_id, [])
            ]

        return build(None)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _validate_title(self, title: Optional[str]) -> str:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title cannot be empty", field="title")
        if PATH_SEPARATOR in title:
            raise ValidationError(f"Title cannot contain '{PATH_SEPARATOR}'", field="title")
        return title

    def _resolve_parent(self, project_id: int, parent_id: Optional[int]) -> Optional[WikiPage]:
        """Load and validate a prospective parent. None means project root."""
        if parent_id is None:
            return None
        parent = self.page_repo.get_by_id(parent_id)
        if parent.project_id != project_id:
            raise ValidationError("Parent page belongs to a different project", field="parent_id")
        if parent.page_type != PageType.DIRECTORY:
            raise ValidationError("Pages can only be nested under a directory", field="parent_id")
        return parent

    def _next_sort_order(self, project_id: int, parent_id: Optional[int]) -> int:
        current_max = self.page_repo.max_sort_order(project_id, parent_id)
        return (current_max if current_max is not None else 0) + 1

    def _is_ancestor_or_self(self, page_id: int, candidate_id: int) -> bool:
        """Walk candidate's ancestor chain to the root looking for page_id."""
        seen = set()
        current_id: Optional[int] = candidate_id
        while current_id is not None:
            if current_id == page_id:
                return True
            if current_id in seen:
                # Existing cycle in stored data; refuse to make it worse.
                logger.error("Cycle detected in page tree", extra={"page_id": current_id})
                return True
            seen.add(current_id)
            node = self.page_repo.get_by_id_optional(current_id)
            current_id = node.parent_id if node is not None else None
        return False

    def _repath_subtree(self, page: WikiPage, parent_path: Optional[str]) -> None:
        page.path = build_path(parent_path, page.title)
        for child in self.page_repo.find_children(page.id):
            self._repath_subtree(child, page.path)

    def _snapshot(self, page: WikiPage) -> _SubtreeSnapshot:
        return _SubtreeSnapshot(
            title=page.title,
            page_type=page.page_type,
            content=page.content,
            sort_order=page.sort_order,
            children=[self._snapshot(child) for child in self.page_repo.find_children(page.id)],
        )

    def _create_from_snapshot(
        self,
        snapshot: _SubtreeSnapshot,
        project_id: int,
        parent_id: Optional[int],
        sort_order: Optional[int],
        creator_id: Optional[int],
    ) -> WikiPage:
        clone = self.create(
            project_id=project_id,
            parent_id=parent_id,
            title=snapshot.title,
            page_type=snapshot.page_type,
            content=snapshot.content,
            sort_order=sort_order,
            creator_id=creator_id,
        )
        for child in snapshot.children:
            self._create_from_snapshot(
                child,
                project_id=project_id,
                parent_id=clone.id,
                sort_order=child.sort_order,
                creator_id=creator_id,
            )
        return clone

    def _delete_subtree(self, page: WikiPage) -> int:
        removed = 0
        for child in self.page_repo.find_children(page.id):
            removed += self._delete_subtree(child)
        self.archive.purge(page.id)
        self.page_repo.delete(page)
        return removed + 1
