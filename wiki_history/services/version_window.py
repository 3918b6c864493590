"""Bounded inline version history and the edit-recording path.

A page keeps its K most recent diffs inline (WikiPage.recent_versions).
Recording an edit appends one VersionEntry; when that pushes the window past
K entries, the oldest one is handed to the archive. Eviction is strict FIFO so
that window + archive always form one gapless chain 2..current_version.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Iterable, Iterator, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.id_generator import IdGenerator, get_id_generator
from ..exceptions import ValidationError
from ..models import VersionEntry, WikiPage
from .archive_service import ArchiveService
from .diff_engine import DiffEngine, EMPTY_PATCH

DEFAULT_CHANGE_DESCRIPTION = "Update content"

logger = logging.getLogger(__name__)


class VersionWindow:
    """Fixed-capacity ring buffer of VersionEntry, oldest first."""

    def __init__(self, entries: Iterable[VersionEntry] = (), capacity: Optional[int] = None):
        self.capacity = capacity or settings.version_window_size
        if self.capacity < 1:
            raise ValueError("Window capacity must be at least 1")
        self._entries: Deque[VersionEntry] = deque(sorted(entries, key=lambda e: e.version))

    @classmethod
    def from_page(cls, page: WikiPage, capacity: Optional[int] = None) -> "VersionWindow":
        raw = page.recent_versions or []
        return cls((VersionEntry.from_dict(item) for item in raw), capacity=capacity)

    def to_json(self) -> List[dict]:
        return [entry.to_dict() for entry in self._entries]

    def push(self, entry: VersionEntry) -> List[VersionEntry]:
        """Append entry; return whatever had to be evicted to stay within capacity.

        Usually zero or one entry. More only when the capacity was lowered
        since the page was last written.
        """
        newest = self.newest
        if newest is not None and entry.version != newest.version + 1:
            raise ValueError(
                f"Window expects version {newest.version + 1}, got {entry.version}"
            )
        self._entries.append(entry)
        evicted: List[VersionEntry] = []
        while len(self._entries) > self.capacity:
            evicted.append(self._entries.popleft())
        return evicted

    @property
    def newest(self) -> Optional[VersionEntry]:
        return self._entries[-1] if self._entries else None

    @property
    def oldest(self) -> Optional[VersionEntry]:
        return self._entries[0] if self._entries else None

    def get(self, version: int) -> Optional[VersionEntry]:
        for entry in self._entries:
            if entry.version == version:
                return entry
        return None

    def __iter__(self) -> Iterator[VersionEntry]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[VersionEntry]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class VersionWindowService:
    """Records content edits into a page's window, archiving overflow."""

    def __init__(
        self,
        db: Session,
        id_generator: Optional[IdGenerator] = None,
        diff_engine: Optional[DiffEngine] = None,
        window_size: Optional[int] = None,
    ):
        self.db = db
        self.diff_engine = diff_engine or DiffEngine()
        self.archive = ArchiveService(db, id_generator or get_id_generator())
        self.window_size = window_size or settings.version_window_size

    def record(
        self,
        page: WikiPage,
        new_content: Optional[str],
        description: Optional[str] = None,
        editor_id: Optional[int] = None,
    ) -> Optional[VersionEntry]:
        """Record new_content as the next version of page.

        Returns the created VersionEntry, or None when the content is
        unchanged (no version is created and nothing is written).
        """
        if not page.is_document:
            raise ValidationError("Directories have no content to version", field="content")

        new_content = new_content if new_content is not None else ""
        old_content = page.content or ""

        new_hash = self.diff_engine.content_hash(new_content)
        if page.content_hash and new_hash == page.content_hash:
            logger.debug("Content unchanged, no version recorded", extra={"page_id": page.id})
            return None

        patch = self.diff_engine.diff(old_content, new_content)
        if patch == EMPTY_PATCH:
            logger.debug("Empty diff, no version recorded", extra={"page_id": page.id})
            return None

        stats = self.diff_engine.stats(old_content, new_content)
        entry = VersionEntry(
            version=page.current_version + 1,
            content_diff=patch,
            change_description=description or DEFAULT_CHANGE_DESCRIPTION,
            editor_id=editor_id,
            created_at=datetime.now(timezone.utc),
            added_lines=stats.added_lines,
            deleted_lines=stats.deleted_lines,
            changed_chars=stats.changed_chars,
            content_hash=new_hash,
        )

        window = VersionWindow.from_page(page, capacity=self.window_size)
        for evicted in window.push(entry):
            self.archive.archive(page, evicted)

        # Reassign (not mutate) so SQLAlchemy sees the JSON column change.
        page.recent_versions = window.to_json()
        page.current_version = entry.version
        apply_content(page, new_content, new_hash)
        page.last_editor_id = editor_id
        self.db.flush()

        logger.info(
            "Recorded page version",
            extra={
                "page_id": page.id,
                "version": entry.version,
                "changes": stats.summary,
                "window_size": len(window),
            },
        )
        return entry


def apply_content(page: WikiPage, content: str, content_hash: str) -> None:
    """Set a document's content and the columns derived from it."""
    page.content = content
    page.content_hash = content_hash
    page.content_size = len(content)
    length = settings.content_summary_length
    page.content_summary = content[:length] if length else None
