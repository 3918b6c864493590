"""Historical version reconstruction.

Starting from a page's current content, reverse-applies the stored forward
diffs newest-first: first the inline window, then archived rows. Every step
must land on exactly the expected version and the running text must hash to
the value recorded for it. Anything else is an integrity failure and is
raised, never papered over.
"""

import logging
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from ..core.id_generator import IdGenerator, get_id_generator
from ..exceptions import IntegrityError, PatchApplicationError, VersionNotFoundError
from ..models import VersionEntry, WikiPage
from ..schemas.version import VersionSummary
from .archive_service import ArchiveService
from .diff_engine import DiffEngine
from .version_window import VersionWindow

logger = logging.getLogger(__name__)


def _summary(entry: VersionEntry, is_archived: bool) -> VersionSummary:
    return VersionSummary(
        version=entry.version,
        change_description=entry.change_description,
        editor_id=entry.editor_id,
        created_at=entry.created_at,
        added_lines=entry.added_lines,
        deleted_lines=entry.deleted_lines,
        changed_chars=entry.changed_chars,
        content_hash=entry.content_hash,
        is_archived=is_archived,
    )


class Reconstructor:
    """Materializes any historical version of a page from its diff chain."""

    def __init__(
        self,
        db: Session,
        id_generator: Optional[IdGenerator] = None,
        diff_engine: Optional[DiffEngine] = None,
    ):
        self.db = db
        self.diff_engine = diff_engine or DiffEngine()
        self.archive = ArchiveService(db, id_generator or get_id_generator())

    def version_at(self, page: WikiPage, target: int) -> str:
        """Full text of page as it was right after version target was recorded."""
        current = page.current_version
        if target < 1 or target > current:
            raise VersionNotFoundError(page.id, target, f"valid versions are 1..{current}")

        content = page.content or ""
        if target == current:
            return content

        # Entries for versions target..current, newest first. The entry for
        # target itself (absent for version 1) is only hash-checked.
        cursor = current
        reached_target_entry = target == 1
        for entry in self._entries_newest_first(page, low=target):
            if entry.version != cursor:
                self._raise_gap(page, cursor, entry.version)
            self._verify(page, entry, content)
            if cursor == target:
                reached_target_entry = True
                break
            content = self._reverse(page, entry, content)
            cursor -= 1

        if cursor != target or not reached_target_entry:
            logger.error(
                "Version chain incomplete",
                extra={"page_id": page.id, "target": target, "reached": cursor},
            )
            raise VersionNotFoundError(
                page.id, target, f"history chain ends at version {cursor}"
            )
        return content

    def diff_between(self, page: WikiPage, version1: int, version2: int) -> str:
        """Unified diff from version1 to version2 (for display, not storage)."""
        content1 = self.version_at(page, version1)
        content2 = self.version_at(page, version2)
        return self.diff_engine.diff(content1, content2)

    def history(self, page: WikiPage) -> List[VersionSummary]:
        """Archived and inline history, oldest first, without reconstructing text."""
        summaries = [
            _summary(VersionEntry.from_archived(row), is_archived=True)
            for row in self.archive.versions_for(page.id)
        ]
        summaries.extend(self.recent_versions(page))
        return summaries

    def recent_versions(self, page: WikiPage) -> List[VersionSummary]:
        return [_summary(entry, is_archived=False) for entry in VersionWindow.from_page(page)]

    def _entries_newest_first(self, page: WikiPage, low: int) -> Iterator[VersionEntry]:
        """Window entries, then archived rows, down to version low (inclusive).

        The archive is only queried when the window does not reach low.
        """
        oldest_seen = page.current_version + 1
        for entry in reversed(VersionWindow.from_page(page)):
            if entry.version < low:
                return
            yield entry
            oldest_seen = entry.version
        for row in self.archive.versions_between(page.id, low, oldest_seen - 1):
            yield VersionEntry.from_archived(row)

    def _raise_gap(self, page: WikiPage, expected: int, found: int) -> None:
        logger.error(
            "Version chain gap",
            extra={"page_id": page.id, "expected": expected, "found": found},
        )
        raise VersionNotFoundError(
            page.id, expected, f"history chain gap: expected version {expected}, found {found}"
        )

    def _verify(self, page: WikiPage, entry: VersionEntry, content: str) -> None:
        """The running text must be exactly what entry.version produced."""
        if entry.content_hash and not self.diff_engine.verify_hash(content, entry.content_hash):
            actual = self.diff_engine.content_hash(content)
            logger.error(
                "Reconstructed content hash mismatch",
                extra={"page_id": page.id, "version": entry.version},
            )
            raise IntegrityError(page.id, entry.version, entry.content_hash, actual)

    def _reverse(self, page: WikiPage, entry: VersionEntry, content: str) -> str:
        try:
            return self.diff_engine.reverse_patch(content, entry.content_diff)
        except PatchApplicationError:
            logger.error(
                "Stored patch no longer applies",
                extra={"page_id": page.id, "version": entry.version},
            )
            raise
