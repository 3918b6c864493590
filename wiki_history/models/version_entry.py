"""Inline version record stored in WikiPage.recent_versions."""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class VersionEntry:
    """One change: the forward diff that turns version - 1 into version."""
    version: int
    content_diff: str
    change_description: Optional[str]
    editor_id: Optional[int]
    created_at: datetime
    added_lines: int = 0
    deleted_lines: int = 0
    changed_chars: int = 0
    content_hash: Optional[str] = None  # hash of the content this version produces

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionEntry":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            version=int(data["version"]),
            content_diff=data.get("content_diff") or "",
            change_description=data.get("change_description"),
            editor_id=data.get("editor_id"),
            created_at=created_at,
            added_lines=data.get("added_lines") or 0,
            deleted_lines=data.get("deleted_lines") or 0,
            changed_chars=data.get("changed_chars") or 0,
            content_hash=data.get("content_hash"),
        )

    @classmethod
    def from_archived(cls, row) -> "VersionEntry":
        """Build from an ArchivedVersion row (same fields, different home)."""
        return cls(
            version=row.version,
            content_diff=row.content_diff or "",
            change_description=row.change_description,
            editor_id=row.editor_id,
            created_at=row.created_at,
            added_lines=row.added_lines or 0,
            deleted_lines=row.deleted_lines or 0,
            changed_chars=row.changed_chars or 0,
            content_hash=row.content_hash,
        )
