"""Line-based unified diffs: compute, apply, reverse, hash, and measure.

Only forward patches (previous version -> next version) are ever stored.
reverse_patch() walks them backwards by inverting hunks on the fly, so
history reconstruction needs no second copy of each change.

The patch text produced here is a persistence format: changing CONTEXT_LINES,
the labels, or the line splitting rules invalidates every stored patch.
"""

import difflib
import hashlib
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..exceptions import PatchApplicationError

EMPTY_PATCH = ""
CONTEXT_LINES = 3
DIFF_OLD_LABEL = "original"
DIFF_NEW_LABEL = "modified"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_INVERT_TAG = {" ": " ", "-": "+", "+": "-"}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeStats:
    """Size of a change. Derived on demand, never persisted on its own."""
    added_lines: int = 0
    deleted_lines: int = 0
    # abs(len(new) - len(old)): undercounts same-length replacements.
    changed_chars: int = 0

    @classmethod
    def zero(cls) -> "ChangeStats":
        return cls()

    @property
    def total_changed_lines(self) -> int:
        return self.added_lines + self.deleted_lines

    @property
    def net_line_change(self) -> int:
        return self.added_lines - self.deleted_lines

    @property
    def has_changes(self) -> bool:
        return self.added_lines > 0 or self.deleted_lines > 0 or self.changed_chars > 0

    @property
    def summary(self) -> str:
        if not self.has_changes:
            return "no changes"
        return f"+{self.added_lines} -{self.deleted_lines} (~{self.changed_chars} chars)"

    def __str__(self) -> str:
        return self.summary


@dataclass(frozen=True)
class Hunk:
    """One parsed ``@@`` block. Every line keeps its ' ', '-' or '+' prefix."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: Tuple[str, ...]

    def inverted(self) -> "Hunk":
        return Hunk(
            old_start=self.new_start,
            old_count=self.new_count,
            new_start=self.old_start,
            new_count=self.old_count,
            lines=tuple(_INVERT_TAG[line[0]] + line[1:] for line in self.lines),
        )

    @property
    def base_index(self) -> int:
        """0-based index of the first base line this hunk touches.

        Unified diff ranges of length zero name the line *before* the
        change, so they are not shifted down by one.
        """
        return self.old_start - 1 if self.old_count > 0 else self.old_start


def normalize_content(content: Optional[str]) -> str:
    return "" if content is None else content


def split_lines(content: str) -> List[str]:
    """Split on newlines, keeping trailing empty lines ("a\\n" -> ["a", ""])."""
    if not content:
        return []
    return content.split("\n")


def join_lines(lines: List[str]) -> str:
    return "\n".join(lines)


class DiffEngine:
    """Stateless diff/patch algebra over plain text."""

    def diff(self, old_content: Optional[str], new_content: Optional[str]) -> str:
        """Unified diff turning old_content into new_content.

        Returns EMPTY_PATCH when the two are identical after None -> "".
        """
        old = normalize_content(old_content)
        new = normalize_content(new_content)
        if old == new:
            return EMPTY_PATCH

        diff_lines = list(difflib.unified_diff(
            split_lines(old),
            split_lines(new),
            fromfile=DIFF_OLD_LABEL,
            tofile=DIFF_NEW_LABEL,
            n=CONTEXT_LINES,
            lineterm="",
        ))
        if not diff_lines:
            return EMPTY_PATCH
        return join_lines(diff_lines)

    def apply_patch(self, base_content: Optional[str], patch: str) -> str:
        """Apply a forward patch. Raises PatchApplicationError on drift."""
        if patch is None:
            raise PatchApplicationError("Patch must not be None")
        base = normalize_content(base_content)
        if not patch.strip():
            return base

        hunks = self.parse(patch)
        return join_lines(self._apply_hunks(split_lines(base), hunks))

    def reverse_patch(self, new_content: Optional[str], patch: str) -> str:
        """Undo a forward patch: given the text it produced, return the text it started from."""
        if patch is None:
            raise PatchApplicationError("Patch must not be None")
        after = normalize_content(new_content)
        if not patch.strip():
            return after

        hunks = [hunk.inverted() for hunk in self.parse(patch)]
        return join_lines(self._apply_hunks(split_lines(after), hunks))

    def content_hash(self, content: Optional[str]) -> str:
        """Lowercase SHA-256 hex digest of the UTF-8 encoded content."""
        return hashlib.sha256(normalize_content(content).encode("utf-8")).hexdigest()

    def verify_hash(self, content: Optional[str], expected_hash: Optional[str]) -> bool:
        if not expected_hash:
            return False
        return self.content_hash(content) == expected_hash.lower()

    def stats(self, old_content: Optional[str], new_content: Optional[str]) -> ChangeStats:
        """Line and character counts for the change old_content -> new_content."""
        old = normalize_content(old_content)
        new = normalize_content(new_content)
        if old == new:
            return ChangeStats.zero()

        added = 0
        deleted = 0
        matcher = difflib.SequenceMatcher(None, split_lines(old), split_lines(new))
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "insert":
                added += j2 - j1
            elif tag == "delete":
                deleted += i2 - i1
            elif tag == "replace":
                added += j2 - j1
                deleted += i2 - i1

        return ChangeStats(
            added_lines=added,
            deleted_lines=deleted,
            changed_chars=abs(len(new) - len(old)),
        )

    def parse(self, patch: str) -> List[Hunk]:
        """Parse unified diff text into hunks.

        Hunk bodies are read by the counts in their headers, so content lines
        that happen to start with "---" or "@@" are handled correctly.
        """
        lines = patch.split("\n")
        hunks: List[Hunk] = []
        i = 0

        # File header: "--- original" / "+++ modified" (optional)
        while i < len(lines) and not lines[i].startswith("@@"):
            if lines[i] and not lines[i].startswith(("---", "+++")):
                raise PatchApplicationError(f"Unexpected line before first hunk: {lines[i]!r}", line=i + 1)
            i += 1

        while i < len(lines):
            header = lines[i]
            if not header:
                if any(rest for rest in lines[i:]):
                    raise PatchApplicationError("Blank line between hunks", line=i + 1)
                break

            match = _HUNK_HEADER.match(header)
            if match is None:
                raise PatchApplicationError(f"Malformed hunk header: {header!r}", line=i + 1)
            old_start = int(match.group(1))
            old_count = int(match.group(2)) if match.group(2) is not None else 1
            new_start = int(match.group(3))
            new_count = int(match.group(4)) if match.group(4) is not None else 1
            i += 1

            body: List[str] = []
            old_left, new_left = old_count, new_count
            while old_left > 0 or new_left > 0:
                if i >= len(lines):
                    raise PatchApplicationError("Truncated hunk", line=i)
                line = lines[i] or " "  # tolerate stripped blank context lines
                tag = line[0]
                if tag == " ":
                    old_left -= 1
                    new_left -= 1
                elif tag == "-":
                    old_left -= 1
                elif tag == "+":
                    new_left -= 1
                elif tag == "\\":
                    # "\ No newline at end of file" carries no content here.
                    i += 1
                    continue
                else:
                    raise PatchApplicationError(f"Unknown hunk line prefix: {tag!r}", line=i + 1)
                if old_left < 0 or new_left < 0:
                    raise PatchApplicationError("Hunk body longer than its header declares", line=i + 1)
                body.append(line)
                i += 1

            while i < len(lines) and lines[i].startswith("\\"):
                i += 1

            hunks.append(Hunk(old_start, old_count, new_start, new_count, tuple(body)))

        return hunks

    def _apply_hunks(self, lines: List[str], hunks: List[Hunk]) -> List[str]:
        result: List[str] = []
        pos = 0
        for hunk in hunks:
            start = hunk.base_index
            if start < pos or start > len(lines):
                raise PatchApplicationError(
                    f"Hunk at line {hunk.old_start} does not fit a {len(lines)}-line base",
                    line=hunk.old_start,
                )
            result.extend(lines[pos:start])
            pos = start

            for entry in hunk.lines:
                tag, text = entry[0], entry[1:]
                if tag == "+":
                    result.append(text)
                    continue
                if pos >= len(lines) or lines[pos] != text:
                    logger.debug(
                        "Patch context mismatch",
                        extra={"line": pos + 1, "expected": text},
                    )
                    raise PatchApplicationError(
                        "Base content does not match patch context; it may have drifted",
                        line=pos + 1,
                    )
                if tag == " ":
                    result.append(text)
                pos += 1

        result.extend(lines[pos:])
        return result
