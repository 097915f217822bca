# Blacken
# Copyright (C) 2025 Phoenix Link (Pty) Ltd. All Rights Reserved.
#
# This file is part of Blacken.
#
# Blacken is dual-licensed:
#
# 1. Open Source: GNU Affero General Public License v3.0 (AGPL-3.0)
# 2. Commercial: Available from Phoenix Link (Pty) Ltd
#
# Contributions require a signed CLA. See COPYRIGHT.md and CLA.md.
"""
Blacken -- Text sinks

A sink is the capability the orchestrator needs from an editor buffer:
read the full text once, read the cursor, and perform one replacement.

``TextBuffer`` is the in-memory sink used by the CLI, the HTTP API and
tests. Its replacement is diff-minimising: only changed line hunks are
rewritten, the way an editor would apply them, so unchanged regions keep
their identity. ``RegionSink`` narrows any ``TextBuffer`` to a subrange.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

# ---------------------------------------------------------------------------
# DATA TYPES
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CursorState:
    """Caret offset and top-of-window offset, both absolute."""

    point: int = 0
    window_start: int = 0

    def clamped(self, length: int) -> CursorState:
        """Return a copy with both offsets inside ``[0, length]``."""
        return CursorState(
            point=min(max(self.point, 0), length),
            window_start=min(max(self.window_start, 0), length),
        )


@dataclass(frozen=True)
class TextEdit:
    """Replace ``[start, end)`` of the old text with ``text``."""

    start: int
    end: int
    text: str


class TextSink(Protocol):
    """What the orchestrator reads from and writes to."""

    def text(self) -> str: ...

    def cursor(self) -> CursorState: ...

    def replace(self, new_text: str, cursor: CursorState) -> None: ...


# ---------------------------------------------------------------------------
# DIFF HELPERS
# ---------------------------------------------------------------------------


def diff_edits(old: str, new: str) -> list[TextEdit]:
    """Compute line-hunk edits that turn ``old`` into ``new``.

    Offsets refer to ``old``. Edits are returned in ascending order and
    never overlap.
    """
    if old == new:
        return []
    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)

    offsets = [0]
    for line in old_lines:
        offsets.append(offsets[-1] + len(line))

    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    edits = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        edits.append(TextEdit(start=offsets[i1], end=offsets[i2], text="".join(new_lines[j1:j2])))
    return edits


def apply_edits(text: str, edits: list[TextEdit]) -> str:
    """Apply non-overlapping ascending edits, last first."""
    for edit in reversed(edits):
        text = text[: edit.start] + edit.text + text[edit.end :]
    return text


# ---------------------------------------------------------------------------
# IN-MEMORY BUFFER
# ---------------------------------------------------------------------------


class TextBuffer:
    """
    Editable in-memory buffer.

    Usage:
        buf = TextBuffer("x=1\\n", point=3)
        outcome = format_buffer(buf)
        buf.text(), buf.point, buf.version
    """

    def __init__(
        self,
        text: str = "",
        point: int = 0,
        window_start: int = 0,
        file_path: str | Path | None = None,
    ):
        self._text = text
        state = CursorState(point, window_start).clamped(len(text))
        self.point = state.point
        self.window_start = state.window_start
        self.file_path = Path(file_path) if file_path else None
        self.version = 0
        self.modified = False

    @classmethod
    def from_file(cls, path: str | Path) -> TextBuffer:
        """Load a file as UTF-8 without newline translation."""
        path = Path(path)
        with open(path, encoding="utf-8", newline="") as fh:
            return cls(fh.read(), file_path=path)

    def save(self, path: str | Path | None = None) -> Path:
        """Write the buffer back to disk and clear the modified flag."""
        target = Path(path) if path else self.file_path
        if target is None:
            raise ValueError("Buffer has no file path")
        with open(target, "w", encoding="utf-8", newline="") as fh:
            fh.write(self._text)
        self.modified = False
        return target

    def __len__(self) -> int:
        return len(self._text)

    # -- TextSink ----------------------------------------------------------

    def text(self) -> str:
        return self._text

    def cursor(self) -> CursorState:
        return CursorState(self.point, self.window_start)

    def replace(self, new_text: str, cursor: CursorState) -> None:
        """Replace the whole buffer, then restore the cursor clamped to the new length."""
        self.replace_range(0, len(self._text), new_text, cursor.clamped(len(new_text)))

    # -- Region support ----------------------------------------------------

    def replace_range(self, start: int, end: int, new_text: str, cursor: CursorState) -> None:
        """Replace ``[start, end)`` with ``new_text`` as one version bump.

        ``cursor`` is absolute in the resulting text and is clamped to it.
        """
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(f"Invalid range [{start}, {end}) for buffer of length {len(self._text)}")
        old = self._text[start:end]
        edits = [
            TextEdit(start + e.start, start + e.end, e.text) for e in diff_edits(old, new_text)
        ]
        if edits:
            self._text = apply_edits(self._text, edits)
            self.version += 1
            self.modified = True
        state = cursor.clamped(len(self._text))
        self.point = state.point
        self.window_start = state.window_start


class RegionSink:
    """A ``TextBuffer`` narrowed to ``[start, end)``.

    The cursor stays absolute. After a replacement a cursor inside the
    region keeps its offset from the region start (clamped to the new
    region), and a cursor after the region shifts by the length change.
    """

    def __init__(self, buffer: TextBuffer, start: int, end: int):
        if not 0 <= start <= end <= len(buffer):
            raise ValueError(f"Invalid region [{start}, {end}) for buffer of length {len(buffer)}")
        self.buffer = buffer
        self.start = start
        self.end = end

    def text(self) -> str:
        return self.buffer.text()[self.start : self.end]

    def cursor(self) -> CursorState:
        return self.buffer.cursor()

    def replace(self, new_text: str, cursor: CursorState) -> None:
        delta = len(new_text) - (self.end - self.start)
        new_end = self.start + len(new_text)
        restored = CursorState(
            point=self._shift(cursor.point, new_end, delta),
            window_start=self._shift(cursor.window_start, new_end, delta),
        )
        self.buffer.replace_range(self.start, self.end, new_text, restored)
        self.end = new_end

    def _shift(self, offset: int, new_end: int, delta: int) -> int:
        if offset < self.start:
            return offset
        if offset <= self.end:
            return min(offset, new_end)
        return offset + delta
