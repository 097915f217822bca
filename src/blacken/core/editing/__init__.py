"""
Editing Pipeline -- text sinks, the format orchestrator, and the save hook.

Snapshots a buffer, runs it through the formatter, and applies the result
with a diff-minimising, cursor-preserving replacement.
"""

from blacken.core.editing.buffer import CursorState, RegionSink, TextBuffer, TextSink
from blacken.core.editing.formatter import (
    DiagnosticsView,
    Failed,
    OutcomeStatus,
    Replaced,
    ReplacementOutcome,
    Unchanged,
    format_buffer,
    format_region,
    format_sink,
)

__all__ = [
    "CursorState",
    "DiagnosticsView",
    "Failed",
    "OutcomeStatus",
    "RegionSink",
    "Replaced",
    "ReplacementOutcome",
    "TextBuffer",
    "TextSink",
    "Unchanged",
    "format_buffer",
    "format_region",
    "format_sink",
]
