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
Blacken -- Format Orchestrator

Runs a sink's text through the formatter and applies the result.

Protocol:
    1. SNAPSHOT:  read the sink's text and cursor once
    2. INVOKE:    pipe the text to the formatter (options then ``-``)
    3. DECIDE:    non-zero exit -> Failed(stderr), sink untouched
    4. APPLY:     identical stdout -> Unchanged, otherwise one replacement
                  with the cursor restored -> Replaced

Safety invariants:
- The sink is written at most once, and only after a zero exit status
  with output that differs from the snapshot
- Every error (spawn, stream, non-zero exit, encoding, rejected
  replacement) becomes a Failed outcome;
  nothing propagates out of ``format_sink``
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from blacken.core.config import FormatterSettings, build_arguments
from blacken.core.editing.buffer import CursorState, RegionSink, TextBuffer, TextSink
from blacken.core.errors import BlackenError, FormatterFailure
from blacken.core.process import ProcessResult, run_process

logger = logging.getLogger("blacken.core.editing.formatter")

ENCODING = "utf-8"

Runner = Callable[[str, Sequence[str], bytes], ProcessResult]


# ---------------------------------------------------------------------------
# OUTCOMES
# ---------------------------------------------------------------------------


class OutcomeStatus(enum.Enum):
    UNCHANGED = "unchanged"
    REPLACED = "replaced"
    FAILED = "failed"


@dataclass(frozen=True)
class ReplacementOutcome:
    """Result of one ``format_sink`` call."""

    status: OutcomeStatus
    result: ProcessResult | None = None

    @property
    def ok(self) -> bool:
        return self.status is not OutcomeStatus.FAILED

    @property
    def message(self) -> str:
        """Short status line for the user."""
        return f"Formatter run {self.status.value}"


@dataclass(frozen=True)
class Unchanged(ReplacementOutcome):
    status: OutcomeStatus = OutcomeStatus.UNCHANGED

    @property
    def message(self) -> str:
        return "Already formatted"


@dataclass(frozen=True)
class Replaced(ReplacementOutcome):
    status: OutcomeStatus = OutcomeStatus.REPLACED
    cursor: CursorState = CursorState()

    @property
    def message(self) -> str:
        return "Buffer formatted"


@dataclass(frozen=True)
class Failed(ReplacementOutcome):
    status: OutcomeStatus = OutcomeStatus.FAILED
    diagnostic: str = ""

    @property
    def message(self) -> str:
        return "Formatter failed, see diagnostics for details"


# ---------------------------------------------------------------------------
# DIAGNOSTICS VIEW
# ---------------------------------------------------------------------------


class DiagnosticsView:
    """Holds the diagnostic text of the last failed run.

    Cleared at the start of every invocation that is given it, so a stale
    error never outlives a later successful run.
    """

    def __init__(self):
        self.text = ""
        self.visible = False

    def clear(self) -> None:
        self.text = ""
        self.visible = False

    def show(self, text: str) -> None:
        self.text = text
        self.visible = True


# ---------------------------------------------------------------------------
# ORCHESTRATOR
# ---------------------------------------------------------------------------


def format_sink(
    sink: TextSink,
    settings: FormatterSettings | None = None,
    *,
    display_errors: bool = False,
    diagnostics: DiagnosticsView | None = None,
    runner: Runner = run_process,
) -> ReplacementOutcome:
    """Format the sink's text with the configured formatter.

    Args:
        sink: Where the text comes from and where the result goes.
        settings: Executable and flags (defaults to ``black`` on PATH).
        display_errors: Show the diagnostic text in ``diagnostics`` on failure.
        diagnostics: View that receives the diagnostic text.
        runner: Process runner; ``run_process`` unless a host supplies its own.

    Returns:
        Unchanged, Replaced or Failed. Never raises for formatter, encoding or sink errors.
    """
    settings = settings or FormatterSettings()
    if diagnostics is not None:
        diagnostics.clear()

    source = sink.text()
    cursor = sink.cursor()
    args = build_arguments(settings)
    result = None

    try:
        source_bytes = source.encode(ENCODING)
        result = runner(settings.executable, args, source_bytes)
        if not result.ok:
            raise FormatterFailure(result)
        if result.stdout == source_bytes:
            logger.debug("Formatter output identical to source; leaving sink untouched")
            return Unchanged(result=result)
        formatted = result.stdout.decode(ENCODING)
        sink.replace(formatted, cursor)
    except BlackenError as exc:
        outcome = Failed(result=getattr(exc, "result", None), diagnostic=exc.diagnostic)
    except UnicodeEncodeError as exc:
        outcome = Failed(diagnostic=f"Buffer text is not valid UTF-8: {exc}")
    except UnicodeDecodeError as exc:
        outcome = Failed(result=result, diagnostic=f"Formatter output is not valid UTF-8: {exc}")
    except ValueError as exc:
        outcome = Failed(result=result, diagnostic=f"Cannot apply formatter output: {exc}")
    except OSError as exc:
        outcome = Failed(result=result, diagnostic=f"I/O error while running formatter: {exc}")
    else:
        logger.debug("Replaced %d bytes with %d bytes", len(source_bytes), len(result.stdout))
        return Replaced(result=result, cursor=sink.cursor())

    logger.warning("Formatter failed: %s", _first_line(outcome.diagnostic))
    if display_errors and diagnostics is not None:
        diagnostics.show(outcome.diagnostic)
    return outcome


def _first_line(text: str) -> str:
    lines = text.strip().splitlines()
    return lines[0] if lines else ""


def format_buffer(
    buffer: TextBuffer,
    settings: FormatterSettings | None = None,
    *,
    display_errors: bool = False,
    diagnostics: DiagnosticsView | None = None,
    runner: Runner = run_process,
) -> ReplacementOutcome:
    """Format the whole buffer."""
    return format_sink(
        buffer,
        settings,
        display_errors=display_errors,
        diagnostics=diagnostics,
        runner=runner,
    )


def format_region(
    buffer: TextBuffer,
    start: int,
    end: int,
    settings: FormatterSettings | None = None,
    *,
    display_errors: bool = False,
    diagnostics: DiagnosticsView | None = None,
    runner: Runner = run_process,
) -> ReplacementOutcome:
    """Format ``[start, end)`` of the buffer; text outside it is not sent.

    Raises:
        ValueError: The region does not lie inside the buffer.
    """
    return format_sink(
        RegionSink(buffer, start, end),
        settings,
        display_errors=display_errors,
        diagnostics=diagnostics,
        runner=runner,
    )
