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
"""Exception hierarchy for formatter invocations.

Invocation errors are caught at the orchestrator boundary and turned into
a ``Failed`` outcome; nothing escapes ``format_sink``. ``SettingsError`` is
raised while reading configuration, before any invocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blacken.core.process import ProcessResult


class BlackenError(Exception):
    """Base class for every error raised by blacken."""

    @property
    def diagnostic(self) -> str:
        """Text shown to the user when this error ends an invocation."""
        return str(self)


class SpawnError(BlackenError):
    """Raised when the formatter executable cannot be launched."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        self.reason = reason
        super().__init__(f"Cannot run formatter '{executable}': {reason}")


class FormatterFailure(BlackenError):
    """Raised when the formatter ran but exited with a non-zero status."""

    def __init__(self, result: ProcessResult):
        self.result = result
        super().__init__(f"Formatter exited with status {result.exit_status}")

    @property
    def diagnostic(self) -> str:
        stderr = self.result.stderr_text
        return stderr if stderr.strip() else str(self)


class StreamError(BlackenError, OSError):
    """Raised when reading from or writing to a formatter pipe fails."""

    def __init__(self, stream: str, cause: BaseException):
        self.stream = stream
        self.cause = cause
        super().__init__(f"I/O error on formatter {stream}: {cause}")


class SettingsError(BlackenError):
    """Raised when a settings file cannot be read or is not a mapping."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid settings file {path}: {reason}")
