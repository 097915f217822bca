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
"""Format-on-save callback for hosts with a pre-save event."""

from __future__ import annotations

import logging

from blacken.core.config import FormatterSettings, project_uses_formatter
from blacken.core.editing.buffer import TextBuffer
from blacken.core.editing.formatter import ReplacementOutcome, Runner, format_buffer
from blacken.core.process import run_process

logger = logging.getLogger("blacken.core.editing.hooks")


class FormatOnSave:
    """
    Pre-save callback that formats a buffer silently.

    Usage:
        hook = FormatOnSave(settings)
        host.before_save.connect(hook)
        hook.enabled = False   # toggle without unregistering
    """

    def __init__(self, settings: FormatterSettings | None = None, runner: Runner = run_process):
        self.settings = settings or FormatterSettings()
        self.runner = runner
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool):
        self._enabled = value

    def should_format(self, buffer: TextBuffer) -> bool:
        """True if this buffer is formatted on save under current settings."""
        if not self._enabled:
            return False
        if self.settings.only_if_project_formatted:
            if buffer.file_path is None or not project_uses_formatter(buffer.file_path):
                logger.debug("Skipping %s: project has no [tool.black] section", buffer.file_path)
                return False
        return True

    def __call__(self, buffer: TextBuffer) -> ReplacementOutcome | None:
        """Format ``buffer`` in place; None when the hook skipped it."""
        if not self.should_format(buffer):
            return None
        return format_buffer(buffer, self.settings, display_errors=False, runner=self.runner)
