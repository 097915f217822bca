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
Blacken -- Run Logger

Every formatter run is recorded to a rotating log file so users can tail
what the formatter did to their buffers.

LOG LOCATION:
    ~/.blacken/logs/blacken.log      (current)
    ~/.blacken/logs/blacken.log.1    (previous rotation)

RULES:
    - 5 MB per file, 3 backups
    - Human-readable format with structured fields
    - WARNING and above are mirrored to stderr

USAGE:
    from blacken.core.logging import get_logger
    log = get_logger()
    log.info("CLI", "Formatting files", count=3)
    log.format_run("app.py", status="replaced", exit_status=0, duration=0.21)
"""

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path

# =============================================================================
# CONSTANTS
# =============================================================================

MAX_LOG_FILE_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3
LOG_DIR = Path.home() / ".blacken" / "logs"
LOG_FILE_NAME = "blacken.log"


# =============================================================================
# CUSTOM FORMATTER -- human-readable + structured
# =============================================================================


class BlackenLogFormatter(logging.Formatter):
    """
    Format: TIMESTAMP | LEVEL | COMPONENT | MESSAGE | {structured fields}

    Example:
    2026-02-09T17:30:45.123Z | FMT   | Formatter    | Run replaced | target="app.py" exit_status=0 duration=0.210
    2026-02-09T17:30:46.501Z | WARN  | Formatter    | Run failed | target="bad.py" exit_status=123
    """

    LEVEL_WIDTH = 5
    COMPONENT_WIDTH = 12

    def format(self, record: logging.LogRecord) -> str:
        now = datetime.fromtimestamp(record.created, timezone.utc)
        ts = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

        level = getattr(record, "blacken_level", record.levelname)
        component = getattr(record, "component", record.name.rsplit(".", 1)[-1])
        message = record.getMessage()

        fields = getattr(record, "fields", {})
        field_str = ""
        if fields:
            parts = []
            for k, v in fields.items():
                if isinstance(v, str):
                    parts.append(f'{k}="{v}"')
                elif isinstance(v, float):
                    parts.append(f"{k}={v:.3f}")
                else:
                    parts.append(f"{k}={v}")
            field_str = " | " + " ".join(parts)

        line = f"{ts} | {level:<{self.LEVEL_WIDTH}} | {component:<{self.COMPONENT_WIDTH}} | {message}{field_str}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# =============================================================================
# BLACKEN LOGGER
# =============================================================================


class BlackenLogger:
    """
    Component-tagged logger for blacken.

    Writes to ~/.blacken/logs/blacken.log with rotation and mirrors
    warnings to stderr. Module loggers under ``blacken.*`` propagate here,
    so ``logging.getLogger("blacken.core.process")`` records land in the
    same file.
    """

    def __init__(self, log_dir: Path | None = None, verbose: bool = False):
        self._log_dir = Path(log_dir) if log_dir else LOG_DIR
        self._log_dir.mkdir(parents=True, exist_ok=True)

        self._logger = logging.getLogger("blacken")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._logger.handlers.clear()

        file_handler = logging.handlers.RotatingFileHandler(
            str(self.log_file),
            maxBytes=MAX_LOG_FILE_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(BlackenLogFormatter())
        self._logger.addHandler(file_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        stderr_handler.setFormatter(BlackenLogFormatter())
        self._logger.addHandler(stderr_handler)


    def _log(self, level: int, blacken_level: str, component: str, message: str, **fields):
        record = self._logger.makeRecord(
            name="blacken.live",
            level=level,
            fn="",
            lno=0,
            msg=message,
            args=(),
            exc_info=None,
        )
        record.component = component
        record.blacken_level = blacken_level
        record.fields = fields
        self._logger.handle(record)

    # =========================================================================
    # PUBLIC API -- General events
    # =========================================================================

    def info(self, component: str, message: str, **fields):
        """Log an informational event."""
        self._log(logging.INFO, "INFO", component, message, **fields)

    # =========================================================================
    # PUBLIC API -- Domain-specific log methods
    # =========================================================================

    def format_run(self, target: str, status: str, exit_status: int | None = None, duration: float = 0.0, **fields):
        """Log the outcome of one formatter run."""
        fields.update(target=target, exit_status=exit_status, duration=duration)
        if status == "failed":
            self._log(logging.WARNING, "WARN", "Formatter", "Run failed", **fields)
        else:
            self._log(logging.INFO, "FMT", "Formatter", f"Run {status}", **fields)

    def http_request(self, method: str, path: str, status: int = 200, latency_ms: int = 0, **fields):
        """Log an HTTP request."""
        fields.update(method=method, path=path, status=status, latency_ms=latency_ms)
        level = logging.INFO if status < 400 else logging.WARNING
        self._log(level, "HTTP", "Server", f"{method} {path} -> {status}", **fields)

    # =========================================================================
    # UTILITY
    # =========================================================================

    @property
    def log_file(self) -> Path:
        return self._log_dir / LOG_FILE_NAME


# =============================================================================
# SINGLETON
# =============================================================================

_logger_instance: BlackenLogger | None = None


def get_logger(log_dir: Path | None = None, verbose: bool = False) -> BlackenLogger:
    """Get or create the global BlackenLogger singleton."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = BlackenLogger(log_dir=log_dir, verbose=verbose)
    return _logger_instance


def reset_logger() -> None:
    """Drop the singleton and detach its handlers."""
    global _logger_instance
    if _logger_instance is not None:
        for handler in list(_logger_instance._logger.handlers):
            handler.close()
        _logger_instance._logger.handlers.clear()
        _logger_instance._logger.propagate = True
    _logger_instance = None
