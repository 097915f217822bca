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
"""Formatter configuration.

Resolves the settings the orchestrator consumes (executable path,
line length and the optional black flags) from, lowest to highest
priority:

1. Hardcoded defaults (``black`` on ``PATH``, formatter's own line length)
2. Settings file (``~/.blacken/settings.json``, or ``.yaml`` / ``.yml``)
3. Environment: ``BLACKEN_EXECUTABLE``, ``BLACKEN_LINE_LENGTH``

Also answers whether a file belongs to a project that opted into the
formatter (``[tool.black]`` in the nearest ``pyproject.toml``).
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from blacken.core.errors import SettingsError

logger = logging.getLogger("blacken.core.config")

# Default paths
_BLACKEN_DIR = Path.home() / ".blacken"
SETTINGS_FILE = _BLACKEN_DIR / "settings.json"

DEFAULT_EXECUTABLE = "black"
STDIN_SENTINEL = "-"

ENV_EXECUTABLE = "BLACKEN_EXECUTABLE"
ENV_LINE_LENGTH = "BLACKEN_LINE_LENGTH"

_TOOL_SECTION = re.compile(r"^\[tool\.black\]", re.MULTILINE)


@dataclass
class FormatterSettings:
    """Resolved formatter settings."""

    executable: str = DEFAULT_EXECUTABLE
    line_length: int | None = None
    skip_string_normalization: bool = False
    fast: bool = False
    target_versions: list[str] = field(default_factory=list)
    only_if_project_formatted: bool = False


def build_arguments(settings: FormatterSettings) -> list[str]:
    """Build the formatter argument list.

    Options come first; the list always ends with ``-`` so the formatter
    reads source from stdin and writes the result to stdout.
    """
    args: list[str] = []
    if settings.line_length is not None:
        args.extend(["--line-length", str(settings.line_length)])
    if settings.skip_string_normalization:
        args.append("--skip-string-normalization")
    if settings.fast:
        args.append("--fast")
    for version in settings.target_versions:
        args.extend(["--target-version", version])
    args.append(STDIN_SENTINEL)
    return args


def load_formatter_settings(
    settings_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> FormatterSettings:
    """Load and resolve formatter settings.

    Args:
        settings_path: Override path to the settings file.
        environ: Environment mapping to read overrides from (default
            ``os.environ``).

    Returns:
        Resolved FormatterSettings.
    """
    path = settings_path or SETTINGS_FILE
    env = os.environ if environ is None else environ

    result = FormatterSettings()

    # Layer 1: settings file
    data = _load_settings_file(path)
    if isinstance(data.get("executable"), str) and data["executable"].strip():
        result.executable = data["executable"].strip()
    if "line_length" in data:
        result.line_length = _parse_line_length(data["line_length"], source=str(path))
    result.skip_string_normalization = _parse_flag(
        data, "skip_string_normalization", result.skip_string_normalization, source=str(path)
    )
    result.fast = _parse_flag(data, "fast", result.fast, source=str(path))
    if "target_versions" in data:
        versions = data["target_versions"]
        if isinstance(versions, str):
            versions = [versions]
        if isinstance(versions, list):
            result.target_versions = [str(v) for v in versions if str(v).strip()]
        else:
            logger.warning("Ignoring target_versions in %s: expected a list", path)
    result.only_if_project_formatted = _parse_flag(
        data, "only_if_project_formatted", result.only_if_project_formatted, source=str(path)
    )

    # Layer 2: environment (override)
    if env.get(ENV_EXECUTABLE, "").strip():
        result.executable = env[ENV_EXECUTABLE].strip()
    if env.get(ENV_LINE_LENGTH, "").strip():
        result.line_length = _parse_line_length(env[ENV_LINE_LENGTH], source=ENV_LINE_LENGTH)

    logger.debug(
        "Formatter settings: executable=%s, line_length=%s, flags=%s",
        result.executable,
        result.line_length,
        build_arguments(result)[:-1],
    )
    return result


def project_uses_formatter(file_path: str | Path) -> bool:
    """Return True if the nearest ``pyproject.toml`` has a ``[tool.black]`` table.

    The search starts at ``file_path`` (or its directory) and walks up to the
    filesystem root. A project with no ``pyproject.toml`` has not opted in.
    """
    start = Path(file_path).resolve()
    if not start.is_dir():
        start = start.parent
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            try:
                text = candidate.read_text(encoding="utf-8")
            except OSError as exc:
                logger.warning("Cannot read %s: %s", candidate, exc)
                return False
            return bool(_TOOL_SECTION.search(text))
    return False


def _parse_line_length(value: Any, source: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        length = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring line_length from %s: %r is not an integer", source, value)
        return None
    if length <= 0:
        logger.warning("Ignoring line_length from %s: %d is not positive", source, length)
        return None
    return length


def _parse_flag(data: dict, key: str, default: bool, source: str) -> bool:
    if key not in data:
        return default
    value = data[key]
    if not isinstance(value, bool):
        logger.warning("Ignoring %s from %s: %r is not true or false", key, source, value)
        return default
    return value


def read_settings_file(path: Path) -> dict:
    """Parse a JSON or YAML settings file.

    Returns an empty dict when the file does not exist.

    Raises:
        SettingsError: The file cannot be parsed or is not a mapping.
    """
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SettingsError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise SettingsError(path, "top level is not a mapping")
    return data


def _load_settings_file(path: Path) -> dict:
    try:
        return read_settings_file(path)
    except SettingsError as exc:
        logger.warning("Ignoring settings: %s", exc)
        return {}
