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
Blacken -- doctor diagnostics

Validates that formatting can work on this machine:
  1. Python environment & dependencies
  2. Settings file integrity
  3. Formatter executable resolvable on PATH
  4. Formatter actually runs (``--version``)

Each check returns ✓ (pass), ⚠ (warning), or ✗ (fail) with a remedy.

Usage:
    from blacken.cli.doctor import run_doctor
    report = run_doctor()
"""

import platform
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from blacken.core import config
from blacken.core.config import FormatterSettings, load_formatter_settings
from blacken.core.errors import SettingsError, SpawnError
from blacken.core.process import run_process


@dataclass
class CheckResult:
    """Result of a single diagnostic check."""
    name: str
    status: str      # "pass", "warn", "fail"
    message: str
    remedy: str = ""
    details: List[str] = field(default_factory=list)

    @property
    def icon(self) -> str:
        return {"pass": "✓", "warn": "⚠", "fail": "✗"}.get(self.status, "?")


@dataclass
class DoctorReport:
    """Full diagnostic report."""
    checks: List[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for c in self.checks if c.status == "pass")

    @property
    def warnings(self) -> int:
        return sum(1 for c in self.checks if c.status == "warn")

    @property
    def failures(self) -> int:
        return sum(1 for c in self.checks if c.status == "fail")

    @property
    def healthy(self) -> bool:
        return self.failures == 0


# =============================================================================
# Individual Checks
# =============================================================================

def check_python_environment() -> CheckResult:
    """Check Python version and the libraries blacken imports."""
    py_version = sys.version_info
    details = [f"Python {py_version.major}.{py_version.minor}.{py_version.micro}"]
    details.append(f"Platform: {platform.system()} {platform.machine()}")

    if py_version < (3, 10):
        return CheckResult(
            name="Python Environment",
            status="fail",
            message=f"Python {py_version.major}.{py_version.minor} -- requires ≥3.10",
            remedy="Install Python 3.10+: https://python.org/downloads",
            details=details,
        )

    optional_missing = []
    for pkg in ["fastapi", "uvicorn"]:
        try:
            __import__(pkg)
        except ImportError:
            optional_missing.append(pkg)

    if optional_missing:
        details.append(f"Optional missing: {', '.join(optional_missing)} (needed for 'blacken serve')")
        return CheckResult(
            name="Python Environment",
            status="warn",
            message=f"Python {py_version.major}.{py_version.minor} OK -- API packages missing",
            remedy=f"pip install {' '.join(optional_missing)}",
            details=details,
        )

    return CheckResult(
        name="Python Environment",
        status="pass",
        message=f"Python {py_version.major}.{py_version.minor}.{py_version.micro} -- all dependencies OK",
        details=details,
    )


def check_settings(settings_path: Optional[Path] = None) -> CheckResult:
    """Check the settings file parses."""
    path = settings_path or config.SETTINGS_FILE
    details = [f"Settings file: {path}"]

    if not path.exists():
        return CheckResult(
            name="Settings",
            status="pass",
            message="No settings file -- using defaults",
            details=details,
        )

    try:
        data = config.read_settings_file(path)
    except SettingsError as e:
        return CheckResult(
            name="Settings",
            status="fail",
            message=f"Settings file unusable: {e.reason}",
            remedy=f"Fix or delete {path}",
            details=details,
        )

    details.append(f"Keys: {', '.join(sorted(data)) or '(none)'}")
    return CheckResult(name="Settings", status="pass", message="Settings file OK", details=details)


def check_executable(settings: FormatterSettings) -> CheckResult:
    """Check the formatter executable resolves."""
    resolved = shutil.which(settings.executable)
    if resolved is None:
        return CheckResult(
            name="Formatter Executable",
            status="fail",
            message=f"'{settings.executable}' not found on PATH",
            remedy="pip install black, or set 'executable' in settings",
        )
    return CheckResult(
        name="Formatter Executable",
        status="pass",
        message=f"Found {resolved}",
    )


def check_formatter_runs(settings: FormatterSettings) -> CheckResult:
    """Run ``<executable> --version`` through the process runner."""
    try:
        result = run_process(settings.executable, ["--version"], b"")
    except SpawnError as e:
        return CheckResult(
            name="Formatter Run",
            status="fail",
            message=str(e),
            remedy="Check the executable path and permissions",
        )

    if not result.ok:
        return CheckResult(
            name="Formatter Run",
            status="fail",
            message=f"'{settings.executable} --version' exited with {result.exit_status}",
            details=result.stderr_text.strip().splitlines()[:5],
        )

    version = (result.stdout_text or result.stderr_text).strip().splitlines()
    return CheckResult(
        name="Formatter Run",
        status="pass",
        message=version[0] if version else "Formatter responded",
    )


def run_doctor(console=None, settings_path: Optional[Path] = None) -> DoctorReport:
    """
    Run all diagnostic checks and display results.

    Args:
        console: Object with a ``print`` method (or None for plain print)
        settings_path: Settings file to validate

    Returns:
        DoctorReport with all check results
    """
    report = DoctorReport()

    def _print(text: str):
        if console is not None and hasattr(console, "print"):
            console.print(text)
        else:
            print(text)

    _print("\n  Blacken Doctor -- System Health Check\n")
    _print("  " + "─" * 50)

    settings = load_formatter_settings(settings_path)
    checks = [
        check_python_environment(),
        check_settings(settings_path),
        check_executable(settings),
    ]
    if checks[-1].status == "pass":
        checks.append(check_formatter_runs(settings))

    for check in checks:
        report.checks.append(check)
        _print(f"\n  {check.icon} {check.name}")
        _print(f"    {check.message}")
        for detail in check.details:
            _print(f"    · {detail}")
        if check.remedy:
            _print(f"    -> {check.remedy}")

    _print("\n  " + "─" * 50)
    summary = (
        f"  {report.passed} passed, "
        f"{report.warnings} warnings, "
        f"{report.failures} failures"
    )
    overall = "healthy" if report.healthy else "needs attention"
    _print(f"\n  Summary: {summary}")
    _print(f"  Status: {overall}\n")

    return report
