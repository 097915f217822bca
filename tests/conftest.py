"""Pytest configuration for blacken tests."""

import stat
import sys
import textwrap
from pathlib import Path

import pytest

# Ensure src/blacken is importable
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)


# =========================================================================
# Fake formatters
#
# Small Python programs standing in for black, so the suite needs no real
# formatter. Each reads all of stdin before writing anything, as black does.
# =========================================================================
FAKE_FORMATTERS = {
    # Spaces around '=', rejects an unclosed paren like a syntax error.
    "spacer": """
        import re, sys
        src = sys.stdin.buffer.read().decode("utf-8")
        if src.rstrip().endswith("("):
            sys.stderr.write("SyntaxError: cannot parse: unclosed '('\\n")
            sys.exit(1)
        out = re.sub(r"[ \\t]*=[ \\t]*", " = ", src)
        sys.stdout.buffer.write(out.encode("utf-8"))
    """,
    # Echo input unchanged.
    "echo": """
        import sys
        sys.stdout.buffer.write(sys.stdin.buffer.read())
    """,
    # Print the argument list, one per line.
    "argv": """
        import sys
        sys.stdin.buffer.read()
        sys.stdout.write("\\n".join(sys.argv[1:]) + "\\n")
    """,
    # Replace everything with a single short line.
    "shrink": """
        import sys
        sys.stdin.buffer.read()
        sys.stdout.write("y\\n")
    """,
    # Fail without reading stdin at all.
    "reject": """
        import sys
        sys.stderr.write("error: cannot format -: refusing\\n")
        sys.exit(123)
    """,
    # Read all input, then never exit on its own.
    "hang": """
        import sys, time
        sys.stdin.buffer.read()
        time.sleep(60)
    """,
    # Answer --version like black does.
    "version": """
        import sys
        if "--version" in sys.argv:
            print("fake-black, 24.1.0")
            sys.exit(0)
        sys.stdout.buffer.write(sys.stdin.buffer.read())
    """,
}


@pytest.fixture()
def make_formatter(tmp_path):
    """Write an executable fake formatter and return its path as a string."""

    def _make(kind: str) -> str:
        script = tmp_path / f"fake-{kind}"
        body = textwrap.dedent(FAKE_FORMATTERS[kind]).lstrip()
        script.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep settings and run logs out of the real ~/.blacken."""
    import blacken.core.config as config_mod
    import blacken.core.logging as logging_mod

    monkeypatch.setattr(config_mod, "SETTINGS_FILE", tmp_path / "home" / "settings.json")
    monkeypatch.setattr(logging_mod, "LOG_DIR", tmp_path / "home" / "logs")
    for var in (config_mod.ENV_EXECUTABLE, config_mod.ENV_LINE_LENGTH):
        monkeypatch.delenv(var, raising=False)
    logging_mod.reset_logger()
    yield tmp_path / "home"
    logging_mod.reset_logger()
