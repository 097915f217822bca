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
"""Process Runner -- one formatter invocation over stdin/stdout/stderr.

Design:
  - Launches the executable with three pipes via ``subprocess.Popen``
  - A writer thread feeds the whole input and then closes stdin, which is
    the end-of-input signal the formatter waits for
  - One reader thread per output stream drains into a private buffer, so a
    child that fills its stdout pipe while stdin is still being written
    never deadlocks
  - Blocks until the child exits, then joins every thread before building
    the ``ProcessResult``

No retry and no timeout: a hung formatter hangs the caller.
"""

from __future__ import annotations

import io
import logging
import subprocess
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import IO

from blacken.core.errors import SpawnError, StreamError

logger = logging.getLogger("blacken.core.process")

CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessInvocation:
    """Everything needed to run the formatter once."""

    executable: str
    args: tuple[str, ...] = ()
    input_bytes: bytes = b""

    @property
    def command(self) -> list[str]:
        return [self.executable, *self.args]


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished invocation."""

    exit_status: int
    stdout: bytes = b""
    stderr: bytes = b""
    duration_seconds: float = field(default=0.0, compare=False)

    @property
    def ok(self) -> bool:
        """True when the formatter reported success."""
        return self.exit_status == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Pipe workers
# ---------------------------------------------------------------------------


class _PipeWorker(threading.Thread):
    """Thread that owns one end of a pipe and records any I/O failure."""

    def __init__(self, name: str, stream: IO[bytes]):
        super().__init__(name=f"blacken-{name}", daemon=True)
        self.stream_name = name
        self.stream = stream
        self.error: BaseException | None = None


class _Writer(_PipeWorker):
    def __init__(self, stream: IO[bytes], data: bytes):
        super().__init__("stdin", stream)
        self.data = data

    def run(self) -> None:
        try:
            view = memoryview(self.data)
            for offset in range(0, len(view), CHUNK_SIZE):
                self.stream.write(view[offset : offset + CHUNK_SIZE])
            self.stream.flush()
        except BrokenPipeError:
            # Child stopped reading; its exit status says why.
            logger.debug("Formatter closed stdin early")
        except OSError as exc:
            self.error = exc
        finally:
            try:
                self.stream.close()
            except BrokenPipeError:
                pass
            except OSError as exc:
                if self.error is None:
                    self.error = exc


class _Reader(_PipeWorker):
    def __init__(self, name: str, stream: IO[bytes]):
        super().__init__(name, stream)
        self.buffer = io.BytesIO()

    def run(self) -> None:
        try:
            while True:
                chunk = self.stream.read1(CHUNK_SIZE)
                if not chunk:
                    break
                self.buffer.write(chunk)
        except OSError as exc:
            self.error = exc
        finally:
            self.stream.close()


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def run_invocation(
    invocation: ProcessInvocation,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> ProcessResult:
    """Run one ``ProcessInvocation`` to completion.

    Raises:
        SpawnError: The executable could not be launched.
        StreamError: A pipe read or write failed for a reason other than
            the child closing its stdin early.
    """
    start = time.time()
    try:
        proc = subprocess.Popen(
            invocation.command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=env,
        )
    except FileNotFoundError:
        raise SpawnError(invocation.executable, "executable not found") from None
    except PermissionError:
        raise SpawnError(invocation.executable, "permission denied") from None
    except OSError as exc:
        raise SpawnError(invocation.executable, str(exc)) from exc

    logger.debug("Spawned %s (pid %d, %d input bytes)", invocation.command, proc.pid, len(invocation.input_bytes))

    writer = _Writer(proc.stdin, invocation.input_bytes)
    out_reader = _Reader("stdout", proc.stdout)
    err_reader = _Reader("stderr", proc.stderr)
    workers = (writer, out_reader, err_reader)

    try:
        try:
            for worker in workers:
                worker.start()
            exit_status = proc.wait()
        except BaseException:
            proc.kill()
            proc.wait()
            for worker in workers:
                if worker.is_alive():
                    worker.join()
            raise
        for worker in workers:
            worker.join()

        for worker in workers:
            if worker.error is not None:
                raise StreamError(worker.stream_name, worker.error)

        result = ProcessResult(
            exit_status=exit_status,
            stdout=out_reader.buffer.getvalue(),
            stderr=err_reader.buffer.getvalue(),
            duration_seconds=round(time.time() - start, 3),
        )
    finally:
        out_reader.buffer.close()
        err_reader.buffer.close()

    logger.debug(
        "Formatter exited with %d after %.3fs (%d stdout bytes, %d stderr bytes)",
        result.exit_status,
        result.duration_seconds,
        len(result.stdout),
        len(result.stderr),
    )
    return result


def run_process(
    executable: str,
    args: Sequence[str],
    input_bytes: bytes,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> ProcessResult:
    """Pipe ``input_bytes`` through ``executable`` and capture the result.

    Args:
        executable: Program name (resolved via ``PATH``) or path.
        args: Arguments passed after the executable, in order.
        input_bytes: Bytes written to the child's stdin before it is closed.
        cwd: Working directory for the child.
        env: Environment for the child (inherits ours when None).

    Returns:
        ProcessResult with the exit status and both captured streams.
    """
    invocation = ProcessInvocation(executable=executable, args=tuple(args), input_bytes=input_bytes)
    return run_invocation(invocation, cwd=cwd, env=env)
