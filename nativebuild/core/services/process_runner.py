"""
Process runner — spawn one command and stream its output line by line.

Several targets compile at once, so their output shares one terminal.
Each captured stream is read in raw chunks, decoded incrementally and
split into lines; only complete lines are written, each prefixed with
the target's display prefix, in a single locked write.  Lines from
different targets may interleave, partial lines never do.

The trailing fragment after the last newline is held until more data
arrives; when the stream closes, whatever is left is flushed as a final
line.

Flow:
    spawn → register → pump stdout/stderr → wait → unregister → exit code
"""

from __future__ import annotations

import codecs
import logging
import subprocess
import sys
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import IO, TextIO

from nativebuild.core.errors import CommandFailed, SpawnFailed
from nativebuild.core.observability.logging_config import OUTPUT_LOCK
from nativebuild.core.services.cancellation import CancellationRegistry

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class LineBuffer:
    """Split a stream of text chunks into complete lines."""

    def __init__(self) -> None:
        self._carry = ""

    @property
    def pending(self) -> str:
        return self._carry

    def feed(self, text: str) -> list[str]:
        """Append a chunk; return every line it completed."""
        if not text:
            return []
        parts = (self._carry + text).split("\n")
        self._carry = parts.pop()
        return [p[:-1] if p.endswith("\r") else p for p in parts]

    def flush(self) -> str | None:
        """Return the unterminated remainder, if any, and reset."""
        rest, self._carry = self._carry, ""
        return rest or None


class ProcessRunner:
    """Run external commands with prefixed, line-multiplexed output.

    Args:
        registry: Cancellation token shared by every run of a pipeline.
        cwd: Working directory for spawned commands.
        stdout: Sink for the child's stdout lines (default: sys.stdout
            at write time).
        stderr: Sink for the child's stderr lines (default: sys.stderr
            at write time).
    """

    def __init__(
        self,
        registry: CancellationRegistry | None = None,
        *,
        cwd: Path | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self.registry = registry if registry is not None else CancellationRegistry()
        self.cwd = cwd
        self._stdout = stdout
        self._stderr = stderr

    def run(self, command: str, args: Sequence[str], output_prefix: str = "") -> None:
        """Run ``command args...`` to completion.

        Raises:
            SpawnFailed: The command could not be started.
            CommandFailed: The command exited non-zero. Raised only after
                both output streams are drained and the exit code is known.
        """
        cmd = [command, *args]
        logger.debug("%sspawning: %s (cwd=%s)", output_prefix, " ".join(cmd), self.cwd)

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(self.cwd) if self.cwd else None,
                stdin=None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnFailed(cmd, str(e)) from e

        self.registry.register(proc)
        try:
            pumps = [
                threading.Thread(
                    target=self._pump,
                    args=(proc.stdout, False, output_prefix),
                    name=f"pump-out-{proc.pid}",
                    daemon=True,
                ),
                threading.Thread(
                    target=self._pump,
                    args=(proc.stderr, True, output_prefix),
                    name=f"pump-err-{proc.pid}",
                    daemon=True,
                ),
            ]
            for t in pumps:
                t.start()
            for t in pumps:
                t.join()
            returncode = proc.wait()
        finally:
            self.registry.unregister(proc)

        if returncode != 0:
            logger.debug("%sexit code %d", output_prefix, returncode)
            raise CommandFailed(cmd, returncode)

    # ── Streaming ───────────────────────────────────────────────

    def _pump(self, stream: IO[bytes], is_err: bool, prefix: str) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        buffer = LineBuffer()
        try:
            while True:
                chunk = stream.read1(_CHUNK_SIZE)  # type: ignore[attr-defined]
                if not chunk:
                    break
                for line in buffer.feed(decoder.decode(chunk)):
                    self._emit(line, is_err, prefix)
            for line in buffer.feed(decoder.decode(b"", final=True)):
                self._emit(line, is_err, prefix)
            rest = buffer.flush()
            if rest is not None:
                self._emit(rest, is_err, prefix)
        finally:
            stream.close()

    def _emit(self, line: str, is_err: bool, prefix: str) -> None:
        if is_err:
            sink = self._stderr or sys.stderr
        else:
            sink = self._stdout or sys.stdout
        with OUTPUT_LOCK:
            sink.write(f"{prefix}{line}\n")
            sink.flush()
