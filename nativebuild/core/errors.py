"""
Error taxonomy — every failure the orchestrator can surface.

All errors derive from ``BuildError`` so the CLI can convert any of them
into a non-zero exit with a readable message.  Nothing here is ever
downgraded to a warning.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nativebuild.core.engine.pipeline import PipelineReport


class BuildError(Exception):
    """Base class for all orchestrator failures."""


class UnknownIdentifier(BuildError):
    """A naming-translation input is outside its axis domain."""

    def __init__(self, axis: str, value: str, known: Iterable[str]) -> None:
        self.axis = axis
        self.value = value
        self.known = sorted(known)
        super().__init__(
            f"Unknown {axis} identifier '{value}' (expected one of: {', '.join(self.known)})"
        )


class UnknownTarget(BuildError):
    """A requested target suffix is not in the catalog."""

    def __init__(self, suffix: str, valid: Sequence[str]) -> None:
        self.suffix = suffix
        self.valid = list(valid)
        super().__init__(
            f"Unknown target '{suffix}'. Valid targets: {', '.join(self.valid)}"
        )


class ProcessError(BuildError):
    """An external command could not complete successfully."""

    def __init__(self, command: Sequence[str], message: str) -> None:
        self.command = list(command)
        super().__init__(message)


class SpawnFailed(ProcessError):
    """The external command never started."""

    def __init__(self, command: Sequence[str], reason: str) -> None:
        self.reason = reason
        super().__init__(command, f"Failed to start {command[0]}: {reason}")


class CommandFailed(ProcessError):
    """The external command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], exit_code: int) -> None:
        self.exit_code = exit_code
        super().__init__(
            command, f"Command {' '.join(command)} failed with exit code {exit_code}"
        )


class StagingError(BuildError):
    """Writing a target's dist folder failed."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot stage {path}: {reason}")


class TemplateRenderError(BuildError):
    """A template is missing, malformed, or references an unknown field."""


class PipelineFailed(BuildError):
    """One or more target tasks in a pipeline phase failed."""

    def __init__(self, report: PipelineReport) -> None:
        self.report = report
        failed = [r.target for r in report.results if r.failed]
        super().__init__(
            f"{report.operation}: {len(failed)} of {report.total} target(s) failed"
            f" ({', '.join(failed)})"
        )
