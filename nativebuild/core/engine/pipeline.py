"""
Build pipeline — the top-level sequencer.

Operations:
    install_toolchain  rustup target add <triple>       (pool of 1)
    stage              render README.md + package.json  (pool of N)
    compile            napi build --target <triple> ... (serial pool + pool of N)
    run_all            install → stage → compile, stopping at the first
                       failed phase

Within a phase every target runs to completion even when a sibling
fails; the phase then raises ``PipelineFailed`` carrying the full report.

Compile-all splits targets by OS: those listed in ``serial_os`` share a
pool of one worker, the rest share a pool of ``jobs`` workers.  The two
pools run side by side, not nested.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from nativebuild.core.errors import BuildError, PipelineFailed
from nativebuild.core.models.config import BuildConfig
from nativebuild.core.models.manifest import RootManifest
from nativebuild.core.models.target import TargetDescriptor
from nativebuild.core.services.cancellation import CancellationRegistry
from nativebuild.core.services.catalog import TargetCatalog, get_catalog
from nativebuild.core.services.process_runner import ProcessRunner
from nativebuild.core.services.stager import DistStager
from nativebuild.core.services.templates import default_renderer

logger = logging.getLogger(__name__)

INSTALL = "install-rust-targets"
STAGE = "create-dist-folders"
COMPILE = "build-node-binaries"


@dataclass
class TaskResult:
    """Outcome of one operation on one target."""

    operation: str
    target: str
    prefix: str = ""
    status: str = "ok"  # ok | failed
    error: str | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "status": self.status,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


@dataclass
class PipelineReport:
    """Result of running one operation across a set of targets."""

    operation: str = ""
    results: list[TaskResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    @property
    def failures(self) -> list[TaskResult]:
        return [r for r in self.results if r.failed]

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }


# (targets, max_workers)
Pool = tuple[Sequence[TargetDescriptor], int]


class BuildPipelineController:
    """Coordinates install, stage and compile across the target matrix.

    Holds no mutable state of its own: every operation reads the catalog
    and config and writes only to per-target directories.
    """

    def __init__(
        self,
        catalog: TargetCatalog,
        stager: DistStager,
        runner: ProcessRunner,
        config: BuildConfig,
    ) -> None:
        self.catalog = catalog
        self.stager = stager
        self.runner = runner
        self.config = config

    @classmethod
    def for_project(
        cls,
        project_root: Path,
        config: BuildConfig,
        manifest: RootManifest,
        registry: CancellationRegistry | None = None,
    ) -> BuildPipelineController:
        """Wire up the default collaborators for a project directory."""
        templates_dir = (
            project_root / config.templates_dir if config.templates_dir else None
        )
        stager = DistStager(
            default_renderer(templates_dir),
            manifest,
            readme_template=config.readme_template,
            manifest_template=config.manifest_template,
        )
        return cls(
            catalog=get_catalog(config, project_root),
            stager=stager,
            runner=ProcessRunner(registry, cwd=project_root),
            config=config,
        )

    @property
    def jobs(self) -> int:
        return self.config.jobs or os.cpu_count() or 1

    # ── Operations ──────────────────────────────────────────────

    def install_toolchain(self, suffix: str | None = None) -> PipelineReport:
        """Add the rustc target for one or all targets."""
        targets = self.catalog.select(suffix)
        return self._run_phase(INSTALL, [(targets, 1)], self._install_one)

    def stage(self, suffix: str | None = None) -> PipelineReport:
        """Create the dist folder for one or all targets."""
        targets = self.catalog.select(suffix)
        return self._run_phase(STAGE, [(targets, self.jobs)], self._stage_one)

    def compile(self, suffix: str | None = None) -> PipelineReport:
        """Build the native binary for one or all targets."""
        targets = self.catalog.select(suffix)
        return self._run_phase(COMPILE, self.compile_pools(targets), self._compile_one)

    def run_all(self) -> list[PipelineReport]:
        """install all → stage all → compile all."""
        return [
            self.install_toolchain(),
            self.stage(),
            self.compile(),
        ]

    def compile_pools(self, targets: Sequence[TargetDescriptor]) -> list[Pool]:
        """Partition targets into the serialized pool and the parallel pool."""
        serial = [t for t in targets if t.package_os in self.config.serial_os]
        parallel = [t for t in targets if t.package_os not in self.config.serial_os]
        pools: list[Pool] = []
        if serial:
            pools.append((serial, 1))
        if parallel:
            pools.append((parallel, self.jobs))
        return pools

    # ── Per-target tasks ────────────────────────────────────────

    def install_args(self, target: TargetDescriptor) -> list[str]:
        return [*self.config.toolchain_install_command, target.toolchain_triple]

    def compile_args(self, target: TargetDescriptor) -> list[str]:
        return [
            *self.config.compile_command,
            "--target", target.toolchain_triple,
            "--target-dir", str(target.build_dir),
            *self.config.compile_flags,
            str(target.output_dir),
        ]

    def _install_one(self, target: TargetDescriptor) -> None:
        command, *args = self.install_args(target)
        self.runner.run(command, args, target.display_prefix)

    def _stage_one(self, target: TargetDescriptor) -> None:
        self.stager.stage(target)

    def _compile_one(self, target: TargetDescriptor) -> None:
        command, *args = self.compile_args(target)
        self.runner.run(command, args, target.display_prefix)

    # ── Execution ───────────────────────────────────────────────

    def _run_phase(
        self,
        operation: str,
        pools: Sequence[Pool],
        task: Callable[[TargetDescriptor], None],
    ) -> PipelineReport:
        """Run ``task`` for every target, each pool with its own limit.

        Raises:
            PipelineFailed: After every task has finished, if any failed.
        """
        logger.info(
            "%s: %s",
            operation,
            ", ".join(f"{len(t)} target(s) × {w} worker(s)" for t, w in pools),
        )

        executors = [
            concurrent.futures.ThreadPoolExecutor(
                max_workers=workers,
                thread_name_prefix=f"{operation}-{i}",
            )
            for i, (_, workers) in enumerate(pools)
        ]
        by_suffix: dict[str, TaskResult] = {}
        try:
            futures = [
                executor.submit(self._run_task, operation, target, task)
                for executor, (targets, _) in zip(executors, pools)
                for target in targets
            ]
            for future in concurrent.futures.as_completed(futures):
                result = future.result()
                by_suffix[result.target] = result
        finally:
            for executor in executors:
                executor.shutdown(wait=True)

        order = [s for s in self.catalog.suffixes if s in by_suffix]
        report = PipelineReport(
            operation=operation,
            results=[by_suffix[s] for s in order],
        )
        if not report.all_ok:
            raise PipelineFailed(report)
        return report

    def _run_task(
        self,
        operation: str,
        target: TargetDescriptor,
        task: Callable[[TargetDescriptor], None],
    ) -> TaskResult:
        result = TaskResult(
            operation=operation,
            target=target.target_suffix,
            prefix=target.display_prefix,
        )
        if self.runner.registry.cancelled:
            result.status = "failed"
            result.error = "Cancelled before start"
            return result

        start = time.monotonic()
        try:
            task(target)
        except BuildError as e:
            result.status = "failed"
            result.error = str(e)
        result.duration_ms = int((time.monotonic() - start) * 1000)

        marker = "✓" if result.ok else "✗"
        logger.info("%s%s %s (%dms)", target.display_prefix, marker, operation, result.duration_ms)
        return result
