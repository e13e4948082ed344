"""
nativebuild — CLI entrypoint.

Usage:
    nativebuild                          # install → stage → compile, all targets
    nativebuild install-rust-targets [TARGET]
    nativebuild create-dist-folders [TARGET]
    nativebuild build-node-binaries [TARGET]
    nativebuild targets
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable
from pathlib import Path

import click

from nativebuild import __version__
from nativebuild.core.errors import BuildError, PipelineFailed
from nativebuild.core.observability.logging_config import setup_logging


def _project(ctx: click.Context):
    """Resolve root, config and manifest, or exit with a message."""
    from nativebuild.core.config.loader import (
        find_project_root,
        load_build_config,
        load_manifest,
    )

    root: Path | None = ctx.obj.get("project_root") or find_project_root()
    if root is None:
        click.secho("❌ No package.json found. Run from a project or pass --project.", fg="red", err=True)
        sys.exit(1)

    try:
        config = load_build_config(root, ctx.obj.get("config_path"))
        if ctx.obj.get("jobs"):
            config = config.model_copy(update={"jobs": ctx.obj["jobs"]})
        manifest = load_manifest(root)
    except BuildError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    return root, config, manifest


def _run_operation(ctx: click.Context, operation: Callable) -> None:
    """Run one controller operation with SIGINT forwarding and exit handling."""
    from nativebuild.core.engine.pipeline import BuildPipelineController
    from nativebuild.core.services.cancellation import (
        CancellationRegistry,
        install_interrupt_handler,
    )

    root, config, manifest = _project(ctx)
    quiet = ctx.obj.get("quiet", False)

    with install_interrupt_handler(CancellationRegistry()) as registry:
        try:
            controller = BuildPipelineController.for_project(root, config, manifest, registry)
            reports = operation(controller)
        except PipelineFailed as e:
            click.echo(err=True)
            for failure in e.report.failures:
                click.secho(f"{failure.prefix}✗ {failure.error}", fg="red", err=True)
            click.secho(f"❌ {e}", fg="red", bold=True, err=True)
            sys.exit(1)
        except BuildError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)

    if not quiet:
        for report in reports:
            click.secho(
                f"✅ {report.operation}: {report.succeeded}/{report.total} target(s)",
                fg="green",
            )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="nativebuild")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--project",
    "-C",
    "project_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project directory containing package.json (default: auto-detect).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to nativebuild.yml (default: <project>/nativebuild.yml).",
)
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=None, help="Parallel compile jobs.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    project_root: Path | None,
    config_path: Path | None,
    jobs: int | None,
) -> None:
    """Build and stage per-platform native Node module packages.

    With no command, runs the full pipeline: install toolchain targets,
    create dist folders, then build every binary.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["project_root"] = project_root.resolve() if project_root else None
    ctx.obj["config_path"] = config_path
    ctx.obj["jobs"] = jobs

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("NATIVEBUILD_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("NATIVEBUILD_LOG_FILE"),
        log_file_level=os.environ.get("NATIVEBUILD_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        _run_operation(ctx, lambda c: c.run_all())


@cli.command("install-rust-targets")
@click.argument("target", required=False)
@click.pass_context
def install_rust_targets(ctx: click.Context, target: str | None) -> None:
    """Add the rustc target for TARGET, or for every target."""
    _run_operation(ctx, lambda c: [c.install_toolchain(target)])


@cli.command("create-dist-folders")
@click.argument("target", required=False)
@click.pass_context
def create_dist_folders(ctx: click.Context, target: str | None) -> None:
    """Write README.md and package.json into each dist folder."""
    _run_operation(ctx, lambda c: [c.stage(target)])


@cli.command("build-node-binaries")
@click.argument("target", required=False)
@click.pass_context
def build_node_binaries(ctx: click.Context, target: str | None) -> None:
    """Compile the native module for TARGET, or for every target."""
    _run_operation(ctx, lambda c: [c.compile(target)])


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def targets(ctx: click.Context, as_json: bool) -> None:
    """List the build matrix."""
    from nativebuild.core.services.catalog import get_catalog

    root, config, manifest = _project(ctx)
    try:
        catalog = get_catalog(config, root)
    except BuildError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        payload = [
            {**t.to_dict(), "package_name": t.package_name(manifest.name)}
            for t in catalog
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    click.secho(f"\n🎯 {manifest.name} v{manifest.version} — {len(catalog)} target(s)", fg="cyan", bold=True)
    serial = set(config.serial_os)
    for t in catalog:
        serial_label = " (serial)" if t.package_os in serial else ""
        click.echo(
            f"   {t.display_prefix}{t.toolchain_triple:<26} "
            f"{t.runtime_platform}/{t.runtime_arch}{serial_label}"
        )
    click.echo()


if __name__ == "__main__":
    cli()
