"""
Build configuration — the optional nativebuild.yml beside package.json.

Every key has a default, so a project with no config file builds the
full linux/macOS/windows × x64/arm64/x86 matrix with rustup + napi.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BuildConfig(BaseModel):
    """Orchestrator settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    dist_dir: str = "dist"
    build_dir: str = "target"

    templates_dir: str | None = None  # None = templates shipped with nativebuild
    readme_template: str = "README.native.md"
    manifest_template: str = "package.native.json"

    # Runtime vocabulary (process.platform / process.arch)
    platforms: tuple[str, ...] = ("linux", "darwin", "win32")
    architectures: tuple[str, ...] = ("x64", "arm64", "ia32")

    # Package OS names whose cross toolchain must not run concurrently
    serial_os: tuple[str, ...] = ("windows",)
    jobs: int | None = Field(default=None, ge=1)  # None = CPU count

    toolchain_install_command: tuple[str, ...] = ("rustup", "target", "add")
    compile_command: tuple[str, ...] = ("napi", "build")
    compile_flags: tuple[str, ...] = ("--release", "--strip", "--cross-compile")
