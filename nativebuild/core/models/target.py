"""
Target descriptor — one (OS, architecture) cell of the build matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class TargetDescriptor:
    """Everything the pipeline needs to know about one build target.

    Attributes:
        runtime_platform: Node's ``process.platform`` value (``win32``).
        runtime_arch:     Node's ``process.arch`` value (``ia32``).
        package_os:       Published OS name (``windows``).
        package_arch:     Published architecture name (``x86``).
        toolchain_triple: rustc target (``i686-pc-windows-msvc``).
        target_suffix:    ``{package_os}-{package_arch}``, unique per catalog.
        output_dir:       Dist folder for this target only.
        build_dir:        Intermediate compiler directory for this target only.
        display_prefix:   Suffix padded to the catalog-wide width.
    """

    runtime_platform: str
    runtime_arch: str
    package_os: str
    package_arch: str
    toolchain_triple: str
    target_suffix: str
    output_dir: Path
    build_dir: Path
    display_prefix: str = ""

    def package_name(self, base_name: str) -> str:
        """Name of the per-target package, e.g. ``pkg-linux-x64``."""
        return f"{base_name}-{self.target_suffix}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "runtime_platform": self.runtime_platform,
            "runtime_arch": self.runtime_arch,
            "package_os": self.package_os,
            "package_arch": self.package_arch,
            "toolchain_triple": self.toolchain_triple,
            "target_suffix": self.target_suffix,
            "output_dir": str(self.output_dir),
            "build_dir": str(self.build_dir),
            "display_prefix": self.display_prefix,
        }
