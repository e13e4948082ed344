"""
Target catalog — the single source of truth for the build matrix.

Built in two explicit passes:

    1. generate one descriptor per (platform, architecture) pair
    2. pad every display prefix to the widest suffix in the catalog

The width depends on the global maximum, so padding cannot happen
while generating.  Catalogs are immutable and memoized per input.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator, Sequence
from functools import lru_cache
from pathlib import Path

from nativebuild.core.config.loader import ConfigError
from nativebuild.core.errors import UnknownTarget
from nativebuild.core.models.config import BuildConfig
from nativebuild.core.models.target import TargetDescriptor
from nativebuild.core.services import naming

logger = logging.getLogger(__name__)


class TargetCatalog:
    """Read-only, ordered collection of build targets keyed by suffix."""

    def __init__(self, targets: Sequence[TargetDescriptor]) -> None:
        self._targets = tuple(targets)
        self._by_suffix = {t.target_suffix: t for t in self._targets}
        if len(self._by_suffix) != len(self._targets):
            raise ConfigError("Duplicate target suffixes in build matrix")

    def __iter__(self) -> Iterator[TargetDescriptor]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, suffix: object) -> bool:
        return suffix in self._by_suffix

    @property
    def suffixes(self) -> list[str]:
        return [t.target_suffix for t in self._targets]

    def get(self, suffix: str) -> TargetDescriptor:
        """Look up a target by suffix.

        Raises:
            UnknownTarget: Listing every valid suffix.
        """
        try:
            return self._by_suffix[suffix]
        except KeyError:
            raise UnknownTarget(suffix, self.suffixes) from None

    def select(self, suffix: str | None) -> list[TargetDescriptor]:
        """All targets, or just the named one."""
        if suffix is None:
            return list(self._targets)
        return [self.get(suffix)]


def build_catalog(
    platforms: Sequence[str],
    architectures: Sequence[str],
    dist_root: Path,
    build_root: Path,
) -> TargetCatalog:
    """Build the full platforms × architectures matrix."""
    # Pass 1: generate
    drafts: list[TargetDescriptor] = []
    for platform in platforms:
        pkg_os = naming.package_os(platform)
        for arch in architectures:
            pkg_arch = naming.package_arch(arch)
            suffix = f"{pkg_os}-{pkg_arch}"
            drafts.append(TargetDescriptor(
                runtime_platform=platform,
                runtime_arch=arch,
                package_os=pkg_os,
                package_arch=pkg_arch,
                toolchain_triple=naming.toolchain_triple(pkg_os, pkg_arch),
                target_suffix=suffix,
                output_dir=dist_root / suffix,
                build_dir=build_root / suffix,
            ))

    # Pass 2: pad
    width = max((len(d.target_suffix) for d in drafts), default=0)
    targets = [
        dataclasses.replace(d, display_prefix=f"{d.target_suffix:>{width}} ")
        for d in drafts
    ]

    logger.debug("Built catalog with %d target(s)", len(targets))
    return TargetCatalog(targets)


@lru_cache(maxsize=None)
def _cached_catalog(
    platforms: tuple[str, ...],
    architectures: tuple[str, ...],
    dist_root: Path,
    build_root: Path,
) -> TargetCatalog:
    return build_catalog(platforms, architectures, dist_root, build_root)


def get_catalog(config: BuildConfig, project_root: Path) -> TargetCatalog:
    """Memoized catalog for a project — built once per process."""
    root = project_root.resolve()
    return _cached_catalog(
        tuple(config.platforms),
        tuple(config.architectures),
        root / config.dist_dir,
        root / config.build_dir,
    )
