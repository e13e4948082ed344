"""
Naming translator — maps between the three target vocabularies.

    runtime  (what Node reports)   linux / darwin / win32,  x64 / arm64 / ia32
    package  (what we publish)     linux / macos  / windows, x64 / arm64 / x86
    toolchain (what rustc wants)   unknown-linux-gnu ...,    x86_64 ...

The OS axis and the architecture axis are independent.  Each axis is a
closed bijection: adding a platform means adding one row to a table
below, never touching call sites.  Anything outside a table is an
``UnknownIdentifier`` — an unmapped value would otherwise produce a
malformed toolchain triple.
"""

from __future__ import annotations

from collections.abc import Mapping

from nativebuild.core.errors import UnknownIdentifier


class NamingAxis:
    """A closed two-way mapping between two vocabularies."""

    def __init__(self, name: str, forward: Mapping[str, str]) -> None:
        reverse = {v: k for k, v in forward.items()}
        if len(reverse) != len(forward):
            raise ValueError(f"Naming axis '{name}' is not a bijection: {dict(forward)}")
        self.name = name
        self._forward = dict(forward)
        self._reverse = reverse

    @property
    def domain(self) -> tuple[str, ...]:
        return tuple(self._forward)

    @property
    def codomain(self) -> tuple[str, ...]:
        return tuple(self._reverse)

    def forward(self, value: str) -> str:
        try:
            return self._forward[value]
        except KeyError:
            raise UnknownIdentifier(self.name, value, self._forward) from None

    def reverse(self, value: str) -> str:
        try:
            return self._reverse[value]
        except KeyError:
            raise UnknownIdentifier(self.name, value, self._reverse) from None


# ── Tables ──────────────────────────────────────────────────────

OS_AXIS = NamingAxis("platform", {
    "linux": "linux",
    "darwin": "macos",
    "win32": "windows",
})

ARCH_AXIS = NamingAxis("architecture", {
    "x64": "x64",
    "arm64": "arm64",
    "ia32": "x86",
})

TOOLCHAIN_OS_AXIS = NamingAxis("toolchain os", {
    "linux": "unknown-linux-gnu",
    "macos": "apple-darwin",
    "windows": "pc-windows-msvc",
})

TOOLCHAIN_ARCH_AXIS = NamingAxis("toolchain architecture", {
    "x64": "x86_64",
    "arm64": "aarch64",
    "x86": "i686",
})


# ── Runtime ↔ package ───────────────────────────────────────────


def package_os(runtime_platform: str) -> str:
    """``darwin`` → ``macos``."""
    return OS_AXIS.forward(runtime_platform)


def runtime_platform(package_os: str) -> str:
    """``macos`` → ``darwin``."""
    return OS_AXIS.reverse(package_os)


def package_arch(runtime_arch: str) -> str:
    """``ia32`` → ``x86``."""
    return ARCH_AXIS.forward(runtime_arch)


def runtime_arch(package_arch: str) -> str:
    """``x86`` → ``ia32``."""
    return ARCH_AXIS.reverse(package_arch)


# ── Package → toolchain ─────────────────────────────────────────


def toolchain_os(package_os: str) -> str:
    return TOOLCHAIN_OS_AXIS.forward(package_os)


def toolchain_arch(package_arch: str) -> str:
    return TOOLCHAIN_ARCH_AXIS.forward(package_arch)


def toolchain_triple(package_os: str, package_arch: str) -> str:
    """Compose the compiler target, e.g. ``x86_64-unknown-linux-gnu``."""
    return f"{toolchain_arch(package_arch)}-{toolchain_os(package_os)}"
