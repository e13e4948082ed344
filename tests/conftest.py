"""
Shared test fixtures and configuration.
"""

import json
from pathlib import Path

import pytest

from nativebuild.core.models import BuildConfig, RootManifest
from nativebuild.core.services.catalog import build_catalog

MANIFEST = {
    "name": "@acme/glob-scanner",
    "version": "1.4.2",
    "description": "Fast gitignore-aware glob walking",
    "repository": "https://github.com/acme/glob-scanner",
    "license": "MIT",
}


@pytest.fixture
def manifest() -> RootManifest:
    return RootManifest.model_validate(MANIFEST)


@pytest.fixture
def node_project(tmp_path: Path) -> Path:
    """A project directory with a valid package.json."""
    (tmp_path / "package.json").write_text(json.dumps(MANIFEST, indent=2))
    return tmp_path


@pytest.fixture
def catalog(tmp_path: Path):
    """The default 3 × 3 matrix rooted in a temp directory."""
    config = BuildConfig()
    return build_catalog(
        config.platforms,
        config.architectures,
        tmp_path / "dist",
        tmp_path / "target",
    )
