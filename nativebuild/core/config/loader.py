"""
Configuration loader — reads package.json and nativebuild.yml into models.

The project root is the directory holding ``package.json``.  The build
config file is optional; the manifest is not.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from nativebuild.core.errors import BuildError
from nativebuild.core.models.config import BuildConfig
from nativebuild.core.models.manifest import RootManifest

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"
BUILD_CONFIG_FILE = "nativebuild.yml"


class ConfigError(BuildError):
    """Raised when project configuration is invalid or missing."""


def find_project_root(start_dir: Path | None = None) -> Path | None:
    """Search for package.json starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        The directory containing package.json, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        if (current / MANIFEST_FILE).is_file():
            return current
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_manifest(project_root: Path) -> RootManifest:
    """Load and validate the root package.json.

    Raises:
        ConfigError: If the file is missing, not JSON, or lacks a
            required string field.
    """
    path = project_root / MANIFEST_FILE
    if not path.is_file():
        raise ConfigError(f"Manifest not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}, got {type(data).__name__}")

    try:
        manifest = RootManifest.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid manifest {path}: {e}") from e

    logger.info("Loaded manifest '%s' v%s", manifest.name, manifest.version)
    return manifest


def load_build_config(project_root: Path, path: Path | None = None) -> BuildConfig:
    """Load nativebuild.yml, falling back to defaults when absent.

    Args:
        project_root: Directory holding package.json.
        path: Explicit config path. Unlike the default location, an
            explicit path must exist.

    Raises:
        ConfigError: If the file is unreadable or fails validation.
    """
    explicit = path is not None
    path = path or project_root / BUILD_CONFIG_FILE

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug("No %s in %s, using defaults", BUILD_CONFIG_FILE, project_root)
        return BuildConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = BuildConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid build configuration: {e}") from e

    logger.info(
        "Loaded build config: %d platform(s) × %d architecture(s)",
        len(config.platforms),
        len(config.architectures),
    )
    return config
