"""
Dist stager — writes a target's README.md and package.json.

Each target owns its own output directory, so stagers for different
targets can run concurrently without locking.  Staging overwrites, so
re-running it is always safe.
"""

from __future__ import annotations

import logging
from pathlib import Path

from nativebuild.core.errors import StagingError
from nativebuild.core.models.manifest import RootManifest
from nativebuild.core.models.target import TargetDescriptor
from nativebuild.core.services.templates import TemplateRenderer

logger = logging.getLogger(__name__)

README_FILE = "README.md"
MANIFEST_FILE = "package.json"


class DistStager:
    """Render and write per-target distributable files."""

    def __init__(
        self,
        renderer: TemplateRenderer,
        manifest: RootManifest,
        *,
        readme_template: str = "README.native.md",
        manifest_template: str = "package.native.json",
    ) -> None:
        self.renderer = renderer
        self.manifest = manifest
        self.readme_template = readme_template
        self.manifest_template = manifest_template

    def stage(self, target: TargetDescriptor) -> list[Path]:
        """Stage one target. Returns the files written.

        Both templates are rendered before anything touches the disk,
        so a template error leaves the target directory untouched.

        Raises:
            TemplateRenderError: A template failed to render.
            StagingError: The directory or a file could not be written.
        """
        files = {
            README_FILE: self.renderer.render(self.readme_template, target, self.manifest),
            MANIFEST_FILE: self.renderer.render(self.manifest_template, target, self.manifest),
        }

        out_dir = target.output_dir
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(out_dir, str(e)) from e

        written: list[Path] = []
        for filename, content in files.items():
            path = out_dir / filename
            try:
                path.write_text(content, encoding="utf-8")
            except OSError as e:
                raise StagingError(path, str(e)) from e
            written.append(path)

        logger.info("%sstaged %s", target.display_prefix, out_dir)
        return written
