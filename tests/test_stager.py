"""
Tests for the dist stager — per-target README.md and package.json.
"""

import json
from pathlib import Path

import pytest

from nativebuild.core.errors import StagingError, TemplateRenderError
from nativebuild.core.services.stager import DistStager
from nativebuild.core.services.templates import TemplateRenderer


@pytest.fixture
def stager(manifest) -> DistStager:
    return DistStager(TemplateRenderer(), manifest)


class TestStage:
    def test_writes_both_files(self, stager, catalog):
        target = catalog.get("linux-x64")
        written = stager.stage(target)
        assert sorted(p.name for p in written) == ["README.md", "package.json"]
        data = json.loads((target.output_dir / "package.json").read_text())
        assert data["name"] == "@acme/glob-scanner-linux-x64"
        assert data["os"] == ["linux"]
        assert data["cpu"] == ["x64"]

    def test_idempotent(self, stager, catalog):
        target = catalog.get("windows-arm64")
        stager.stage(target)
        first = (target.output_dir / "README.md").read_text()
        stager.stage(target)
        assert (target.output_dir / "README.md").read_text() == first

    def test_overwrites_previous_contents(self, stager, catalog):
        target = catalog.get("macos-x64")
        target.output_dir.mkdir(parents=True)
        (target.output_dir / "package.json").write_text("stale")
        stager.stage(target)
        assert json.loads((target.output_dir / "package.json").read_text())["cpu"] == ["x64"]

    def test_keeps_other_files(self, stager, catalog):
        target = catalog.get("linux-arm64")
        target.output_dir.mkdir(parents=True)
        (target.output_dir / "index.node").write_bytes(b"\x7fELF")
        stager.stage(target)
        assert (target.output_dir / "index.node").exists()

    def test_only_touches_own_directory(self, stager, catalog, tmp_path: Path):
        stager.stage(catalog.get("linux-x86"))
        assert [p.name for p in (tmp_path / "dist").iterdir()] == ["linux-x86"]


class TestStageErrors:
    def test_unwritable_output(self, stager, catalog):
        target = catalog.get("linux-x64")
        target.output_dir.parent.mkdir(parents=True)
        target.output_dir.write_text("a file, not a directory")
        with pytest.raises(StagingError):
            stager.stage(target)

    def test_template_error_writes_nothing(self, manifest, catalog, tmp_path: Path):
        tpl = tmp_path / "tpl"
        tpl.mkdir()
        (tpl / "README.native.md").write_text("{{ name }}\n")
        (tpl / "package.native.json").write_text("{{ missing }}\n")
        stager = DistStager(TemplateRenderer(tpl), manifest)
        target = catalog.get("linux-x64")
        with pytest.raises(TemplateRenderError):
            stager.stage(target)
        assert not target.output_dir.exists()
