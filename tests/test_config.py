"""
Tests for configuration loading — package.json and nativebuild.yml.
"""

import json
import textwrap
from pathlib import Path

import pytest

from nativebuild.core.config.loader import (
    ConfigError,
    find_project_root,
    load_build_config,
    load_manifest,
)
from nativebuild.core.models import BuildConfig


class TestLoadManifest:
    def test_load_valid(self, node_project: Path):
        manifest = load_manifest(node_project)
        assert manifest.name == "@acme/glob-scanner"
        assert manifest.version == "1.4.2"
        assert manifest.license == "MIT"

    def test_extra_fields_ignored(self, node_project: Path):
        data = json.loads((node_project / "package.json").read_text())
        data["scripts"] = {"build": "nativebuild"}
        (node_project / "package.json").write_text(json.dumps(data))
        assert load_manifest(node_project).name == "@acme/glob-scanner"

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_manifest(tmp_path)

    def test_invalid_json_raises(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{ nope")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_manifest(tmp_path)

    def test_non_object_raises(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("[1, 2]")
        with pytest.raises(ConfigError, match="Expected a JSON object"):
            load_manifest(tmp_path)

    def test_missing_field_raises(self, node_project: Path):
        data = json.loads((node_project / "package.json").read_text())
        del data["license"]
        (node_project / "package.json").write_text(json.dumps(data))
        with pytest.raises(ConfigError, match="license"):
            load_manifest(node_project)

    def test_wrong_type_raises(self, node_project: Path):
        data = json.loads((node_project / "package.json").read_text())
        data["repository"] = {"type": "git", "url": "https://example.com/x.git"}
        (node_project / "package.json").write_text(json.dumps(data))
        with pytest.raises(ConfigError, match="repository"):
            load_manifest(node_project)

    def test_numeric_version_rejected(self, node_project: Path):
        data = json.loads((node_project / "package.json").read_text())
        data["version"] = 1
        (node_project / "package.json").write_text(json.dumps(data))
        with pytest.raises(ConfigError):
            load_manifest(node_project)


class TestLoadBuildConfig:
    def test_defaults_when_absent(self, node_project: Path):
        config = load_build_config(node_project)
        assert config == BuildConfig()
        assert config.platforms == ("linux", "darwin", "win32")
        assert config.serial_os == ("windows",)

    def test_load_overrides(self, node_project: Path):
        (node_project / "nativebuild.yml").write_text(textwrap.dedent("""\
            dist_dir: npm
            platforms: [linux, darwin]
            architectures: [x64]
            jobs: 2
            compile_command: [cargo, zigbuild]
        """))
        config = load_build_config(node_project)
        assert config.dist_dir == "npm"
        assert config.platforms == ("linux", "darwin")
        assert config.jobs == 2
        assert config.compile_command == ("cargo", "zigbuild")

    def test_empty_file_is_defaults(self, node_project: Path):
        (node_project / "nativebuild.yml").write_text("")
        assert load_build_config(node_project) == BuildConfig()

    def test_explicit_path_must_exist(self, node_project: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_build_config(node_project, node_project / "custom.yml")

    def test_invalid_yaml_raises(self, node_project: Path):
        (node_project / "nativebuild.yml").write_text(":: invalid: yaml: [")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_build_config(node_project)

    def test_unknown_key_raises(self, node_project: Path):
        (node_project / "nativebuild.yml").write_text("dist: out\n")
        with pytest.raises(ConfigError, match="Invalid build configuration"):
            load_build_config(node_project)

    def test_non_mapping_raises(self, node_project: Path):
        (node_project / "nativebuild.yml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_build_config(node_project)

    def test_zero_jobs_rejected(self, node_project: Path):
        (node_project / "nativebuild.yml").write_text("jobs: 0\n")
        with pytest.raises(ConfigError):
            load_build_config(node_project)


class TestFindProjectRoot:
    def test_finds_in_current_dir(self, node_project: Path):
        assert find_project_root(node_project) == node_project.resolve()

    def test_finds_in_parent(self, node_project: Path):
        sub = node_project / "src" / "deep"
        sub.mkdir(parents=True)
        assert find_project_root(sub) == node_project.resolve()

    def test_returns_none_when_missing(self, tmp_path: Path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = find_project_root(empty)
        # May find a package.json further up the real filesystem
        if result is not None:
            assert (result / "package.json").is_file()
