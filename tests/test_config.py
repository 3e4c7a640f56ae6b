"""
Tests for configuration loading — storegen.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from storegen.core.config.loader import ConfigError, find_config_file, load_config


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        domain: sqlite
        sources:
          - app
          - lib
        output: generated
        exclude:
          - migrations
        fail_on_diagnostics: false
    """)
    path = tmp_path / "storegen.yml"
    path.write_text(content)
    return path


class TestFindConfigFile:
    def test_in_start_dir(self, config_file: Path):
        assert find_config_file(config_file.parent) == config_file.resolve()

    def test_walks_up(self, config_file: Path):
        nested = config_file.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == config_file.resolve()

    def test_not_found(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr("storegen.core.config.loader.CONFIG_FILE", "no-such-storegen.yml")
        assert find_config_file(tmp_path) is None


class TestLoadConfig:
    def test_full_file(self, config_file: Path):
        config = load_config(config_file)
        assert config.domain == "sqlite"
        assert config.sources == ["app", "lib"]
        assert config.fail_on_diagnostics is False
        assert config.base_dir == config_file.parent.resolve()
        assert config.output_dir == (config_file.parent / "generated").resolve()
        assert "migrations" in config.exclude_patterns
        assert "__pycache__" in config.exclude_patterns

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("storegen.core.config.loader.CONFIG_FILE", "no-such-storegen.yml")
        config = load_config()
        assert config.base_dir == Path.cwd()
        assert config.sources == ["."]
        assert config.fail_on_diagnostics is True

    def test_auto_detect(self, config_file: Path, monkeypatch):
        monkeypatch.chdir(config_file.parent)
        assert load_config().sources == ["app", "lib"]

    def test_single_source_string(self, tmp_path: Path):
        path = tmp_path / "storegen.yml"
        path.write_text("sources: app\n")
        assert load_config(path).sources == ["app"]

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "storegen.yml"
        path.write_text("")
        assert load_config(path).domain == "sqlite"

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "storegen.yml"
        path.write_text("sources: [app\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "storegen.yml"
        path.write_text("- app\n- lib\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_invalid_field(self, tmp_path: Path):
        path = tmp_path / "storegen.yml"
        path.write_text("fail_on_diagnostics: maybe\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)
