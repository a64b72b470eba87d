"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from grimoire.config import Settings, get_settings, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from GRIMOIRE_* variables and a grimoire.yaml in the cwd."""
    for name in ("REGISTRY_ROOT", "MIN_TOPICS", "TOPIC_EXTENSIONS", "WORKERS", "LOG_LEVEL"):
        monkeypatch.delenv(f"GRIMOIRE_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    """Test Settings defaults and validation."""

    def test_defaults(self):
        settings = Settings()
        assert settings.registry_root == Path("packages")
        assert settings.min_topics == 5
        assert settings.topic_extensions == [".md", ".markdown"]
        assert settings.workers == 1
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("GRIMOIRE_MIN_TOPICS", "3")
        monkeypatch.setenv("GRIMOIRE_REGISTRY_ROOT", "/srv/registry")
        settings = Settings()
        assert settings.min_topics == 3
        assert settings.registry_root == Path("/srv/registry")

    def test_extensions_normalized(self):
        settings = Settings(topic_extensions=["MD", ".Markdown"])
        assert settings.topic_extensions == [".md", ".markdown"]

    def test_invalid_workers(self):
        with pytest.raises(ValidationError):
            Settings(workers=0)

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("GRIMOIRE_LOG_LEVEL", "verbose")
        with pytest.raises(ValidationError, match="log_level"):
            Settings()

    def test_unknown_log_level_is_a_value_error(self, monkeypatch):
        monkeypatch.setenv("GRIMOIRE_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError):
            get_settings()


class TestLoadConfig:
    """Test load_config function."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "grimoire.yaml")

    def test_empty_file(self, tmp_path):
        config_path = tmp_path / "grimoire.yaml"
        config_path.write_text("")
        assert load_config(config_path) == {}

    def test_not_a_mapping(self, tmp_path):
        config_path = tmp_path / "grimoire.yaml"
        config_path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(config_path)

    def test_malformed_yaml(self, tmp_path):
        config_path = tmp_path / "grimoire.yaml"
        config_path.write_text("registry_root: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(config_path)


class TestGetSettings:
    """Test get_settings precedence."""

    def test_file_values(self, tmp_path):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("registry_root: registry\nmin_topics: 7\n")

        settings = get_settings(config_path)

        assert settings.registry_root == Path("registry")
        assert settings.min_topics == 7

    def test_default_file_in_cwd(self, tmp_path):
        (tmp_path / "grimoire.yaml").write_text("workers: 8\n")
        assert get_settings().workers == 8

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("min_topics: 7\nworkers: 2\n")
        monkeypatch.setenv("GRIMOIRE_MIN_TOPICS", "4")

        settings = get_settings(config_path)

        assert settings.min_topics == 4
        assert settings.workers == 2

    def test_overrides_win(self, tmp_path, monkeypatch):
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("min_topics: 7\n")
        monkeypatch.setenv("GRIMOIRE_MIN_TOPICS", "4")

        settings = get_settings(config_path, min_topics=1, workers=None)

        assert settings.min_topics == 1
        assert settings.workers == 1
