"""Tests for configuration management."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from typedb_contexts.config import Settings, read_user_config, save_user_config
from typedb_contexts.main import app

runner = CliRunner()


class TestSettings:
    """Tests for Settings."""

    def test_default_values(self, config_file: Path):
        settings = Settings()
        assert settings.typedb_url == "http://localhost:8000"
        assert settings.username == "admin"
        assert settings.lesson_prefix == "learn_"
        assert settings.demo_prefix == "demo_"
        assert settings.catalog_dir is None

    def test_load_from_env(self, config_file: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TYPEDB_CONTEXTS_TYPEDB_URL", "http://env-host:8000")
        monkeypatch.setenv("TYPEDB_CONTEXTS_CATALOG_DIR", "/srv/contexts")

        settings = Settings()
        assert settings.typedb_url == "http://env-host:8000"
        assert settings.catalog_dir == Path("/srv/contexts")

    def test_load_from_file(self, config_file: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(yaml.dump({"typedb_url": "http://file-host:8000", "unknown": 1}))

        settings = Settings()
        assert settings.typedb_url == "http://file-host:8000"

    def test_env_overrides_file(self, config_file: Path, monkeypatch: pytest.MonkeyPatch):
        config_file.parent.mkdir(parents=True)
        config_file.write_text(yaml.dump({"typedb_url": "http://file-host:8000"}))
        monkeypatch.setenv("TYPEDB_CONTEXTS_TYPEDB_URL", "http://env-host:8000")

        assert Settings().typedb_url == "http://env-host:8000"

    def test_to_display_masks_password(self, config_file: Path):
        display = Settings(password="supersecretvalue").to_display()
        assert display["password"] == "su************ue"
        assert display["catalog_dir"] == ""

    def test_short_password_fully_masked(self, config_file: Path):
        assert Settings(password="pw").to_display()["password"] == "**"


class TestUserConfigFile:
    """Tests for reading and writing the YAML config file."""

    def test_missing_file(self, config_file: Path):
        assert read_user_config() == {}

    def test_not_a_mapping(self, config_file: Path):
        config_file.parent.mkdir(parents=True)
        config_file.write_text("- just\n- a list\n")
        assert read_user_config() == {}

    def test_save_merges(self, config_file: Path):
        save_user_config({"typedb_url": "http://a"})
        path = save_user_config({"username": "bob"})

        assert path == config_file
        assert yaml.safe_load(config_file.read_text()) == {
            "typedb_url": "http://a",
            "username": "bob",
        }


class TestConfigCommands:
    """Tests for 'config' commands."""

    def test_set_and_show(self, config_file: Path):
        result = runner.invoke(app, ["config", "set", "typedb-url", "http://cli-host:8000"])
        assert result.exit_code == 0
        assert "typedb_url = http://cli-host:8000" in result.stdout

        result = runner.invoke(app, ["--json", "config", "show"])
        assert result.exit_code == 0
        assert '"typedb_url": "http://cli-host:8000"' in result.stdout

    def test_set_password_masked(self, config_file: Path):
        result = runner.invoke(app, ["config", "set", "password", "supersecretvalue"])
        assert result.exit_code == 0
        assert "supersecretvalue" not in result.stdout
        assert yaml.safe_load(config_file.read_text())["password"] == "supersecretvalue"

    def test_set_unknown_key(self, config_file: Path):
        result = runner.invoke(app, ["config", "set", "colour", "blue"])
        assert result.exit_code == 1
        assert not config_file.exists()

    def test_set_invalid_value(self, config_file: Path):
        result = runner.invoke(app, ["config", "set", "request-timeout", "soon"])
        assert result.exit_code == 1
        assert not config_file.exists()
