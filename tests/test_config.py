"""Tests for config: settings env overrides, config store persistence."""

import json
import os
from pathlib import Path
from unittest.mock import patch

from dext.core.config import DEFAULT_REGISTRY, ConfigStore, Settings, load_settings


class TestSettingsDefaults:
    def test_default_home(self):
        s = Settings()
        assert s.home == Path.home() / ".dext"

    def test_derived_paths(self, tmp_path):
        s = Settings(home=tmp_path)
        assert s.config_path == tmp_path / "config.json"
        assert s.plugins_dir == tmp_path / "plugins"

    def test_explicit_overrides(self, tmp_path):
        s = Settings(home=tmp_path, config_file=tmp_path / "c.json", plugin_dir=tmp_path / "p")
        assert s.config_path == tmp_path / "c.json"
        assert s.plugins_dir == tmp_path / "p"

    def test_default_registry(self):
        assert Settings().registry_url == DEFAULT_REGISTRY
        assert Settings().install_command == "npm"


class TestLoadSettings:
    def test_env_overrides(self, tmp_path):
        env = {
            "DEXT_HOME": str(tmp_path),
            "DEXT_REGISTRY": "https://registry.example.com/",
            "DEXT_NPM": "pnpm",
            "DEXT_INSTALL_TIMEOUT": "12.5",
        }
        with patch("dext.core.config.load_dotenv"), patch.dict(os.environ, env, clear=False):
            s = load_settings(verbose=True)
        assert s.home == tmp_path
        assert s.registry_url == "https://registry.example.com"
        assert s.install_command == "pnpm"
        assert s.install_timeout == 12.5
        assert s.verbose is True

    def test_bad_timeout_keeps_default(self):
        with patch("dext.core.config.load_dotenv"), patch.dict(
            os.environ, {"DEXT_INSTALL_TIMEOUT": "soon"}, clear=False
        ):
            s = load_settings()
        assert s.install_timeout == 300.0

    def test_bad_timeout_is_logged(self):
        env = {"DEXT_INSTALL_TIMEOUT": "soon"}
        with patch("dext.core.config.load_dotenv"), patch.dict(os.environ, env, clear=False):
            with patch("dext.core.config.log") as mock_log:
                load_settings()
        mock_log.warning.assert_called_once()
        assert mock_log.warning.call_args.kwargs["value"] == "soon"

    def test_config_and_plugins_dir_env(self, tmp_path):
        env = {
            "DEXT_CONFIG": str(tmp_path / "conf.json"),
            "DEXT_PLUGINS_DIR": str(tmp_path / "plugins"),
        }
        with patch("dext.core.config.load_dotenv"), patch.dict(os.environ, env, clear=False):
            s = load_settings()
        assert s.config_path == tmp_path / "conf.json"
        assert s.plugins_dir == tmp_path / "plugins"

    def test_reads_dotenv(self):
        with patch("dext.core.config.load_dotenv") as mock_load:
            load_settings()
        mock_load.assert_called_once()


class TestConfigStore:
    def test_defaults_when_missing(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json")
        assert store.get("theme") == ""
        assert store.get("enabledPlugins") == {}
        assert not (tmp_path / "config.json").exists()

    def test_set_writes_through(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        store = ConfigStore(path)
        store.set("theme", "dext-theme-dark")
        data = json.loads(path.read_text())
        assert data["theme"] == "dext-theme-dark"

    def test_survives_reload(self, tmp_path):
        path = tmp_path / "config.json"
        ConfigStore(path).set("hotkey", "alt+space")
        assert ConfigStore(path).get("hotkey") == "alt+space"

    def test_loads_existing_document(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"theme": "x", "enabledPlugins": {"x": True}, "width": 800}))
        store = ConfigStore(path)
        assert store.get("theme") == "x"
        assert store.get("width") == 800

    def test_invalid_json_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("not json")
        store = ConfigStore(path)
        assert store.get("theme") == ""

    def test_non_object_document_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        assert ConfigStore(path).get("enabledPlugins") == {}

    def test_get_default(self, tmp_path):
        assert ConfigStore(tmp_path / "c.json").get("missing", 42) == 42

    def test_store_is_snapshot(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json")
        snapshot = store.store
        snapshot["enabledPlugins"]["x"] = True
        assert store.get("enabledPlugins") == {}

    def test_get_returns_copy(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json")
        enabled = store.get("enabledPlugins")
        enabled["x"] = True
        assert store.get("enabledPlugins") == {}

    def test_custom_defaults(self, tmp_path):
        store = ConfigStore(tmp_path / "config.json", defaults={"theme": "base"})
        assert store.get("theme") == "base"
        assert store.get("enabledPlugins") is None
