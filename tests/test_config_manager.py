import json
import logging

from skills_studio.config_manager import CONFIG_ENV_VAR, ConfigManager


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "sub" / "config.json"
    config = ConfigManager(path)
    assert path.exists()
    assert config.get("server.base_url") == "http://localhost:3344"
    assert config.get("studio.reuse_clean_tabs") is True


def test_loaded_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"server": {"base_url": "http://other:1/"}}), encoding="utf-8")
    config = ConfigManager(path)
    assert config.get_base_url() == "http://other:1"
    assert config.get("server.save_timeout") == 15
    assert config.get("editor.sync_delay_ms") == 600


def test_broken_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    config = ConfigManager(path)
    assert config.load() is False
    assert config.get("server.load_timeout") == 10


def test_env_var_selects_file(tmp_path, monkeypatch):
    path = tmp_path / "env.json"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert ConfigManager().path == path


def test_dot_notation_set_get_and_save(tmp_path):
    path = tmp_path / "config.json"
    config = ConfigManager(path)
    config.set("studio.reuse_clean_tabs", False)
    config.set("new.nested.key", 3)
    assert config.get("new.nested.key") == 3
    assert config.get("missing.key", "dflt") == "dflt"
    assert config.save()
    assert ConfigManager(path).get("studio.reuse_clean_tabs") is False


def test_timeouts_are_bounded(tmp_path):
    config = ConfigManager(tmp_path / "config.json")
    assert config.get_timeouts() == (10.0, 15.0)
    config.set("server.load_timeout", 0.1)
    config.set("server.save_timeout", "soon")
    assert config.get_timeouts() == (1.0, 15.0)


def test_empty_base_url_uses_default(tmp_path):
    config = ConfigManager(tmp_path / "config.json")
    config.set("server.base_url", "")
    assert config.get_base_url() == "http://localhost:3344"


def test_log_level_and_directory(tmp_path):
    config = ConfigManager(tmp_path / "config.json")
    assert config.get_log_level() == logging.INFO
    assert config.get_log_dir() == tmp_path / "logs"
    config.set("logging.level", "debug")
    config.set("logging.directory", str(tmp_path / "elsewhere"))
    assert config.get_log_level() == logging.DEBUG
    assert config.get_log_dir() == tmp_path / "elsewhere"


def test_unknown_log_level_falls_back_to_info(tmp_path):
    config = ConfigManager(tmp_path / "config.json")
    config.set("logging.level", "chatty")
    assert config.get_log_level() == logging.INFO
