from __future__ import annotations

import json

import pytest

from mpd_outputs.config import Config, deep_update, env_overrides, load_config, load_config_file


def test_defaults_without_file_or_env() -> None:
    cfg = load_config(None, environ={})

    assert cfg["mpd"] == {"host": "localhost", "port": 6600, "timeout": 30.0, "password": None}
    assert cfg["api"]["port"] == 8789
    assert cfg["log"]["level"] == "info"


def test_yaml_file_overrides_defaults(tmp_path) -> None:
    path = tmp_path / "outputs.yaml"
    path.write_text("mpd:\n  host: music.lan\n  port: 6601\nlog:\n  level: debug\n", encoding="utf-8")

    cfg = load_config(str(path), environ={})

    assert cfg["mpd"]["host"] == "music.lan"
    assert cfg["mpd"]["port"] == 6601
    assert cfg["mpd"]["timeout"] == 30.0
    assert cfg["log"]["level"] == "debug"


def test_toml_and_json_files(tmp_path) -> None:
    toml_path = tmp_path / "outputs.toml"
    toml_path.write_text('[mpd]\nhost = "/run/mpd/socket"\n', encoding="utf-8")
    json_path = tmp_path / "outputs.json"
    json_path.write_text(json.dumps({"api": {"port": 9000}}), encoding="utf-8")

    assert load_config_file(str(toml_path)) == {"mpd": {"host": "/run/mpd/socket"}}
    assert load_config_file(str(json_path)) == {"api": {"port": 9000}}


def test_missing_unknown_or_broken_files_are_ignored(tmp_path) -> None:
    broken = tmp_path / "broken.yaml"
    broken.write_text("mpd: [unterminated\n", encoding="utf-8")
    ini = tmp_path / "outputs.ini"
    ini.write_text("[mpd]\n", encoding="utf-8")

    assert load_config_file(str(tmp_path / "nope.yaml")) == {}
    assert load_config_file(str(broken)) == {}
    assert load_config_file(str(ini)) == {}


def test_env_overrides_file(tmp_path) -> None:
    path = tmp_path / "outputs.yaml"
    path.write_text("mpd:\n  host: from-file\n", encoding="utf-8")

    cfg = load_config(str(path), environ={"MPD_HOST": "s3cret@from-env", "MPD_PORT": "6700"})

    assert cfg["mpd"]["host"] == "from-env"
    assert cfg["mpd"]["password"] == "s3cret"
    assert cfg["mpd"]["port"] == 6700


def test_invalid_port_env_is_ignored() -> None:
    assert env_overrides({"MPD_PORT": "sixty-six"}) == {}


def test_deep_update_merges_nested() -> None:
    dst = {"mpd": {"host": "a", "port": 1}}
    deep_update(dst, {"mpd": {"port": 2}, "extra": True})
    assert dst == {"mpd": {"host": "a", "port": 2}, "extra": True}


def test_config_singleton_get_set() -> None:
    Config.load(None, environ={})
    config = Config()

    assert Config() is config
    assert config.get("mpd.port") == 6600
    config["mpd.host"] = "10.0.0.5"
    assert config["mpd.host"] == "10.0.0.5"
    assert config.connection_settings() == {"host": "10.0.0.5", "port": 6600, "timeout": 30.0, "password": None}
    with pytest.raises(KeyError):
        config.get("mpd.nope")
