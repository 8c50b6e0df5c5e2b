# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from remedy.core._error_codes import CONFIG_FILE_INVALID, CONFIG_FILE_UNREADABLE
from remedy.core.config import RemedyConfig
from remedy.core.errors import ConfigError


def test_defaults():
    config = RemedyConfig()
    assert config.session_type == "ars"
    assert config.count == 50
    assert config.wrap == 80
    assert config.debug_level == "ERROR"
    assert config.logfile_level == "INFO"
    assert config.cache_namespace == "Remedy_Cache"
    assert config.cache_expiration == 7 * 24 * 60 * 60
    assert config.caching is True
    assert config.http_retries is None


def test_server_url_from_host_and_port():
    assert RemedyConfig(remedy_host="remedy.example.edu").server_url == "https://remedy.example.edu"
    assert RemedyConfig(remedy_host="remedy.example.edu", remedy_port=8443).server_url == (
        "https://remedy.example.edu:8443"
    )


def test_server_url_prefers_explicit_url():
    config = RemedyConfig(remedy_host="ignored", remedy_url="http://localhost:8008/")
    assert config.server_url == "http://localhost:8008"


def test_server_url_requires_host():
    with pytest.raises(ConfigError):
        RemedyConfig().server_url


def test_acting_user_prefers_username(monkeypatch):
    assert RemedyConfig(username="jdoe").acting_user == "jdoe"
    monkeypatch.setattr("getpass.getuser", lambda: "shelluser")
    assert RemedyConfig().acting_user == "shelluser"


def test_replace_returns_copy():
    base = RemedyConfig(company="A")
    changed = base.replace(company="B")
    assert base.company == "A"
    assert changed.company == "B"


def test_from_env(monkeypatch):
    monkeypatch.setenv("REMEDY_HOST", "remedy.example.edu")
    monkeypatch.setenv("REMEDY_PORT", "8443")
    monkeypatch.setenv("REMEDY_CACHING", "no")
    monkeypatch.setenv("REMEDY_WORKGROUP", "ITS Unix Systems")
    monkeypatch.delenv("REMEDY_USER", raising=False)

    config = RemedyConfig.from_env()

    assert config.remedy_host == "remedy.example.edu"
    assert config.remedy_port == 8443
    assert config.caching is False
    assert config.workgroup == "ITS Unix Systems"
    assert config.remedy_user is None


def test_load_script(tmp_path):
    script = tmp_path / "config"
    script.write_text(
        "REMEDY_HOST = 'remedy.example.edu'\n"
        "REMEDY_USER = 'svc'\n"
        "SEARCH_COUNT = 10\n"
        "TEXT_WRAP = 0\n"
        "COMPANY = 'Example University'\n"
        "UNKNOWN_SETTING = 1\n"
        "lowercase = 'ignored'\n"
    )

    config = RemedyConfig.load(str(script))

    assert config.remedy_host == "remedy.example.edu"
    assert config.remedy_user == "svc"
    assert config.count == 10
    assert config.wrap == 0
    assert config.company == "Example University"
    assert config.config_file == str(script)


def test_load_uses_env_path(tmp_path, monkeypatch):
    script = tmp_path / "remedy.conf"
    script.write_text("WORKGROUP = 'Desk'\n")
    monkeypatch.setenv("REMEDY_CONFIG", str(script))

    assert RemedyConfig.load().workgroup == "Desk"


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError) as exc:
        RemedyConfig.load(str(tmp_path / "nope"))
    assert exc.value.subcode == CONFIG_FILE_UNREADABLE


def test_load_broken_script(tmp_path):
    script = tmp_path / "config"
    script.write_text("REMEDY_HOST = \n")
    with pytest.raises(ConfigError) as exc:
        RemedyConfig.load(str(script))
    assert exc.value.subcode == CONFIG_FILE_INVALID


def test_bad_integer_rejected():
    with pytest.raises(ConfigError):
        RemedyConfig.from_mapping({"SEARCH_COUNT": "many"})


def test_repr_hides_password():
    config = RemedyConfig(remedy_host="remedy.example.edu", remedy_user="svc-remedy", remedy_pass="hunter2")
    text = repr(config)
    assert "hunter2" not in text
    assert "svc-remedy" in text
    assert config.remedy_pass == "hunter2"
