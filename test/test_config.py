"""
Tests for loading the notifier configuration from YAML.
"""

import sys
from pathlib import Path

import pytest

from helpers import read_lines

from notify import ConfigError, NotifierConfig, load_config


def write_config(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:

    def test_reads_notify_section(self, tmp_path: Path):
        path = write_config(tmp_path / "settings.yaml", """
notify:
  service: beacon
  instance: beacon_server_01
  log_all: true
  json_format: true
  capacity: 10
  endpoints:
    - logs/beacon.log
    - stdout
other:
  ignored: true
""")
        config = load_config(path)
        assert config == NotifierConfig(
            service="beacon",
            instance="beacon_server_01",
            log_all=True,
            json_format=True,
            capacity=10,
            endpoints=["logs/beacon.log", "stdout"],
        )

    def test_default_location(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        write_config(tmp_path / "config" / "notify.yaml", "notify:\n  service: from-cwd\n")
        assert load_config().service == "from-cwd"

    def test_defaults_when_missing(self, tmp_path: Path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert load_config() == NotifierConfig()
        assert load_config(tmp_path / "nope.yaml") == NotifierConfig()
        assert "not found" in capsys.readouterr().out

    def test_missing_section(self, tmp_path: Path, capsys):
        path = write_config(tmp_path / "settings.yaml", "vcs:\n  something: 1\n")
        assert load_config(path) == NotifierConfig()
        assert "has no 'notify' section" in capsys.readouterr().out

    def test_unknown_keys_warn(self, tmp_path: Path, capsys):
        path = write_config(tmp_path / "settings.yaml", "notify:\n  service: s\n  rotate: daily\n")
        assert load_config(path).service == "s"
        assert "unknown configuration key 'rotate'" in capsys.readouterr().out

    def test_single_endpoint_string(self, tmp_path: Path):
        path = write_config(tmp_path / "settings.yaml", "notify:\n  endpoints: app.log\n")
        assert load_config(path).endpoints == ["app.log"]

    def test_bad_yaml(self, tmp_path: Path):
        path = write_config(tmp_path / "settings.yaml", "notify: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_bad_capacity(self, tmp_path: Path):
        path = write_config(tmp_path / "settings.yaml", "notify:\n  capacity: lots\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_section_must_be_mapping(self, tmp_path: Path):
        path = write_config(tmp_path / "settings.yaml", "notify:\n  - a\n  - b\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestBuild:

    def test_stdout_endpoint(self):
        config = NotifierConfig(endpoints=["STDOUT"])
        assert config.resolved_endpoints() == [sys.stdout]

    def test_build_notifier(self, logfile: Path):
        config = NotifierConfig(service="beacon", instance="b01", log_all=True, endpoints=[str(logfile)])
        notifier = config.build()
        consumer = notifier.start()
        notifier.sender("Config")("built from config")
        assert notifier.exit() is None
        consumer.join(timeout=5.0)

        first = read_lines(logfile)[0]
        assert first[1:4] == ["beacon", "b01", "Config"]
        assert first[7] == "built from config"
