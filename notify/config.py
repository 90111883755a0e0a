"""
Configuration Module

Reads the notifier settings from the "notify" section of a YAML file, e.g.

    notify:
      service: beacon
      instance: beacon_server_01
      log_all: true
      async_send: false
      json_format: false
      capacity: 100
      endpoints:
        - logs/beacon.log
        - stdout
"""

# System modules
from dataclasses import dataclass, field, fields
import os
from pathlib import Path
import sys

# Third-party modules
import yaml

# Notify modules
from notify.endpoints import EndpointRegistry
from notify.notifier import DEFAULT_CAPACITY, Notifier
from notify.syswarn import syswarn

CONFIG_FILE: str = "notify.yaml"
CONSOLE_ENDPOINT: str = "stdout"


class ConfigError(ValueError):
    """The configuration file exists but cannot be used."""


@dataclass
class NotifierConfig:
    service: str = "N/A"
    instance: str = "N/A"
    log_all: bool = False
    async_send: bool = False
    json_format: bool = False
    capacity: int = DEFAULT_CAPACITY
    endpoints: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: dict) -> "NotifierConfig":
        """Build a config from a mapping, ignoring (and reporting) unknown keys."""
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                syswarn(f"unknown configuration key '{key}' ignored")

        config = cls(**{key: value for key, value in data.items() if key in known})
        if isinstance(config.endpoints, (str, os.PathLike)):
            config.endpoints = [config.endpoints]
        if not isinstance(config.capacity, int) or isinstance(config.capacity, bool):
            raise ConfigError(f"capacity must be an integer, got {config.capacity!r}")
        return config

    def resolved_endpoints(self) -> list[object]:
        """Endpoint references understood by Notifier ("stdout" is the console)."""
        return [sys.stdout if str(e).lower() == CONSOLE_ENDPOINT else e for e in self.endpoints]

    def build(self, registry: EndpointRegistry | None = None) -> Notifier:
        return Notifier(
            self.service,
            self.instance,
            *self.resolved_endpoints(),
            log_all=self.log_all,
            async_send=self.async_send,
            json_format=self.json_format,
            capacity=self.capacity,
            registry=registry,
        )


def load_config(path: str | os.PathLike | None = None) -> NotifierConfig:
    """
    Load the notifier configuration.

    Searches the given path first, then config/notify.yaml in the current working
    directory, reads its top-level "notify" section and returns the settings.
    Defaults are returned if no file is found.

    Raises:
        ConfigError: if a file is present but cannot be parsed.
    """
    potential_paths: list[Path] = []
    if path is not None:
        potential_paths.append(Path(path))
    potential_paths.append(Path("config") / CONFIG_FILE)

    for config_path in potential_paths:
        if config_path.exists() and config_path.is_file():
            try:
                with open(config_path, "r", encoding="utf-8") as file:
                    data = yaml.safe_load(file)
            except yaml.YAMLError as e:
                raise ConfigError(f"Error parsing YAML file {config_path}: {e}") from e

            data = data.get("notify") if isinstance(data, dict) else None
            if data is None:
                syswarn(f"{config_path} has no 'notify' section. Using defaults")
                return NotifierConfig()
            if not isinstance(data, dict):
                raise ConfigError(f"the 'notify' section of {config_path} must be a mapping")
            return NotifierConfig.from_mapping(data)

    if path is not None:
        syswarn(f"configuration file {path} not found. Using defaults")
    return NotifierConfig()
