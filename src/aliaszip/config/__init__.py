"""Configuration management for aliaszip."""

from __future__ import annotations

import os
import textwrap
from pathlib import Path
from typing import Any, Mapping

import yaml

from aliaszip.errors import ConfigError

from .models import AliasZipConfig
from .resolver import (
    parse_setting,
    resolve_with_precedence,
    setting_keys,
    settings_from_env,
    settings_from_file,
)

DEFAULT_CONFIG_PATH = Path("~/.aliaszip/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # aliaszip configuration file
    # Change a setting with `aliaszip config set SECTION.NAME --value VALUE`.
    # ALIASZIP__SECTION__NAME environment variables override these values.
    """
)


class ConfigManager:
    """Read and update the aliaszip settings file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
    ) -> AliasZipConfig:
        """Return the effective configuration, creating the file on first use.

        Args:
            cli_overrides: Dotted settings taken from command-line flags.
            include_env: Whether `ALIASZIP__*` variables are applied.
        """
        self.ensure_exists()
        return resolve_with_precedence(
            file_settings=self.file_settings(),
            env_settings=settings_from_env(self._env) if include_env else None,
            cli_settings=cli_overrides,
        )

    def file_settings(self) -> dict[str, Any]:
        """Return the dotted settings stored in the config file."""
        return settings_from_file(self._read_document())

    def ensure_exists(self) -> Path:
        """Write a file holding every default setting if none exists yet."""
        if not self._config_path.exists():
            self._write_document(AliasZipConfig().model_dump(mode="json"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_value(self, key: str, raw_value: str) -> bool:
        """Store one setting, parsing raw_value as a YAML scalar.

        Returns:
            bool: False when the stored configuration already had this value.

        Raises:
            ConfigError: If the key is unknown or the value is invalid.
        """
        section, name = parse_setting(key)
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value for {key}: {exc}") from exc

        self.ensure_exists()
        document = self._read_document()
        settings = settings_from_file(document)
        current = resolve_with_precedence(file_settings=settings)
        updated = resolve_with_precedence(file_settings={**settings, f"{section}.{name}": value})
        if updated == current:
            return False

        section_values = dict(document.get(section) or {})
        section_values[name] = value
        document[section] = section_values
        self._write_document(document)
        return True

    def replace_text(self, text: str) -> None:
        """Validate an edited config document and write it verbatim.

        Raises:
            ConfigError: If the document is not valid aliaszip configuration.
        """
        resolve_with_precedence(file_settings=settings_from_file(_parse_document(text)))
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(text, encoding="utf-8")

    def _read_document(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}
        return _parse_document(self._config_path.read_text(encoding="utf-8"))

    def _write_document(self, document: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        body = yaml.safe_dump(dict(document), sort_keys=False)
        self._config_path.write_text(_CONFIG_HEADER + body, encoding="utf-8")


def _parse_document(text: str) -> dict[str, Any]:
    try:
        document = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
    if not isinstance(document, dict):
        raise ConfigError("Configuration file must contain a mapping of sections.")
    return document


__all__ = [
    "AliasZipConfig",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "resolve_with_precedence",
    "setting_keys",
]
