"""Layering of aliaszip settings from the config file, the environment, and CLI flags.

Every setting is addressed by a dotted name such as `resolution.on_unresolved`.
Each layer is flattened into those names before the layers are stacked, so a
later layer replaces individual settings rather than whole sections.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from aliaszip.errors import ConfigError

from .models import AliasZipConfig

ENV_PREFIX = "ALIASZIP__"


def setting_keys() -> list[str]:
    """Return the dotted name of every configurable setting."""
    keys: list[str] = []
    for section, field in AliasZipConfig.model_fields.items():
        section_model = field.annotation
        for name in section_model.model_fields:  # type: ignore[union-attr]
            keys.append(f"{section}.{name}")
    return keys


def parse_setting(key: str) -> tuple[str, str]:
    """Split a dotted setting name into (section, name).

    Raises:
        ConfigError: If the name does not address a known setting.
    """
    section, _, name = key.strip().partition(".")
    if f"{section}.{name}" not in setting_keys():
        raise ConfigError(
            f"Unknown setting '{key}'. Known settings: {', '.join(setting_keys())}."
        )
    return section, name


def settings_from_file(data: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a config file document of sections into dotted settings."""
    settings: dict[str, Any] = {}
    for section, values in data.items():
        if values is None:
            continue
        if not isinstance(values, MappingABC):
            raise ConfigError(f"Section '{section}' must map setting names to values.")
        for name, value in values.items():
            key = f"{section}.{name}"
            parse_setting(key)
            settings[key] = value
    return settings


def settings_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect `ALIASZIP__SECTION__NAME` variables as dotted settings.

    Values are parsed as YAML scalars so `true`, `5` and `[a, b]` keep their types.
    """
    settings: dict[str, Any] = {}
    for variable, raw_value in environ.items():
        if not variable.startswith(ENV_PREFIX):
            continue
        key = variable[len(ENV_PREFIX) :].lower().replace("__", ".")
        try:
            parse_setting(key)
        except ConfigError as exc:
            raise ConfigError(f"Environment variable {variable}: {exc}") from exc
        try:
            settings[key] = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            settings[key] = raw_value
    return settings


def resolve_with_precedence(
    *,
    file_settings: Mapping[str, Any] | None = None,
    env_settings: Mapping[str, Any] | None = None,
    cli_settings: Mapping[str, Any] | None = None,
) -> AliasZipConfig:
    """Build the effective configuration: defaults < file < environment < CLI.

    Raises:
        ConfigError: If a setting is unknown or a value fails validation.
    """
    sections: dict[str, dict[str, Any]] = {}
    for layer in (file_settings, env_settings, cli_settings):
        for key, value in (layer or {}).items():
            section, name = parse_setting(key)
            sections.setdefault(section, {})[name] = value

    try:
        return AliasZipConfig.model_validate(sections)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigError(f"Invalid configuration values: {problems}") from exc


__all__ = [
    "ENV_PREFIX",
    "parse_setting",
    "resolve_with_precedence",
    "setting_keys",
    "settings_from_env",
    "settings_from_file",
]
