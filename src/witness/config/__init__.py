"""Configuration management for Witness."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import WitnessConfig
from .resolver import (
    assign_nested,
    flatten_for_env,
    parse_env_overrides,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.witness/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # Witness configuration file
    # Manage via `witness config edit` or `witness config set KEY --value VALUE`.
    # Environment variables such as WITNESS__SOURCE__PROVIDER override these values.
    """
)


class ConfigManager:
    """Load and persist configuration data, applying precedence rules."""

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
        ensure_file: bool = False,
        env_overrides: Mapping[str, str] | None = None,
    ) -> WitnessConfig:
        """Load configuration from disk and the environment, applying precedence rules."""
        if ensure_file:
            self.ensure_exists()

        env_data: Mapping[str, str] | None = None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env

        return resolve_with_precedence(
            defaults=WitnessConfig(),
            file_overrides=self._read_file(),
            env_overrides=parse_env_overrides(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored on disk."""
        return self._read_file()

    def save(self, config: WitnessConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if isinstance(config, WitnessConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self._write_file(WitnessConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")

        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(data), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{serialized}", encoding="utf-8"
        )


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "WitnessConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "parse_env_overrides",
    "assign_nested",
    "ConfigError",
]
