"""
Layered configuration for daybook.

Three layers are merged, later ones winning:
    1. Built-in defaults (plus any extra defaults passed by the caller)
    2. A YAML or JSON config file
    3. Environment variables, ``DAYBOOK_SECTION__KEY=value``

Usage:
    config = Config(config_file="~/.daybook/config.yaml")

    config.get("storage.backend")          # "local"
    config.get("view.page_size")           # 20
    config.validated().storage.quota_bytes # typed, checked by pydantic

Values from the environment arrive as strings; ``validated()`` coerces them.
"""

from __future__ import annotations

import copy
import json
import os
from typing import TYPE_CHECKING, Any

import yaml

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .config_schema import DaybookConfig

_DEFAULT_ENV_PREFIX = "DAYBOOK_"
_DEFAULT_DATA_DIR_NAME = ".daybook-data"
_NEST = "__"

DEFAULT_STORAGE_KEY = "daybook.v1"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024  # typical browser localStorage ceiling
DEFAULT_PAGE_SIZE = 20


def _deep_merge(target: dict[str, Any], overlay: dict[str, Any]) -> None:
    """Merge *overlay* into *target* in place; nested sections merge, leaves replace."""
    for key, value in overlay.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _deep_merge(current, value)
        else:
            target[key] = copy.deepcopy(value)


def _read_config_file(path: str) -> dict[str, Any]:
    """Parse a YAML or JSON config file into a dict.

    Raises:
        ConfigurationError: For an unknown extension, a parse error, or a
            top level that is not a mapping.
    """
    ext = os.path.splitext(path)[1].lower()
    try:
        with open(path, encoding="utf-8") as f:
            if ext in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif ext == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported config file type '{ext}': {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


class Config:
    """
    Merged configuration tree with dot-path access.

    Env vars use a double underscore for nesting:
    DAYBOOK_STORAGE__BACKEND=memory -> config["storage"]["backend"] = "memory"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        data_dir: str | None = None,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: YAML or JSON file. A path that doesn't exist is skipped.
            env_prefix: Prefix for environment overrides; empty disables them.
            data_dir: Where journal data lives. Defaults to ~/.daybook-data.
            defaults: Extra defaults merged over the built-in ones.
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self._data_dir = os.path.expanduser(data_dir or os.path.join("~", _DEFAULT_DATA_DIR_NAME))

        self.config_data = self._builtin_defaults()
        if defaults:
            _deep_merge(self.config_data, defaults)
        if self.config_file and os.path.exists(self.config_file):
            _deep_merge(self.config_data, _read_config_file(self.config_file))
        _deep_merge(self.config_data, self._env_overrides())

    def _builtin_defaults(self) -> dict[str, Any]:
        return {
            "paths": {
                "data_dir": self._data_dir,
                "log_dir": os.path.join(self._data_dir, "logs"),
            },
            "storage": {
                "backend": "local",
                "key": DEFAULT_STORAGE_KEY,
                "quota_bytes": DEFAULT_QUOTA_BYTES,
            },
            "view": {"page_size": DEFAULT_PAGE_SIZE},
            "logging": {"level": "WARNING", "file": ""},
        }

    def _env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        if not self.env_prefix:
            return overrides
        for name, value in os.environ.items():
            if not name.startswith(self.env_prefix):
                continue
            *sections, leaf = name[len(self.env_prefix) :].lower().split(_NEST)
            node = overrides
            for section in sections:
                node = node.setdefault(section, {})
            node[leaf] = value
        return overrides

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up a dotted path such as ``"storage.key"``; *default* if any part is missing."""
        node: Any = self.config_data
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key_path: str, value: Any) -> None:
        """Set a dotted path, creating (or replacing non-dict) sections on the way."""
        *sections, leaf = key_path.split(".")
        node = self.config_data
        for section in sections:
            if not isinstance(node.get(section), dict):
                node[section] = {}
            node = node[section]
        node[leaf] = value

    def get_data_dir(self) -> str:
        return os.path.expanduser(self.get("paths.data_dir") or self._data_dir)

    def ensure_directories(self) -> None:
        """Create every directory listed under ``paths``."""
        for value in self.config_data.get("paths", {}).values():
            if isinstance(value, str) and value:
                os.makedirs(os.path.expanduser(value), exist_ok=True)

    def validated(self) -> DaybookConfig:
        """Return a typed, validated view of the merged configuration.

        Raises:
            pydantic.ValidationError: If a value has the wrong type or range.
        """
        from .config_schema import DaybookConfig

        return DaybookConfig.model_validate(self.config_data)


_config_instance: Config | None = None


def get_config(
    config_file: str | None = None,
    env_prefix: str = _DEFAULT_ENV_PREFIX,
    data_dir: str | None = None,
) -> Config:
    """Process-wide Config, created on first call. Later arguments are ignored."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file=config_file, env_prefix=env_prefix, data_dir=data_dir)
    return _config_instance


def reset_config() -> None:
    """Forget the process-wide Config (tests use this between cases)."""
    global _config_instance
    _config_instance = None
