"""
Configuration file loading.

Loads ``config.yaml`` from a project directory, overlays ``config.<env>.yaml``
and resolves environment placeholders.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from catalogpdf.config.resolver import resolve_config
from catalogpdf.exceptions import ConfigurationError

CONFIG_FILENAME = "config.yaml"


class Config:
    """catalogpdf configuration container with dict-like access."""

    def __init__(self, data: dict[str, Any]):
        self.data = data
        # Convenience properties for the main sections
        self.remote = data.get("remote") or {}
        self.renderer = data.get("renderer") or {}
        self.assets = data.get("assets") or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        value: Any = self.data
        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default
        return value

    def section(self, key: str) -> dict[str, Any]:
        """Return a top-level section as a dict (empty when missing)."""
        value = self.data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"Configuration '{key}' must be a mapping, got {type(value).__name__}")
        return value

    def __getitem__(self, key: str) -> Any:
        """Dict-like access: config['key'] or config['nested.key']."""
        if "." in key:
            return self.get(key)
        if key in self.data:
            value = self.data[key]
            if isinstance(value, dict):
                return Config(value)
            return value
        raise KeyError(f"Config key '{key}' not found")

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config (dot notation supported)."""
        value: Any = self.data
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return False
            value = value[k]
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def validate(self) -> None:
        """Validate configuration structure."""
        errors = []
        for name in ("remote", "renderer", "assets", "layout", "retry", "logging"):
            value = self.data.get(name)
            if value is not None and not isinstance(value, dict):
                errors.append(f"Configuration '{name}' must be a mapping, got {type(value).__name__}")
        if errors:
            raise ConfigurationError("\n".join(errors))


def load_config(project_path: Path | None = None, env: str | None = None) -> Config:
    """
    Load catalogpdf configuration.

    Args:
        project_path: Directory holding config.yaml (default: current directory)
        env: Environment name (dev, staging, prod); selects config.<env>.yaml

    Returns:
        Config instance with merged, resolved configuration
    """
    if project_path is None:
        project_path = Path.cwd()

    base_config_path = project_path / CONFIG_FILENAME
    if not base_config_path.is_file():
        raise ConfigurationError(
            f"Configuration file not found: {base_config_path}\n"
            f"  Suggestion: Create a {CONFIG_FILENAME} file in your project directory"
        )

    config_data = _read_yaml(base_config_path)

    if env:
        env_config_path = project_path / f"config.{env}.yaml"
        if env_config_path.exists():
            _merge_dict(config_data, _read_yaml(env_config_path))

    config_data = resolve_config(config_data, env or "dev")

    config = Config(config_data)
    config.validate()
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark is not None else ""
        raise ConfigurationError(
            f"Error parsing {path.name}{where}:\n"
            f"  {e}\n"
            f"  Suggestion: Check YAML syntax, ensure proper indentation and quotes"
        ) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__} in {path}")
    return data


def _merge_dict(base: dict, override: dict) -> None:
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value
