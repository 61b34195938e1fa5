"""
Placeholder substitution in loaded configuration.

String values may use:

- ``${VAR}``: the environment variable, left as written when unset
- ``${VAR:-fallback}``: the environment variable, or ``fallback`` when unset or empty
- ``{env}``: the selected environment name (dev, staging, prod)
"""

import os
import re
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def _substitute(match: re.Match) -> str:
    value = os.environ.get(match.group("name"))
    fallback = match.group("fallback")
    if fallback is not None:
        return value or fallback
    return match.group(0) if value is None else value


def resolve_config(config_data: dict[str, Any], env: str = "dev") -> dict[str, Any]:
    """Return a copy of ``config_data`` with every placeholder substituted."""
    return _resolve(config_data, env)


def _resolve(value: Any, env: str) -> Any:
    if isinstance(value, dict):
        return {key: _resolve(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_resolve(item, env) for item in value]
    if isinstance(value, str):
        return _PLACEHOLDER.sub(_substitute, value).replace("{env}", env)
    return value
