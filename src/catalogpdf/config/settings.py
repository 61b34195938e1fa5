"""
Typed views over config sections.

Each builder accepts the raw section mapping and applies defaults, so code
below the CLI never reads YAML keys directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from catalogpdf.config.loader import Config
from catalogpdf.exceptions import ConfigurationError
from catalogpdf.rendering.dynamic_height import A4_WIDTH_INCHES, REFERENCE_DPI, SAFETY_BUFFER_INCHES, PageLayout
from catalogpdf.rendering.gateway import Margins
from catalogpdf.sync.types import RemoteEndpoint

DEFAULT_SFTP_TIMEOUT_S = 30.0
DEFAULT_RENDERER_TIMEOUT_S = 120.0
DEFAULT_PROBE_TIMEOUT_S = 3.0


@dataclass(frozen=True)
class RendererSettings:
    url: str
    timeout_s: float = DEFAULT_RENDERER_TIMEOUT_S


@dataclass(frozen=True)
class AssetSettings:
    base_url: str
    path_prefix: str = "\\\\webserver\\storecards\\"
    strategy: str = "bounded"
    max_exhaustive_letters: int = 12
    probe_timeout_s: float = DEFAULT_PROBE_TIMEOUT_S


def _section(config: Config | dict[str, Any], name: str) -> dict[str, Any]:
    if isinstance(config, Config):
        return config.section(name)
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Configuration '{name}' must be a mapping")
    return value


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def endpoint_from_config(config: Config | dict[str, Any]) -> RemoteEndpoint:
    """Build a RemoteEndpoint from the ``remote:`` section (validated later, before I/O)."""
    remote = _section(config, "remote")
    try:
        port = int(remote.get("port", 22))
        timeout = float(remote.get("connect_timeout_s", DEFAULT_SFTP_TIMEOUT_S))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid remote port or timeout: {e}") from e
    return RemoteEndpoint(
        host=str(remote.get("host") or ""),
        port=port,
        download_dir=str(remote.get("download_dir") or ""),
        upload_dir=str(remote.get("upload_dir") or ""),
        credentials_file=str(remote.get("credentials_file") or ""),
        extension=str(remote.get("extension") or ".xml"),
        connect_timeout_s=timeout,
        verify_host_key=_as_bool(remote.get("verify_host_key"), True),
        known_hosts_path=remote.get("known_hosts_path"),
    )


def renderer_from_config(config: Config | dict[str, Any]) -> RendererSettings:
    renderer = _section(config, "renderer")
    url = str(renderer.get("url") or "").strip()
    if not url:
        raise ConfigurationError("renderer.url is required")
    try:
        timeout = float(renderer.get("timeout_s", DEFAULT_RENDERER_TIMEOUT_S))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid renderer timeout: {e}") from e
    return RendererSettings(url=url, timeout_s=timeout)


def assets_from_config(config: Config | dict[str, Any]) -> AssetSettings:
    assets = _section(config, "assets")
    base_url = str(assets.get("base_url") or "").strip()
    if not base_url:
        raise ConfigurationError("assets.base_url is required")
    strategy = str(assets.get("strategy", "bounded")).lower()
    if strategy not in ("bounded", "exhaustive"):
        raise ConfigurationError(f"assets.strategy must be 'bounded' or 'exhaustive', got '{strategy}'")
    kwargs: dict[str, Any] = {}
    if "path_prefix" in assets:
        kwargs["path_prefix"] = str(assets["path_prefix"])
    try:
        max_letters = int(assets.get("max_exhaustive_letters", 12))
        probe_timeout = float(assets.get("probe_timeout_s", DEFAULT_PROBE_TIMEOUT_S))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid assets limits: {e}") from e
    return AssetSettings(
        base_url=base_url,
        strategy=strategy,
        max_exhaustive_letters=max_letters,
        probe_timeout_s=probe_timeout,
        **kwargs,
    )


def layout_from_config(config: Config | dict[str, Any]) -> PageLayout:
    """Build the page geometry from the ``layout:`` section."""
    layout = _section(config, "layout")
    fixed = layout.get("fixed_margins") or {}
    try:
        return PageLayout(
            page_width_in=float(layout.get("page_width_in", A4_WIDTH_INCHES)),
            dpi=int(layout.get("dpi", REFERENCE_DPI)),
            safety_buffer_in=float(layout.get("safety_buffer_in", SAFETY_BUFFER_INCHES)),
            header_margin_in=float(layout.get("header_margin_in", 0.0)),
            footer_margin_in=float(layout.get("footer_margin_in", 0.0)),
            fixed_page_format=str(layout.get("fixed_page_format", "A4")),
            fixed_margins=Margins(
                top=str(fixed.get("top", "0")),
                bottom=str(fixed.get("bottom", "0")),
                left=str(fixed.get("left", "0")),
                right=str(fixed.get("right", "0")),
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid layout configuration: {e}") from e
