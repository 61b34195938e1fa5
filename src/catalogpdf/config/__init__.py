"""
Configuration management: YAML loading, environment resolution, typed settings.
"""

from catalogpdf.config.loader import Config, load_config
from catalogpdf.config.resolver import resolve_config
from catalogpdf.config.settings import (
    AssetSettings,
    RendererSettings,
    assets_from_config,
    endpoint_from_config,
    layout_from_config,
    renderer_from_config,
)

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
    "AssetSettings",
    "RendererSettings",
    "assets_from_config",
    "endpoint_from_config",
    "layout_from_config",
    "renderer_from_config",
]
