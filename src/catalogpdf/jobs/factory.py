"""
Builds renderers, resolvers and processors from a loaded Config.
"""

from __future__ import annotations

from typing import Any

from catalogpdf.assets.resolver import AssetResolver, HttpAssetProbe
from catalogpdf.config.loader import Config
from catalogpdf.config.settings import assets_from_config, layout_from_config, renderer_from_config
from catalogpdf.exceptions import ConfigurationError
from catalogpdf.jobs.processors import OfferProcessor, ProductSheetProcessor
from catalogpdf.rendering.dynamic_height import DynamicHeightRenderer
from catalogpdf.rendering.gateway import GotenbergGateway
from catalogpdf.retry.policy import RetryPolicy

PROCESSOR_KINDS = ("product-sheet", "offer")


def build_renderer(config: Config | dict[str, Any]) -> DynamicHeightRenderer:
    settings = renderer_from_config(config)
    return DynamicHeightRenderer(
        GotenbergGateway(settings.url, timeout=settings.timeout_s),
        layout=layout_from_config(config),
    )


def build_resolver(config: Config | dict[str, Any]) -> AssetResolver:
    settings = assets_from_config(config)
    return AssetResolver(
        settings.base_url,
        probe=HttpAssetProbe(timeout=settings.probe_timeout_s),
        path_prefix=settings.path_prefix,
        strategy=settings.strategy,
        max_exhaustive_letters=settings.max_exhaustive_letters,
    )


def build_processor(config: Config | dict[str, Any], kind: str) -> ProductSheetProcessor | OfferProcessor:
    """Processor for ``kind`` ("product-sheet" or "offer") wired from config."""
    data = config.data if isinstance(config, Config) else config
    renderer = build_renderer(config)
    resolver = build_resolver(config) if (data.get("assets") or {}).get("base_url") else None
    policy = RetryPolicy.from_config(data.get("retry"))

    if kind == "product-sheet":
        return ProductSheetProcessor(renderer, resolver=resolver, retry_policy=policy)
    if kind == "offer":
        return OfferProcessor(renderer, resolver=resolver, retry_policy=policy)
    raise ConfigurationError(f"Unknown document kind '{kind}'. Available: {', '.join(PROCESSOR_KINDS)}")
