"""
Rendering: service gateway, two-pass dynamic-height renderer and HTML templates.
"""

from catalogpdf.rendering.dynamic_height import DynamicHeightRenderer, PageLayout, compute_page_height
from catalogpdf.rendering.gateway import (
    GotenbergGateway,
    Margins,
    RenderGateway,
    RenderRequest,
    ScreenshotRequest,
)
from catalogpdf.rendering.templates import TemplateRenderer

__all__ = [
    "DynamicHeightRenderer",
    "GotenbergGateway",
    "Margins",
    "PageLayout",
    "RenderGateway",
    "RenderRequest",
    "ScreenshotRequest",
    "TemplateRenderer",
    "compute_page_height",
]
