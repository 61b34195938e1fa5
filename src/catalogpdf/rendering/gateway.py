"""
Client for the HTML -> PDF / HTML -> screenshot rendering service.

The service is a Gotenberg-compatible HTTP API: multipart POSTs carrying
``index.html`` plus optional ``header.html`` / ``footer.html`` file parts and
plain form fields for page geometry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

import aiohttp

from catalogpdf.exceptions import ConfigurationError, RenderError
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.rendering.gateway")

PDF_ENDPOINT = "/forms/chromium/convert/html"
SCREENSHOT_ENDPOINT = "/forms/chromium/screenshot/html"

# Paper sizes in inches (width, height)
PAGE_FORMATS: dict[str, tuple[float, float]] = {
    "A3": (11.7, 16.54),
    "A4": (8.27, 11.7),
    "A5": (5.83, 8.27),
    "LETTER": (8.5, 11.0),
    "LEGAL": (8.5, 14.0),
}


@dataclass(frozen=True)
class Margins:
    """Page margins as CSS lengths understood by the service ("0", "1in", "2.5cm")."""

    top: str = "0"
    bottom: str = "0"
    left: str = "0"
    right: str = "0"

    def as_fields(self) -> dict[str, str]:
        return {
            "marginTop": self.top,
            "marginBottom": self.bottom,
            "marginLeft": self.left,
            "marginRight": self.right,
        }


@dataclass(frozen=True)
class RenderRequest:
    """
    One PDF render.

    Exactly one of ``page_format`` or the explicit ``paper_width`` +
    ``paper_height`` pair (inches) must be given.
    """

    html_body: str
    header_html: str | None = None
    footer_html: str | None = None
    page_format: str | None = None
    paper_width: float | None = None
    paper_height: float | None = None
    margins: Margins = field(default_factory=Margins)
    print_background: bool = True
    prefer_css_page_size: bool = False
    scale: float = 1.0

    def __post_init__(self) -> None:
        explicit = self.paper_width is not None or self.paper_height is not None
        if self.page_format is not None and explicit:
            raise ConfigurationError("RenderRequest takes either page_format or paper_width/paper_height, not both")
        if self.page_format is None:
            if self.paper_width is None or self.paper_height is None:
                raise ConfigurationError("RenderRequest needs page_format or both paper_width and paper_height")
            if self.paper_width <= 0 or self.paper_height <= 0:
                raise ConfigurationError("Paper dimensions must be positive")
        elif self.page_format.upper() not in PAGE_FORMATS:
            raise ConfigurationError(
                f"Unknown page format '{self.page_format}'. Available: {sorted(PAGE_FORMATS)}"
            )
        if self.scale <= 0:
            raise ConfigurationError("scale must be > 0")

    def form_fields(self) -> dict[str, str]:
        fields = {}
        if self.page_format is not None:
            width, height = PAGE_FORMATS[self.page_format.upper()]
        else:
            width, height = self.paper_width, self.paper_height
        fields["paperWidth"] = _number(width)
        fields["paperHeight"] = _number(height)
        fields.update(self.margins.as_fields())
        fields["printBackground"] = _flag(self.print_background)
        fields["preferCssPageSize"] = _flag(self.prefer_css_page_size)
        fields["scale"] = _number(self.scale)
        return fields


@dataclass(frozen=True)
class ScreenshotRequest:
    """Full-page screenshot of ``html_body`` at a fixed device width."""

    html_body: str
    width_px: int
    header_html: str | None = None
    footer_html: str | None = None
    clip: bool = False
    image_format: str = "png"
    optimize_for_speed: bool = True

    def form_fields(self) -> dict[str, str]:
        return {
            "width": str(self.width_px),
            "clip": _flag(self.clip),
            "format": self.image_format,
            "optimizeForSpeed": _flag(self.optimize_for_speed),
        }


class RenderGateway(Protocol):
    """The two operations the pipeline needs from a rendering backend."""

    async def render_pdf(self, request: RenderRequest) -> bytes: ...

    async def render_screenshot(self, request: ScreenshotRequest) -> bytes: ...


class GotenbergGateway:
    """
    aiohttp client for a Gotenberg server.

    No retries happen here; a non-2xx response raises RenderError with the
    upstream status and body.
    """

    def __init__(self, base_url: str, timeout: float = 120.0):
        if not base_url or not base_url.strip():
            raise ConfigurationError("Rendering service URL is required")
        self.base_url = base_url.strip().rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def render_pdf(self, request: RenderRequest) -> bytes:
        return await self._post(
            "PDF generation",
            PDF_ENDPOINT,
            request.html_body,
            request.header_html,
            request.footer_html,
            request.form_fields(),
        )

    async def render_screenshot(self, request: ScreenshotRequest) -> bytes:
        return await self._post(
            "Screenshot",
            SCREENSHOT_ENDPOINT,
            request.html_body,
            request.header_html,
            request.footer_html,
            request.form_fields(),
        )

    async def _post(
        self,
        operation: str,
        path: str,
        html_body: str,
        header_html: str | None,
        footer_html: str | None,
        fields: dict[str, str],
    ) -> bytes:
        form = aiohttp.FormData()
        for filename, content in (("index.html", html_body), ("header.html", header_html), ("footer.html", footer_html)):
            if content is not None:
                form.add_field("files", content.encode("utf-8"), filename=filename, content_type="text/html")
        for name, value in fields.items():
            form.add_field(name, value)

        url = f"{self.base_url}{path}"
        logger.debug(f"POST {url} {fields}")
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, data=form) as response:
                    body = await response.read()
                    if not 200 <= response.status < 300:
                        raise RenderError(operation, response.status, body.decode("utf-8", errors="replace"))
                    return body
        except aiohttp.ClientError as e:
            raise RenderError(operation, None, str(e)) from e
        except asyncio.TimeoutError as e:
            raise RenderError(operation, None, f"timed out after {self.timeout.total}s") from e


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _number(value: float) -> str:
    # 8.27 -> "8.27", 1.0 -> "1"
    return f"{value:.4f}".rstrip("0").rstrip(".")
