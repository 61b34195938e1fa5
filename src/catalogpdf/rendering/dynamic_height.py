"""
Dynamic-height PDF rendering.

A continuous, non-paginated PDF needs its exact page height before the
renderer can lay it out, so rendering takes two passes:

1. Measure: screenshot the body at a fixed pixel width with clipping off;
   the image height is the content height in pixels.
2. Render: convert pixels to inches at the reference DPI, add a safety
   buffer and the header/footer allowances, and render the PDF with that
   explicit page height.

The two passes for one document always run in sequence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from catalogpdf.exceptions import RenderError
from catalogpdf.rendering.gateway import Margins, RenderGateway, RenderRequest, ScreenshotRequest
from catalogpdf.utils.async_utils import dual
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.rendering.dynamic_height")

A4_WIDTH_INCHES = 8.27
REFERENCE_DPI = 96
SAFETY_BUFFER_INCHES = 0.5


@dataclass(frozen=True)
class PageLayout:
    """Geometry shared by the measure and render passes."""

    page_width_in: float = A4_WIDTH_INCHES
    dpi: int = REFERENCE_DPI
    safety_buffer_in: float = SAFETY_BUFFER_INCHES
    # Header/footer allowance for full-length pages, in inches
    header_margin_in: float = 0.0
    footer_margin_in: float = 0.0
    # Fixed-page variant
    fixed_page_format: str = "A4"
    fixed_margins: Margins = field(default_factory=Margins)

    @property
    def width_px(self) -> int:
        return round(self.page_width_in * self.dpi)

    @property
    def full_length_margins(self) -> Margins:
        return Margins(top=_inches(self.header_margin_in), bottom=_inches(self.footer_margin_in))


def compute_page_height(
    content_height_px: int,
    dpi: int = REFERENCE_DPI,
    safety_buffer_in: float = SAFETY_BUFFER_INCHES,
    header_margin_in: float = 0.0,
    footer_margin_in: float = 0.0,
) -> float:
    """
    Page height in inches for a measured content height.

    Non-decreasing in ``content_height_px``.
    """
    if content_height_px < 0:
        raise ValueError("content_height_px must be >= 0")
    if dpi <= 0:
        raise ValueError("dpi must be > 0")
    return header_margin_in + content_height_px / dpi + safety_buffer_in + footer_margin_in


class DynamicHeightRenderer:
    """Renders full-length (single continuous page) and fixed-page PDFs."""

    def __init__(self, gateway: RenderGateway, layout: PageLayout | None = None):
        self.gateway = gateway
        self.layout = layout or PageLayout()

    @dual
    async def measure_content_height(
        self, html_body: str, header_html: str | None = None, footer_html: str | None = None
    ) -> int:
        """Screenshot the body and return its rendered height in pixels."""
        png = await self.gateway.render_screenshot(
            ScreenshotRequest(
                html_body=html_body,
                width_px=self.layout.width_px,
                header_html=header_html,
                footer_html=footer_html,
            )
        )
        try:
            with Image.open(BytesIO(png)) as image:
                width, height = image.size
        except (UnidentifiedImageError, OSError) as e:
            raise RenderError("Screenshot", None, f"response is not a readable image: {e}") from e
        logger.debug(f"Screenshot dimensions: {width}x{height} px")
        return height

    @dual
    async def render_full_length(
        self, html_body: str, header_html: str | None = None, footer_html: str | None = None
    ) -> bytes:
        """Two-pass render: one page, as tall as the content."""
        layout = self.layout
        content_px = await self.measure_content_height(html_body, header_html, footer_html)
        height_in = compute_page_height(
            content_px,
            dpi=layout.dpi,
            safety_buffer_in=layout.safety_buffer_in,
            header_margin_in=layout.header_margin_in,
            footer_margin_in=layout.footer_margin_in,
        )
        logger.info(f"Measured content height: {content_px}px -> page {layout.page_width_in}x{height_in:.3f} in")

        return await self.gateway.render_pdf(
            RenderRequest(
                html_body=html_body,
                header_html=header_html,
                footer_html=footer_html,
                paper_width=layout.page_width_in,
                paper_height=height_in,
                margins=layout.full_length_margins,
                print_background=True,
                prefer_css_page_size=False,
                scale=1.0,
            )
        )

    @dual
    async def render_fixed_page(
        self,
        html_body: str,
        header_html: str | None = None,
        footer_html: str | None = None,
        margins: Margins | None = None,
    ) -> bytes:
        """Single-pass render on standard fixed-size pages."""
        return await self.gateway.render_pdf(
            RenderRequest(
                html_body=html_body,
                header_html=header_html,
                footer_html=footer_html,
                page_format=self.layout.fixed_page_format,
                margins=margins or self.layout.fixed_margins,
                print_background=True,
                prefer_css_page_size=True,
            )
        )


def _inches(value: float) -> str:
    if value == 0:
        return "0"
    return f"{value:g}in"
