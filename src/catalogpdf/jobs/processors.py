"""
Document processors: one source XML in, a lazy stream of PDF artifacts out.

A processor is any callable ``(SourceDocument) -> Iterable[OutputArtifact]``.
Artifacts are yielded one at a time so the orchestrator uploads each PDF
before the next one is rendered.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import date
from enum import Enum
from pathlib import Path

from catalogpdf.assets.resolver import AssetResolver
from catalogpdf.catalog.models import ProductSheet
from catalogpdf.catalog.parsers import OfferXmlParser, ProductSheetXmlParser
from catalogpdf.rendering.dynamic_height import DynamicHeightRenderer
from catalogpdf.rendering.gateway import Margins
from catalogpdf.rendering.templates import TemplateRenderer
from catalogpdf.retry.manager import RetryManager
from catalogpdf.retry.policy import RetryPolicy
from catalogpdf.sync.types import OutputArtifact, SourceDocument
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.jobs.processors")

OFFER_MARGINS = Margins(top="1in", bottom="1.125in")


class SheetFormat(Enum):
    A4 = "A4"
    FULL_LENGTH = "full"

    def filename(self, code: str) -> str:
        return f"{_safe_filename(code)}_produktovy_list_{self.value}.pdf"


class ProductSheetProcessor:
    """
    Renders every valid product of a product-sheet listing twice: an A4
    fixed-page sheet and a full-length sheet.

    A product that fails to render is logged and skipped; the remaining
    products of the document still render.
    """

    def __init__(
        self,
        renderer: DynamicHeightRenderer,
        templates: TemplateRenderer | None = None,
        resolver: AssetResolver | None = None,
        parser: ProductSheetXmlParser | None = None,
        retry: RetryManager | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.renderer = renderer
        self.templates = templates or TemplateRenderer()
        self.resolver = resolver
        self.parser = parser or ProductSheetXmlParser()
        self.retry = retry or RetryManager()
        self.retry_policy = retry_policy

    def __call__(self, document: SourceDocument) -> Iterator[OutputArtifact]:
        products = self.parser.parse(document.local_path)
        rendered = failed = 0

        for product in products:
            for sheet_format in (SheetFormat.A4, SheetFormat.FULL_LENGTH):
                try:
                    path = self.render_product(product, sheet_format, document.output_dir)
                except Exception as e:
                    failed += 1
                    logger.error(f"Failed to generate PDFs for product {product.code}: {e}", exc_info=True)
                    break
                yield OutputArtifact(name=path.name, local_path=path, source=document)
            else:
                rendered += 1

        logger.info(f"{document.name}: {rendered} product(s) rendered, {failed} failed")

    def render_product(self, product: ProductSheet, sheet_format: SheetFormat, output_dir: Path) -> Path:
        full_length = sheet_format is SheetFormat.FULL_LENGTH
        context = {
            "product": product,
            "pictures": self._picture_urls(product),
            "full_length": full_length,
            "generated_on": date.today(),
        }
        body, header, footer = self.templates.render_document("product_sheet", context)

        render = self.renderer.render_full_length if full_length else self.renderer.render_fixed_page
        pdf = self.retry.execute_sync(
            render, body, header, footer, policy=self.retry_policy, name=f"{sheet_format.value} sheet {product.code}"
        )

        path = output_dir / sheet_format.filename(product.code)
        path.write_bytes(pdf)
        logger.debug(f"PDF generated: {path}")
        return path

    def _picture_urls(self, product: ProductSheet) -> list[str]:
        if self.resolver is None:
            return []
        urls = (self.resolver.resolve(product.code, raw) for raw in product.pictures)
        return [url for url in urls if url]


class OfferProcessor:
    """Renders one issued offer into ``<DocNumber>.pdf`` on fixed A4 pages."""

    def __init__(
        self,
        renderer: DynamicHeightRenderer,
        templates: TemplateRenderer | None = None,
        resolver: AssetResolver | None = None,
        parser: OfferXmlParser | None = None,
        retry: RetryManager | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.renderer = renderer
        self.templates = templates or TemplateRenderer()
        self.resolver = resolver
        self.parser = parser or OfferXmlParser()
        self.retry = retry or RetryManager()
        self.retry_policy = retry_policy

    def __call__(self, document: SourceDocument) -> Iterator[OutputArtifact]:
        offer = self.parser.parse(document.local_path)
        rows = [
            {
                "item": item,
                "picture_url": self.resolver.resolve(item.code, item.picture_path) if self.resolver else None,
            }
            for item in offer.products
        ]
        body, header, footer = self.templates.render_document("offer", {"offer": offer, "rows": rows})
        pdf = self.retry.execute_sync(
            self.renderer.render_fixed_page,
            body,
            header,
            footer,
            OFFER_MARGINS,
            policy=self.retry_policy,
            name=f"offer {offer.doc_number or document.name}",
        )

        stem = offer.doc_number or Path(document.name).stem
        path = document.output_dir / f"{_safe_filename(stem)}.pdf"
        path.write_bytes(pdf)
        yield OutputArtifact(name=path.name, local_path=path, source=document)


_UNSAFE = re.compile(r"[^\w.\-]+")


def _safe_filename(value: str) -> str:
    return _UNSAFE.sub("_", value.strip()).strip("._") or "document"
