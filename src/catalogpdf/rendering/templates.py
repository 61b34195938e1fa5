"""
HTML templates for generated documents.

Templates ship inside the package (``catalogpdf/templates``) and are rendered
with Jinja2; rendering is a pure function of the context.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateNotFound, select_autoescape

from catalogpdf.exceptions import ConfigurationError


def _money(value: Decimal | None, places: int = 2) -> str:
    if value is None:
        return ""
    return f"{value:,.{places}f}".replace(",", " ")


def _date_format(value: date | None, fmt: str = "%d.%m.%Y") -> str:
    return value.strftime(fmt) if value else ""


class TemplateRenderer:
    """
    Renders ``<name>.html`` templates.

    Document kinds come in triples: ``<kind>.html``, ``<kind>_header.html``
    and ``<kind>_footer.html``.
    """

    def __init__(self, package: str = "catalogpdf", directory: str = "templates"):
        self.env = Environment(
            loader=PackageLoader(package, directory),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["money"] = _money
        self.env.filters["date_format"] = _date_format

    def render(self, name: str, context: dict[str, Any]) -> str:
        try:
            template = self.env.get_template(f"{name}.html")
        except TemplateNotFound as e:
            raise ConfigurationError(f"Template '{name}.html' not found") from e
        return template.render(**context)

    def render_document(self, kind: str, context: dict[str, Any]) -> tuple[str, str, str]:
        """Return (body, header, footer) HTML for one document kind."""
        return (
            self.render(kind, context),
            self.render(f"{kind}_header", context),
            self.render(f"{kind}_footer", context),
        )
