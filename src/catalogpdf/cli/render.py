"""
catalogpdf render - Render a single HTML file to PDF.
"""

from pathlib import Path

import typer

from catalogpdf.cli.common import load_project_config
from catalogpdf.config.settings import layout_from_config, renderer_from_config
from catalogpdf.exceptions import CatalogPdfError
from catalogpdf.rendering.dynamic_height import DynamicHeightRenderer, PageLayout
from catalogpdf.rendering.gateway import GotenbergGateway


def _read(path: Path | None) -> str | None:
    return path.read_text(encoding="utf-8") if path is not None else None


def render(
    html_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Body HTML file"),
    output: Path = typer.Option(..., "--output", "-o", help="Output PDF path"),
    full_length: bool = typer.Option(False, "--full-length", help="One continuous page as tall as the content"),
    header: Path | None = typer.Option(None, "--header", exists=True, dir_okay=False, help="Header HTML file"),
    footer: Path | None = typer.Option(None, "--footer", exists=True, dir_okay=False, help="Footer HTML file"),
    renderer_url: str | None = typer.Option(None, "--renderer-url", help="Rendering service URL (overrides config)"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
) -> None:
    """
    Render HTML_FILE through the rendering service.
    """
    config = load_project_config(project_dir, env, verbose, required=renderer_url is None)
    try:
        if renderer_url is not None:
            gateway = GotenbergGateway(renderer_url)
            layout = layout_from_config(config) if config is not None else PageLayout()
        else:
            settings = renderer_from_config(config)
            gateway = GotenbergGateway(settings.url, timeout=settings.timeout_s)
            layout = layout_from_config(config)
        renderer = DynamicHeightRenderer(gateway, layout=layout)

        body, header_html, footer_html = _read(html_file), _read(header), _read(footer)
        if full_length:
            pdf = renderer.render_full_length(body, header_html, footer_html)
        else:
            pdf = renderer.render_fixed_page(body, header_html, footer_html)
    except CatalogPdfError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(pdf)
    typer.echo(f"Wrote {output} ({len(pdf)} bytes)")
