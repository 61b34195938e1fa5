"""
catalogpdf resolve-image - Resolve an image reference to a URL on the asset host.
"""

from pathlib import Path

import typer

from catalogpdf.assets.resolver import AssetResolver, HttpAssetProbe
from catalogpdf.cli.common import load_project_config
from catalogpdf.exceptions import CatalogPdfError
from catalogpdf.jobs.factory import build_resolver


def resolve_image(
    item_key: str = typer.Argument(..., help="Item identifier (product code)"),
    reference: str = typer.Argument(..., help="Image path or filename as found in the catalog"),
    base_url: str | None = typer.Option(None, "--base-url", help="Asset host base URL (overrides config)"),
    exhaustive: bool = typer.Option(False, "--exhaustive", help="Try every upper/lower case combination"),
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
) -> None:
    """
    Print the URL REFERENCE resolves to.
    """
    config = load_project_config(project_dir, env, verbose, required=base_url is None)
    try:
        if base_url is not None:
            resolver = AssetResolver(
                base_url, probe=HttpAssetProbe(), strategy="exhaustive" if exhaustive else "bounded"
            )
        else:
            resolver = build_resolver(config)
            if exhaustive:
                resolver.strategy = "exhaustive"
    except CatalogPdfError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    url = resolver.resolve(item_key, reference)
    if url is None:
        typer.echo("Error: empty image reference", err=True)
        raise typer.Exit(1)
    typer.echo(url)
