"""
Main CLI entry point.
"""

import typer

from catalogpdf import __version__
from catalogpdf.cli import render, resolve, sync


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"catalogpdf version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="catalogpdf",
    help="catalogpdf - Batch conversion of catalog XML documents to PDF",
    add_completion=True,
)

# Register commands
app.command(name="sync", help="Convert remote catalog XML files to PDFs")(sync.sync)
app.command(name="render", help="Render an HTML file to PDF")(render.render)
app.command(name="resolve-image", help="Resolve an image reference to a URL")(resolve.resolve_image)


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    catalogpdf - Batch conversion of catalog XML documents to PDF.

    Run 'catalogpdf <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
