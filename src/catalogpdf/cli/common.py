"""
Shared CLI helpers: config loading and logging setup.
"""

from pathlib import Path

import typer

from catalogpdf.config.loader import Config, load_config
from catalogpdf.exceptions import ConfigurationError
from catalogpdf.utils.logging import get_logger, setup_logging, setup_logging_from_config

logger = get_logger("catalogpdf.cli")


def load_project_config(project_dir: Path, env: str | None, verbose: bool, required: bool = True) -> Config | None:
    """
    Load config.yaml and configure logging from it.

    Exits with status 1 on configuration errors. When ``required`` is False a
    missing config file yields None and console-only logging.
    """
    config_path = project_dir / "config.yaml"
    if not required and not config_path.is_file():
        setup_logging(level="DEBUG" if verbose else "INFO")
        return None

    try:
        config = load_config(project_dir, env=env)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    setup_logging_from_config(config.data, project_dir)
    if verbose:
        import logging

        logging.getLogger("catalogpdf").setLevel(logging.DEBUG)
    return config
