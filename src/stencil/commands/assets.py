from pathlib import Path
from typing import Optional

from loguru import logger
from rich.console import Console
from rich.table import Table
from typer import Argument, Exit, Option

from stencil.config import StencilConfig
from stencil.errors import StencilError
from stencil.ordering import DEFAULT_KINDS_ORDER
from stencil.processor import TemplateProcessor
from stencil.sources import FileSystemAssetSource

from . import app


def load_processor(path: Path, config_file: Path | None) -> tuple[TemplateProcessor, str, StencilConfig]:
    """
    Create a #TemplateProcessor for the templates at *path*, which may be a directory or a single file. Returns the
    processor, the asset path to pass to it and the loaded configuration.
    """

    config = StencilConfig.load(config_file)
    if path.is_file():
        source, asset_path = FileSystemAssetSource(path.parent), path.name
    else:
        source, asset_path = FileSystemAssetSource(path), "."
    logger.debug("Using {} with options {}", source, config.config.to_options())
    return TemplateProcessor(source, config.config.to_options()), asset_path, config


@app.command()
def assets(
    path: Path = Argument(..., help="The directory or file containing the templates."),
    recursive: bool = Option(False, "--recursive", "-r", help="Descend into subdirectories."),
    exclude: list[str] = Option([], "--exclude", "-e", help="Skip assets whose name contains this fragment."),
    config_file: Optional[Path] = Option(None, "--config", help="The configuration file to use."),
) -> None:
    """
    List the names of the template assets without rendering them.
    """

    processor, asset_path, _config = load_processor(path, config_file)
    try:
        names = processor.asset_names(asset_path, exclude, recursive)
    except StencilError as exc:
        logger.error("{}", exc)
        raise Exit(1)

    for name in names:
        print(name)


@app.command()
def kinds(
    config_file: Optional[Path] = Option(None, "--config", help="The configuration file to use."),
) -> None:
    """
    Show the order in which resource kinds are applied.
    """

    config = StencilConfig.load(config_file)
    kinds_order = config.config.kinds_order
    if kinds_order is None:
        kinds_order = list(DEFAULT_KINDS_ORDER)

    table = Table()
    table.add_column("Rank", justify="right", style="cyan")
    table.add_column("Kind")
    for rank, kind in enumerate(kinds_order):
        table.add_row(str(rank), kind)
    table.add_row(str(len(kinds_order)), "[dim](any other kind)[/dim]")

    Console().print(table)
