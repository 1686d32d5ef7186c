import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from typer import Argument, Exit, Option

from stencil.config import load_values, merge_values, parse_set_values
from stencil.documents import dump_manifests
from stencil.errors import StencilError
from stencil.tools.kubectl import Kubectl, KubectlError

from . import app
from .assets import load_processor


@app.command()
def template(
    path: Path = Argument(..., help="The directory or file containing the templates."),
    recursive: bool = Option(False, "--recursive", "-r", help="Descend into subdirectories."),
    exclude: list[str] = Option([], "--exclude", "-e", help="Skip assets whose name contains this fragment."),
    values_files: list[Path] = Option(
        [],
        "--values",
        "-f",
        help="A YAML file with values to render the templates with. Can be specified multiple times, later files "
        "take precedence over earlier ones and over the `values_files` of the configuration file.",
    ),
    set_values: list[str] = Option(
        [], "--set", help="Set a value on the command-line, e.g. `--set Values.replicas=3`. Takes precedence."
    ),
    raw: bool = Option(
        False,
        help="Print the rendered YAML documents as-is and in the order of the source files, instead of decoding and "
        "ordering them for application.",
    ),
    apply: bool = Option(False, help="Run `kubectl apply` on the ordered manifests instead of printing them."),
    config_file: Optional[Path] = Option(None, "--config", help="The configuration file to use."),
) -> None:
    """
    Render templates into Kubernetes manifests, ordered by kind for sequential application.
    """

    if raw and apply:
        logger.error("--raw and --apply cannot be combined, only ordered manifests can be applied")
        raise Exit(1)

    processor, asset_path, config = load_processor(path, config_file)

    try:
        values = load_values([*config.config.values_files, *values_files])
        values = merge_values(values, parse_set_values(set_values))
    except (OSError, ValueError) as exc:
        logger.error("Could not load values: {}", exc)
        raise Exit(1)

    try:
        if raw:
            separator = processor.options.delimiter + "\n"
            for document in processor.render_yaml(asset_path, exclude, recursive, values):
                text = document.decode("utf-8")
                sys.stdout.write(separator + text + ("" if text.endswith("\n") else "\n"))
            return

        manifests = processor.render_manifests(asset_path, exclude, recursive, values)
    except StencilError as exc:
        logger.error("{}", exc)
        raise Exit(1)

    if not apply:
        sys.stdout.write(dump_manifests(manifests))
        return

    logger.info("Kubectl-apply {} manifest(s) from '{}'", len(manifests), path)
    try:
        Kubectl().apply(manifests)
    except KubectlError as exc:
        logger.error("{}", exc)
        raise Exit(1)
