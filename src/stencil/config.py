"""
Loading of the `stencil.yaml` configuration file and of value files.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from stencil.documents import DEFAULT_DELIMITER
from stencil.processor import HELPERS_SUFFIX, Options
from stencil.tools.fs import find_config_file


@dataclass
class Config:
    """
    Settings for rendering templates, stored in a `stencil.yaml` file.
    """

    kinds_order: list[str] | None = None
    """
    The kind priority to order manifests by. Falls back to the built-in default order.
    """

    delimiter: str = DEFAULT_DELIMITER
    """
    The line that separates documents in an asset.
    """

    strict: bool = True
    """
    Whether referencing an undefined value in a template is an error.
    """

    helpers_suffix: str = HELPERS_SUFFIX
    """
    Name suffix that identifies helper assets.
    """

    values_files: list[Path] = field(default_factory=list)
    """
    YAML files with values to render templates with, merged in order. Relative to the configuration file.
    """

    def to_options(self) -> Options:
        return Options(
            kinds_order=self.kinds_order,
            delimiter=self.delimiter,
            strict=self.strict,
            helpers_suffix=self.helpers_suffix,
        )


@dataclass
class StencilConfig:
    """
    Wrapper for the configuration file.
    """

    FILENAMES = ("stencil.yaml", "stencil.yml")

    file: Path | None
    config: Config

    @staticmethod
    def load(file: Path | None = None, /, cwd: Path | None = None) -> "StencilConfig":
        """
        Load the configuration from the given file, or from the closest `stencil.yaml` in the working directory or
        its parents. If no configuration file exists, the default configuration is returned.
        """

        from databind.json import load as deser

        if file is None:
            file = find_config_file(StencilConfig.FILENAMES, cwd, required=False)
        if file is None:
            return StencilConfig(None, Config())

        logger.debug("Loading configuration from '{}'", file)
        config = deser(yaml.safe_load(file.read_text()) or {}, Config, filename=str(file))

        for idx, path in enumerate(config.values_files):
            if not path.is_absolute():
                config.values_files[idx] = file.parent / path

        return StencilConfig(file, config)


def merge_values(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge *update* into a copy of *base*. Nested mappings are merged, all other values are replaced.
    """

    result = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_values(result[key], value)
        else:
            result[key] = value
    return result


def load_values(files: Iterable[Path]) -> dict[str, Any]:
    """
    Load and deep-merge YAML value files. Later files take precedence.
    """

    values: dict[str, Any] = {}
    for file in files:
        logger.debug("Loading values from '{}'", file)
        data = yaml.safe_load(file.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Values file '{file}' must contain a mapping, got {type(data).__name__}")
        values = merge_values(values, data)
    return values


def parse_set_values(assignments: Iterable[str]) -> dict[str, Any]:
    """
    Parse `key.path=value` assignments into a nested mapping. Values are parsed as YAML scalars.
    """

    values: dict[str, Any] = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid assignment {assignment!r}, expected 'key=value'")
        update: Any = yaml.safe_load(raw) if raw else ""
        for part in reversed(key.split(".")):
            update = {part: update}
        values = merge_values(values, update)
    return values
