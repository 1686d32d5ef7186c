"""
Errors raised while discovering, rendering, decoding and ordering manifests.
"""

from dataclasses import dataclass


class StencilError(Exception):
    """
    Base class for all errors raised by Stencil.
    """


@dataclass
class NotFoundError(StencilError):
    """
    The requested path or asset does not exist in the asset source.
    """

    name: str

    def __str__(self) -> str:
        return f"Asset or path not found: '{self.name}'"


@dataclass
class ReadError(StencilError):
    """
    An I/O error occurred while reading an existing path.
    """

    name: str
    reason: str

    def __str__(self) -> str:
        return f"Could not read '{self.name}': {self.reason}"


@dataclass
class MissingValueError(StencilError):
    """
    A template referenced a value that is not defined in the values passed for rendering.
    """

    asset: str
    path: str
    message: str | None = None
    lineno: int | None = None

    def __str__(self) -> str:
        location = self.asset if self.lineno is None else f"{self.asset}:{self.lineno}"
        message = f"Missing value '{self.path}' while rendering '{location}'"
        if self.message:
            message += f" ({self.message})"
        return message


@dataclass
class TemplateSyntaxError(StencilError):
    """
    The template of an asset is malformed, regardless of the values passed for rendering.
    """

    asset: str
    lineno: int | None
    message: str

    def __str__(self) -> str:
        location = self.asset if self.lineno is None else f"{self.asset}:{self.lineno}"
        return f"Invalid template syntax in '{location}': {self.message}"


@dataclass
class DecodeError(StencilError):
    """
    A rendered document is not well-formed YAML or does not contain a mapping at the top level.
    """

    asset: str
    index: int
    message: str

    def __str__(self) -> str:
        return f"Could not decode document #{self.index} of asset '{self.asset}': {self.message}"


@dataclass
class ManifestShapeError(StencilError):
    """
    A decoded manifest lacks a field that is required to identify or order it.
    """

    field: str
    message: str

    def __str__(self) -> str:
        return f"Manifest field '{self.field}' is unusable: {self.message}"
