"""
Asset sources provide the named template blobs that Stencil renders. A source may be backed by a directory on
disk, by templates embedded in an installed Python package, or by an in-memory mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger


@dataclass(frozen=True)
class Asset:
    """
    A single named template blob before rendering.
    """

    name: str
    """ Logical identifier of the asset, usually a relative POSIX path or a positional index. """

    content: bytes
    """ The raw bytes of the asset. """


def is_excluded(name: str, excluded: Iterable[str] | None) -> bool:
    """
    Returns `True` if any of the *excluded* fragments is contained in the asset *name*.
    """

    return any(fragment in name for fragment in excluded or ())


class AssetSource(ABC):
    """
    Base class for sources of template assets.
    """

    @abstractmethod
    def list(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[str]:
        """
        List the names of the assets in *path*.

        Args:
            path: The path to list assets in. How it is interpreted depends on the source.
            excluded: Name fragments; an asset whose name contains any of them is skipped.
            recursive: Whether to descend into nested directories.
        Raises:
            NotFoundError: If *path* does not exist in the source.
            ReadError: If the source could not be read.
        """

        raise NotImplementedError

    @abstractmethod
    def read_one(self, name: str) -> Asset:
        """
        Read the asset with the given *name*.

        Raises:
            NotFoundError: If no such asset exists.
            ReadError: If the asset could not be read.
        """

        raise NotImplementedError

    def read_all(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[Asset]:
        """
        Read all assets in *path*, in the same order as returned by #list().
        """

        names = self.list(path, excluded, recursive)
        logger.trace("Reading {} asset(s) from '{}'", len(names), path)
        return [self.read_one(name) for name in names]


from .filesystem import FileSystemAssetSource  # noqa: E402
from .memory import MemoryAssetSource, StringAssetSource  # noqa: E402
from .package import PackageAssetSource  # noqa: E402

__all__ = [
    "Asset",
    "AssetSource",
    "FileSystemAssetSource",
    "MemoryAssetSource",
    "PackageAssetSource",
    "StringAssetSource",
    "is_excluded",
]
