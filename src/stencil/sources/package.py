from __future__ import annotations

from collections.abc import Iterable, Iterator
from importlib.resources import files
from importlib.resources.abc import Traversable

from loguru import logger

from stencil.errors import NotFoundError, ReadError

from . import Asset, AssetSource, is_excluded


def _walk(directory: Traversable, prefix: str, recursive: bool) -> Iterator[str]:
    for item in sorted(directory.iterdir(), key=lambda x: x.name):
        if item.name.startswith(".") or item.name == "__pycache__":
            continue
        name = f"{prefix}/{item.name}" if prefix else item.name
        if item.is_file():
            yield name
        elif recursive and item.is_dir():
            yield from _walk(item, name, recursive)


class PackageAssetSource(AssetSource):
    """
    Serves templates embedded as package data in an installed Python package, read through `importlib.resources`.
    Asset names are POSIX paths relative to *root* inside the *package*.
    """

    def __init__(self, package: str, root: str = "") -> None:
        self.package = package
        self.root = root.strip("/")

    def __repr__(self) -> str:
        return f"PackageAssetSource(package={self.package!r}, root={self.root!r})"

    def _resolve(self, name: str) -> Traversable:
        traversable = files(self.package)
        for part in f"{self.root}/{name}".split("/"):
            if part not in ("", "."):
                traversable = traversable.joinpath(part)
        return traversable

    def list(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[str]:
        prefix = path.strip("/") if path.strip("/") not in ("", ".") else ""
        directory = self._resolve(prefix)

        if directory.is_file():
            candidates = [prefix]
        elif directory.is_dir():
            logger.trace("Listing '{}' in package '{}' (recursive={})", prefix or ".", self.package, recursive)
            try:
                candidates = list(_walk(directory, prefix, recursive))
            except OSError as exc:
                raise ReadError(path, str(exc)) from exc
        else:
            raise NotFoundError(path)

        return [name for name in candidates if not is_excluded(name, excluded)]

    def read_one(self, name: str) -> Asset:
        resource = self._resolve(name)
        if not resource.is_file():
            raise NotFoundError(name)
        try:
            return Asset(name, resource.read_bytes())
        except OSError as exc:
            raise ReadError(name, str(exc)) from exc
