from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from stencil.errors import NotFoundError, ReadError

from . import Asset, AssetSource, is_excluded


class FileSystemAssetSource(AssetSource):
    """
    Serves assets from a directory on disk. Asset names are POSIX paths relative to the *root* directory, and the
    *path* passed to #list() is interpreted relative to it as well. Hidden files and directories (names starting
    with a dot) are never listed.
    """

    def __init__(self, root: Path | str = ".") -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"FileSystemAssetSource(root={str(self.root)!r})"

    def _resolve(self, name: str) -> Path:
        return self.root / name.strip("/") if name.strip("/") not in ("", ".") else self.root

    def _name(self, file: Path) -> str:
        return file.relative_to(self.root).as_posix()

    def list(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[str]:
        directory = self._resolve(path)
        if not directory.exists():
            raise NotFoundError(path)

        if directory.is_file():
            files = [directory]
        else:
            logger.trace("Listing '{}' (recursive={})", directory, recursive)
            try:
                candidates = directory.rglob("*") if recursive else directory.iterdir()
                files = sorted(
                    item
                    for item in candidates
                    if item.is_file() and not any(part.startswith(".") for part in item.relative_to(directory).parts)
                )
            except OSError as exc:
                raise ReadError(path, str(exc)) from exc

        names = []
        for file in files:
            name = self._name(file)
            if is_excluded(name, excluded):
                logger.trace("Excluding asset '{}'", name)
                continue
            names.append(name)
        return names

    def read_one(self, name: str) -> Asset:
        file = self._resolve(name)
        if not file.is_file():
            raise NotFoundError(name)
        try:
            return Asset(name, file.read_bytes())
        except OSError as exc:
            raise ReadError(name, str(exc)) from exc
