from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from loguru import logger

from stencil.documents import DEFAULT_DELIMITER, split_documents
from stencil.errors import NotFoundError

from . import Asset, AssetSource, is_excluded


def _to_bytes(content: bytes | str) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else bytes(content)


def _relative_name(name: str, path: str) -> str | None:
    """
    Returns the part of *name* below *path*, or `None` if the asset is not located in *path*.
    """

    prefix = path.strip("/")
    if prefix in ("", "."):
        return name
    if name == prefix:
        return name.rpartition("/")[2]
    if name.startswith(prefix + "/"):
        return name[len(prefix) + 1 :]
    return None


class MemoryAssetSource(AssetSource):
    """
    Serves assets from a fixed in-process mapping of names to contents. When a sequence is given instead of a
    mapping, the assets are named by their positional index (`"0"`, `"1"`, ...).

    Names may contain slashes to emulate a directory structure; the *path* and *recursive* arguments of #list()
    are applied to that structure.
    """

    def __init__(self, assets: Mapping[str, bytes | str] | Sequence[bytes | str]) -> None:
        if isinstance(assets, Mapping):
            self._assets = {name: _to_bytes(assets[name]) for name in sorted(assets)}
        else:
            self._assets = {str(idx): _to_bytes(content) for idx, content in enumerate(assets)}

    def list(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[str]:
        names = []
        matched = False
        for name in self._assets:
            relative = _relative_name(name, path)
            if relative is None:
                continue
            matched = True
            if not recursive and "/" in relative:
                continue
            if is_excluded(name, excluded):
                logger.trace("Excluding asset '{}'", name)
                continue
            names.append(name)

        if not matched and path.strip("/") not in ("", "."):
            raise NotFoundError(path)
        return names

    def read_one(self, name: str) -> Asset:
        try:
            return Asset(name, self._assets[name])
        except KeyError:
            raise NotFoundError(name) from None


class StringAssetSource(MemoryAssetSource):
    """
    Treats a single multi-document string as a set of assets, one per document, named by positional index. The
    *path* and *recursive* arguments of #list() are ignored, exclusions are honored.
    """

    def __init__(self, content: bytes | str, delimiter: str = DEFAULT_DELIMITER) -> None:
        super().__init__(split_documents(_to_bytes(content), delimiter))
        self.delimiter = delimiter

    def list(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[str]:
        return super().list("", excluded, recursive=True)
