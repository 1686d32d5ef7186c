"""
Splitting of rendered assets into YAML documents and decoding of documents into generic manifests.
"""

from collections.abc import Iterable

import yaml

from stencil.errors import DecodeError
from stencil.tools.types import Manifest

DEFAULT_DELIMITER = "---"
""" The standard YAML multi-document marker. """


def _is_blank(segment: list[bytes]) -> bool:
    """
    Returns `True` if the segment consists only of whitespace and comment lines.
    """

    for line in segment:
        stripped = line.strip()
        if stripped and not stripped.startswith(b"#"):
            return False
    return True


def split_documents(content: bytes, delimiter: str = DEFAULT_DELIMITER) -> list[bytes]:
    """
    Split *content* on lines that consist solely of the *delimiter*. Segments are returned verbatim and in order of
    appearance; segments that contain nothing but whitespace or comments are dropped.
    """

    marker = delimiter.encode("utf-8")
    documents: list[bytes] = []
    segment: list[bytes] = []

    def flush() -> None:
        if not _is_blank(segment):
            documents.append(b"".join(segment))
        segment.clear()

    for line in content.splitlines(keepends=True):
        if line.rstrip() == marker:
            flush()
        else:
            segment.append(line)
    flush()

    return documents


def decode_document(content: bytes, *, asset: str = "<string>", index: int = 0) -> Manifest:
    """
    Decode a single YAML document into a #Manifest.

    Args:
        content: The YAML document.
        asset: The name of the asset the document was rendered from, for error reporting.
        index: The position of the document in the asset, for error reporting.
    Raises:
        DecodeError: If the document is not well-formed YAML or its top-level value is not a mapping.
    """

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise DecodeError(asset, index, str(exc)) from exc

    if not isinstance(data, dict):
        raise DecodeError(asset, index, f"expected a mapping at the top level, got {type(data).__name__}")

    return Manifest(data)


def dump_manifests(manifests: Iterable[Manifest]) -> str:
    """
    Serialize manifests into a YAML stream, preserving the key order of each manifest.
    """

    return yaml.safe_dump_all([dict(manifest) for manifest in manifests], sort_keys=False, explicit_start=True)
