"""
Stencil renders parameterized Kubernetes manifests from templates and values, decodes them into generic manifests
and orders them deterministically for sequential application to a cluster.
"""

from stencil.errors import (
    DecodeError,
    ManifestShapeError,
    MissingValueError,
    NotFoundError,
    ReadError,
    StencilError,
    TemplateSyntaxError,
)
from stencil.ordering import DEFAULT_KINDS_ORDER, sort_manifests
from stencil.processor import Options, TemplateProcessor
from stencil.sources import (
    Asset,
    AssetSource,
    FileSystemAssetSource,
    MemoryAssetSource,
    PackageAssetSource,
    StringAssetSource,
)
from stencil.tools.types import Manifest, Manifests

__all__ = [
    "Asset",
    "AssetSource",
    "DEFAULT_KINDS_ORDER",
    "DecodeError",
    "FileSystemAssetSource",
    "Manifest",
    "ManifestShapeError",
    "Manifests",
    "MemoryAssetSource",
    "MissingValueError",
    "NotFoundError",
    "Options",
    "PackageAssetSource",
    "ReadError",
    "StencilError",
    "StringAssetSource",
    "TemplateProcessor",
    "TemplateSyntaxError",
]
