from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from posixpath import dirname
from typing import Any

from loguru import logger

from stencil.documents import DEFAULT_DELIMITER, decode_document, split_documents
from stencil.ordering import sort_manifests
from stencil.sources import Asset, AssetSource
from stencil.templating import HelperRegistry, Renderer
from stencil.tools.types import Manifest, Manifests

HELPERS_SUFFIX = "_helpers.tpl"
""" Assets whose name ends with this suffix define helper macros and are not rendered as documents. """


@dataclass(frozen=True)
class Options:
    """
    Options for a #TemplateProcessor.
    """

    kinds_order: Sequence[str] | None = None
    """
    The kind priority to order manifests by. Kinds that are not listed are placed after all listed kinds. If not
    set, #stencil.ordering.DEFAULT_KINDS_ORDER is used.
    """

    delimiter: str = DEFAULT_DELIMITER
    """
    The line that separates documents in an asset.
    """

    strict: bool = True
    """
    Whether referencing an undefined value in a template is an error. If disabled, undefined values render empty.
    """

    helpers_suffix: str = HELPERS_SUFFIX
    """
    Name suffix that identifies helper assets.
    """

    def __post_init__(self) -> None:
        if self.kinds_order is not None:
            object.__setattr__(self, "kinds_order", tuple(self.kinds_order))


class TemplateProcessor:
    """
    Renders the assets of an #AssetSource into YAML documents or into manifests ordered for application.

    Every operation works on freshly read assets, nothing is cached between calls. Any failure to read, render or
    decode an asset aborts the whole operation.
    """

    def __init__(self, source: AssetSource, options: Options | None = None) -> None:
        self.source = source
        self.options = options or Options()
        self.renderer = Renderer(strict=self.options.strict)

    def _is_helper(self, name: str) -> bool:
        return name.endswith(self.options.helpers_suffix)

    def _helpers(self, directory: str, values: Any) -> HelperRegistry:
        """
        Collect the helper assets located directly in *directory* of the asset source.
        """

        names = [name for name in self.source.list(directory or ".", recursive=False) if self._is_helper(name)]
        logger.trace("Helper assets in '{}': {}", directory or ".", names)
        return self.renderer.collect_helpers((self.source.read_one(name) for name in names), values)

    def _render_assets(self, assets: Iterable[Asset], values: Any) -> list[tuple[str, bytes]]:
        registries: dict[str, HelperRegistry] = {}
        rendered = []
        for asset in assets:
            if self._is_helper(asset.name):
                continue
            directory = dirname(asset.name)
            if directory not in registries:
                registries[directory] = self._helpers(directory, values)
            content = self.renderer.render(asset.content, values, name=asset.name, helpers=registries[directory])
            rendered.append((asset.name, content))
        return rendered

    def _decode(self, asset: str, documents: Iterable[bytes]) -> Manifests:
        return Manifests([decode_document(document, asset=asset, index=idx) for idx, document in enumerate(documents)])

    def asset_names(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[str]:
        """
        List the names of the assets in *path* without reading or rendering them.
        """

        return self.source.list(path, excluded, recursive)

    def assets(self, path: str, excluded: Iterable[str] | None = None, recursive: bool = False) -> list[bytes]:
        """
        Returns the unrendered contents of the assets in *path*.
        """

        return [asset.content for asset in self.source.read_all(path, excluded, recursive)]

    def render_asset(self, name: str, values: Any = None) -> bytes:
        """
        Render a single asset, with the helpers from its directory available.
        """

        asset = self.source.read_one(name)
        return self.renderer.render(asset.content, values, name=name, helpers=self._helpers(dirname(name), values))

    def render_yaml(
        self,
        path: str,
        excluded: Iterable[str] | None = None,
        recursive: bool = False,
        values: Any = None,
    ) -> list[bytes]:
        """
        Render all assets in *path* and split them into YAML documents. The documents are returned in the order of
        the assets and of their appearance in each asset; they are not ordered by kind.
        """

        documents: list[bytes] = []
        for _name, content in self._render_assets(self.source.read_all(path, excluded, recursive), values):
            documents.extend(split_documents(content, self.options.delimiter))
        logger.debug("Rendered {} document(s) from '{}'", len(documents), path)
        return documents

    def render_manifests(
        self,
        path: str,
        excluded: Iterable[str] | None = None,
        recursive: bool = False,
        values: Any = None,
    ) -> Manifests:
        """
        Render all assets in *path*, decode the resulting documents and order them for application.

        Raises:
            NotFoundError: If *path* does not exist.
            ReadError: If an asset could not be read.
            TemplateSyntaxError: If a template is malformed.
            MissingValueError: If a template references an undefined value (in strict mode).
            DecodeError: If a rendered document is not a YAML mapping.
            ManifestShapeError: If a manifest lacks a `kind` or `metadata.name`.
        """

        manifests: list[Manifest] = []
        for name, content in self._render_assets(self.source.read_all(path, excluded, recursive), values):
            manifests.extend(self._decode(name, split_documents(content, self.options.delimiter)))
        logger.debug("Decoded {} manifest(s) from '{}'", len(manifests), path)
        return sort_manifests(manifests, self.options.kinds_order)

    def render_bytes(self, content: bytes, values: Any = None, delimiter: str | None = None) -> Manifests:
        """
        Render an explicit blob instead of discovered assets, decode the documents and order them for application.
        Helpers at the root of the asset source are available to the blob.

        Args:
            content: The template source.
            values: The values to render the template with.
            delimiter: Overrides the configured document delimiter for this call.
        """

        rendered = self.renderer.render(content, values, helpers=self._helpers("", values))
        manifests = self._decode("<string>", split_documents(rendered, delimiter or self.options.delimiter))
        logger.debug("Decoded {} manifest(s) from blob", len(manifests))
        return sort_manifests(manifests, self.options.kinds_order)
