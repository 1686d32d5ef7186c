from typing import Any, NewType

from stencil.errors import ManifestShapeError


class Manifest(dict[str, Any]):
    """
    Represents a Kubernetes manifest decoded into a generic, key-ordered mapping. Accessors for the fields that
    identify a resource fail explicitly when the field is absent instead of returning a fallback.
    """

    def _require_str(self, field: str, value: Any) -> str:
        if value is None:
            raise ManifestShapeError(field, "field is missing")
        if not isinstance(value, str):
            raise ManifestShapeError(field, f"expected a string, got {type(value).__name__}")
        return value

    @property
    def metadata(self) -> dict[str, Any]:
        metadata = self.get("metadata")
        if metadata is None:
            raise ManifestShapeError("metadata", "field is missing")
        if not isinstance(metadata, dict):
            raise ManifestShapeError("metadata", f"expected a mapping, got {type(metadata).__name__}")
        return metadata

    @property
    def api_version(self) -> str:
        return self._require_str("apiVersion", self.get("apiVersion"))

    @property
    def kind(self) -> str:
        return self._require_str("kind", self.get("kind"))

    @property
    def name(self) -> str:
        return self._require_str("metadata.name", self.metadata.get("name"))

    @property
    def namespace(self) -> str | None:
        """
        The namespace of the resource, or `None` if the manifest does not specify one.
        """

        metadata = self.get("metadata")
        if not isinstance(metadata, dict) or metadata.get("namespace") is None:
            return None
        return self._require_str("metadata.namespace", metadata["namespace"])

    def __repr__(self) -> str:
        return f"Manifest({dict.__repr__(self)})"


Manifests = NewType("Manifests", list[Manifest])
""" Represents a list of Kubernetes manifests. """
