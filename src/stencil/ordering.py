"""
Deterministic ordering of manifests for sequential application to a cluster.
"""

from collections.abc import Iterable, Sequence

from loguru import logger

from stencil.tools.types import Manifest, Manifests

DEFAULT_KINDS_ORDER: tuple[str, ...] = (
    "Namespace",
    "CustomResourceDefinition",
    "ResourceQuota",
    "LimitRange",
    "PriorityClass",
    "PodSecurityPolicy",
    "PodDisruptionBudget",
    "ServiceAccount",
    "Secret",
    "SecretList",
    "ConfigMap",
    "StorageClass",
    "PersistentVolume",
    "PersistentVolumeClaim",
    "ClusterRole",
    "ClusterRoleList",
    "ClusterRoleBinding",
    "ClusterRoleBindingList",
    "Role",
    "RoleList",
    "RoleBinding",
    "RoleBindingList",
    "Service",
    "DaemonSet",
    "Pod",
    "ReplicationController",
    "ReplicaSet",
    "Deployment",
    "HorizontalPodAutoscaler",
    "StatefulSet",
    "Job",
    "CronJob",
    "IngressClass",
    "Ingress",
    "APIService",
)
"""
The kind priority used when no explicit order is configured. Namespaces and CRDs come first, then policies and
service accounts, configuration and storage, RBAC, and finally services and workloads.
"""


def kind_rank(kind: str, kinds_order: Sequence[str]) -> int:
    """
    Returns the position of *kind* in *kinds_order*. Kinds that are not listed are ranked after all listed kinds.
    """

    try:
        return list(kinds_order).index(kind)
    except ValueError:
        return len(kinds_order)


def sort_manifests(manifests: Iterable[Manifest], kinds_order: Sequence[str] | None = None) -> Manifests:
    """
    Stable-sort *manifests* by the rank of their kind, then by name. Manifests with equal kind rank and name keep
    their relative input order.

    Raises:
        ManifestShapeError: If a manifest has no `kind` or `metadata.name`.
    """

    order = DEFAULT_KINDS_ORDER if kinds_order is None else tuple(kinds_order)
    result = sorted(manifests, key=lambda m: (kind_rank(m.kind, order), m.name))
    logger.trace("Ordered {} manifest(s): {}", len(result), [f"{m.kind}/{m.name}" for m in result])
    return Manifests(result)
