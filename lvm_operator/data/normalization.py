"""Manifest normalization.

Converts Kubernetes-shaped dictionaries (as loaded from YAML or returned by
the API server) into the typed models of ``lvm_operator.data.models``.

Key normalizations:
1. Enum strings → TolerationOperator / TaintEffect / NodeSelectorOperator
2. Lists → tuples, so the models stay hashable and read-only
3. Empty strings for optional toleration fields → None
4. LVMCluster layouts: ``spec.storage.deviceClasses`` and the older
   ``spec.deviceClasses`` are both accepted
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import yaml

from .models import (
    ClusterConfig,
    ContainerInfo,
    DeviceClass,
    NodeSelector,
    NodeSelectorOperator,
    NodeSelectorRequirement,
    NodeSelectorTerm,
    Pod,
    TaintEffect,
    Toleration,
    TolerationOperator,
)


class ClusterConfigError(ValueError):
    """Raised when an LVMCluster manifest cannot be interpreted."""


def _parse_enum(enum_cls: Type[Enum], raw: Any, field_name: str) -> Optional[Enum]:
    """Map a manifest string onto ``enum_cls``; empty means unset."""
    if raw is None or raw == "":
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ClusterConfigError(f"Invalid {field_name} {raw!r} (expected one of: {allowed})")


def _optional_str(raw: Any) -> Optional[str]:
    if raw is None or raw == "":
        return None
    return str(raw)


# =============================================================================
# Placement
# =============================================================================


def normalize_requirement(data: Dict[str, Any]) -> NodeSelectorRequirement:
    """Normalize one node selector requirement."""
    key = data.get("key")
    if not key:
        raise ClusterConfigError("Node selector requirement is missing 'key'")
    operator = _parse_enum(NodeSelectorOperator, data.get("operator"), "node selector operator")
    if operator is None:
        raise ClusterConfigError(f"Node selector requirement {key!r} is missing 'operator'")
    return NodeSelectorRequirement(
        key=key,
        operator=operator,
        values=tuple(str(v) for v in data.get("values") or ()),
    )


def normalize_node_selector(data: Optional[Dict[str, Any]]) -> Optional[NodeSelector]:
    """Normalize a node selector; ``None`` stays ``None``."""
    if data is None:
        return None
    terms = []
    for term in data.get("nodeSelectorTerms") or []:
        terms.append(NodeSelectorTerm(
            match_expressions=tuple(normalize_requirement(r) for r in term.get("matchExpressions") or []),
            match_fields=tuple(normalize_requirement(r) for r in term.get("matchFields") or []),
        ))
    return NodeSelector(node_selector_terms=tuple(terms))


def normalize_toleration(data: Dict[str, Any]) -> Toleration:
    """Normalize one toleration."""
    seconds = data.get("tolerationSeconds")
    if seconds is not None:
        raw = seconds
        if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
            raise ClusterConfigError(f"Invalid tolerationSeconds {raw!r} (expected a whole number)")
        try:
            seconds = int(raw)
        except (TypeError, ValueError):
            raise ClusterConfigError(f"Invalid tolerationSeconds {raw!r} (expected a whole number)")
    return Toleration(
        key=_optional_str(data.get("key")),
        operator=_parse_enum(TolerationOperator, data.get("operator"), "toleration operator"),
        value=_optional_str(data.get("value")),
        effect=_parse_enum(TaintEffect, data.get("effect"), "taint effect"),
        toleration_seconds=seconds,
    )


# =============================================================================
# LVMCluster
# =============================================================================


def normalize_device_class(data: Dict[str, Any]) -> DeviceClass:
    """Normalize one device class entry of an LVMCluster."""
    name = data.get("name")
    if not name:
        raise ClusterConfigError("Device class is missing 'name'")
    return DeviceClass(
        name=name,
        node_selector=normalize_node_selector(data.get("nodeSelector")),
        tolerations=tuple(normalize_toleration(t) for t in data.get("tolerations") or []),
        default=bool(data.get("default", False)),
    )


def _device_class_entries(spec: Dict[str, Any]) -> List[Dict[str, Any]]:
    storage = spec.get("storage") or {}
    if "deviceClasses" in storage:
        return storage.get("deviceClasses") or []
    return spec.get("deviceClasses") or []


def normalize_cluster_config(manifest: Dict[str, Any]) -> ClusterConfig:
    """Build a ClusterConfig from an LVMCluster manifest.

    Args:
        manifest: LVMCluster object as a dictionary

    Raises:
        ClusterConfigError: If the manifest is malformed.
    """
    if not isinstance(manifest, dict):
        raise ClusterConfigError("LVMCluster manifest must be a mapping")

    metadata = manifest.get("metadata") or {}
    name = metadata.get("name")
    if not name:
        raise ClusterConfigError("LVMCluster is missing 'metadata.name'")

    spec = manifest.get("spec") or {}
    device_classes = tuple(normalize_device_class(dc) for dc in _device_class_entries(spec))

    names = [dc.name for dc in device_classes]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ClusterConfigError(f"Duplicate device class names: {', '.join(duplicates)}")

    return ClusterConfig(
        name=name,
        namespace=metadata.get("namespace"),
        device_classes=device_classes,
    )


def load_cluster_config(path: Path) -> ClusterConfig:
    """Load an LVMCluster manifest from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return normalize_cluster_config(data)


# =============================================================================
# Pod
# =============================================================================


def normalize_pod(manifest: Dict[str, Any]) -> Pod:
    """Reduce a Pod object to its name, namespace and container images."""
    metadata = manifest.get("metadata") or {}
    spec = manifest.get("spec") or {}
    containers = tuple(
        ContainerInfo(name=c.get("name", ""), image=c.get("image", ""))
        for c in spec.get("containers") or []
    )
    return Pod(
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace", ""),
        containers=containers,
    )
