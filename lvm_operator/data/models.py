"""Data models for the LVM operator's node agent.

This module defines the structures the operator reasons about when it
computes the desired state of the vg-manager DaemonSet:

1. CLUSTER CONFIGURATION (input, read-only)
   - ClusterConfig: the LVMCluster, an ordered list of device classes
   - DeviceClass: one storage policy with its own placement constraints

2. PLACEMENT
   - NodeSelector / NodeSelectorTerm / NodeSelectorRequirement
   - Toleration
   - AggregatedPlacement: the merged placement of all device classes

3. WORKLOAD (output)
   - HostPathVolume, VolumeMount, EnvVar, SecurityContext, Container
   - AgentWorkloadSpec: the DaemonSet handed to the reconcile loop

Every output model renders to the Kubernetes manifest shape with
``to_dict()``: camelCase keys, unset optional fields omitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# Enumerations (closed value sets of optional Kubernetes fields)
# =============================================================================


class TolerationOperator(str, Enum):
    """Relationship between a toleration's key and value."""

    EQUAL = "Equal"  # Key and value must both match the taint
    EXISTS = "Exists"  # Any taint with the key matches, value must be empty


class TaintEffect(str, Enum):
    """Taint effect a toleration matches."""

    NO_SCHEDULE = "NoSchedule"
    PREFER_NO_SCHEDULE = "PreferNoSchedule"
    NO_EXECUTE = "NoExecute"


class NodeSelectorOperator(str, Enum):
    """Operators usable in a node selector requirement."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"
    GT = "Gt"
    LT = "Lt"


class HostPathType(str, Enum):
    """Check performed on a host path before it is mounted."""

    DIRECTORY_OR_CREATE = "DirectoryOrCreate"
    DIRECTORY = "Directory"
    FILE_OR_CREATE = "FileOrCreate"
    FILE = "File"
    SOCKET = "Socket"
    CHAR_DEVICE = "CharDevice"
    BLOCK_DEVICE = "BlockDevice"


class MountPropagationMode(str, Enum):
    """How mounts propagate between host and container."""

    NONE = "None"
    HOST_TO_CONTAINER = "HostToContainer"
    BIDIRECTIONAL = "Bidirectional"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


# =============================================================================
# Placement Model
# =============================================================================


@dataclass(frozen=True)
class NodeSelectorRequirement:
    """A predicate over one node label (or field)."""

    key: str
    operator: NodeSelectorOperator
    values: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"key": self.key, "operator": self.operator.value}
        if self.values:
            data["values"] = list(self.values)
        return data


@dataclass(frozen=True)
class NodeSelectorTerm:
    """Requirements that are ANDed together."""

    match_expressions: tuple = ()  # Tuple[NodeSelectorRequirement, ...]
    match_fields: tuple = ()  # Tuple[NodeSelectorRequirement, ...]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.match_expressions:
            data["matchExpressions"] = [r.to_dict() for r in self.match_expressions]
        if self.match_fields:
            data["matchFields"] = [r.to_dict() for r in self.match_fields]
        return data


@dataclass(frozen=True)
class NodeSelector:
    """A node selector. Its terms are ORed.

    A selector without terms places no restriction on scheduling.
    """

    node_selector_terms: tuple = ()  # Tuple[NodeSelectorTerm, ...]

    @property
    def is_empty(self) -> bool:
        return not self.node_selector_terms

    def to_dict(self) -> Dict[str, Any]:
        return {"nodeSelectorTerms": [t.to_dict() for t in self.node_selector_terms]}


@dataclass(frozen=True)
class Toleration:
    """Permits scheduling onto nodes with a matching taint.

    Every field is optional. Two tolerations are the same rule iff all
    five fields are equal.
    """

    key: Optional[str] = None
    operator: Optional[TolerationOperator] = None
    value: Optional[str] = None
    effect: Optional[TaintEffect] = None
    toleration_seconds: Optional[int] = None  # Unit: seconds, NoExecute only

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "key": self.key,
            "operator": self.operator.value if self.operator else None,
            "value": self.value,
            "effect": self.effect.value if self.effect else None,
            "tolerationSeconds": self.toleration_seconds,
        })


# =============================================================================
# Cluster Configuration Model
# =============================================================================


@dataclass(frozen=True)
class DeviceClass:
    """A named storage policy of an LVMCluster."""

    name: str
    node_selector: Optional[NodeSelector] = None  # None = every node
    tolerations: tuple = ()  # Tuple[Toleration, ...]
    default: bool = False


@dataclass(frozen=True)
class ClusterConfig:
    """The LVMCluster: cluster-wide storage configuration."""

    name: str
    namespace: Optional[str] = None
    device_classes: tuple = ()  # Tuple[DeviceClass, ...], ordered


@dataclass(frozen=True)
class AggregatedPlacement:
    """Placement of the agent derived from all device classes.

    ``node_selector`` is None when the agent may run on every node.
    """

    node_selector: Optional[NodeSelector] = None
    tolerations: tuple = ()  # Tuple[Toleration, ...], deduplicated

    @property
    def is_unrestricted(self) -> bool:
        return self.node_selector is None


# =============================================================================
# Workload Model
# =============================================================================


@dataclass
class HostPathVolume:
    """A volume backed by a path on the node."""

    name: str
    path: str
    type: Optional[HostPathType] = None  # None = no check before mounting

    def to_dict(self) -> Dict[str, Any]:
        host_path: Dict[str, Any] = {"path": self.path}
        if self.type is not None:
            host_path["type"] = self.type.value
        return {"name": self.name, "hostPath": host_path}


@dataclass
class VolumeMount:
    """Mount of a named volume into the container."""

    name: str
    mount_path: str
    mount_propagation: Optional[MountPropagationMode] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "name": self.name,
            "mountPath": self.mount_path,
            "mountPropagation": self.mount_propagation.value if self.mount_propagation else None,
        })


@dataclass
class EnvVar:
    """Environment variable filled from a pod field at pod start."""

    name: str
    field_path: str  # e.g. "spec.nodeName"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "valueFrom": {"fieldRef": {"fieldPath": self.field_path}},
        }


@dataclass
class SecurityContext:
    """Container security settings."""

    privileged: Optional[bool] = None
    run_as_user: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"privileged": self.privileged, "runAsUser": self.run_as_user})


@dataclass
class Container:
    """A container of the agent pod."""

    name: str
    image: str
    command: List[str] = field(default_factory=list)
    security_context: Optional[SecurityContext] = None
    volume_mounts: List[VolumeMount] = field(default_factory=list)
    env: List[EnvVar] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "image": self.image,
            "command": list(self.command),
        }
        if self.security_context is not None:
            data["securityContext"] = self.security_context.to_dict()
        data["volumeMounts"] = [m.to_dict() for m in self.volume_mounts]
        data["env"] = [e.to_dict() for e in self.env]
        return data


@dataclass
class PodTemplate:
    """Pod template of the agent DaemonSet."""

    labels: Dict[str, str]
    containers: List[Container]
    volumes: List[HostPathVolume] = field(default_factory=list)
    host_pid: bool = False
    tolerations: List[Toleration] = field(default_factory=list)
    node_selector: Optional[NodeSelector] = None  # Required node affinity
    service_account_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        spec: Dict[str, Any] = {
            "volumes": [v.to_dict() for v in self.volumes],
            "containers": [c.to_dict() for c in self.containers],
            "hostPID": self.host_pid,
        }
        if self.tolerations:
            spec["tolerations"] = [t.to_dict() for t in self.tolerations]
        if self.service_account_name:
            spec["serviceAccountName"] = self.service_account_name
        if self.node_selector is not None:
            spec["affinity"] = {
                "nodeAffinity": {
                    "requiredDuringSchedulingIgnoredDuringExecution": self.node_selector.to_dict(),
                }
            }
        return {"metadata": {"labels": dict(self.labels)}, "spec": spec}


@dataclass
class AgentWorkloadSpec:
    """Desired state of the per-node agent DaemonSet.

    Owned by the caller once returned. ``selector`` and the template
    labels hold equal content.
    """

    name: str
    namespace: Optional[str]
    labels: Dict[str, str]
    selector: Dict[str, str]
    template: PodTemplate

    @property
    def volume_names(self) -> List[str]:
        return [v.name for v in self.template.volumes]

    @property
    def volume_mount_names(self) -> List[str]:
        return [m.name for c in self.template.containers for m in c.volume_mounts]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apiVersion": "apps/v1",
            "kind": "DaemonSet",
            "metadata": _compact({
                "name": self.name,
                "namespace": self.namespace,
                "labels": dict(self.labels),
            }),
            "spec": {
                "selector": {"matchLabels": dict(self.selector)},
                "template": self.template.to_dict(),
            },
        }


# =============================================================================
# Self-lookup Model
# =============================================================================


@dataclass(frozen=True)
class ContainerInfo:
    """Name and image of a container in a running pod."""

    name: str
    image: str


@dataclass(frozen=True)
class Pod:
    """The parts of a running pod the image resolver reads."""

    name: str
    namespace: str
    containers: tuple = ()  # Tuple[ContainerInfo, ...]
